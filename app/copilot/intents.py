"""Closed intent vocabulary and the typed parameters each intent accepts."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schema.copilot import to_camel


class Intent(str, Enum):
  CREATE_COURSE = "create_course"
  CREATE_QUIZ = "create_quiz"
  CREATE_ASSIGNMENT = "create_assignment"
  CREATE_LECTURE = "create_lecture"
  PUBLISH_QUIZ = "publish_quiz"
  UPDATE_QUIZ = "update_quiz"
  DELETE_QUIZ = "delete_quiz"
  DELETE_COURSE = "delete_course"
  DELETE_ASSIGNMENT = "delete_assignment"
  DELETE_LECTURE = "delete_lecture"
  GENERATE_PUBLIC_LINK = "generate_public_link"
  GENERATE_QUESTIONS = "generate_questions"
  LIST_QUIZZES = "list_quizzes"
  LIST_COURSES = "list_courses"
  LIST_ASSIGNMENTS = "list_assignments"
  LIST_LECTURES = "list_lectures"
  LIST_ENROLLMENTS = "list_enrollments"
  LIST_SUBMISSIONS = "list_submissions"
  VIEW_ANALYTICS = "view_analytics"
  NAVIGATE = "navigate"
  HELP = "help"
  UNKNOWN = "unknown"

  @classmethod
  def parse(cls, raw: str) -> Intent:
    """Map a model-supplied label onto the vocabulary; anything unrecognized is UNKNOWN."""
    try:
      return cls(raw.strip().lower())
    except ValueError:
      return cls.UNKNOWN


_COURSE_NAME_SYNONYMS: tuple[str, ...] = ("course", "courseTitle", "courseCode", "course_title", "course_code")
_QUIZ_NAME_SYNONYMS: tuple[str, ...] = ("quiz", "quizTitle", "quiz_title", "title", "name")

# Any of these keys means the task already names its target, so nothing is injected from context.
COURSE_REFERENCE_KEYS: frozenset[str] = frozenset({"courseName", "course_name", "courseId", "course_id", *_COURSE_NAME_SYNONYMS})
QUIZ_REFERENCE_KEYS: frozenset[str] = frozenset({"quizName", "quiz_name", "quizId", "quiz_id", *_QUIZ_NAME_SYNONYMS})

_BULK_WORDS = frozenset({"all", "every"})
_BULK_FILLER = frozenset({"my", "the", "of", "draft", "drafts", "quiz", "quizzes", "unpublished"})


def is_bulk_phrase(text: str) -> bool:
  """True for phrases like "all", "every draft" or "all my draft quizzes"; a real title never qualifies."""
  words = re.findall(r"[a-z]+", text.lower())
  return any(word in _BULK_WORDS for word in words) and all(word in _BULK_WORDS or word in _BULK_FILLER for word in words)


class IntentParams(BaseModel):
  """Base for per-intent parameters: camelCase or snake_case keys, unknown keys ignored."""

  model_config = ConfigDict(populate_by_name=True, extra="ignore", alias_generator=to_camel, str_strip_whitespace=True)

  # Alternate spellings the model uses, folded onto the canonical key before validation.
  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {}

  @model_validator(mode="before")
  @classmethod
  def fold_synonyms(cls, data: Any) -> Any:
    if not isinstance(data, dict):
      return data
    # Empty strings and nulls mean "not provided".
    folded = {key: value for key, value in data.items() if value is not None and value != ""}
    for canonical, alternatives in cls.key_synonyms.items():
      if canonical in folded:
        continue
      for alternative in alternatives:
        if alternative in folded:
          folded[canonical] = folded[alternative]
          break
    return folded


class _CourseRef(IntentParams):
  course_name: str | None = None
  course_id: str | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {"courseName": _COURSE_NAME_SYNONYMS}

  @field_validator("course_name", "course_id", mode="before")
  @classmethod
  def stringify_ids(cls, v: Any) -> Any:
    return str(v) if isinstance(v, int) else v


class _QuizRef(IntentParams):
  quiz_name: str | None = None
  quiz_id: str | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {"quizName": _QUIZ_NAME_SYNONYMS}


class CreateCourseParams(IntentParams):
  name: str | None = None
  code: str | None = Field(default=None, max_length=20)
  semester: str | None = None
  description: str | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {"name": ("courseName", "title", "course"), "code": ("courseCode",)}


class CreateQuizParams(_CourseRef):
  title: str | None = None
  topic: str | None = None
  description: str | None = None
  num_questions: int | None = Field(default=None, ge=1, le=50)
  generate_questions: bool = False
  time_limit_minutes: int | None = Field(default=None, ge=1, le=600)
  difficulty: str | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {
    **_CourseRef.key_synonyms,
    "title": ("quizTitle", "quizName", "name"),
    "numQuestions": ("questionCount", "count", "number"),
    "timeLimitMinutes": ("timeLimit", "duration"),
  }


class CreateAssignmentParams(_CourseRef):
  title: str | None = None
  description: str | None = None
  due_date: datetime | None = None
  due_in_days: int | None = Field(default=None, ge=0, le=365)
  max_score: int | None = Field(default=None, ge=1, le=1000)

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {
    **_CourseRef.key_synonyms,
    "title": ("assignmentTitle", "assignmentName", "name", "topic"),
    "dueDate": ("deadline", "due"),
    "maxScore": ("points", "maxPoints"),
  }

  @field_validator("due_date", mode="before")
  @classmethod
  def lenient_due_date(cls, v: Any) -> Any:
    # Phrases like "next Friday" fall back to the default due date.
    if isinstance(v, str):
      try:
        parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
      except ValueError:
        return None
      return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return v


class CreateLectureParams(_CourseRef):
  title: str | None = None
  description: str | None = None
  unit: str | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {**_CourseRef.key_synonyms, "title": ("lectureTitle", "name", "topic")}


class PublishQuizParams(_QuizRef):
  all: bool = False

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {**_QuizRef.key_synonyms, "all": ("publishAll", "allDrafts")}

  @model_validator(mode="after")
  def quiz_name_all(self) -> PublishQuizParams:
    if self.quiz_name and is_bulk_phrase(self.quiz_name):
      self.all = True
      self.quiz_name = None
    return self


class UpdateQuizParams(_QuizRef):
  new_title: str | None = None
  description: str | None = None
  time_limit_minutes: int | None = Field(default=None, ge=1, le=600)
  passing_score: int | None = Field(default=None, ge=0, le=100)
  proctored: bool | None = None
  status: Literal["draft", "published", "closed"] | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {
    "quizName": _QUIZ_NAME_SYNONYMS,
    "newTitle": ("renameTo", "rename"),
    "timeLimitMinutes": ("timeLimit", "duration"),
    "passingScore": ("passMark",),
  }

  @field_validator("status", mode="before")
  @classmethod
  def lower_status(cls, v: Any) -> Any:
    return v.strip().lower() if isinstance(v, str) else v

  def changes(self) -> dict[str, Any]:
    """Store-level field changes requested by the command."""
    changes: dict[str, Any] = {"title": self.new_title, "description": self.description, "time_limit_minutes": self.time_limit_minutes, "passing_score": self.passing_score, "proctored": self.proctored, "status": self.status}
    return {key: value for key, value in changes.items() if value is not None}


class DeleteQuizParams(_QuizRef):
  pass


class DeleteCourseParams(_CourseRef):
  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {"courseName": ("course", "courseTitle", "courseCode", "name", "title")}


class DeleteAssignmentParams(IntentParams):
  assignment_name: str | None = None
  assignment_id: str | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {"assignmentName": ("assignment", "assignmentTitle", "title", "name")}


class DeleteLectureParams(IntentParams):
  lecture_name: str | None = None
  lecture_id: str | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {"lectureName": ("lecture", "lectureTitle", "title", "name")}


class GeneratePublicLinkParams(_QuizRef):
  permission: Literal["view", "attempt"] = "attempt"
  required_fields: list[str] | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {**_QuizRef.key_synonyms, "permission": ("access", "mode"), "requiredFields": ("requiredIdentificationFields",)}

  @field_validator("permission", mode="before")
  @classmethod
  def normalize_permission(cls, v: Any) -> Any:
    # Only an explicit view request restricts the link; anything else allows attempts.
    return "view" if isinstance(v, str) and "view" in v.lower() else "attempt"


class GenerateQuestionsParams(_QuizRef):
  topic: str | None = None
  num_questions: int | None = Field(default=None, ge=1, le=50)
  difficulty: str | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {**_QuizRef.key_synonyms, "numQuestions": ("questionCount", "count", "number")}


class ListCoursesParams(IntentParams):
  pass


class ListQuizzesParams(_CourseRef):
  status: Literal["draft", "published", "closed"] | None = None

  @field_validator("status", mode="before")
  @classmethod
  def lower_status(cls, v: Any) -> Any:
    if isinstance(v, str):
      lowered = v.strip().lower()
      return None if lowered in {"all", "any"} else lowered
    return v


class ListAssignmentsParams(_CourseRef):
  pass


class ListLecturesParams(_CourseRef):
  pass


class ListEnrollmentsParams(_CourseRef):
  pass


class ListSubmissionsParams(_QuizRef):
  pass


class ViewAnalyticsParams(IntentParams):
  pass


class NavigateParams(IntentParams):
  page: str | None = None

  key_synonyms: ClassVar[dict[str, tuple[str, ...]]] = {"page": ("destination", "target", "route", "to", "section", "pageName")}


class HelpParams(IntentParams):
  pass


class UnknownParams(IntentParams):
  message: str | None = None


INTENT_PARAMS: dict[Intent, type[IntentParams]] = {
  Intent.CREATE_COURSE: CreateCourseParams,
  Intent.CREATE_QUIZ: CreateQuizParams,
  Intent.CREATE_ASSIGNMENT: CreateAssignmentParams,
  Intent.CREATE_LECTURE: CreateLectureParams,
  Intent.PUBLISH_QUIZ: PublishQuizParams,
  Intent.UPDATE_QUIZ: UpdateQuizParams,
  Intent.DELETE_QUIZ: DeleteQuizParams,
  Intent.DELETE_COURSE: DeleteCourseParams,
  Intent.DELETE_ASSIGNMENT: DeleteAssignmentParams,
  Intent.DELETE_LECTURE: DeleteLectureParams,
  Intent.GENERATE_PUBLIC_LINK: GeneratePublicLinkParams,
  Intent.GENERATE_QUESTIONS: GenerateQuestionsParams,
  Intent.LIST_QUIZZES: ListQuizzesParams,
  Intent.LIST_COURSES: ListCoursesParams,
  Intent.LIST_ASSIGNMENTS: ListAssignmentsParams,
  Intent.LIST_LECTURES: ListLecturesParams,
  Intent.LIST_ENROLLMENTS: ListEnrollmentsParams,
  Intent.LIST_SUBMISSIONS: ListSubmissionsParams,
  Intent.VIEW_ANALYTICS: ViewAnalyticsParams,
  Intent.NAVIGATE: NavigateParams,
  Intent.HELP: HelpParams,
  Intent.UNKNOWN: UnknownParams,
}
