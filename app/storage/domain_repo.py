"""Storage interfaces and records for courses, quizzes and related teaching data."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Protocol

QuizStatus = Literal["draft", "published", "closed"]
AssignmentStatus = Literal["draft", "published", "closed"]
QuestionType = Literal["mcq", "true_false", "short_answer", "essay", "fill_blank", "matching"]
PublicLinkPermission = Literal["view", "attempt"]
SubmissionStatus = Literal["in_progress", "submitted", "graded"]


class StoreError(RuntimeError):
  """Raised when the domain store cannot complete an operation."""


@dataclass(frozen=True)
class CourseRecord:
  """Record stored in the courses table."""

  id: str
  name: str
  code: str
  instructor_id: str
  created_at: datetime
  semester: str | None = None
  description: str | None = None


@dataclass(frozen=True)
class LectureRecord:
  """Record stored in the lectures table."""

  id: str
  course_id: str
  title: str
  created_at: datetime
  description: str | None = None
  unit: str | None = None


@dataclass(frozen=True)
class QuestionRecord:
  """Record stored in the question bank."""

  id: str
  course_id: str
  type: QuestionType
  text: str
  created_at: datetime
  options: list[str] | None = None
  correct_answer: str | None = None
  difficulty: str = "medium"
  points: int = 1
  explanation: str | None = None
  ai_generated: bool = False


@dataclass(frozen=True)
class QuizRecord:
  """Record stored in the quizzes table."""

  id: str
  course_id: str
  title: str
  status: QuizStatus
  created_at: datetime
  description: str | None = None
  time_limit_minutes: int | None = None
  passing_score: int | None = None
  proctored: bool = False
  public_access_token: str | None = None
  public_link_permission: PublicLinkPermission | None = None
  public_link_enabled: bool = False
  required_identification_fields: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class QuizQuestionRecord:
  """Link between a quiz and one question, ordered by `order_index`."""

  id: str
  quiz_id: str
  question_id: str
  order_index: int


@dataclass(frozen=True)
class AssignmentRecord:
  """Record stored in the assignments table."""

  id: str
  course_id: str
  title: str
  status: AssignmentStatus
  max_score: int
  created_at: datetime
  description: str | None = None
  due_date: datetime | None = None


@dataclass(frozen=True)
class EnrollmentRecord:
  """A student's enrollment in a course."""

  id: str
  course_id: str
  student_id: str
  enrolled_at: datetime


@dataclass(frozen=True)
class QuizSubmissionRecord:
  """A student's attempt at a quiz."""

  id: str
  quiz_id: str
  student_id: str
  status: SubmissionStatus
  score: int | None = None
  percentage: int | None = None
  submitted_at: datetime | None = None


@dataclass(frozen=True)
class DashboardStats:
  """Aggregate counts shown on the instructor dashboard."""

  total_courses: int
  total_quizzes: int
  total_assignments: int
  total_students: int
  pending_grading: int
  recent_submissions: int


class DomainStore(Protocol):
  """Repository interface for teaching data.

  List methods return records in creation order. `instructor_id=None` means
  no ownership filter (elevated actors); otherwise only records owned by that
  instructor, directly or through their course, are returned.
  """

  async def create_course(self, *, name: str, code: str, instructor_id: str, semester: str | None = None, description: str | None = None) -> CourseRecord:
    """Insert a course."""

  async def get_courses(self, instructor_id: str | None = None) -> list[CourseRecord]:
    """Return courses visible to the instructor."""

  async def get_course(self, course_id: str) -> CourseRecord | None:
    """Return one course by id."""

  async def delete_course(self, course_id: str) -> bool:
    """Delete a course and everything that hangs off it."""

  async def create_quiz(self, *, course_id: str, title: str, description: str | None = None, status: QuizStatus = "draft", time_limit_minutes: int | None = None) -> QuizRecord:
    """Insert a quiz."""

  async def get_quizzes(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[QuizRecord]:
    """Return quizzes visible to the instructor."""

  async def get_quiz(self, quiz_id: str) -> QuizRecord | None:
    """Return one quiz by id."""

  async def update_quiz(self, quiz_id: str, changes: dict[str, Any]) -> QuizRecord | None:
    """Apply field changes to a quiz and return the updated record."""

  async def delete_quiz(self, quiz_id: str) -> bool:
    """Delete a quiz and its question links."""

  async def create_question(self, *, course_id: str, type: QuestionType, text: str, options: list[str] | None = None, correct_answer: str | None = None, difficulty: str = "medium", points: int = 1, explanation: str | None = None, ai_generated: bool = False) -> QuestionRecord:
    """Insert a question into the course question bank."""

  async def add_quiz_question(self, *, quiz_id: str, question_id: str, order_index: int) -> QuizQuestionRecord:
    """Link a question to a quiz."""

  async def get_quiz_questions(self, quiz_id: str) -> list[QuizQuestionRecord]:
    """Return the question links of a quiz ordered by position."""

  async def create_assignment(self, *, course_id: str, title: str, due_date: datetime | None, description: str | None = None, max_score: int = 100, status: AssignmentStatus = "draft") -> AssignmentRecord:
    """Insert an assignment."""

  async def get_assignments(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[AssignmentRecord]:
    """Return assignments visible to the instructor."""

  async def delete_assignment(self, assignment_id: str) -> bool:
    """Delete an assignment."""

  async def create_lecture(self, *, course_id: str, title: str, description: str | None = None, unit: str | None = None) -> LectureRecord:
    """Insert a lecture."""

  async def get_lectures(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[LectureRecord]:
    """Return lectures visible to the instructor."""

  async def delete_lecture(self, lecture_id: str) -> bool:
    """Delete a lecture."""

  async def create_enrollment(self, *, course_id: str, student_id: str) -> EnrollmentRecord:
    """Enroll a student in a course."""

  async def get_enrollments(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[EnrollmentRecord]:
    """Return enrollments in courses visible to the instructor."""

  async def create_quiz_submission(self, *, quiz_id: str, student_id: str, status: SubmissionStatus = "submitted", score: int | None = None, percentage: int | None = None) -> QuizSubmissionRecord:
    """Record a quiz attempt."""

  async def get_quiz_submissions(self, quiz_id: str) -> list[QuizSubmissionRecord]:
    """Return the submissions for one quiz."""

  async def generate_quiz_public_link(self, quiz_id: str, *, permission: PublicLinkPermission, required_fields: list[str]) -> QuizRecord | None:
    """Enable public access for a quiz, issuing an access token if it has none."""

  async def get_dashboard_stats(self, instructor_id: str | None = None) -> DashboardStats:
    """Return dashboard counts for the instructor."""
