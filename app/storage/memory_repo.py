"""Process-local repositories used when no database DSN is configured."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime, timedelta
from typing import Any

from app.storage.commands_repo import TERMINAL_STATUSES, CommandRecord, CommandStatus, ensure_transition
from app.storage.domain_repo import (
  AssignmentRecord,
  AssignmentStatus,
  CourseRecord,
  DashboardStats,
  EnrollmentRecord,
  LectureRecord,
  PublicLinkPermission,
  QuestionRecord,
  QuestionType,
  QuizQuestionRecord,
  QuizRecord,
  QuizStatus,
  QuizSubmissionRecord,
  StoreError,
  SubmissionStatus,
)
from app.utils.ids import generate_public_token, generate_record_id

_UPDATABLE_QUIZ_FIELDS = frozenset({"title", "description", "status", "time_limit_minutes", "passing_score", "proctored"})


def _now() -> datetime:
  return datetime.now(UTC)


class InMemoryDomainStore:
  """Dict-backed domain store; dicts keep insertion order so lists come back in creation order."""

  def __init__(self) -> None:
    self._courses: dict[str, CourseRecord] = {}
    self._quizzes: dict[str, QuizRecord] = {}
    self._questions: dict[str, QuestionRecord] = {}
    self._quiz_questions: dict[str, QuizQuestionRecord] = {}
    self._assignments: dict[str, AssignmentRecord] = {}
    self._lectures: dict[str, LectureRecord] = {}
    self._enrollments: dict[str, EnrollmentRecord] = {}
    self._quiz_submissions: dict[str, QuizSubmissionRecord] = {}

  def _require_course(self, course_id: str) -> CourseRecord:
    course = self._courses.get(course_id)
    if course is None:
      raise StoreError(f"Course {course_id} does not exist.")
    return course

  def _require_quiz(self, quiz_id: str) -> QuizRecord:
    quiz = self._quizzes.get(quiz_id)
    if quiz is None:
      raise StoreError(f"Quiz {quiz_id} does not exist.")
    return quiz

  def _owned_course_ids(self, instructor_id: str | None) -> set[str]:
    return {course.id for course in self._courses.values() if instructor_id is None or course.instructor_id == instructor_id}

  async def create_course(self, *, name: str, code: str, instructor_id: str, semester: str | None = None, description: str | None = None) -> CourseRecord:
    course = CourseRecord(id=generate_record_id(), name=name, code=code, instructor_id=instructor_id, created_at=_now(), semester=semester, description=description)
    self._courses[course.id] = course
    return course

  async def get_courses(self, instructor_id: str | None = None) -> list[CourseRecord]:
    return [course for course in self._courses.values() if instructor_id is None or course.instructor_id == instructor_id]

  async def get_course(self, course_id: str) -> CourseRecord | None:
    return self._courses.get(course_id)

  async def delete_course(self, course_id: str) -> bool:
    if self._courses.pop(course_id, None) is None:
      return False
    # Cascade to everything owned through the course.
    for quiz in [quiz for quiz in self._quizzes.values() if quiz.course_id == course_id]:
      await self.delete_quiz(quiz.id)
    self._assignments = {key: value for key, value in self._assignments.items() if value.course_id != course_id}
    self._lectures = {key: value for key, value in self._lectures.items() if value.course_id != course_id}
    self._questions = {key: value for key, value in self._questions.items() if value.course_id != course_id}
    self._enrollments = {key: value for key, value in self._enrollments.items() if value.course_id != course_id}
    return True

  async def create_quiz(self, *, course_id: str, title: str, description: str | None = None, status: QuizStatus = "draft", time_limit_minutes: int | None = None) -> QuizRecord:
    self._require_course(course_id)
    quiz = QuizRecord(id=generate_record_id(), course_id=course_id, title=title, status=status, created_at=_now(), description=description, time_limit_minutes=time_limit_minutes)
    self._quizzes[quiz.id] = quiz
    return quiz

  async def get_quizzes(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[QuizRecord]:
    owned = self._owned_course_ids(instructor_id)
    return [quiz for quiz in self._quizzes.values() if quiz.course_id in owned and (course_id is None or quiz.course_id == course_id)]

  async def get_quiz(self, quiz_id: str) -> QuizRecord | None:
    return self._quizzes.get(quiz_id)

  async def update_quiz(self, quiz_id: str, changes: dict[str, Any]) -> QuizRecord | None:
    quiz = self._quizzes.get(quiz_id)
    if quiz is None:
      return None
    unknown = set(changes) - _UPDATABLE_QUIZ_FIELDS
    if unknown:
      raise StoreError(f"Quiz fields cannot be updated: {sorted(unknown)}")
    updated = dataclasses.replace(quiz, **changes)
    self._quizzes[quiz_id] = updated
    return updated

  async def delete_quiz(self, quiz_id: str) -> bool:
    if self._quizzes.pop(quiz_id, None) is None:
      return False
    self._quiz_questions = {key: value for key, value in self._quiz_questions.items() if value.quiz_id != quiz_id}
    self._quiz_submissions = {key: value for key, value in self._quiz_submissions.items() if value.quiz_id != quiz_id}
    return True

  async def create_question(self, *, course_id: str, type: QuestionType, text: str, options: list[str] | None = None, correct_answer: str | None = None, difficulty: str = "medium", points: int = 1, explanation: str | None = None, ai_generated: bool = False) -> QuestionRecord:
    self._require_course(course_id)
    question = QuestionRecord(id=generate_record_id(), course_id=course_id, type=type, text=text, created_at=_now(), options=options, correct_answer=correct_answer, difficulty=difficulty, points=points, explanation=explanation, ai_generated=ai_generated)
    self._questions[question.id] = question
    return question

  async def add_quiz_question(self, *, quiz_id: str, question_id: str, order_index: int) -> QuizQuestionRecord:
    self._require_quiz(quiz_id)
    if question_id not in self._questions:
      raise StoreError(f"Question {question_id} does not exist.")
    link = QuizQuestionRecord(id=generate_record_id(), quiz_id=quiz_id, question_id=question_id, order_index=order_index)
    self._quiz_questions[link.id] = link
    return link

  async def get_quiz_questions(self, quiz_id: str) -> list[QuizQuestionRecord]:
    links = [link for link in self._quiz_questions.values() if link.quiz_id == quiz_id]
    return sorted(links, key=lambda link: link.order_index)

  async def create_assignment(self, *, course_id: str, title: str, due_date: datetime | None, description: str | None = None, max_score: int = 100, status: AssignmentStatus = "draft") -> AssignmentRecord:
    self._require_course(course_id)
    assignment = AssignmentRecord(id=generate_record_id(), course_id=course_id, title=title, status=status, max_score=max_score, created_at=_now(), description=description, due_date=due_date)
    self._assignments[assignment.id] = assignment
    return assignment

  async def get_assignments(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[AssignmentRecord]:
    owned = self._owned_course_ids(instructor_id)
    return [item for item in self._assignments.values() if item.course_id in owned and (course_id is None or item.course_id == course_id)]

  async def delete_assignment(self, assignment_id: str) -> bool:
    return self._assignments.pop(assignment_id, None) is not None

  async def create_lecture(self, *, course_id: str, title: str, description: str | None = None, unit: str | None = None) -> LectureRecord:
    self._require_course(course_id)
    lecture = LectureRecord(id=generate_record_id(), course_id=course_id, title=title, created_at=_now(), description=description, unit=unit)
    self._lectures[lecture.id] = lecture
    return lecture

  async def get_lectures(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[LectureRecord]:
    owned = self._owned_course_ids(instructor_id)
    return [item for item in self._lectures.values() if item.course_id in owned and (course_id is None or item.course_id == course_id)]

  async def delete_lecture(self, lecture_id: str) -> bool:
    return self._lectures.pop(lecture_id, None) is not None

  async def create_enrollment(self, *, course_id: str, student_id: str) -> EnrollmentRecord:
    self._require_course(course_id)
    enrollment = EnrollmentRecord(id=generate_record_id(), course_id=course_id, student_id=student_id, enrolled_at=_now())
    self._enrollments[enrollment.id] = enrollment
    return enrollment

  async def get_enrollments(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[EnrollmentRecord]:
    owned = self._owned_course_ids(instructor_id)
    return [item for item in self._enrollments.values() if item.course_id in owned and (course_id is None or item.course_id == course_id)]

  async def create_quiz_submission(self, *, quiz_id: str, student_id: str, status: SubmissionStatus = "submitted", score: int | None = None, percentage: int | None = None) -> QuizSubmissionRecord:
    self._require_quiz(quiz_id)
    submitted_at = _now() if status != "in_progress" else None
    submission = QuizSubmissionRecord(id=generate_record_id(), quiz_id=quiz_id, student_id=student_id, status=status, score=score, percentage=percentage, submitted_at=submitted_at)
    self._quiz_submissions[submission.id] = submission
    return submission

  async def get_quiz_submissions(self, quiz_id: str) -> list[QuizSubmissionRecord]:
    return [item for item in self._quiz_submissions.values() if item.quiz_id == quiz_id]

  async def generate_quiz_public_link(self, quiz_id: str, *, permission: PublicLinkPermission, required_fields: list[str]) -> QuizRecord | None:
    quiz = self._quizzes.get(quiz_id)
    if quiz is None:
      return None
    updated = dataclasses.replace(quiz, public_access_token=generate_public_token(), public_link_permission=permission, public_link_enabled=True, required_identification_fields=list(required_fields))
    self._quizzes[quiz_id] = updated
    return updated

  async def get_dashboard_stats(self, instructor_id: str | None = None) -> DashboardStats:
    owned = self._owned_course_ids(instructor_id)
    quiz_ids = {quiz.id for quiz in self._quizzes.values() if quiz.course_id in owned}
    submissions = [item for item in self._quiz_submissions.values() if item.quiz_id in quiz_ids]
    week_ago = _now() - timedelta(days=7)
    return DashboardStats(
      total_courses=len(owned),
      total_quizzes=len(quiz_ids),
      total_assignments=sum(1 for item in self._assignments.values() if item.course_id in owned),
      total_students=sum(1 for item in self._enrollments.values() if item.course_id in owned),
      pending_grading=sum(1 for item in submissions if item.status == "submitted"),
      recent_submissions=sum(1 for item in submissions if item.submitted_at is not None and item.submitted_at > week_ago),
    )


class InMemoryCommandsRepository:
  """Dict-backed command audit trail."""

  def __init__(self) -> None:
    self._commands: dict[str, CommandRecord] = {}

  async def create_command(self, *, user_id: str, raw_text: str) -> CommandRecord:
    record = CommandRecord(id=generate_record_id(), user_id=user_id, raw_text=raw_text, status="pending", created_at=_now())
    self._commands[record.id] = record
    return record

  async def transition(self, command_id: str, status: CommandStatus, *, intent: str | None = None, parameters: list[dict[str, Any]] | None = None, result: dict[str, Any] | None = None) -> CommandRecord:
    current = self._commands.get(command_id)
    if current is None:
      raise StoreError(f"Command {command_id} does not exist.")
    ensure_transition(current.status, status)
    changes: dict[str, Any] = {"status": status}
    if intent is not None:
      changes["intent"] = intent
    if parameters is not None:
      changes["parameters"] = parameters
    if result is not None:
      changes["result"] = result
    if status in TERMINAL_STATUSES:
      changes["completed_at"] = _now()
    updated = dataclasses.replace(current, **changes)
    self._commands[command_id] = updated
    return updated

  async def get_command(self, command_id: str) -> CommandRecord | None:
    return self._commands.get(command_id)

  async def list_commands(self, user_id: str, *, limit: int | None = None) -> list[CommandRecord]:
    # Reverse insertion order breaks created_at ties the same way.
    commands = [record for record in reversed(self._commands.values()) if record.user_id == user_id]
    commands.sort(key=lambda record: record.created_at, reverse=True)
    return commands if limit is None else commands[:limit]
