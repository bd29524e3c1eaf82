"""Postgres-backed domain store using SQLAlchemy."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session_factory
from app.schema.domain import Assignment, Course, Enrollment, Lecture, Question, QuestionType, Quiz, QuizQuestion, QuizStatus, QuizSubmission
from app.storage.domain_repo import (
  AssignmentRecord,
  AssignmentStatus,
  CourseRecord,
  DashboardStats,
  EnrollmentRecord,
  LectureRecord,
  PublicLinkPermission,
  QuestionRecord,
  QuizQuestionRecord,
  QuizRecord,
  QuizSubmissionRecord,
  StoreError,
  SubmissionStatus,
)
from app.utils.ids import generate_public_token, generate_record_id

logger = logging.getLogger(__name__)

_UPDATABLE_QUIZ_FIELDS = frozenset({"title", "description", "status", "time_limit_minutes", "passing_score", "proctored"})


def _course_record(row: Course) -> CourseRecord:
  return CourseRecord(id=row.id, name=row.name, code=row.code, instructor_id=row.instructor_id, created_at=row.created_at, semester=row.semester, description=row.description)


def _lecture_record(row: Lecture) -> LectureRecord:
  return LectureRecord(id=row.id, course_id=row.course_id, title=row.title, created_at=row.created_at, description=row.description, unit=row.unit)


def _question_record(row: Question) -> QuestionRecord:
  return QuestionRecord(
    id=row.id,
    course_id=row.course_id,
    type=QuestionType(row.type).value,
    text=row.text,
    created_at=row.created_at,
    options=row.options,
    correct_answer=row.correct_answer,
    difficulty=row.difficulty,
    points=row.points,
    explanation=row.explanation,
    ai_generated=row.ai_generated,
  )


def _quiz_record(row: Quiz) -> QuizRecord:
  return QuizRecord(
    id=row.id,
    course_id=row.course_id,
    title=row.title,
    status=QuizStatus(row.status).value,
    created_at=row.created_at,
    description=row.description,
    time_limit_minutes=row.time_limit_minutes,
    passing_score=row.passing_score,
    proctored=row.proctored,
    public_access_token=row.public_access_token,
    public_link_permission=row.public_link_permission,
    public_link_enabled=row.public_link_enabled,
    required_identification_fields=list(row.required_identification_fields or []),
  )


def _assignment_record(row: Assignment) -> AssignmentRecord:
  return AssignmentRecord(id=row.id, course_id=row.course_id, title=row.title, status=row.status, max_score=row.max_score, created_at=row.created_at, description=row.description, due_date=row.due_date)


def _enrollment_record(row: Enrollment) -> EnrollmentRecord:
  return EnrollmentRecord(id=row.id, course_id=row.course_id, student_id=row.student_id, enrolled_at=row.enrolled_at)


def _submission_record(row: QuizSubmission) -> QuizSubmissionRecord:
  return QuizSubmissionRecord(id=row.id, quiz_id=row.quiz_id, student_id=row.student_id, status=row.status, score=row.score, percentage=row.percentage, submitted_at=row.submitted_at)


def _scoped(stmt: Select, model: Any, instructor_id: str | None, course_id: str | None) -> Select:
  """Restrict a course-owned model to the instructor's courses and optionally one course."""
  if instructor_id is not None:
    owned_courses = select(Course.id).where(Course.instructor_id == instructor_id)
    stmt = stmt.where(model.course_id.in_(owned_courses))
  if course_id is not None:
    stmt = stmt.where(model.course_id == course_id)
  return stmt


class PostgresDomainStore:
  """Persist teaching data to Postgres using SQLAlchemy."""

  def __init__(self) -> None:
    self._session_factory = get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized")

  @asynccontextmanager
  async def _session(self) -> AsyncIterator[AsyncSession]:
    """Open a session and surface driver failures as StoreError."""
    try:
      async with self._session_factory() as session:
        yield session
    except SQLAlchemyError as exc:
      logger.error("Domain store operation failed error_type=%s", type(exc).__name__, exc_info=True)
      raise StoreError("The domain store rejected the operation.") from exc

  async def create_course(self, *, name: str, code: str, instructor_id: str, semester: str | None = None, description: str | None = None) -> CourseRecord:
    async with self._session() as session:
      course = Course(id=generate_record_id(), name=name, code=code, instructor_id=instructor_id, semester=semester, description=description, created_at=datetime.now(UTC))
      session.add(course)
      await session.commit()
      return _course_record(course)

  async def get_courses(self, instructor_id: str | None = None) -> list[CourseRecord]:
    async with self._session() as session:
      stmt = select(Course).order_by(Course.created_at, Course.id)
      if instructor_id is not None:
        stmt = stmt.where(Course.instructor_id == instructor_id)
      result = await session.execute(stmt)
      return [_course_record(row) for row in result.scalars().all()]

  async def get_course(self, course_id: str) -> CourseRecord | None:
    async with self._session() as session:
      row = await session.get(Course, course_id)
      return _course_record(row) if row else None

  async def delete_course(self, course_id: str) -> bool:
    async with self._session() as session:
      # Child tables cascade through their foreign keys.
      result = await session.execute(delete(Course).where(Course.id == course_id))
      await session.commit()
      return result.rowcount > 0

  async def create_quiz(self, *, course_id: str, title: str, description: str | None = None, status: str = "draft", time_limit_minutes: int | None = None) -> QuizRecord:
    async with self._session() as session:
      quiz = Quiz(id=generate_record_id(), course_id=course_id, title=title, description=description, status=QuizStatus(status), time_limit_minutes=time_limit_minutes, proctored=False, public_link_enabled=False, required_identification_fields=[], created_at=datetime.now(UTC))
      session.add(quiz)
      await session.commit()
      return _quiz_record(quiz)

  async def get_quizzes(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[QuizRecord]:
    async with self._session() as session:
      stmt = _scoped(select(Quiz), Quiz, instructor_id, course_id).order_by(Quiz.created_at, Quiz.id)
      result = await session.execute(stmt)
      return [_quiz_record(row) for row in result.scalars().all()]

  async def get_quiz(self, quiz_id: str) -> QuizRecord | None:
    async with self._session() as session:
      row = await session.get(Quiz, quiz_id)
      return _quiz_record(row) if row else None

  async def update_quiz(self, quiz_id: str, changes: dict[str, Any]) -> QuizRecord | None:
    unknown = set(changes) - _UPDATABLE_QUIZ_FIELDS
    if unknown:
      raise StoreError(f"Quiz fields cannot be updated: {sorted(unknown)}")
    async with self._session() as session:
      quiz = await session.get(Quiz, quiz_id)
      if quiz is None:
        return None
      for key, value in changes.items():
        setattr(quiz, key, QuizStatus(value) if key == "status" else value)
      await session.commit()
      return _quiz_record(quiz)

  async def delete_quiz(self, quiz_id: str) -> bool:
    async with self._session() as session:
      result = await session.execute(delete(Quiz).where(Quiz.id == quiz_id))
      await session.commit()
      return result.rowcount > 0

  async def create_question(self, *, course_id: str, type: str, text: str, options: list[str] | None = None, correct_answer: str | None = None, difficulty: str = "medium", points: int = 1, explanation: str | None = None, ai_generated: bool = False) -> QuestionRecord:
    async with self._session() as session:
      question = Question(id=generate_record_id(), course_id=course_id, type=QuestionType(type), text=text, options=options, correct_answer=correct_answer, difficulty=difficulty, points=points, explanation=explanation, ai_generated=ai_generated, created_at=datetime.now(UTC))
      session.add(question)
      await session.commit()
      return _question_record(question)

  async def add_quiz_question(self, *, quiz_id: str, question_id: str, order_index: int) -> QuizQuestionRecord:
    async with self._session() as session:
      link = QuizQuestion(id=generate_record_id(), quiz_id=quiz_id, question_id=question_id, order_index=order_index)
      session.add(link)
      await session.commit()
      return QuizQuestionRecord(id=link.id, quiz_id=link.quiz_id, question_id=link.question_id, order_index=link.order_index)

  async def get_quiz_questions(self, quiz_id: str) -> list[QuizQuestionRecord]:
    async with self._session() as session:
      result = await session.execute(select(QuizQuestion).where(QuizQuestion.quiz_id == quiz_id).order_by(QuizQuestion.order_index))
      return [QuizQuestionRecord(id=row.id, quiz_id=row.quiz_id, question_id=row.question_id, order_index=row.order_index) for row in result.scalars().all()]

  async def create_assignment(self, *, course_id: str, title: str, due_date: datetime | None, description: str | None = None, max_score: int = 100, status: AssignmentStatus = "draft") -> AssignmentRecord:
    async with self._session() as session:
      assignment = Assignment(id=generate_record_id(), course_id=course_id, title=title, description=description, status=status, max_score=max_score, due_date=due_date, created_at=datetime.now(UTC))
      session.add(assignment)
      await session.commit()
      return _assignment_record(assignment)

  async def get_assignments(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[AssignmentRecord]:
    async with self._session() as session:
      stmt = _scoped(select(Assignment), Assignment, instructor_id, course_id).order_by(Assignment.created_at, Assignment.id)
      result = await session.execute(stmt)
      return [_assignment_record(row) for row in result.scalars().all()]

  async def delete_assignment(self, assignment_id: str) -> bool:
    async with self._session() as session:
      result = await session.execute(delete(Assignment).where(Assignment.id == assignment_id))
      await session.commit()
      return result.rowcount > 0

  async def create_lecture(self, *, course_id: str, title: str, description: str | None = None, unit: str | None = None) -> LectureRecord:
    async with self._session() as session:
      lecture = Lecture(id=generate_record_id(), course_id=course_id, title=title, description=description, unit=unit, created_at=datetime.now(UTC))
      session.add(lecture)
      await session.commit()
      return _lecture_record(lecture)

  async def get_lectures(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[LectureRecord]:
    async with self._session() as session:
      stmt = _scoped(select(Lecture), Lecture, instructor_id, course_id).order_by(Lecture.created_at, Lecture.id)
      result = await session.execute(stmt)
      return [_lecture_record(row) for row in result.scalars().all()]

  async def delete_lecture(self, lecture_id: str) -> bool:
    async with self._session() as session:
      result = await session.execute(delete(Lecture).where(Lecture.id == lecture_id))
      await session.commit()
      return result.rowcount > 0

  async def create_enrollment(self, *, course_id: str, student_id: str) -> EnrollmentRecord:
    async with self._session() as session:
      enrollment = Enrollment(id=generate_record_id(), course_id=course_id, student_id=student_id, enrolled_at=datetime.now(UTC))
      session.add(enrollment)
      await session.commit()
      return _enrollment_record(enrollment)

  async def get_enrollments(self, instructor_id: str | None = None, *, course_id: str | None = None) -> list[EnrollmentRecord]:
    async with self._session() as session:
      stmt = _scoped(select(Enrollment), Enrollment, instructor_id, course_id).order_by(Enrollment.enrolled_at, Enrollment.id)
      result = await session.execute(stmt)
      return [_enrollment_record(row) for row in result.scalars().all()]

  async def create_quiz_submission(self, *, quiz_id: str, student_id: str, status: SubmissionStatus = "submitted", score: int | None = None, percentage: int | None = None) -> QuizSubmissionRecord:
    async with self._session() as session:
      submitted_at = datetime.now(UTC) if status != "in_progress" else None
      submission = QuizSubmission(id=generate_record_id(), quiz_id=quiz_id, student_id=student_id, status=status, score=score, percentage=percentage, submitted_at=submitted_at)
      session.add(submission)
      await session.commit()
      return _submission_record(submission)

  async def get_quiz_submissions(self, quiz_id: str) -> list[QuizSubmissionRecord]:
    async with self._session() as session:
      result = await session.execute(select(QuizSubmission).where(QuizSubmission.quiz_id == quiz_id).order_by(QuizSubmission.submitted_at, QuizSubmission.id))
      return [_submission_record(row) for row in result.scalars().all()]

  async def generate_quiz_public_link(self, quiz_id: str, *, permission: PublicLinkPermission, required_fields: list[str]) -> QuizRecord | None:
    async with self._session() as session:
      quiz = await session.get(Quiz, quiz_id)
      if quiz is None:
        return None
      quiz.public_access_token = generate_public_token()
      quiz.public_link_permission = permission
      quiz.public_link_enabled = True
      quiz.required_identification_fields = list(required_fields)
      await session.commit()
      return _quiz_record(quiz)

  async def get_dashboard_stats(self, instructor_id: str | None = None) -> DashboardStats:
    async with self._session() as session:
      course_filter = select(Course.id)
      if instructor_id is not None:
        course_filter = course_filter.where(Course.instructor_id == instructor_id)
      quiz_filter = select(Quiz.id).where(Quiz.course_id.in_(course_filter))
      week_ago = datetime.now(UTC) - timedelta(days=7)

      total_courses = await session.scalar(select(func.count()).select_from(course_filter.subquery()))
      total_quizzes = await session.scalar(select(func.count()).select_from(quiz_filter.subquery()))
      total_assignments = await session.scalar(select(func.count(Assignment.id)).where(Assignment.course_id.in_(course_filter)))
      total_students = await session.scalar(select(func.count(Enrollment.id)).where(Enrollment.course_id.in_(course_filter)))
      pending_grading = await session.scalar(select(func.count(QuizSubmission.id)).where(QuizSubmission.quiz_id.in_(quiz_filter), QuizSubmission.status == "submitted"))
      recent_submissions = await session.scalar(select(func.count(QuizSubmission.id)).where(QuizSubmission.quiz_id.in_(quiz_filter), QuizSubmission.submitted_at > week_ago))

      return DashboardStats(
        total_courses=total_courses or 0,
        total_quizzes=total_quizzes or 0,
        total_assignments=total_assignments or 0,
        total_students=total_students or 0,
        pending_grading=pending_grading or 0,
        recent_submissions=recent_submissions or 0,
      )
