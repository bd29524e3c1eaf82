from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class QuizStatus(str, Enum):
  DRAFT = "draft"
  PUBLISHED = "published"
  CLOSED = "closed"


class QuestionType(str, Enum):
  MCQ = "mcq"
  TRUE_FALSE = "true_false"
  SHORT_ANSWER = "short_answer"
  ESSAY = "essay"
  FILL_BLANK = "fill_blank"
  MATCHING = "matching"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
  return [member.value for member in enum_cls]


class Course(Base):
  __tablename__ = "courses"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  name: Mapped[str] = mapped_column(String, nullable=False)
  code: Mapped[str] = mapped_column(String, nullable=False)
  semester: Mapped[str | None] = mapped_column(String, nullable=True)
  description: Mapped[str | None] = mapped_column(Text, nullable=True)
  instructor_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Lecture(Base):
  __tablename__ = "lectures"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  course_id: Mapped[str] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
  title: Mapped[str] = mapped_column(String, nullable=False)
  description: Mapped[str | None] = mapped_column(Text, nullable=True)
  unit: Mapped[str | None] = mapped_column(String, nullable=True)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Question(Base):
  __tablename__ = "questions"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  course_id: Mapped[str] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
  type: Mapped[QuestionType] = mapped_column(SAEnum(QuestionType, name="question_type", values_callable=_enum_values), nullable=False)
  text: Mapped[str] = mapped_column(Text, nullable=False)
  options: Mapped[list | None] = mapped_column(JSONB, nullable=True)
  correct_answer: Mapped[str | None] = mapped_column(Text, nullable=True)
  difficulty: Mapped[str] = mapped_column(String, nullable=False, server_default="medium")
  points: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
  explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
  ai_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Quiz(Base):
  __tablename__ = "quizzes"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  course_id: Mapped[str] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
  title: Mapped[str] = mapped_column(String, nullable=False)
  description: Mapped[str | None] = mapped_column(Text, nullable=True)
  status: Mapped[QuizStatus] = mapped_column(SAEnum(QuizStatus, name="quiz_status", values_callable=_enum_values), nullable=False, default=QuizStatus.DRAFT)
  time_limit_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
  passing_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
  proctored: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
  public_access_token: Mapped[str | None] = mapped_column(String, nullable=True, unique=True)
  public_link_permission: Mapped[str | None] = mapped_column(String, nullable=True)
  public_link_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
  required_identification_fields: Mapped[list | None] = mapped_column(JSONB, nullable=True)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class QuizQuestion(Base):
  __tablename__ = "quiz_questions"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  quiz_id: Mapped[str] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
  question_id: Mapped[str] = mapped_column(ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
  order_index: Mapped[int] = mapped_column(Integer, nullable=False)


class Assignment(Base):
  __tablename__ = "assignments"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  course_id: Mapped[str] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
  title: Mapped[str] = mapped_column(String, nullable=False)
  description: Mapped[str | None] = mapped_column(Text, nullable=True)
  status: Mapped[str] = mapped_column(String, nullable=False, server_default="draft")
  max_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default="100")
  due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Enrollment(Base):
  __tablename__ = "enrollments"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  course_id: Mapped[str] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
  student_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
  enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class QuizSubmission(Base):
  __tablename__ = "quiz_submissions"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  quiz_id: Mapped[str] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
  student_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
  status: Mapped[str] = mapped_column(String, nullable=False, server_default="in_progress")
  score: Mapped[int | None] = mapped_column(Integer, nullable=True)
  percentage: Mapped[int | None] = mapped_column(Integer, nullable=True)
  submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
