"""Create teaching data and Co-Pilot command tables.

Revision ID: a1c3e5f70b21
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "a1c3e5f70b21"
down_revision = None
branch_labels = None
depends_on = None

QUIZ_STATUS = postgresql.ENUM("draft", "published", "closed", name="quiz_status", create_type=False)
QUESTION_TYPE = postgresql.ENUM("mcq", "true_false", "short_answer", "essay", "fill_blank", "matching", name="question_type", create_type=False)


def upgrade() -> None:
  """Upgrade schema."""
  bind = op.get_bind()
  QUIZ_STATUS.create(bind, checkfirst=True)
  QUESTION_TYPE.create(bind, checkfirst=True)

  op.create_table(
    "courses",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("name", sa.String(), nullable=False),
    sa.Column("code", sa.String(), nullable=False),
    sa.Column("semester", sa.String(), nullable=True),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("instructor_id", sa.String(), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_courses_instructor_id"), "courses", ["instructor_id"], unique=False)

  op.create_table(
    "lectures",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("course_id", sa.String(), nullable=False),
    sa.Column("title", sa.String(), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("unit", sa.String(), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_lectures_course_id"), "lectures", ["course_id"], unique=False)

  op.create_table(
    "questions",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("course_id", sa.String(), nullable=False),
    sa.Column("type", QUESTION_TYPE, nullable=False),
    sa.Column("text", sa.Text(), nullable=False),
    sa.Column("options", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.Column("correct_answer", sa.Text(), nullable=True),
    sa.Column("difficulty", sa.String(), server_default="medium", nullable=False),
    sa.Column("points", sa.Integer(), server_default="1", nullable=False),
    sa.Column("explanation", sa.Text(), nullable=True),
    sa.Column("ai_generated", sa.Boolean(), server_default="false", nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_questions_course_id"), "questions", ["course_id"], unique=False)

  op.create_table(
    "quizzes",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("course_id", sa.String(), nullable=False),
    sa.Column("title", sa.String(), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("status", QUIZ_STATUS, nullable=False),
    sa.Column("time_limit_minutes", sa.Integer(), nullable=True),
    sa.Column("passing_score", sa.Integer(), nullable=True),
    sa.Column("proctored", sa.Boolean(), server_default="false", nullable=False),
    sa.Column("public_access_token", sa.String(), nullable=True),
    sa.Column("public_link_permission", sa.String(), nullable=True),
    sa.Column("public_link_enabled", sa.Boolean(), server_default="false", nullable=False),
    sa.Column("required_identification_fields", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
    sa.PrimaryKeyConstraint("id"),
    sa.UniqueConstraint("public_access_token"),
  )
  op.create_index(op.f("ix_quizzes_course_id"), "quizzes", ["course_id"], unique=False)

  op.create_table(
    "quiz_questions",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("quiz_id", sa.String(), nullable=False),
    sa.Column("question_id", sa.String(), nullable=False),
    sa.Column("order_index", sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
    sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"], ondelete="CASCADE"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_quiz_questions_quiz_id"), "quiz_questions", ["quiz_id"], unique=False)

  op.create_table(
    "assignments",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("course_id", sa.String(), nullable=False),
    sa.Column("title", sa.String(), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("status", sa.String(), server_default="draft", nullable=False),
    sa.Column("max_score", sa.Integer(), server_default="100", nullable=False),
    sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_assignments_course_id"), "assignments", ["course_id"], unique=False)

  op.create_table(
    "enrollments",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("course_id", sa.String(), nullable=False),
    sa.Column("student_id", sa.String(), nullable=False),
    sa.Column("enrolled_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_enrollments_course_id"), "enrollments", ["course_id"], unique=False)
  op.create_index(op.f("ix_enrollments_student_id"), "enrollments", ["student_id"], unique=False)

  op.create_table(
    "quiz_submissions",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("quiz_id", sa.String(), nullable=False),
    sa.Column("student_id", sa.String(), nullable=False),
    sa.Column("status", sa.String(), server_default="in_progress", nullable=False),
    sa.Column("score", sa.Integer(), nullable=True),
    sa.Column("percentage", sa.Integer(), nullable=True),
    sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
    sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"], ondelete="CASCADE"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_quiz_submissions_quiz_id"), "quiz_submissions", ["quiz_id"], unique=False)
  op.create_index(op.f("ix_quiz_submissions_student_id"), "quiz_submissions", ["student_id"], unique=False)

  op.create_table(
    "chat_commands",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("user_id", sa.String(), nullable=False),
    sa.Column("command", sa.Text(), nullable=False),
    sa.Column("intent", sa.String(), nullable=True),
    sa.Column("parameters", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.Column("status", sa.String(), server_default="pending", nullable=False),
    sa.Column("result", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index("ix_chat_commands_user_created", "chat_commands", ["user_id", "created_at"], unique=False)


def downgrade() -> None:
  """Downgrade schema."""
  op.drop_index("ix_chat_commands_user_created", table_name="chat_commands")
  op.drop_table("chat_commands")
  for table, columns in (
    ("quiz_submissions", ("quiz_id", "student_id")),
    ("enrollments", ("course_id", "student_id")),
    ("assignments", ("course_id",)),
    ("quiz_questions", ("quiz_id",)),
    ("quizzes", ("course_id",)),
    ("questions", ("course_id",)),
    ("lectures", ("course_id",)),
    ("courses", ("instructor_id",)),
  ):
    for column in columns:
      op.drop_index(op.f(f"ix_{table}_{column}"), table_name=table)
    op.drop_table(table)

  bind = op.get_bind()
  QUESTION_TYPE.drop(bind, checkfirst=True)
  QUIZ_STATUS.drop(bind, checkfirst=True)
