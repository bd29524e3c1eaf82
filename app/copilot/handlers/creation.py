"""Handlers that create courses, quizzes, assignments and lectures."""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime, timedelta

from app.copilot.contracts import TaskResult
from app.copilot.handlers.base import HandlerContext, count_noun, resolve_course, succeed
from app.copilot.intents import CreateAssignmentParams, CreateCourseParams, CreateLectureParams, CreateQuizParams
from app.copilot.payloads import to_payload
from app.copilot.question_generator import GeneratedQuestion, QuestionGenerationError
from app.storage.domain_repo import QuizRecord, StoreError

logger = logging.getLogger(__name__)

DEFAULT_DUE_IN_DAYS = 7
_WORD_RE = re.compile(r"[A-Za-z]+")
_DIGITS_RE = re.compile(r"\d+")


def generate_course_code(name: str) -> str:
  """Short code from the course name: "Biology 101" -> "BIO101", "Intro to Physics" -> "ITP101"."""
  words = _WORD_RE.findall(name)
  if not words:
    prefix = "CRS"
  elif len(words) == 1:
    prefix = words[0][:3].upper()
  else:
    prefix = "".join(word[0] for word in words[:4]).upper()
  digits = _DIGITS_RE.search(name)
  number = digits.group(0)[:3] if digits else "101"
  return f"{prefix}{number}"


async def persist_questions(ctx: HandlerContext, quiz: QuizRecord, questions: list[GeneratedQuestion], *, start_index: int = 0) -> int:
  """Store generated questions in the course bank and link them to the quiz in order.

  Stops at the first storage failure and returns how many questions were linked.
  """
  linked = 0
  for offset, question in enumerate(questions):
    try:
      stored = await ctx.store.create_question(
        course_id=quiz.course_id,
        type=question.type,
        text=question.text,
        options=question.options,
        correct_answer=question.correct_answer,
        difficulty=question.difficulty,
        points=question.points,
        explanation=question.explanation,
        ai_generated=True,
      )
      await ctx.store.add_quiz_question(quiz_id=quiz.id, question_id=stored.id, order_index=start_index + offset)
    except StoreError as exc:
      logger.warning("Stored %s of %s generated questions for quiz %s: %s", linked, len(questions), quiz.id, exc)
      break
    linked += 1
  return linked


async def create_course(params: CreateCourseParams, ctx: HandlerContext) -> TaskResult:
  name = params.name or "New Course"
  code = params.code or generate_course_code(name)
  course = await ctx.store.create_course(name=name, code=code, instructor_id=ctx.actor.user_id, semester=params.semester or ctx.settings.default_semester, description=params.description)
  return succeed(f'Created course "{course.name}" ({course.code})', {"course": to_payload(course)})


async def create_quiz(params: CreateQuizParams, ctx: HandlerContext) -> TaskResult:
  course = await resolve_course(ctx, params.course_name, params.course_id)
  title = params.title or (f"{params.topic} Quiz" if params.topic else "AI Generated Quiz")
  quiz = await ctx.store.create_quiz(course_id=course.id, title=title, description=params.description, status="draft", time_limit_minutes=params.time_limit_minutes)
  data = {"quiz": to_payload(quiz), "course": to_payload(course)}
  message = f'Created quiz "{quiz.title}" in course "{course.name}"'

  if not (params.topic or params.generate_questions):
    return succeed(message, data)

  topic = params.topic or quiz.title
  try:
    questions = await ctx.question_generator.generate(topic, count=params.num_questions, difficulty=params.difficulty)
  except QuestionGenerationError as exc:
    # The quiz stays; it is reported without a question count.
    logger.warning("Quiz %s created without generated questions: %s", quiz.id, exc)
    return succeed(message, data)

  generated = await persist_questions(ctx, quiz, questions)
  data["questionsGenerated"] = generated
  if generated:
    message = f"{message} with {count_noun(generated, 'question')}"
  return succeed(message, data)


async def create_assignment(params: CreateAssignmentParams, ctx: HandlerContext) -> TaskResult:
  course = await resolve_course(ctx, params.course_name, params.course_id)
  due_in_days = params.due_in_days if params.due_in_days is not None else DEFAULT_DUE_IN_DAYS
  due_date = params.due_date or datetime.now(UTC) + timedelta(days=due_in_days)
  assignment = await ctx.store.create_assignment(course_id=course.id, title=params.title or "New Assignment", due_date=due_date, description=params.description, max_score=params.max_score or 100, status="draft")
  message = f'Created assignment "{assignment.title}" in course "{course.name}" due {due_date.date().isoformat()}'
  return succeed(message, {"assignment": to_payload(assignment), "course": to_payload(course)})


async def create_lecture(params: CreateLectureParams, ctx: HandlerContext) -> TaskResult:
  course = await resolve_course(ctx, params.course_name, params.course_id)
  lecture = await ctx.store.create_lecture(course_id=course.id, title=params.title or "New Lecture", description=params.description, unit=params.unit)
  return succeed(f'Created lecture "{lecture.title}" in course "{course.name}"', {"lecture": to_payload(lecture), "course": to_payload(course)})
