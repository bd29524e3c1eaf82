"""Handlers that change or remove existing entities."""

from __future__ import annotations

import logging

from app.copilot.contracts import TaskResult
from app.copilot.handlers.base import HandlerContext, TargetNotFoundError, count_noun, display_name, fail, resolve_for_delete, resolve_quiz, succeed
from app.copilot.handlers.creation import persist_questions
from app.copilot.intents import (
  DeleteAssignmentParams,
  DeleteCourseParams,
  DeleteLectureParams,
  DeleteQuizParams,
  GeneratePublicLinkParams,
  GenerateQuestionsParams,
  PublishQuizParams,
  UpdateQuizParams,
)
from app.copilot.payloads import to_payload, to_payloads
from app.copilot.question_generator import QuestionGenerationError
from app.copilot.resolver import EntityKind
from app.storage.domain_repo import QuizRecord

logger = logging.getLogger(__name__)

DEFAULT_REQUIRED_FIELDS: tuple[str, ...] = ("name", "email")
_CHANGE_LABELS: dict[str, str] = {
  "title": "title",
  "description": "description",
  "time_limit_minutes": "time limit",
  "passing_score": "passing score",
  "proctored": "proctoring",
  "status": "status",
}


async def publish_quiz(params: PublishQuizParams, ctx: HandlerContext) -> TaskResult:
  if params.all:
    quizzes = await ctx.resolver.scoped("quiz", ctx.actor)
    drafts = [quiz for quiz in quizzes if isinstance(quiz, QuizRecord) and quiz.status == "draft"]
    if not drafts:
      return succeed("No draft quizzes to publish.", {"quizzes": []})
    published: list[QuizRecord] = []
    for quiz in drafts:
      updated = await ctx.store.update_quiz(quiz.id, {"status": "published"})
      if updated is not None:
        published.append(updated)
    return succeed(f"Published {count_noun(len(published), 'draft quiz', 'draft quizzes')}", {"quizzes": to_payloads(published)})

  quiz = await resolve_quiz(ctx, params.quiz_name, params.quiz_id, purpose="publish")
  if quiz.status == "published":
    return succeed(f'Quiz "{quiz.title}" is already published', {"quiz": to_payload(quiz)})
  updated = await ctx.store.update_quiz(quiz.id, {"status": "published"})
  if updated is None:
    raise TargetNotFoundError(f'Quiz "{quiz.title}" no longer exists.')
  return succeed(f'Published quiz "{updated.title}"', {"quiz": to_payload(updated)})


async def update_quiz(params: UpdateQuizParams, ctx: HandlerContext) -> TaskResult:
  changes = params.changes()
  if not changes:
    return fail("Tell me what to change on the quiz, for example its time limit or passing score.")
  quiz = await resolve_quiz(ctx, params.quiz_name, params.quiz_id, purpose="update")
  updated = await ctx.store.update_quiz(quiz.id, changes)
  if updated is None:
    raise TargetNotFoundError(f'Quiz "{quiz.title}" no longer exists.')
  labels = ", ".join(_CHANGE_LABELS[key] for key in changes)
  return succeed(f'Updated {labels} for quiz "{updated.title}"', {"quiz": to_payload(updated)})


async def _delete(ctx: HandlerContext, kind: EntityKind, name: str | None, entity_id: str | None) -> TaskResult:
  entity = await resolve_for_delete(ctx, kind, name, entity_id)
  deleters = {"course": ctx.store.delete_course, "quiz": ctx.store.delete_quiz, "assignment": ctx.store.delete_assignment, "lecture": ctx.store.delete_lecture}
  label = display_name(entity)
  if not await deleters[kind](entity.id):
    return fail(f'Could not delete {kind} "{label}".')
  logger.info("Deleted %s id=%s user_id=%s", kind, entity.id, ctx.actor.user_id)
  return succeed(f'Deleted {kind} "{label}"', {"deleted": {"kind": kind, "id": entity.id, "name": label}})


async def delete_quiz(params: DeleteQuizParams, ctx: HandlerContext) -> TaskResult:
  return await _delete(ctx, "quiz", params.quiz_name, params.quiz_id)


async def delete_course(params: DeleteCourseParams, ctx: HandlerContext) -> TaskResult:
  return await _delete(ctx, "course", params.course_name, params.course_id)


async def delete_assignment(params: DeleteAssignmentParams, ctx: HandlerContext) -> TaskResult:
  return await _delete(ctx, "assignment", params.assignment_name, params.assignment_id)


async def delete_lecture(params: DeleteLectureParams, ctx: HandlerContext) -> TaskResult:
  return await _delete(ctx, "lecture", params.lecture_name, params.lecture_id)


async def generate_public_link(params: GeneratePublicLinkParams, ctx: HandlerContext) -> TaskResult:
  quiz = await resolve_quiz(ctx, params.quiz_name, params.quiz_id, purpose="generate a link for")
  required_fields = params.required_fields or list(DEFAULT_REQUIRED_FIELDS)
  updated = await ctx.store.generate_quiz_public_link(quiz.id, permission=params.permission, required_fields=required_fields)
  if updated is None or not updated.public_access_token:
    raise TargetNotFoundError(f'Quiz "{quiz.title}" no longer exists.')
  public_url = f"{ctx.settings.public_base_url}/public/quiz/{updated.public_access_token}"
  prefix = "view-only public link" if params.permission == "view" else "public link"
  return succeed(f'Generated {prefix} for "{updated.title}": {public_url}', {"publicUrl": public_url, "quiz": to_payload(updated)})


async def generate_questions(params: GenerateQuestionsParams, ctx: HandlerContext) -> TaskResult:
  quiz = await resolve_quiz(ctx, params.quiz_name, params.quiz_id, purpose="add questions to")
  topic = params.topic or quiz.title
  try:
    questions = await ctx.question_generator.generate(topic, count=params.num_questions, difficulty=params.difficulty)
  except QuestionGenerationError as exc:
    logger.warning("Question generation failed quiz_id=%s: %s", quiz.id, exc)
    return fail(f'I couldn\'t generate questions on "{topic}" right now. Please try again.')

  existing = await ctx.store.get_quiz_questions(quiz.id)
  generated = await persist_questions(ctx, quiz, questions, start_index=len(existing))
  if not generated:
    return fail(f'I couldn\'t save the generated questions for quiz "{quiz.title}". Please try again.')
  message = f'Added {count_noun(generated, "question")} on "{topic}" to quiz "{quiz.title}"'
  return succeed(message, {"quiz": to_payload(quiz), "questionsGenerated": generated})
