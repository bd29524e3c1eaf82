"""Shared plumbing for per-intent task handlers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from app.config import Settings
from app.copilot.contracts import Actor, TaskResult
from app.copilot.question_generator import QuestionGenerator
from app.copilot.resolver import EntityKind, EntityResolver
from app.storage.domain_repo import CourseRecord, DomainStore, QuizRecord

Handler = Callable[[Any, "HandlerContext"], Awaitable[TaskResult]]

PLURALS: dict[str, str] = {"course": "courses", "quiz": "quizzes", "assignment": "assignments", "lecture": "lectures"}


class TargetNotFoundError(LookupError):
  """Raised by handlers when the entity a task needs is not in the actor's scope."""


@dataclass(frozen=True)
class HandlerContext:
  """Collaborators a handler may touch while running one task."""

  store: DomainStore
  resolver: EntityResolver
  question_generator: QuestionGenerator
  settings: Settings
  actor: Actor


def succeed(message: str, data: dict[str, Any] | None = None) -> TaskResult:
  return TaskResult(success=True, message=message, data=data)


def fail(message: str, data: dict[str, Any] | None = None) -> TaskResult:
  return TaskResult(success=False, message=message, data=data)


def count_noun(count: int, singular: str, plural: str | None = None) -> str:
  return f"{count} {singular if count == 1 else (plural or singular + 's')}"


def display_name(entity: Any) -> str:
  return entity.name if isinstance(entity, CourseRecord) else entity.title


async def resolve_course(ctx: HandlerContext, name: str | None, course_id: str | None) -> CourseRecord:
  """Course a creation task belongs to; the most recent course when none is named."""
  course = await ctx.resolver.resolve("course", name, ctx.actor, entity_id=course_id)
  if course is None:
    raise TargetNotFoundError("No courses found. Please create a course first.")
  return course  # type: ignore[return-value]


async def resolve_course_filter(ctx: HandlerContext, name: str | None, course_id: str | None) -> CourseRecord | None:
  """Optional course scope for listings; a named course that does not exist is an error."""
  if not name and not course_id:
    return None
  course = await ctx.resolver.resolve("course", name, ctx.actor, entity_id=course_id, fallback=False)
  if course is None:
    raise TargetNotFoundError(f'No course named "{name or course_id}" found.')
  return course  # type: ignore[return-value]


async def resolve_quiz(ctx: HandlerContext, name: str | None, quiz_id: str | None, *, purpose: str) -> QuizRecord:
  quiz = await ctx.resolver.resolve("quiz", name, ctx.actor, entity_id=quiz_id)
  if quiz is None:
    raise TargetNotFoundError(f"No quizzes found to {purpose}.")
  return quiz  # type: ignore[return-value]


async def resolve_for_delete(ctx: HandlerContext, kind: EntityKind, name: str | None, entity_id: str | None) -> Any:
  """Deletes never fall back to another entity when a name or id was given and missed."""
  entity = await ctx.resolver.resolve(kind, name, ctx.actor, entity_id=entity_id, fallback=False)
  if entity is None:
    if name or entity_id:
      raise TargetNotFoundError(f'No {kind} named "{name or entity_id}" found.')
    raise TargetNotFoundError(f"No {PLURALS[kind]} found to delete.")
  return entity
