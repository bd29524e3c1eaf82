"""Routes one task to its handler and isolates its failures."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from app.config import Settings
from app.copilot.contracts import Actor, TaskResult
from app.copilot.handlers import creation, mutation, navigation, queries
from app.copilot.handlers.base import Handler, HandlerContext, TargetNotFoundError
from app.copilot.intents import INTENT_PARAMS, Intent
from app.copilot.question_generator import QuestionGenerator
from app.copilot.resolver import EntityResolver
from app.storage.domain_repo import DomainStore, StoreError

logger = logging.getLogger(__name__)

HANDLERS: dict[Intent, Handler] = {
  Intent.CREATE_COURSE: creation.create_course,
  Intent.CREATE_QUIZ: creation.create_quiz,
  Intent.CREATE_ASSIGNMENT: creation.create_assignment,
  Intent.CREATE_LECTURE: creation.create_lecture,
  Intent.PUBLISH_QUIZ: mutation.publish_quiz,
  Intent.UPDATE_QUIZ: mutation.update_quiz,
  Intent.DELETE_QUIZ: mutation.delete_quiz,
  Intent.DELETE_COURSE: mutation.delete_course,
  Intent.DELETE_ASSIGNMENT: mutation.delete_assignment,
  Intent.DELETE_LECTURE: mutation.delete_lecture,
  Intent.GENERATE_PUBLIC_LINK: mutation.generate_public_link,
  Intent.GENERATE_QUESTIONS: mutation.generate_questions,
  Intent.LIST_QUIZZES: queries.list_quizzes,
  Intent.LIST_COURSES: queries.list_courses,
  Intent.LIST_ASSIGNMENTS: queries.list_assignments,
  Intent.LIST_LECTURES: queries.list_lectures,
  Intent.LIST_ENROLLMENTS: queries.list_enrollments,
  Intent.LIST_SUBMISSIONS: queries.list_submissions,
  Intent.VIEW_ANALYTICS: queries.view_analytics,
  Intent.NAVIGATE: navigation.navigate,
  Intent.HELP: navigation.show_help,
  Intent.UNKNOWN: navigation.passthrough,
}


def _describe_validation_error(exc: ValidationError) -> str:
  errors = exc.errors()
  if not errors:
    return "invalid parameters"
  first = errors[0]
  location = ".".join(str(part) for part in first.get("loc", ())) or "parameters"
  return f"{location} {first.get('msg', 'is invalid').lower()}"


class TaskDispatcher:
  """Validate task parameters into the intent's model and run its handler."""

  def __init__(self, *, store: DomainStore, resolver: EntityResolver, question_generator: QuestionGenerator, settings: Settings) -> None:
    self._store = store
    self._resolver = resolver
    self._question_generator = question_generator
    self._settings = settings

  async def execute(self, intent: str, parameters: dict[str, Any], actor: Actor) -> TaskResult:
    """Run one task; every failure comes back as an unsuccessful TaskResult."""
    parsed = Intent.parse(intent)
    action = parsed.value.replace("_", " ")
    if parsed is Intent.UNKNOWN and intent.strip().lower() != Intent.UNKNOWN.value:
      logger.info("Unrecognized intent %r treated as unknown", intent)

    try:
      params = INTENT_PARAMS[parsed].model_validate(parameters)
    except ValidationError as exc:
      logger.info("Rejected parameters for %s: %s", parsed.value, exc)
      return TaskResult(success=False, message=f"I couldn't use the details for {action}: {_describe_validation_error(exc)}.")

    ctx = HandlerContext(store=self._store, resolver=self._resolver, question_generator=self._question_generator, settings=self._settings, actor=actor)
    try:
      result = await HANDLERS[parsed](params, ctx)
    except TargetNotFoundError as exc:
      result = TaskResult(success=False, message=str(exc))
    except StoreError as exc:
      logger.error("Store error during %s user_id=%s: %s", parsed.value, actor.user_id, exc, exc_info=True)
      result = TaskResult(success=False, message=f"I couldn't {action} because the platform could not save or load the data. Please try again.")
    except Exception as exc:  # noqa: BLE001
      logger.error("Task %s failed user_id=%s: %s", parsed.value, actor.user_id, exc, exc_info=True)
      result = TaskResult(success=False, message=f"Something went wrong while trying to {action}.")

    logger.info("Task %s success=%s user_id=%s", parsed.value, result.success, actor.user_id)
    return result
