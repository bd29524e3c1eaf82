"""Command lifecycle: audit record, extraction, sequential dispatch, aggregation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from app.ai.providers.base import AIModel
from app.config import Settings, SuccessPolicy
from app.copilot.context_chain import CommandContext
from app.copilot.contracts import Actor, AggregatedResult, TaskOutcome
from app.copilot.dispatcher import TaskDispatcher
from app.copilot.extractor import IntentExtractor, PlatformSnapshot
from app.copilot.question_generator import QuestionGenerator
from app.copilot.resolver import EntityResolver
from app.storage.commands_repo import CommandRecord, CommandsRepository, InvalidTransitionError
from app.storage.domain_repo import DomainStore, StoreError

logger = logging.getLogger(__name__)

PROCESSING_ERROR_MESSAGE = "I couldn't process that command right now. Please try again."


class CommandProcessingError(RuntimeError):
  """Raised when a command is aborted before its tasks could run."""

  def __init__(self, message: str = PROCESSING_ERROR_MESSAGE, *, command_id: str | None = None) -> None:
    super().__init__(message)
    self.command_id = command_id


@dataclass(frozen=True)
class CommandSubmission:
  """What a caller gets back for one submitted command."""

  command: CommandRecord
  result: AggregatedResult
  summary: str


def is_successful(successes: int, total: int, policy: SuccessPolicy) -> bool:
  if total == 0:
    return False
  if policy == "all":
    return successes == total
  if policy == "majority":
    return successes * 2 > total
  return successes > 0


def aggregate(outcomes: Sequence[TaskOutcome], policy: SuccessPolicy = "any") -> AggregatedResult:
  """Fold task outcomes into one result; later task data overwrites earlier keys."""
  successes = sum(1 for outcome in outcomes if outcome.result.success)
  if len(outcomes) == 1:
    message = outcomes[0].result.message
  else:
    message = "\n".join(f"{index}. {outcome.result.message}" for index, outcome in enumerate(outcomes, start=1))
  data: dict[str, Any] = {}
  for outcome in outcomes:
    if outcome.result.data:
      data.update(outcome.result.data)
  return AggregatedResult(success=is_successful(successes, len(outcomes), policy), message=message, data=data, task_results=list(outcomes))


class CommandOrchestrator:
  """Runs one command end to end: pending -> executing -> completed | failed."""

  def __init__(self, *, commands: CommandsRepository, resolver: EntityResolver, extractor: IntentExtractor, dispatcher: TaskDispatcher, settings: Settings) -> None:
    self._commands = commands
    self._resolver = resolver
    self._extractor = extractor
    self._dispatcher = dispatcher
    self._settings = settings

  async def submit(self, actor: Actor, raw_text: str) -> CommandSubmission:
    """Execute a command's tasks strictly in order and persist the audited outcome."""
    try:
      command = await self._commands.create_command(user_id=actor.user_id, raw_text=raw_text)
    except StoreError as exc:
      logger.error("Unable to record command user_id=%s: %s", actor.user_id, exc, exc_info=True)
      raise CommandProcessingError() from exc

    logger.info("Command %s pending user_id=%s", command.id, actor.user_id)

    try:
      command = await self._commands.transition(command.id, "executing")
      snapshot = await self._snapshot(actor)
      history = await self._recent_history(actor, exclude=command.id)
      extraction = await self._extractor.extract(raw_text, snapshot, history)
    except Exception as exc:  # noqa: BLE001
      logger.error("Command %s aborted during extraction: %s", command.id, exc, exc_info=True)
      await self._abort(command.id)
      raise CommandProcessingError(command_id=command.id) from exc

    context = CommandContext()
    outcomes: list[TaskOutcome] = []
    dispatched: list[dict[str, Any]] = []
    for task in extraction.tasks:
      parameters = context.inject(task.intent, task.parameters)
      dispatched.append(parameters)
      result = await self._dispatcher.execute(task.intent, parameters, actor)
      outcomes.append(TaskOutcome(intent=task.intent, result=result))
      if result.success:
        context.record(task.intent, result.data)

    aggregated = aggregate(outcomes, self._settings.copilot_success_policy)
    status = "completed" if aggregated.success else "failed"
    intent = "+".join(task.intent for task in extraction.tasks)
    try:
      command = await self._commands.transition(command.id, status, intent=intent, parameters=dispatched, result=aggregated.to_dict())
    except StoreError as exc:
      logger.error("Unable to finalize command %s: %s", command.id, exc, exc_info=True)
      await self._abort(command.id)
      raise CommandProcessingError(command_id=command.id) from exc

    logger.info("Command %s %s tasks=%s succeeded=%s", command.id, status, len(outcomes), sum(1 for outcome in outcomes if outcome.result.success))
    return CommandSubmission(command=command, result=aggregated, summary=extraction.summary)

  async def history(self, actor: Actor) -> list[CommandRecord]:
    """Every command the actor submitted, newest first."""
    return await self._commands.list_commands(actor.user_id)

  async def _snapshot(self, actor: Actor) -> PlatformSnapshot:
    courses = await self._resolver.scoped("course", actor)
    quizzes = await self._resolver.scoped("quiz", actor)
    assignments = await self._resolver.scoped("assignment", actor)
    return PlatformSnapshot(courses=courses, quizzes=quizzes, assignments=assignments)  # type: ignore[arg-type]

  async def _recent_history(self, actor: Actor, *, exclude: str) -> list[CommandRecord]:
    limit = self._settings.copilot_history_limit
    if limit == 0:
      return []
    records = await self._commands.list_commands(actor.user_id, limit=limit + 1)
    return [record for record in records if record.id != exclude][:limit]

  async def _abort(self, command_id: str) -> None:
    result = {"success": False, "message": PROCESSING_ERROR_MESSAGE, "data": {}, "taskResults": []}
    try:
      await self._commands.transition(command_id, "failed", parameters=[], result=result)
    except (StoreError, InvalidTransitionError) as exc:
      logger.warning("Unable to mark command %s failed: %s", command_id, exc)


def build_orchestrator(settings: Settings, *, store: DomainStore, commands: CommandsRepository, model: AIModel) -> CommandOrchestrator:
  """Wire the Co-Pilot components around one store and one language model."""
  resolver = EntityResolver(store)
  question_generator = QuestionGenerator(model, max_questions=settings.copilot_max_generated_questions)
  dispatcher = TaskDispatcher(store=store, resolver=resolver, question_generator=question_generator, settings=settings)
  extractor = IntentExtractor(model, history_limit=settings.copilot_history_limit)
  return CommandOrchestrator(commands=commands, resolver=resolver, extractor=extractor, dispatcher=dispatcher, settings=settings)
