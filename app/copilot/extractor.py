"""Turns one free-text instructor command into an ordered task list."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from app.ai.json_parser import parse_first_object
from app.ai.providers.base import AIModel
from app.copilot.contracts import ExtractionResult, Task
from app.copilot.prompts import render_intent_prompt
from app.storage.commands_repo import CommandRecord
from app.storage.domain_repo import AssignmentRecord, CourseRecord, QuizRecord

logger = logging.getLogger(__name__)

SNAPSHOT_LIMIT = 10
FALLBACK_MESSAGE = "I couldn't understand that command. Try asking me to create a quiz or generate a public link."


@dataclass(frozen=True)
class PlatformSnapshot:
  """The actor's existing entities, newest last, as shown to the model."""

  courses: list[CourseRecord] = field(default_factory=list)
  quizzes: list[QuizRecord] = field(default_factory=list)
  assignments: list[AssignmentRecord] = field(default_factory=list)

  def to_prompt(self, limit: int = SNAPSHOT_LIMIT) -> dict[str, list[dict[str, Any]]]:
    # Keep the most recent entries; those are what pronouns point at.
    return {
      "courses": [{"name": course.name, "code": course.code} for course in self.courses[-limit:]],
      "quizzes": [{"title": quiz.title, "status": quiz.status} for quiz in self.quizzes[-limit:]],
      "assignments": [{"title": assignment.title} for assignment in self.assignments[-limit:]],
    }


def _fallback(message: str = FALLBACK_MESSAGE) -> ExtractionResult:
  return ExtractionResult(tasks=[Task(intent="unknown", parameters={"message": message})], summary=message)


def _coerce_task(entry: Any) -> Task | None:
  if not isinstance(entry, dict):
    return None
  intent = entry.get("intent")
  if not isinstance(intent, str) or not intent.strip():
    return None
  parameters = entry.get("parameters")
  return Task(intent=intent.strip().lower(), parameters=dict(parameters) if isinstance(parameters, dict) else {})


def _summarize(tasks: Sequence[Task]) -> str:
  labels = [task.intent.replace("_", " ") for task in tasks]
  if len(labels) == 1:
    return f"Running {labels[0]}."
  return f"Running {len(labels)} tasks: {', '.join(labels)}."


def parse_extraction(raw: str) -> ExtractionResult:
  """
  Repair raw model text into a non-empty task list.

  A `tasks` array wins; a bare `{intent, parameters}` object becomes a single
  task; anything else degrades to one `unknown` task with a help message.
  """
  payload = parse_first_object(raw)
  if payload is None:
    logger.warning("Model output had no JSON object; falling back to unknown intent.")
    return _fallback()

  if isinstance(payload.get("tasks"), list):
    tasks = [task for task in (_coerce_task(entry) for entry in payload["tasks"]) if task is not None]
  else:
    single = _coerce_task(payload)
    tasks = [single] if single is not None else []

  if not tasks:
    logger.warning("Model output had no usable tasks: keys=%s", sorted(payload))
    return _fallback()

  summary = payload.get("summary") or payload.get("message")
  if not isinstance(summary, str) or not summary.strip():
    summary = _summarize(tasks)
  return ExtractionResult(tasks=tasks, summary=summary.strip())


class IntentExtractor:
  """Single model call per command; output is always repaired into at least one task."""

  def __init__(self, model: AIModel, *, history_limit: int = 5) -> None:
    self._model = model
    self._history_limit = history_limit

  async def extract(self, raw_text: str, snapshot: PlatformSnapshot, history: Sequence[CommandRecord]) -> ExtractionResult:
    recent = [{"command": record.raw_text, "intent": record.intent} for record in list(history)[: self._history_limit]]
    prompt = render_intent_prompt(raw_text, snapshot.to_prompt(), recent)
    # Model exceptions propagate; they abort the command upstream.
    response = await self._model.generate(prompt)
    logger.info("Intent model response: %s", response.content)
    result = parse_extraction(response.content)
    logger.info("Extracted %s task(s): %s", len(result.tasks), [task.intent for task in result.tasks])
    return result
