"""Carries entities created earlier in a command into the tasks that follow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.copilot.intents import COURSE_REFERENCE_KEYS, QUIZ_REFERENCE_KEYS, Intent

ENTITY_KINDS: tuple[str, ...] = ("course", "quiz", "assignment", "lecture")

_NEEDS_COURSE: frozenset[Intent] = frozenset({Intent.CREATE_QUIZ, Intent.CREATE_ASSIGNMENT, Intent.CREATE_LECTURE})
_NEEDS_QUIZ: frozenset[Intent] = frozenset({Intent.PUBLISH_QUIZ, Intent.GENERATE_PUBLIC_LINK, Intent.UPDATE_QUIZ, Intent.GENERATE_QUESTIONS})
_CREATED_KIND: dict[Intent, str] = {Intent.CREATE_COURSE: "course", Intent.CREATE_QUIZ: "quiz", Intent.CREATE_ASSIGNMENT: "assignment", Intent.CREATE_LECTURE: "lecture"}


def _has_reference(parameters: dict[str, Any], keys: frozenset[str]) -> bool:
  return any(parameters.get(key) not in (None, "") for key in keys)


def _is_bulk(parameters: dict[str, Any]) -> bool:
  flag = parameters.get("all")
  return flag is True or (isinstance(flag, str) and flag.strip().lower() in {"true", "yes", "1"})


@dataclass
class CommandContext:
  """Every entity payload created so far in the current command, keyed by kind in creation order."""

  created: dict[str, list[dict[str, Any]]] = field(default_factory=lambda: {kind: [] for kind in ENTITY_KINDS})

  def last_created(self, kind: str) -> dict[str, Any] | None:
    entries = self.created.get(kind) or []
    return entries[-1] if entries else None

  @property
  def last_created_course_name(self) -> str | None:
    course = self.last_created("course")
    return course.get("name") if course else None

  def inject(self, intent: str, parameters: dict[str, Any]) -> dict[str, Any]:
    """Return parameters with implied references filled in; explicit references are never replaced."""
    parsed = Intent.parse(intent)
    injected = dict(parameters)

    if parsed in _NEEDS_COURSE and not _has_reference(injected, COURSE_REFERENCE_KEYS):
      course_name = self.last_created_course_name
      if course_name:
        injected["courseName"] = course_name

    if parsed in _NEEDS_QUIZ and not _has_reference(injected, QUIZ_REFERENCE_KEYS) and not _is_bulk(injected):
      # "publish it" right after creating a quiz targets that quiz.
      quiz = self.last_created("quiz")
      if quiz and quiz.get("id"):
        injected["quizId"] = quiz["id"]

    return injected

  def record(self, intent: str, data: dict[str, Any] | None) -> None:
    """Remember the entity a successful creation task produced."""
    kind = _CREATED_KIND.get(Intent.parse(intent))
    if kind is None or not data:
      return
    # Only the created kind counts; create_quiz also echoes its parent course.
    payload = data.get(kind)
    if isinstance(payload, dict) and payload.get("id"):
      self.created[kind].append(payload)
