"""Prompt rendering for the Co-Pilot model calls."""

from __future__ import annotations

import json
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path
from typing import Any

_INTENT_HINTS: tuple[tuple[str, str], ...] = (
  ("create_course", "name, code, semester, description"),
  ("create_quiz", "title, topic, courseName, numQuestions, generateQuestions, timeLimitMinutes, difficulty"),
  ("create_assignment", "title, description, courseName, dueDate (ISO 8601), maxScore"),
  ("create_lecture", "title, description, unit, courseName"),
  ("publish_quiz", "quizName, all (true to publish every draft quiz)"),
  ("update_quiz", "quizName, newTitle, description, timeLimitMinutes, passingScore, proctored, status"),
  ("delete_quiz", "quizName"),
  ("delete_course", "courseName"),
  ("delete_assignment", "assignmentName"),
  ("delete_lecture", "lectureName"),
  ("generate_public_link", "quizName, permission (view or attempt), requiredFields"),
  ("generate_questions", "quizName, topic, numQuestions, difficulty"),
  ("list_quizzes", "courseName, status"),
  ("list_courses", "none"),
  ("list_assignments", "courseName"),
  ("list_lectures", "courseName"),
  ("list_enrollments", "courseName"),
  ("list_submissions", "quizName"),
  ("view_analytics", "none"),
  ("navigate", "page"),
  ("help", "none"),
  ("unknown", "message"),
)


@lru_cache(maxsize=8)
def _load_prompt(name: str) -> str:
  try:
    path = Path(__file__).parents[1] / "ai" / "prompts" / name
    return path.read_text(encoding="utf-8").strip()
  except (FileNotFoundError, PermissionError, UnicodeDecodeError) as exc:
    raise RuntimeError(f"Failed to load prompt '{name}': {exc}") from exc


def _format_intents() -> str:
  return "\n".join(f"- {intent}: {hints}" for intent, hints in _INTENT_HINTS)


def _format_context(snapshot: dict[str, list[dict[str, Any]]]) -> str:
  if not any(snapshot.values()):
    return "The instructor has no courses, quizzes or assignments yet."
  return json.dumps(snapshot, ensure_ascii=False, indent=2)


def _format_history(history: Sequence[dict[str, Any]]) -> str:
  if not history:
    return "None."
  lines = []
  for entry in history:
    intent = entry.get("intent") or "pending"
    lines.append(f'- "{entry.get("command", "")}" -> {intent}')
  return "\n".join(lines)


def render_intent_prompt(raw_text: str, snapshot: dict[str, list[dict[str, Any]]], history: Sequence[dict[str, Any]]) -> str:
  """Build the single extraction prompt for one instructor command."""
  rendered = _load_prompt("copilot_intents.md")
  rendered = rendered.replace("{{INTENTS}}", _format_intents())
  rendered = rendered.replace("{{PLATFORM_CONTEXT}}", _format_context(snapshot))
  rendered = rendered.replace("{{RECENT_HISTORY}}", _format_history(history))
  # User text is substituted last; it may itself contain "{{...}}".
  rendered = rendered.replace("{{COMMAND}}", raw_text.replace('"', "'"))
  return rendered


def render_question_prompt(topic: str, count: int, difficulty: str) -> str:
  rendered = _load_prompt("copilot_questions.md")
  rendered = rendered.replace("{{COUNT}}", str(count))
  rendered = rendered.replace("{{DIFFICULTY}}", difficulty)
  rendered = rendered.replace("{{TOPIC}}", topic.replace('"', "'"))
  return rendered
