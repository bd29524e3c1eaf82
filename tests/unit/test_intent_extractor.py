"""Intent extraction: prompt contents, one model call, and output repair."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from app.copilot.extractor import FALLBACK_MESSAGE, IntentExtractor, PlatformSnapshot, parse_extraction
from app.storage.commands_repo import CommandRecord
from app.storage.domain_repo import CourseRecord, QuizRecord


def test_parse_extraction_keeps_task_order() -> None:
  raw = '{"tasks": [{"intent": "create_course", "parameters": {"name": "Biology 101"}}, {"intent": "create_quiz", "parameters": {"topic": "Cell Division"}}, {"intent": "list_courses"}], "summary": "Create a course and a quiz"}'
  result = parse_extraction(raw)
  assert [task.intent for task in result.tasks] == ["create_course", "create_quiz", "list_courses"]
  assert result.tasks[2].parameters == {}
  assert result.summary == "Create a course and a quiz"


def test_parse_extraction_wraps_bare_intent_object() -> None:
  result = parse_extraction('```json\n{"intent": "Publish_Quiz", "parameters": {"quizName": "Midterm"}}\n```')
  assert len(result.tasks) == 1
  assert result.tasks[0].intent == "publish_quiz"
  assert result.tasks[0].parameters == {"quizName": "Midterm"}
  assert result.summary == "Running publish quiz."


def test_parse_extraction_ignores_braces_in_leading_prose() -> None:
  result = parse_extraction('Sure {ok}! Here is the plan: {"tasks": [{"intent": "list_courses", "parameters": {}}], "summary": "List courses"}')
  assert [task.intent for task in result.tasks] == ["list_courses"]
  assert result.summary == "List courses"


def test_parse_extraction_degrades_prose_to_unknown() -> None:
  result = parse_extraction("Sorry, I am not sure what you mean.")
  assert len(result.tasks) == 1
  assert result.tasks[0].intent == "unknown"
  assert result.tasks[0].parameters == {"message": FALLBACK_MESSAGE}


def test_parse_extraction_drops_entries_without_intent() -> None:
  result = parse_extraction('{"tasks": [{"parameters": {}}, "list courses", {"intent": 7}, {"intent": "help", "parameters": ["bad"]}]}')
  assert [task.intent for task in result.tasks] == ["help"]
  assert result.tasks[0].parameters == {}


def test_parse_extraction_never_returns_empty_task_list() -> None:
  result = parse_extraction('{"tasks": [], "summary": "nothing"}')
  assert [task.intent for task in result.tasks] == ["unknown"]


@pytest.mark.anyio
async def test_extract_calls_model_once_with_context(model) -> None:
  model.queue({"tasks": [{"intent": "publish_quiz", "parameters": {"quizName": "Genetics Quiz"}}], "summary": "Publish it"})
  extractor = IntentExtractor(model, history_limit=1)
  now = datetime.now(UTC)
  snapshot = PlatformSnapshot(courses=[CourseRecord(id="c1", name="Biology 101", code="BIO101", instructor_id="u1", created_at=now)], quizzes=[QuizRecord(id="q1", course_id="c1", title="Genetics Quiz", status="draft", created_at=now)])
  history = [
    CommandRecord(id="h2", user_id="u1", raw_text="add a quiz on genetics", status="completed", created_at=now, intent="create_quiz"),
    CommandRecord(id="h1", user_id="u1", raw_text="create biology", status="completed", created_at=now, intent="create_course"),
  ]

  result = await extractor.extract("publish it", snapshot, history)

  assert [task.intent for task in result.tasks] == ["publish_quiz"]
  assert len(model.prompts) == 1
  prompt = model.prompts[0]
  assert '"publish it"' in prompt
  assert "Biology 101" in prompt
  assert "Genetics Quiz" in prompt
  assert "add a quiz on genetics" in prompt
  # Only the configured number of history entries is shown.
  assert "create biology" not in prompt
  assert "generate_public_link" in prompt
  assert "{{" not in prompt


@pytest.mark.anyio
async def test_extract_propagates_model_errors(model) -> None:
  model.queue(ConnectionError("provider down"))
  extractor = IntentExtractor(model)
  with pytest.raises(ConnectionError):
    await extractor.extract("list my courses", PlatformSnapshot(), [])
