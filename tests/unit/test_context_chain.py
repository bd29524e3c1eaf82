from __future__ import annotations

import pytest

from app.copilot.context_chain import CommandContext
from app.copilot.intents import CreateQuizParams


def test_injects_last_created_course_into_dependent_creations() -> None:
  context = CommandContext()
  context.record("create_course", {"course": {"id": "c1", "name": "Biology 101"}})
  assert context.inject("create_quiz", {"topic": "Cell Division"}) == {"topic": "Cell Division", "courseName": "Biology 101"}
  assert context.inject("create_assignment", {})["courseName"] == "Biology 101"
  assert context.inject("create_lecture", {"title": "Mitosis"})["courseName"] == "Biology 101"


def test_never_overrides_explicit_course_reference() -> None:
  context = CommandContext()
  context.record("create_course", {"course": {"id": "c1", "name": "Biology 101"}})
  assert context.inject("create_quiz", {"course": "Chemistry"}) == {"course": "Chemistry"}
  assert context.inject("create_quiz", {"courseId": "c9"}) == {"courseId": "c9"}


@pytest.mark.parametrize("key", ["courseTitle", "courseCode", "course_title", "course_code"])
def test_course_synonyms_count_as_explicit_reference(key) -> None:
  context = CommandContext()
  context.record("create_course", {"course": {"id": "c2", "name": "Chemistry 101"}})
  assert context.inject("create_quiz", {"title": "Cells", key: "BIO101"}) == {"title": "Cells", key: "BIO101"}
  assert CreateQuizParams.model_validate({key: "BIO101"}).course_name == "BIO101"


def test_no_injection_without_created_course() -> None:
  context = CommandContext()
  assert context.inject("create_quiz", {"topic": "Gravity"}) == {"topic": "Gravity"}


def test_last_created_course_wins_and_all_are_kept() -> None:
  context = CommandContext()
  context.record("create_course", {"course": {"id": "c1", "name": "Biology 101"}})
  context.record("create_course", {"course": {"id": "c2", "name": "Chemistry 101"}})
  context.record("list_courses", {"courses": []})
  assert context.last_created_course_name == "Chemistry 101"
  assert [course["id"] for course in context.created["course"]] == ["c1", "c2"]


def test_quiz_creation_does_not_count_as_course_creation() -> None:
  context = CommandContext()
  context.record("create_quiz", {"quiz": {"id": "q1", "title": "Gravity Quiz"}, "course": {"id": "c1", "name": "Physics"}})
  assert context.last_created_course_name is None
  assert context.last_created("quiz") == {"id": "q1", "title": "Gravity Quiz"}


def test_injects_created_quiz_into_follow_up_quiz_tasks() -> None:
  context = CommandContext()
  context.record("create_quiz", {"quiz": {"id": "q1", "title": "Gravity Quiz"}})
  assert context.inject("publish_quiz", {}) == {"quizId": "q1"}
  assert context.inject("generate_public_link", {"permission": "view"}) == {"permission": "view", "quizId": "q1"}
  assert context.inject("publish_quiz", {"all": True}) == {"all": True}
  assert context.inject("publish_quiz", {"quizName": "Midterm"}) == {"quizName": "Midterm"}
  assert context.inject("delete_quiz", {}) == {}
