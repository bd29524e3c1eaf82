"""Per-intent handler behaviour through the dispatcher boundary."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from app.copilot.handlers.creation import generate_course_code
from app.copilot.handlers.navigation import HELP_MESSAGE, UNKNOWN_MESSAGE
from app.storage.domain_repo import StoreError
from tests.conftest import questions_payload


def test_generate_course_code() -> None:
  assert generate_course_code("Biology 101") == "BIO101"
  assert generate_course_code("Introduction to Physics") == "ITP101"
  assert generate_course_code("Organic Chemistry 2") == "OC2"
  assert generate_course_code("!!!") == "CRS101"


@pytest.mark.anyio
async def test_create_course_applies_defaults(dispatcher, store, instructor) -> None:
  result = await dispatcher.execute("create_course", {"name": "Biology 101"}, instructor)
  assert result.success is True
  assert result.message == 'Created course "Biology 101" (BIO101)'
  assert result.data["course"]["code"] == "BIO101"
  assert result.data["course"]["semester"] == "Spring 2026"
  assert result.data["course"]["instructorId"] == instructor.user_id
  assert len(await store.get_courses(instructor.user_id)) == 1


@pytest.mark.anyio
async def test_create_course_without_name(dispatcher, instructor) -> None:
  result = await dispatcher.execute("create_course", {}, instructor)
  assert result.success is True
  assert result.data["course"]["name"] == "New Course"


@pytest.mark.anyio
async def test_create_quiz_without_courses_fails_gracefully(dispatcher, instructor) -> None:
  result = await dispatcher.execute("create_quiz", {"topic": "Gravity"}, instructor)
  assert result.success is False
  assert result.message == "No courses found. Please create a course first."


@pytest.mark.anyio
async def test_create_quiz_generates_and_links_questions(dispatcher, store, model, instructor) -> None:
  course = await store.create_course(name="Biology 101", code="BIO101", instructor_id=instructor.user_id)
  model.queue(questions_payload(3))

  result = await dispatcher.execute("create_quiz", {"topic": "Cell Division", "numQuestions": "3", "courseName": "biology"}, instructor)

  assert result.success is True
  assert result.message == 'Created quiz "Cell Division Quiz" in course "Biology 101" with 3 questions'
  assert result.data["questionsGenerated"] == 3
  assert result.data["quiz"]["courseId"] == course.id
  assert result.data["quiz"]["status"] == "draft"
  links = await store.get_quiz_questions(result.data["quiz"]["id"])
  assert [link.order_index for link in links] == [0, 1, 2]
  assert "Cell Division" in model.prompts[0]


@pytest.mark.anyio
async def test_create_quiz_survives_question_generation_failure(dispatcher, store, model, instructor) -> None:
  await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  model.queue("I cannot write questions today.")

  result = await dispatcher.execute("create_quiz", {"topic": "Gravity"}, instructor)

  assert result.success is True
  assert result.message == 'Created quiz "Gravity Quiz" in course "Physics"'
  assert "questionsGenerated" not in result.data
  assert await store.get_quiz_questions(result.data["quiz"]["id"]) == []


def _fail_nth_question_write(store, monkeypatch, n: int) -> None:
  original = store.create_question
  calls = 0

  async def create_question(**kwargs):
    nonlocal calls
    calls += 1
    if calls == n:
      raise StoreError("connection reset")
    return await original(**kwargs)

  monkeypatch.setattr(store, "create_question", create_question)


@pytest.mark.anyio
async def test_create_quiz_reports_questions_actually_stored(dispatcher, store, model, instructor, monkeypatch) -> None:
  await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  model.queue(questions_payload(3))
  _fail_nth_question_write(store, monkeypatch, 2)

  result = await dispatcher.execute("create_quiz", {"topic": "Gravity", "numQuestions": 3}, instructor)

  assert result.success is True
  assert result.message == 'Created quiz "Gravity Quiz" in course "Physics" with 1 question'
  assert result.data["questionsGenerated"] == 1
  assert len(await store.get_quiz_questions(result.data["quiz"]["id"])) == 1


@pytest.mark.anyio
async def test_generate_questions_with_nothing_stored_is_task_failure(dispatcher, store, model, instructor, monkeypatch) -> None:
  course = await store.create_course(name="Biology", code="BIO101", instructor_id=instructor.user_id)
  quiz = await store.create_quiz(course_id=course.id, title="Genetics Quiz")
  model.queue(questions_payload(2))
  _fail_nth_question_write(store, monkeypatch, 1)

  result = await dispatcher.execute("generate_questions", {"numQuestions": 2}, instructor)

  assert result.success is False
  assert result.message == 'I couldn\'t save the generated questions for quiz "Genetics Quiz". Please try again.'
  assert await store.get_quiz_questions(quiz.id) == []


@pytest.mark.anyio
async def test_create_quiz_without_topic_skips_generation(dispatcher, store, model, instructor) -> None:
  await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  result = await dispatcher.execute("create_quiz", {}, instructor)
  assert result.success is True
  assert result.data["quiz"]["title"] == "AI Generated Quiz"
  assert model.prompts == []


@pytest.mark.anyio
async def test_invalid_parameters_become_task_failure(dispatcher, store, instructor) -> None:
  await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  result = await dispatcher.execute("create_quiz", {"numQuestions": "many"}, instructor)
  assert result.success is False
  assert result.message.startswith("I couldn't use the details for create quiz: numQuestions")


@pytest.mark.anyio
async def test_store_errors_are_absorbed(dispatcher, store, instructor, monkeypatch) -> None:
  monkeypatch.setattr(store, "create_course", AsyncMock(side_effect=StoreError("duplicate key value violates unique constraint")))
  result = await dispatcher.execute("create_course", {"name": "Biology"}, instructor)
  assert result.success is False
  assert "unique constraint" not in result.message
  assert result.message.startswith("I couldn't create course")


@pytest.mark.anyio
async def test_unexpected_errors_are_absorbed(dispatcher, store, instructor, monkeypatch) -> None:
  monkeypatch.setattr(store, "get_courses", AsyncMock(side_effect=RuntimeError("kaboom")))
  result = await dispatcher.execute("list_courses", {}, instructor)
  assert result.success is False
  assert result.message == "Something went wrong while trying to list courses."


@pytest.mark.anyio
async def test_create_assignment_defaults_due_date(dispatcher, store, instructor) -> None:
  await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  result = await dispatcher.execute("create_assignment", {"title": "Lab Report", "dueDate": "next Friday"}, instructor)
  assert result.success is True
  assignment = result.data["assignment"]
  assert assignment["status"] == "draft"
  assert assignment["maxScore"] == 100
  due = datetime.fromisoformat(assignment["dueDate"])
  assert timedelta(days=6, hours=23) < due - datetime.now(UTC) <= timedelta(days=7)


@pytest.mark.anyio
async def test_create_lecture_uses_named_course(dispatcher, store, instructor) -> None:
  await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  biology = await store.create_course(name="Biology 101", code="BIO101", instructor_id=instructor.user_id)
  result = await dispatcher.execute("create_lecture", {"title": "Mitosis", "course": "BIO101"}, instructor)
  assert result.success is True
  assert result.data["lecture"]["courseId"] == biology.id


@pytest.mark.anyio
async def test_publish_all_drafts_only_touches_own_quizzes(dispatcher, store, instructor, other_instructor) -> None:
  mine = await store.create_course(name="Biology 101", code="BIO101", instructor_id=instructor.user_id)
  theirs = await store.create_course(name="Chemistry", code="CHE101", instructor_id=other_instructor.user_id)
  for title in ("Quiz 1", "Quiz 2", "Quiz 3"):
    await store.create_quiz(course_id=mine.id, title=title)
  foreign = await store.create_quiz(course_id=theirs.id, title="Their Quiz")

  result = await dispatcher.execute("publish_quiz", {"quizName": "all my draft quizzes"}, instructor)

  assert result.success is True
  assert result.message == "Published 3 draft quizzes"
  assert all(quiz.status == "published" for quiz in await store.get_quizzes(instructor.user_id))
  untouched = await store.get_quiz(foreign.id)
  assert untouched is not None
  assert untouched.status == "draft"


@pytest.mark.anyio
async def test_publish_all_with_no_drafts(dispatcher, instructor) -> None:
  result = await dispatcher.execute("publish_quiz", {"all": True}, instructor)
  assert result.success is True
  assert result.message == "No draft quizzes to publish."


@pytest.mark.anyio
@pytest.mark.parametrize("phrase", ["every draft", "all my drafts", "All unpublished quizzes", "all"])
async def test_publish_understands_bulk_phrasings(dispatcher, store, instructor, phrase) -> None:
  course = await store.create_course(name="Biology 101", code="BIO101", instructor_id=instructor.user_id)
  for title in ("Quiz 1", "Quiz 2"):
    await store.create_quiz(course_id=course.id, title=title)

  result = await dispatcher.execute("publish_quiz", {"quizName": phrase}, instructor)

  assert result.message == "Published 2 draft quizzes"


@pytest.mark.anyio
async def test_publish_title_starting_with_all_targets_one_quiz(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Biology 101", code="BIO101", instructor_id=instructor.user_id)
  await store.create_quiz(course_id=course.id, title="All About Cells")
  other = await store.create_quiz(course_id=course.id, title="Genetics")

  result = await dispatcher.execute("publish_quiz", {"quizName": "All About Cells"}, instructor)

  assert result.message == 'Published quiz "All About Cells"'
  untouched = await store.get_quiz(other.id)
  assert untouched is not None
  assert untouched.status == "draft"


@pytest.mark.anyio
async def test_publish_without_quizzes_is_task_failure(dispatcher, instructor) -> None:
  result = await dispatcher.execute("publish_quiz", {"quizName": "Midterm"}, instructor)
  assert result.success is False
  assert result.message == "No quizzes found to publish."


@pytest.mark.anyio
async def test_generate_public_link_defaults(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  quiz = await store.create_quiz(course_id=course.id, title="Gravity Quiz")

  result = await dispatcher.execute("generate_public_link", {"quizName": "gravity"}, instructor)

  assert result.success is True
  assert result.data["publicUrl"].startswith("http://test.local/public/quiz/")
  stored = await store.get_quiz(quiz.id)
  assert stored is not None
  assert stored.public_link_permission == "attempt"
  assert stored.required_identification_fields == ["name", "email"]
  assert result.data["publicUrl"].endswith(stored.public_access_token)


@pytest.mark.anyio
async def test_generate_view_only_link(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  await store.create_quiz(course_id=course.id, title="Gravity Quiz")
  result = await dispatcher.execute("generate_public_link", {"permission": "view only"}, instructor)
  assert result.success is True
  assert result.message.startswith('Generated view-only public link for "Gravity Quiz"')
  assert result.data["quiz"]["publicLinkPermission"] == "view"


@pytest.mark.anyio
async def test_generate_public_link_without_quizzes(dispatcher, instructor) -> None:
  result = await dispatcher.execute("generate_public_link", {}, instructor)
  assert result.success is False
  assert result.message == "No quizzes found to generate a link for."


@pytest.mark.anyio
async def test_delete_with_unmatched_name_does_not_fall_back(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  quiz = await store.create_quiz(course_id=course.id, title="Gravity Quiz")
  result = await dispatcher.execute("delete_quiz", {"quizName": "Astronomy Final"}, instructor)
  assert result.success is False
  assert result.message == 'No quiz named "Astronomy Final" found.'
  assert await store.get_quiz(quiz.id) is not None


@pytest.mark.anyio
async def test_delete_course_by_name(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  await store.create_quiz(course_id=course.id, title="Gravity Quiz")
  result = await dispatcher.execute("delete_course", {"name": "physics"}, instructor)
  assert result.success is True
  assert result.data["deleted"] == {"kind": "course", "id": course.id, "name": "Physics"}
  assert await store.get_courses(instructor.user_id) == []
  assert await store.get_quizzes(instructor.user_id) == []


@pytest.mark.anyio
async def test_delete_assignment_and_lecture(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  await store.create_assignment(course_id=course.id, title="Lab Report", due_date=None)
  await store.create_lecture(course_id=course.id, title="Kinematics")
  assignment = await dispatcher.execute("delete_assignment", {"assignmentName": "lab"}, instructor)
  lecture = await dispatcher.execute("delete_lecture", {}, instructor)
  assert assignment.success is True
  assert lecture.success is True
  assert await store.get_assignments(instructor.user_id) == []
  assert await store.get_lectures(instructor.user_id) == []


@pytest.mark.anyio
async def test_update_quiz_applies_changes(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  quiz = await store.create_quiz(course_id=course.id, title="Gravity Quiz")
  result = await dispatcher.execute("update_quiz", {"timeLimit": 30, "passingScore": "70"}, instructor)
  assert result.success is True
  stored = await store.get_quiz(quiz.id)
  assert stored is not None
  assert stored.time_limit_minutes == 30
  assert stored.passing_score == 70


@pytest.mark.anyio
async def test_update_quiz_without_changes_fails(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  await store.create_quiz(course_id=course.id, title="Gravity Quiz")
  result = await dispatcher.execute("update_quiz", {"quizName": "gravity"}, instructor)
  assert result.success is False


@pytest.mark.anyio
async def test_generate_questions_appends_after_existing(dispatcher, store, model, instructor) -> None:
  course = await store.create_course(name="Biology 101", code="BIO101", instructor_id=instructor.user_id)
  quiz = await store.create_quiz(course_id=course.id, title="Genetics Quiz")
  model.queue(questions_payload(2, topic="Genetics"), questions_payload(2, topic="Genetics"))

  first = await dispatcher.execute("generate_questions", {"numQuestions": 2}, instructor)
  second = await dispatcher.execute("generate_questions", {"quizName": "genetics", "numQuestions": 2}, instructor)

  assert first.success is True
  assert second.success is True
  assert "Genetics Quiz" in model.prompts[0]
  links = await store.get_quiz_questions(quiz.id)
  assert [link.order_index for link in links] == [0, 1, 2, 3]


@pytest.mark.anyio
async def test_generate_questions_failure_is_task_failure(dispatcher, store, model, instructor) -> None:
  course = await store.create_course(name="Biology 101", code="BIO101", instructor_id=instructor.user_id)
  await store.create_quiz(course_id=course.id, title="Genetics Quiz")
  model.queue(TimeoutError("model timed out"))
  result = await dispatcher.execute("generate_questions", {"topic": "Genes"}, instructor)
  assert result.success is False
  assert "timed out" not in result.message


@pytest.mark.anyio
async def test_list_courses_when_empty(dispatcher, instructor) -> None:
  result = await dispatcher.execute("list_courses", {}, instructor)
  assert result.success is True
  assert result.message == "Found 0 courses"
  assert result.data == {"courses": []}


@pytest.mark.anyio
async def test_list_quizzes_previews_and_reports_true_count(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  for index in range(12):
    await store.create_quiz(course_id=course.id, title=f"Quiz {index}")
  result = await dispatcher.execute("list_quizzes", {}, instructor)
  assert result.success is True
  assert result.message.startswith("Found 12 quizzes")
  assert result.message.endswith("(showing the first 10)")
  assert len(result.data["quizzes"]) == 10


@pytest.mark.anyio
async def test_list_quizzes_filters_status_and_course(dispatcher, store, instructor) -> None:
  physics = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  biology = await store.create_course(name="Biology", code="BIO101", instructor_id=instructor.user_id)
  published = await store.create_quiz(course_id=physics.id, title="Gravity Quiz", status="published")
  await store.create_quiz(course_id=physics.id, title="Optics Quiz")
  await store.create_quiz(course_id=biology.id, title="Cells Quiz", status="published")

  result = await dispatcher.execute("list_quizzes", {"courseName": "physics", "status": "Published"}, instructor)

  assert result.success is True
  assert [quiz["id"] for quiz in result.data["quizzes"]] == [published.id]
  assert result.message == 'Found 1 published quiz in "Physics": Gravity Quiz'


@pytest.mark.anyio
async def test_list_for_unknown_course_fails(dispatcher, store, instructor) -> None:
  await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  result = await dispatcher.execute("list_assignments", {"courseName": "Astronomy"}, instructor)
  assert result.success is False
  assert result.message == 'No course named "Astronomy" found.'


@pytest.mark.anyio
async def test_list_enrollments_and_submissions(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  quiz = await store.create_quiz(course_id=course.id, title="Gravity Quiz")
  await store.create_enrollment(course_id=course.id, student_id="s1")
  await store.create_enrollment(course_id=course.id, student_id="s2")
  await store.create_quiz_submission(quiz_id=quiz.id, student_id="s1", score=8, percentage=80)

  enrollments = await dispatcher.execute("list_enrollments", {}, instructor)
  submissions = await dispatcher.execute("list_submissions", {"quizName": "gravity"}, instructor)

  assert enrollments.message == "Found 2 enrollments"
  assert len(enrollments.data["enrollments"]) == 2
  assert submissions.message == 'Found 1 submission for "Gravity Quiz"'
  assert submissions.data["submissions"][0]["studentId"] == "s1"


@pytest.mark.anyio
async def test_view_analytics(dispatcher, store, instructor) -> None:
  course = await store.create_course(name="Physics", code="PHY101", instructor_id=instructor.user_id)
  await store.create_enrollment(course_id=course.id, student_id="s1")
  result = await dispatcher.execute("view_analytics", {}, instructor)
  assert result.success is True
  assert result.message.startswith("Here are your analytics")
  assert result.data["stats"]["totalCourses"] == 1
  assert result.data["stats"]["totalStudents"] == 1


@pytest.mark.anyio
@pytest.mark.parametrize(("page", "route"), [("Gradebook", "/gradebook"), ("the quiz builder", "/quizzes/new"), ("my quizzes", "/quizzes"), ("Courses page", "/courses"), ("somewhere else", "/dashboard"), (None, "/dashboard")])
async def test_navigate(dispatcher, instructor, page, route) -> None:
  result = await dispatcher.execute("navigate", {"page": page}, instructor)
  assert result.success is True
  assert result.data == {"navigateTo": route}


@pytest.mark.anyio
async def test_help_and_unknown_always_succeed(dispatcher, instructor) -> None:
  help_result = await dispatcher.execute("help", {}, instructor)
  passthrough = await dispatcher.execute("unknown", {"message": "I can only help with teaching tasks."}, instructor)
  unrecognized = await dispatcher.execute("make_coffee", {"size": "large"}, instructor)
  assert help_result.success is True
  assert help_result.message == HELP_MESSAGE
  assert passthrough.message == "I can only help with teaching tasks."
  assert unrecognized.success is True
  assert unrecognized.message == UNKNOWN_MESSAGE
