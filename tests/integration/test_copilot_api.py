"""HTTP surface of the Co-Pilot: identity checks, command submission and history."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from tests.conftest import questions_payload

_INSTRUCTOR = {"X-User-Id": "instructor-1", "X-User-Role": "instructor"}


@pytest.mark.anyio
async def test_health(async_client) -> None:
  response = await async_client.get("/health")
  assert response.status_code == 200
  assert response.json()["status"] == "ok"
  assert response.headers["x-content-type-options"] == "nosniff"
  assert response.headers["x-request-id"]


@pytest.mark.anyio
async def test_submit_command_runs_all_tasks(async_client, model) -> None:
  model.queue(
    {"tasks": [{"intent": "create_course", "parameters": {"name": "Biology 101"}}, {"intent": "create_quiz", "parameters": {"topic": "Cell Division", "numQuestions": 2}}], "summary": "Create a course and a quiz"},
    questions_payload(2),
  )

  response = await async_client.post("/api/chat/command", json={"command": "Create a course called Biology 101 and add a quiz on Cell Division"}, headers=_INSTRUCTOR)

  assert response.status_code == 200
  body = response.json()
  assert body["summary"] == "Create a course and a quiz"
  assert body["command"]["status"] == "completed"
  assert body["command"]["userId"] == "instructor-1"
  assert body["command"]["completedAt"] is not None
  assert body["result"]["success"] is True
  assert body["result"]["message"].startswith('1. Created course "Biology 101" (BIO101)\n2. Created quiz "Cell Division Quiz"')
  assert body["result"]["data"]["quiz"]["courseId"] == body["result"]["data"]["course"]["id"]
  assert [item["intent"] for item in body["result"]["taskResults"]] == ["create_course", "create_quiz"]


@pytest.mark.anyio
async def test_role_defaults_to_instructor(async_client, model) -> None:
  model.queue({"intent": "navigate", "parameters": {"page": "gradebook"}})
  response = await async_client.post("/api/chat/command", json={"command": "open the gradebook"}, headers={"X-User-Id": "instructor-1"})
  assert response.status_code == 200
  assert response.json()["result"]["data"] == {"navigateTo": "/gradebook"}


@pytest.mark.anyio
async def test_empty_command_is_rejected(async_client, model) -> None:
  response = await async_client.post("/api/chat/command", json={"command": "   "}, headers=_INSTRUCTOR)
  assert response.status_code == 400
  assert response.json()["detail"] == "Command must not be empty."
  assert model.prompts == []


@pytest.mark.anyio
async def test_missing_command_field_is_validation_error(async_client) -> None:
  response = await async_client.post("/api/chat/command", json={}, headers=_INSTRUCTOR)
  assert response.status_code == 422


@pytest.mark.anyio
async def test_missing_identity_is_unauthorized(async_client) -> None:
  response = await async_client.post("/api/chat/command", json={"command": "list my courses"})
  assert response.status_code == 401


@pytest.mark.anyio
async def test_students_cannot_use_copilot(async_client) -> None:
  response = await async_client.post("/api/chat/command", json={"command": "list my courses"}, headers={"X-User-Id": "student-1", "X-User-Role": "student"})
  assert response.status_code == 403
  history = await async_client.get("/api/chat/history", headers={"X-User-Id": "student-1", "X-User-Role": "student"})
  assert history.status_code == 403


@pytest.mark.anyio
async def test_unknown_role_is_forbidden(async_client) -> None:
  response = await async_client.get("/api/chat/history", headers={"X-User-Id": "u1", "X-User-Role": "superuser"})
  assert response.status_code == 403


@pytest.mark.anyio
async def test_model_failure_returns_natural_language_error(async_client, model) -> None:
  model.queue(ConnectionError("provider unavailable"))

  response = await async_client.post("/api/chat/command", json={"command": "list my courses"}, headers=_INSTRUCTOR)

  assert response.status_code == 502
  body = response.json()
  assert body["detail"] == "I couldn't process that command right now. Please try again."
  assert "provider" not in body["detail"]
  history = await async_client.get("/api/chat/history", headers=_INSTRUCTOR)
  assert history.json()[0]["id"] == body["commandId"]
  assert history.json()[0]["status"] == "failed"


@pytest.mark.anyio
async def test_history_is_newest_first_and_per_user(async_client, model) -> None:
  model.queue({"intent": "list_courses", "parameters": {}}, {"intent": "help", "parameters": {}}, {"intent": "help", "parameters": {}})
  await async_client.post("/api/chat/command", json={"command": "list my courses"}, headers=_INSTRUCTOR)
  await async_client.post("/api/chat/command", json={"command": "help"}, headers={"X-User-Id": "instructor-2"})
  await async_client.post("/api/chat/command", json={"command": "what can you do?"}, headers=_INSTRUCTOR)

  response = await async_client.get("/api/chat/history", headers=_INSTRUCTOR)

  assert response.status_code == 200
  assert [item["command"] for item in response.json()] == ["what can you do?", "list my courses"]
  assert response.json()[1]["intent"] == "list_courses"


@pytest.mark.anyio
async def test_unconfigured_model_returns_service_unavailable() -> None:
  # No lifespan runs under ASGITransport, so app.state has no orchestrator.
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    response = await client.post("/api/chat/command", json={"command": "list my courses"}, headers=_INSTRUCTOR)
  assert response.status_code == 503
