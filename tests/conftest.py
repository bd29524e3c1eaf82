"""Shared fixtures: in-memory repositories, a scripted language model and an API client."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import AsyncIterator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.ai.providers.base import AIModel, ModelResponse, SimpleModelResponse
from app.api.deps import get_orchestrator
from app.config import Settings, get_settings
from app.copilot.contracts import Actor
from app.copilot.dispatcher import TaskDispatcher
from app.copilot.orchestrator import CommandOrchestrator, build_orchestrator
from app.copilot.question_generator import QuestionGenerator
from app.copilot.resolver import EntityResolver
from app.main import app
from app.storage.memory_repo import InMemoryCommandsRepository, InMemoryDomainStore


class ScriptedModel(AIModel):
  """Returns queued responses in order and records every prompt it receives."""

  def __init__(self) -> None:
    self.name = "scripted"
    self.prompts: list[str] = []
    self._responses: list[Any] = []

  def queue(self, *responses: Any) -> None:
    """Queue raw text, JSON-able objects, or exceptions to raise."""
    self._responses.extend(responses)

  async def generate(self, prompt: str) -> ModelResponse:
    self.prompts.append(prompt)
    if not self._responses:
      raise RuntimeError("No scripted response left")
    item = self._responses.pop(0)
    if isinstance(item, BaseException):
      raise item
    content = item if isinstance(item, str) else json.dumps(item)
    return SimpleModelResponse(content=content)


def questions_payload(count: int, *, topic: str = "Cell Division") -> dict[str, Any]:
  return {"questions": [{"type": "mcq", "text": f"{topic} question {index + 1}?", "options": ["A", "B", "C", "D"], "correctAnswer": "A", "difficulty": "medium", "points": 1} for index in range(count)]}


@pytest.fixture
def anyio_backend() -> str:
  return "asyncio"


@pytest.fixture
def settings() -> Settings:
  return dataclasses.replace(get_settings(), public_base_url="http://test.local", default_semester="Spring 2026", copilot_history_limit=5, copilot_preview_limit=10, copilot_success_policy="any", copilot_max_generated_questions=20)


@pytest.fixture
def store() -> InMemoryDomainStore:
  return InMemoryDomainStore()


@pytest.fixture
def commands() -> InMemoryCommandsRepository:
  return InMemoryCommandsRepository()


@pytest.fixture
def model() -> ScriptedModel:
  return ScriptedModel()


@pytest.fixture
def instructor() -> Actor:
  return Actor(user_id="instructor-1", role="instructor")


@pytest.fixture
def other_instructor() -> Actor:
  return Actor(user_id="instructor-2", role="instructor")


@pytest.fixture
def admin() -> Actor:
  return Actor(user_id="admin-1", role="admin")


@pytest.fixture
def resolver(store: InMemoryDomainStore) -> EntityResolver:
  return EntityResolver(store)


@pytest.fixture
def dispatcher(store: InMemoryDomainStore, resolver: EntityResolver, model: ScriptedModel, settings: Settings) -> TaskDispatcher:
  generator = QuestionGenerator(model, max_questions=settings.copilot_max_generated_questions)
  return TaskDispatcher(store=store, resolver=resolver, question_generator=generator, settings=settings)


@pytest.fixture
def orchestrator(settings: Settings, store: InMemoryDomainStore, commands: InMemoryCommandsRepository, model: ScriptedModel) -> CommandOrchestrator:
  return build_orchestrator(settings, store=store, commands=commands, model=model)


@pytest.fixture
async def async_client(orchestrator: CommandOrchestrator) -> AsyncIterator[AsyncClient]:
  app.dependency_overrides[get_orchestrator] = lambda: orchestrator
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()
