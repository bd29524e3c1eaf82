"""Value objects passed between the extractor, dispatcher and orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ActorRole = Literal["admin", "instructor", "student"]


@dataclass(frozen=True)
class Actor:
  """Authenticated user on whose behalf a command runs."""

  user_id: str
  role: ActorRole

  @property
  def is_elevated(self) -> bool:
    """Admins see every entity; everyone else only what they own."""
    return self.role == "admin"

  @property
  def owner_filter(self) -> str | None:
    """Instructor id to filter the store by, or None for unrestricted access."""
    return None if self.is_elevated else self.user_id


@dataclass(frozen=True)
class Task:
  """One intent-tagged unit of work extracted from a command."""

  intent: str
  parameters: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExtractionResult:
  """Ordered tasks plus the model's one-line summary of the command."""

  tasks: list[Task]
  summary: str


@dataclass(frozen=True)
class TaskResult:
  """Outcome of one task; `data` holds JSON-ready payloads of touched entities."""

  success: bool
  message: str
  data: dict[str, Any] | None = None

  def to_dict(self) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": self.success, "message": self.message}
    if self.data is not None:
      payload["data"] = self.data
    return payload


@dataclass(frozen=True)
class TaskOutcome:
  intent: str
  result: TaskResult

  def to_dict(self) -> dict[str, Any]:
    return {"intent": self.intent, "result": self.result.to_dict()}


@dataclass(frozen=True)
class AggregatedResult:
  """Single result returned for a command after all of its tasks ran."""

  success: bool
  message: str
  data: dict[str, Any]
  task_results: list[TaskOutcome]

  def to_dict(self) -> dict[str, Any]:
    return {"success": self.success, "message": self.message, "data": self.data, "taskResults": [outcome.to_dict() for outcome in self.task_results]}
