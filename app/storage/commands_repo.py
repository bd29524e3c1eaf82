"""Storage interface and records for the Co-Pilot command audit trail."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Protocol

CommandStatus = Literal["pending", "executing", "completed", "failed"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "failed"})
_ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {"pending": frozenset({"executing", "failed"}), "executing": frozenset({"completed", "failed"}), "completed": frozenset(), "failed": frozenset()}


class InvalidTransitionError(ValueError):
  """Raised when a command status change would go backwards or skip a state."""


@dataclass(frozen=True)
class CommandRecord:
  """One submitted natural-language command and its outcome."""

  id: str
  user_id: str
  raw_text: str
  status: CommandStatus
  created_at: datetime
  intent: str | None = None
  parameters: list[dict[str, Any]] | None = None
  result: dict[str, Any] | None = None
  completed_at: datetime | None = None


def ensure_transition(current: str, new: str) -> None:
  """Reject any status change other than pending->executing->completed|failed, or a pending command failing outright."""
  if new not in _ALLOWED_TRANSITIONS.get(current, frozenset()):
    raise InvalidTransitionError(f"Command cannot move from '{current}' to '{new}'.")


class CommandsRepository(Protocol):
  """Repository interface for command audit records."""

  async def create_command(self, *, user_id: str, raw_text: str) -> CommandRecord:
    """Insert a command in the pending state."""

  async def transition(self, command_id: str, status: CommandStatus, *, intent: str | None = None, parameters: list[dict[str, Any]] | None = None, result: dict[str, Any] | None = None) -> CommandRecord:
    """Move a command to `status`, stamping completed_at for terminal states."""

  async def get_command(self, command_id: str) -> CommandRecord | None:
    """Return one command by id."""

  async def list_commands(self, user_id: str, *, limit: int | None = None) -> list[CommandRecord]:
    """Return the user's commands, most recent first."""
