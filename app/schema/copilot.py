"""Request and response models for the Co-Pilot chat API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.storage.commands_repo import CommandRecord


def to_camel(string: str) -> str:
  """Convert snake_case to camelCase so the API accepts frontend-style payloads."""
  parts = string.split("_")
  if not parts:
    return string
  return parts[0] + "".join(part[:1].upper() + part[1:] for part in parts[1:])


class CommandRequest(BaseModel):
  model_config = ConfigDict(populate_by_name=True, extra="ignore", alias_generator=to_camel)
  command: str = Field(..., max_length=2000, description="Free-text instruction, e.g. 'Create a course called Biology 101 and add a quiz on Cell Division'.")

  @field_validator("command")
  @classmethod
  def strip_command(cls, v: str) -> str:
    return v.strip()


class CommandResponse(BaseModel):
  """Audit record of one command as returned to clients."""

  model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)
  id: str
  user_id: str
  command: str
  intent: str | None = None
  parameters: list[dict[str, Any]] | None = None
  status: Literal["pending", "executing", "completed", "failed"]
  result: dict[str, Any] | None = None
  created_at: datetime
  completed_at: datetime | None = None

  @classmethod
  def from_record(cls, record: CommandRecord) -> CommandResponse:
    return cls(
      id=record.id,
      user_id=record.user_id,
      command=record.raw_text,
      intent=record.intent,
      parameters=record.parameters,
      status=record.status,
      result=record.result,
      created_at=record.created_at,
      completed_at=record.completed_at,
    )


class SubmitCommandResponse(BaseModel):
  model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)
  command: CommandResponse
  result: dict[str, Any]
  summary: str
