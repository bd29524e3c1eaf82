"""Postgres-backed command audit repository using SQLAlchemy."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import get_session_factory
from app.schema.commands import ChatCommand
from app.storage.commands_repo import TERMINAL_STATUSES, CommandRecord, CommandStatus, ensure_transition
from app.storage.domain_repo import StoreError
from app.utils.ids import generate_record_id

logger = logging.getLogger(__name__)


def _command_record(row: ChatCommand) -> CommandRecord:
  return CommandRecord(id=row.id, user_id=row.user_id, raw_text=row.command, status=row.status, created_at=row.created_at, intent=row.intent, parameters=row.parameters, result=row.result, completed_at=row.completed_at)


class PostgresCommandsRepository:
  """Persist command audit records to Postgres."""

  def __init__(self) -> None:
    self._session_factory = get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized")

  async def create_command(self, *, user_id: str, raw_text: str) -> CommandRecord:
    """Insert a pending command."""
    try:
      async with self._session_factory() as session:
        row = ChatCommand(id=generate_record_id(), user_id=user_id, command=raw_text, status="pending", created_at=datetime.now(UTC))
        session.add(row)
        await session.commit()
        return _command_record(row)
    except SQLAlchemyError as exc:
      raise StoreError("Could not record the command.") from exc

  async def transition(self, command_id: str, status: CommandStatus, *, intent: str | None = None, parameters: list[dict[str, Any]] | None = None, result: dict[str, Any] | None = None) -> CommandRecord:
    """Advance a command's status under a row lock so concurrent writers cannot reopen it."""
    try:
      async with self._session_factory() as session:
        row = (await session.execute(select(ChatCommand).where(ChatCommand.id == command_id).with_for_update())).scalar_one_or_none()
        if row is None:
          raise StoreError(f"Command {command_id} does not exist.")
        ensure_transition(row.status, status)
        row.status = status
        if intent is not None:
          row.intent = intent
        if parameters is not None:
          row.parameters = parameters
        if result is not None:
          row.result = result
        if status in TERMINAL_STATUSES:
          row.completed_at = datetime.now(UTC)
        await session.commit()
        return _command_record(row)
    except SQLAlchemyError as exc:
      raise StoreError("Could not update the command.") from exc

  async def get_command(self, command_id: str) -> CommandRecord | None:
    try:
      async with self._session_factory() as session:
        row = await session.get(ChatCommand, command_id)
        return _command_record(row) if row else None
    except SQLAlchemyError as exc:
      raise StoreError("Could not load the command.") from exc

  async def list_commands(self, user_id: str, *, limit: int | None = None) -> list[CommandRecord]:
    """Return the user's commands, newest first."""
    try:
      async with self._session_factory() as session:
        stmt = select(ChatCommand).where(ChatCommand.user_id == user_id).order_by(ChatCommand.created_at.desc(), ChatCommand.id.desc())
        if limit is not None:
          stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return [_command_record(row) for row in result.scalars().all()]
    except SQLAlchemyError as exc:
      logger.error("Failed to list commands user_id=%s", user_id, exc_info=True)
      raise StoreError("Could not load command history.") from exc
