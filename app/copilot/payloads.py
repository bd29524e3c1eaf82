"""Convert storage records into camelCase JSON payloads for task results."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from app.schema.copilot import to_camel


def _json_value(value: Any) -> Any:
  if isinstance(value, datetime):
    return value.isoformat()
  if isinstance(value, list | tuple):
    return [_json_value(item) for item in value]
  if isinstance(value, dict):
    return {str(key): _json_value(item) for key, item in value.items()}
  return value


def to_payload(record: Any) -> dict[str, Any]:
  """Serialize a frozen record dataclass with camelCase keys and ISO timestamps."""
  return {to_camel(item.name): _json_value(getattr(record, item.name)) for item in dataclasses.fields(record)}


def to_payloads(records: list[Any]) -> list[dict[str, Any]]:
  return [to_payload(record) for record in records]
