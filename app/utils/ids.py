"""Identifier utilities."""

from __future__ import annotations

import secrets
import uuid


def generate_record_id() -> str:
  """Return a new primary key for a course, quiz, command or other record."""
  return str(uuid.uuid4())


def generate_public_token(size: int = 16) -> str:
  """Return a hex token of `size` characters for public quiz links."""
  return secrets.token_hex((size + 1) // 2)[:size]
