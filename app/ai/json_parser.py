"""Lenient JSON parsing helpers for model output."""

from __future__ import annotations

import json
import re
from typing import Any

_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")


def parse_json_with_fallback(raw: str) -> Any:
  """Parse JSON, recovering from prose around the payload and common model slips."""
  # Valid JSON is returned untouched.
  try:
    return json.loads(raw)
  except json.JSONDecodeError as exc:
    last_error = exc

  candidate = extract_json_block(raw)
  if candidate is None:
    raise last_error

  for repair in (_identity, _strip_trailing_commas, _quote_bare_keys):
    candidate = repair(candidate)
    try:
      return json.loads(candidate)
    except json.JSONDecodeError as exc:
      last_error = exc

  raise last_error


def parse_first_object(raw: str) -> dict[str, Any] | None:
  """Return the first parseable top-level JSON object in `raw`, or None when there is none."""
  if not raw:
    return None
  # Brace groups in prose that do not parse are skipped whole.
  start = raw.find("{")
  while start != -1:
    candidate = raw[start:]
    try:
      parsed = parse_json_with_fallback(candidate)
    except json.JSONDecodeError:
      parsed = None
    if isinstance(parsed, dict):
      return parsed
    block = extract_json_block(candidate)
    start = raw.find("{", start + (len(block) if block else 1))
  return None


def extract_json_block(raw: str) -> str | None:
  """Locate the first balanced JSON object/array, honoring string escapes."""
  start_index: int | None = None
  depth = 0
  in_string = False
  escape = False

  for index, char in enumerate(raw):
    if start_index is None:
      if char in "{[":
        start_index = index
        depth = 1
      continue

    if in_string:
      if escape:
        escape = False
      elif char == "\\":
        escape = True
      elif char == '"':
        in_string = False
      continue

    if char == '"':
      in_string = True
    elif char in "{[":
      depth += 1
    elif char in "}]":
      depth -= 1
      if depth == 0:
        return raw[start_index : index + 1]

  return None


def _identity(raw: str) -> str:
  return raw


def _strip_trailing_commas(raw: str) -> str:
  """Remove trailing commas before closing brackets."""
  return _TRAILING_COMMA_RE.sub(r"\1", raw)


def _quote_bare_keys(raw: str) -> str:
  """Wrap JS-style bare object keys in quotes."""
  return _BARE_KEY_RE.sub(r'\1"\2"\3', raw)
