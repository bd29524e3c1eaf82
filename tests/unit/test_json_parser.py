from __future__ import annotations

import json

import pytest

from app.ai.json_parser import extract_json_block, parse_first_object, parse_json_with_fallback


def test_parse_json_with_fallback_accepts_valid_json() -> None:
  assert parse_json_with_fallback('{"intent": "help"}') == {"intent": "help"}


def test_parse_json_with_fallback_recovers_from_surrounding_prose() -> None:
  raw = 'Sure! Here is the plan:\n{"tasks": [{"intent": "list_courses", "parameters": {}}]}\nLet me know.'
  assert parse_json_with_fallback(raw)["tasks"][0]["intent"] == "list_courses"


def test_parse_json_with_fallback_repairs_trailing_commas_and_bare_keys() -> None:
  assert parse_json_with_fallback('{intent: "help", parameters: {},}') == {"intent": "help", "parameters": {}}


def test_parse_json_with_fallback_raises_when_nothing_parses() -> None:
  with pytest.raises(json.JSONDecodeError):
    parse_json_with_fallback("no json here")


def test_extract_json_block_ignores_braces_inside_strings() -> None:
  raw = 'x {"message": "use {curly} braces", "n": 1} y'
  assert extract_json_block(raw) == '{"message": "use {curly} braces", "n": 1}'


def test_parse_first_object_skips_leading_arrays() -> None:
  assert parse_first_object('[1, 2] then {"intent": "help"}') == {"intent": "help"}


def test_parse_first_object_skips_unparseable_brace_groups() -> None:
  assert parse_first_object('Sure {ok}! {"tasks": [{"intent": "help"}]}') == {"tasks": [{"intent": "help"}]}
  assert parse_first_object("Use {braces} like {this}") is None
  assert parse_first_object('{unbalanced then {"intent": "help"}') == {"intent": "help"}


def test_parse_first_object_returns_none_for_prose() -> None:
  assert parse_first_object("I can help you create quizzes.") is None
  assert parse_first_object("") is None
