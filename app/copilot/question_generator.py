"""Secondary model call that writes quiz questions for a topic."""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.ai.json_parser import parse_first_object
from app.ai.providers.base import AIModel
from app.copilot.prompts import render_question_prompt
from app.schema.copilot import to_camel

logger = logging.getLogger(__name__)

DEFAULT_QUESTION_COUNT = 5
_DIFFICULTIES = frozenset({"easy", "medium", "hard"})
_TYPE_ALIASES: dict[str, str] = {"multiple_choice": "mcq", "multiple-choice": "mcq", "truefalse": "true_false", "true/false": "true_false", "short": "short_answer"}


class QuestionGenerationError(RuntimeError):
  """Raised when the model produced no usable questions."""


class GeneratedQuestion(BaseModel):
  """One model-written question, normalized for the question bank."""

  model_config = ConfigDict(populate_by_name=True, extra="ignore", alias_generator=to_camel, str_strip_whitespace=True)

  type: Literal["mcq", "true_false", "short_answer", "essay", "fill_blank", "matching"] = "mcq"
  text: str = Field(min_length=1)
  options: list[str] | None = None
  correct_answer: str | None = None
  difficulty: str = "medium"
  points: int = Field(default=1, ge=1, le=100)
  explanation: str | None = None

  @field_validator("type", mode="before")
  @classmethod
  def normalize_type(cls, v: Any) -> Any:
    if isinstance(v, str):
      lowered = v.strip().lower()
      return _TYPE_ALIASES.get(lowered, lowered)
    return v

  @field_validator("correct_answer", mode="before")
  @classmethod
  def stringify_answer(cls, v: Any) -> Any:
    if isinstance(v, bool):
      return "True" if v else "False"
    if isinstance(v, int | float):
      return str(v)
    return v

  @field_validator("difficulty", mode="before")
  @classmethod
  def normalize_difficulty(cls, v: Any) -> Any:
    if isinstance(v, str) and v.strip().lower() in _DIFFICULTIES:
      return v.strip().lower()
    return "medium"


class QuestionGenerator:
  """Ask the language model for questions and keep only the well-formed ones."""

  def __init__(self, model: AIModel, *, max_questions: int) -> None:
    self._model = model
    self._max_questions = max_questions

  def clamp_count(self, requested: int | None) -> int:
    count = requested or DEFAULT_QUESTION_COUNT
    return max(1, min(count, self._max_questions))

  async def generate(self, topic: str, *, count: int | None = None, difficulty: str | None = None) -> list[GeneratedQuestion]:
    target = self.clamp_count(count)
    level = (difficulty or "medium").strip().lower()
    if level not in _DIFFICULTIES:
      level = "medium"

    prompt = render_question_prompt(topic, target, level)
    try:
      response = await self._model.generate(prompt)
    except Exception as exc:  # noqa: BLE001
      logger.error("Question generation failed topic=%r: %s", topic, exc)
      raise QuestionGenerationError(f"Question generation failed: {exc}") from exc

    payload = parse_first_object(response.content)
    raw_items = payload.get("questions") if payload else None
    if not isinstance(raw_items, list):
      raise QuestionGenerationError("Question generation returned no question list.")

    questions: list[GeneratedQuestion] = []
    for item in raw_items:
      if not isinstance(item, dict):
        continue
      try:
        questions.append(GeneratedQuestion.model_validate(item))
      except ValidationError as exc:
        logger.warning("Dropping malformed generated question: %s", exc)

    if not questions:
      raise QuestionGenerationError("Question generation returned no valid questions.")

    logger.info("Generated %s/%s questions topic=%r", len(questions), target, topic)
    return questions[:target]
