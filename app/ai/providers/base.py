"""Base interfaces for language model providers."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol


class ModelResponse(Protocol):
  """Response contract for model outputs."""

  content: str
  usage: dict[str, int] | None


@dataclass
class SimpleModelResponse:
  """Minimal model response structure."""

  content: str
  usage: dict[str, int] | None = None


class AIModel(ABC):
  """Abstract base class for text generation models."""

  name: str

  @abstractmethod
  async def generate(self, prompt: str) -> ModelResponse:
    """Generate a response for the given prompt."""

  @staticmethod
  def load_dummy_response(agent: str) -> str | None:
    """Return a canned response from EDUASSESS_DUMMY_RESPONSE_<AGENT>, if set."""
    raw = os.getenv(f"EDUASSESS_DUMMY_RESPONSE_{agent.upper()}")
    if raw is None or not raw.strip():
      return None
    return raw


class Provider(ABC):
  """Abstract base class for model providers."""

  name: str

  @abstractmethod
  def get_model(self, model: str | None = None) -> AIModel:
    """Return the model client for the provider."""
