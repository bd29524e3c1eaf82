"""OpenRouter provider implementation using the openai SDK."""

from __future__ import annotations

import logging
import os
from typing import Final

from openai import AsyncOpenAI

from app.ai.backoff import retry_with_backoff
from app.ai.providers.base import AIModel, ModelResponse, Provider, SimpleModelResponse

logger = logging.getLogger(__name__)


class OpenRouterModel(AIModel):
  """OpenRouter chat model client."""

  def __init__(self, name: str, api_key: str | None = None, base_url: str | None = None, *, agent: str = "COPILOT") -> None:
    self.name: str = name
    self._agent = agent

    api_key = api_key or os.getenv("OPENROUTER_API_KEY")
    if not api_key:
      raise ValueError("OPENROUTER_API_KEY environment variable is required")

    # OpenRouter uses the OpenAI-compatible API; attribution headers are optional.
    default_headers = {}
    referer = os.getenv("OPENROUTER_HTTP_REFERER")
    if referer:
      default_headers["HTTP-Referer"] = referer
    title = os.getenv("OPENROUTER_TITLE")
    if title:
      default_headers["X-Title"] = title

    self._client = AsyncOpenAI(api_key=api_key, base_url=base_url or "https://openrouter.ai/api/v1", default_headers=default_headers or None)

  async def generate(self, prompt: str) -> ModelResponse:
    """Generate text response from OpenRouter."""
    # Allow deterministic local runs without spending credits.
    dummy = AIModel.load_dummy_response(self._agent)
    if dummy is not None:
      logger.info("OpenRouter %s dummy response:\n%s", self._agent, dummy)
      return SimpleModelResponse(content=dummy, usage=None)

    response = await retry_with_backoff(self._client.chat.completions.create, model=self.name, messages=[{"role": "user", "content": prompt}])

    content = response.choices[0].message.content or ""
    logger.info("OpenRouter response:\n%s", content)
    usage = None
    if response.usage:
      usage = {"prompt_tokens": response.usage.prompt_tokens, "completion_tokens": response.usage.completion_tokens, "total_tokens": response.usage.total_tokens}
    return SimpleModelResponse(content=content, usage=usage)


class OpenRouterProvider(Provider):
  """OpenRouter provider."""

  _DEFAULT_MODEL: Final[str] = "openai/gpt-oss-20b:free"

  def __init__(self, api_key: str | None = None, base_url: str | None = None) -> None:
    self.name: str = "openrouter"
    self._api_key = api_key
    self._base_url = base_url

  def get_model(self, model: str | None = None) -> AIModel:
    """Return an OpenRouter model client; any routed model id is accepted."""
    return OpenRouterModel(model or self._DEFAULT_MODEL, api_key=self._api_key, base_url=self._base_url)
