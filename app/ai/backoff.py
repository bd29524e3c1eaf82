"""Retry helper for rate-limited provider calls."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)

_RETRYABLE_MARKERS = ("429", "Too Many Requests", "Resource Exhausted", "Quota Exceeded")


def is_rate_limited(error: BaseException) -> bool:
  """Return True when the provider error looks like a quota or rate limit."""
  message = str(error)
  return any(marker in message for marker in _RETRYABLE_MARKERS)


async def retry_with_backoff(func: Callable[..., Awaitable[T]], *args, retries: int = 3, base_delay: float = 1.0, **kwargs) -> T:
  """
  Await `func` and retry only on rate-limit errors.

  Delays grow exponentially with jitter: ~1s, ~2s, ~4s.
  """
  for attempt in range(retries):
    try:
      return await func(*args, **kwargs)
    except Exception as e:
      if not is_rate_limited(e):
        raise
      delay = base_delay * (2**attempt) + random.uniform(0, 1)
      logger.warning("Provider rate limited (attempt %s/%s): %s. Retrying in %.1fs", attempt + 1, retries, e, delay)
      await asyncio.sleep(delay)

  # Final attempt propagates whatever the provider raises.
  return await func(*args, **kwargs)
