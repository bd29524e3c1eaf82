import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI

from app.ai.router import get_model_for_settings
from app.copilot.orchestrator import build_orchestrator
from app.core.database import get_db_engine
from app.core.logging import _initialize_logging
from app.storage.factory import build_repositories


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Initialize logging and wire the Co-Pilot onto app.state."""
  from app.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("app.core.lifespan")

  _initialize_logging(settings)
  logger.info("Startup environment=%s pg_dsn=%s llm_provider=%s", settings.environment, _redact_dsn(settings.pg_dsn), settings.llm_provider)

  store, commands = build_repositories(settings)
  app.state.store = store
  app.state.commands = commands
  app.state.orchestrator = None
  try:
    model = get_model_for_settings(settings)
  except ValueError:
    # Commands are rejected with 503 until the provider is configured.
    logger.error("Language model unavailable; Co-Pilot commands are disabled.", exc_info=True)
  else:
    app.state.orchestrator = build_orchestrator(settings, store=store, commands=commands, model=model)
    logger.info("Co-Pilot ready model=%s", model.name)

  yield

  engine = get_db_engine()
  if engine is not None:
    await engine.dispose()


def _redact_dsn(raw: str | None) -> str:
  """Redact credentials from a DSN while keeping host/db visible."""
  if not raw:
    return "<unset>"

  parsed = urlparse(raw)
  if not parsed.scheme:
    return "<invalid>"

  user = parsed.username or ""
  host = parsed.hostname or ""
  port = f":{parsed.port}" if parsed.port else ""
  netloc = f"{user}@{host}{port}" if user else f"{host}{port}"
  database = parsed.path.lstrip("/")
  path = f"/{database}" if database else ""
  return f"{parsed.scheme}://{netloc}{path}"
