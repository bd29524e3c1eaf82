"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from app.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

SuccessPolicy = Literal["any", "all", "majority"]
_SUCCESS_POLICIES: frozenset[str] = frozenset({"any", "all", "majority"})
_LLM_PROVIDERS: frozenset[str] = frozenset({"gemini", "openrouter"})


@dataclass(frozen=True)
class Settings:
  """Typed settings for the EduAssess Co-Pilot service."""

  environment: str
  allowed_origins: tuple[str, ...]
  debug: bool
  log_max_bytes: int
  log_backup_count: int
  log_http_4xx: bool
  pg_dsn: str | None
  pg_connect_timeout: int
  llm_provider: str
  llm_model: str | None
  gemini_api_key: str | None
  openrouter_api_key: str | None
  public_base_url: str
  default_semester: str
  copilot_history_limit: int
  copilot_preview_limit: int
  copilot_success_policy: SuccessPolicy
  copilot_max_generated_questions: int


@dataclass(frozen=True)
class DatabaseSettings:
  """Typed settings for database connectivity."""

  debug: bool
  pg_dsn: str | None
  pg_connect_timeout: int


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  origins = [origin.strip() for origin in (raw or "http://localhost:5173").split(",") if origin.strip()]

  if not origins:
    raise ValueError("EDUASSESS_ALLOWED_ORIGINS must include at least one origin.")

  if "*" in origins:
    raise ValueError("EDUASSESS_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  return value or None


def _positive_int(name: str, default: str) -> int:
  value = int(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive integer.")
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("EDUASSESS_ENV", "development").lower()

  # Toggle verbose SQL output and diagnostics in non-production environments.
  debug = _parse_bool(os.getenv("EDUASSESS_DEBUG"))

  log_max_bytes = _positive_int("EDUASSESS_LOG_MAX_BYTES", "5242880")  # 5MB default
  log_backup_count = int(os.getenv("EDUASSESS_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("EDUASSESS_LOG_BACKUP_COUNT must be zero or a positive integer.")

  # Allow opt-in logging of 4xx HTTPExceptions for diagnostics.
  log_http_4xx = _parse_bool(os.getenv("EDUASSESS_LOG_HTTP_4XX"))

  llm_provider = (os.getenv("EDUASSESS_LLM_PROVIDER") or "gemini").strip().lower()
  if llm_provider not in _LLM_PROVIDERS:
    raise ValueError(f"EDUASSESS_LLM_PROVIDER must be one of {sorted(_LLM_PROVIDERS)}.")

  success_policy = (os.getenv("EDUASSESS_COPILOT_SUCCESS_POLICY") or "any").strip().lower()
  if success_policy not in _SUCCESS_POLICIES:
    raise ValueError(f"EDUASSESS_COPILOT_SUCCESS_POLICY must be one of {sorted(_SUCCESS_POLICIES)}.")

  history_limit = int(os.getenv("EDUASSESS_COPILOT_HISTORY_LIMIT", "5"))
  if history_limit < 0:
    raise ValueError("EDUASSESS_COPILOT_HISTORY_LIMIT must be zero or a positive integer.")

  return Settings(
    environment=environment,
    allowed_origins=_parse_origins(os.getenv("EDUASSESS_ALLOWED_ORIGINS")),
    debug=debug,
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    log_http_4xx=log_http_4xx,
    pg_dsn=_optional_str(os.getenv("EDUASSESS_PG_DSN")) or _optional_str(os.getenv("DATABASE_URL")),
    pg_connect_timeout=_positive_int("EDUASSESS_PG_CONNECT_TIMEOUT", "5"),
    llm_provider=llm_provider,
    llm_model=_optional_str(os.getenv("EDUASSESS_LLM_MODEL")),
    gemini_api_key=_optional_str(os.getenv("GEMINI_API_KEY")),
    openrouter_api_key=_optional_str(os.getenv("OPENROUTER_API_KEY")),
    public_base_url=(os.getenv("EDUASSESS_PUBLIC_BASE_URL") or "http://localhost:5000").strip().rstrip("/"),
    default_semester=(os.getenv("EDUASSESS_DEFAULT_SEMESTER") or "Spring 2026").strip(),
    copilot_history_limit=history_limit,
    copilot_preview_limit=_positive_int("EDUASSESS_COPILOT_PREVIEW_LIMIT", "10"),
    copilot_success_policy=success_policy,  # type: ignore[arg-type]
    copilot_max_generated_questions=_positive_int("EDUASSESS_COPILOT_MAX_GENERATED_QUESTIONS", "20"),
  )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
  """Load database settings without requiring web-runtime configuration like CORS."""
  # Keep database configuration isolated so migrations don't require unrelated env vars.
  debug = _parse_bool(os.getenv("EDUASSESS_DEBUG"))
  pg_connect_timeout = _positive_int("EDUASSESS_PG_CONNECT_TIMEOUT", "5")
  pg_dsn = _optional_str(os.getenv("EDUASSESS_PG_DSN")) or _optional_str(os.getenv("DATABASE_URL"))
  return DatabaseSettings(debug=debug, pg_dsn=pg_dsn, pg_connect_timeout=pg_connect_timeout)
