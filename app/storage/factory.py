"""Repository selection for the configured storage backend."""

from __future__ import annotations

import logging

from app.config import Settings
from app.storage.commands_repo import CommandsRepository
from app.storage.domain_repo import DomainStore
from app.storage.memory_repo import InMemoryCommandsRepository, InMemoryDomainStore
from app.storage.postgres_commands_repo import PostgresCommandsRepository
from app.storage.postgres_domain_repo import PostgresDomainStore

logger = logging.getLogger(__name__)


def build_repositories(settings: Settings) -> tuple[DomainStore, CommandsRepository]:
  """Return Postgres repositories when a DSN is configured, otherwise process-local ones."""
  if settings.pg_dsn:
    logger.info("Using Postgres repositories.")
    return PostgresDomainStore(), PostgresCommandsRepository()

  logger.warning("EDUASSESS_PG_DSN is not set; data lives in process memory and is lost on restart.")
  return InMemoryDomainStore(), InMemoryCommandsRepository()
