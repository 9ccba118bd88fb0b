"""SQLAlchemy adapter package for storyledger."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyContentRepository,
    SqlAlchemyLinkRepository,
    SqlAlchemyStorytellerRepository,
    translate_store_errors,
)
from .unit_of_work import SqlAlchemyLedgerUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyContentRepository",
    "SqlAlchemyLedgerUnitOfWork",
    "SqlAlchemyLinkRepository",
    "SqlAlchemyStorytellerRepository",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
    "translate_store_errors",
]
