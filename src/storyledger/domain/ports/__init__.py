"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import ContentRepository, LinkRepository, StorytellerRepository
from .unit_of_work import (
    LedgerRepositories,
    LedgerUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ContentRepository",
    "LedgerRepositories",
    "LedgerUnitOfWork",
    "LinkRepository",
    "RepositoryCollection",
    "StorytellerRepository",
    "UnitOfWork",
]
