"""Public interface for the PostgREST store adapter."""

from __future__ import annotations

from .client import PostgrestClient
from .schema import ContentRow, LinkRow, StorytellerRow
from .store import (
    PostgrestContentRepository,
    PostgrestLedgerUnitOfWork,
    PostgrestLinkRepository,
    PostgrestStorytellerRepository,
)

__all__ = [
    "ContentRow",
    "LinkRow",
    "PostgrestClient",
    "PostgrestContentRepository",
    "PostgrestLedgerUnitOfWork",
    "PostgrestLinkRepository",
    "PostgrestStorytellerRepository",
    "StorytellerRow",
]
