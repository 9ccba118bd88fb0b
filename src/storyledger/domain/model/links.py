"""Resolved content -> storyteller associations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from storyledger.domain.model.enums import Confidence, EntityType, LinkMethod


@dataclass(frozen=True, slots=True, kw_only=True)
class LinkEdge:
    """One candidate owner of a content item, as produced by the link resolver."""

    storyteller_id: UUID
    content_id: UUID
    content_type: EntityType
    method: LinkMethod
    confidence: Confidence
    requires_review: bool = False

    @property
    def sort_key(self) -> tuple[int, int, int, str]:
        """Highest confidence first, then method priority, then a stable id order."""
        return (
            -self.confidence.rank,
            int(self.requires_review),
            self.method.priority,
            str(self.storyteller_id),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class StoredLink:
    """A link row as currently persisted in the link store."""

    content_id: UUID
    storyteller_id: UUID
    content_type: EntityType
    method: LinkMethod
    confidence: Confidence
