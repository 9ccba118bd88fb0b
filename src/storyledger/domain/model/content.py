"""Narrative content items.

``ContentItem`` is a tagged union over ``Story``, ``Quote``, ``Theme`` and
``MediaAsset`` (tag = ``ENTITY_TYPE``). The raw link fields are kept exactly as
the import passes wrote them; effective owners come from the link resolver only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from storyledger.domain.model.base import Entity
from storyledger.domain.model.enums import EntityType

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class ContentItem(Entity):
    title: str | None = None
    body: str = ""
    created_at: datetime | None = None

    # Raw link fields as imported:
    owner_ref: str | None = None
    member_refs: tuple[str, ...] | None = None  # None = field absent, () = empty list
    attribution: str | None = None

    @property
    def content_type(self) -> EntityType:
        return self.ENTITY_TYPE

    @property
    def label(self) -> str:
        """Short human-readable label for logs and operator output."""
        text = self.title or self.body
        text = " ".join(text.split())
        return text if len(text) <= 60 else text[:57] + "..."

    @property
    def has_link_fields(self) -> bool:
        return (
            bool(self.owner_ref and self.owner_ref.strip())
            or self.member_refs is not None
            or bool(self.attribution and self.attribution.strip())
        )


@dataclass(eq=False, kw_only=True)
class Story(ContentItem):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.STORY


@dataclass(eq=False, kw_only=True)
class Quote(ContentItem):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.QUOTE

    source_media_id: UUID | None = None


@dataclass(eq=False, kw_only=True)
class Theme(ContentItem):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.THEME


@dataclass(eq=False, kw_only=True)
class MediaAsset(ContentItem):
    """Media assets carry their title in ``title``; ``body`` holds the transcript."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.MEDIA_ASSET

    media_type: str | None = None
    url: str | None = None


CONTENT_CLASS_BY_TYPE: dict[EntityType, type[ContentItem]] = {
    EntityType.STORY: Story,
    EntityType.QUOTE: Quote,
    EntityType.THEME: Theme,
    EntityType.MEDIA_ASSET: MediaAsset,
}
