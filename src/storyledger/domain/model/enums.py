"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Typed-reference discriminator; the content members tag ``ContentItem``."""

    STORYTELLER = "storyteller"

    STORY = "story"
    QUOTE = "quote"
    THEME = "theme"
    MEDIA_ASSET = "media_asset"


CONTENT_TYPES: tuple[EntityType, ...] = (
    EntityType.STORY,
    EntityType.QUOTE,
    EntityType.THEME,
    EntityType.MEDIA_ASSET,
)


class LinkMethod(StrEnum):
    """How a content -> storyteller association was discovered.

    Declaration order is the method priority used when two strategies name the
    same storyteller.
    """

    DIRECT_REFERENCE = "direct_reference"
    MEMBERSHIP_ARRAY = "membership_array"
    EMAIL_MATCH = "email_match"
    NAME_MATCH = "name_match"

    @property
    def priority(self) -> int:
        return _METHOD_ORDER.index(self)


_METHOD_ORDER: tuple[LinkMethod, ...] = tuple(LinkMethod)


class Confidence(StrEnum):
    """Ordered reliability scale of a link (not a probability)."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK: dict[Confidence, int] = {
    Confidence.HIGH: 3,
    Confidence.MEDIUM: 2,
    Confidence.LOW: 1,
}
