"""Domain model for storytellers, narrative content and resolved links."""

from __future__ import annotations

from .base import Entity, new_id
from .content import CONTENT_CLASS_BY_TYPE, ContentItem, MediaAsset, Quote, Story, Theme
from .enums import CONTENT_TYPES, Confidence, EntityType, LinkMethod
from .links import LinkEdge, StoredLink
from .storyteller import PrivacyProfile, Storyteller

__all__ = [
    "CONTENT_CLASS_BY_TYPE",
    "CONTENT_TYPES",
    "Confidence",
    "ContentItem",
    "Entity",
    "EntityType",
    "LinkEdge",
    "LinkMethod",
    "MediaAsset",
    "PrivacyProfile",
    "Quote",
    "Story",
    "StoredLink",
    "Storyteller",
    "Theme",
    "new_id",
]
