"""Link resolver: ranked storyteller candidates for a content item."""

from __future__ import annotations

from .index import StorytellerIndex
from .normalize import extract_emails, normalize_email, normalize_text, split_attribution
from .resolve import (
    MIN_CONTAINMENT_LENGTH,
    LinkConflict,
    LinkResolution,
    ResolutionIssue,
    ResolutionIssueKind,
    parse_ref,
    resolve_links,
)

__all__ = [
    "MIN_CONTAINMENT_LENGTH",
    "LinkConflict",
    "LinkResolution",
    "ResolutionIssue",
    "ResolutionIssueKind",
    "StorytellerIndex",
    "extract_emails",
    "normalize_email",
    "normalize_text",
    "parse_ref",
    "resolve_links",
    "split_attribution",
]
