"""Ports for the backing store.

The store only has to support point lookup by id, equality filtering,
array-overlap filtering and case-insensitive substring filtering.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence
    from uuid import UUID

    from storyledger.domain.model import ContentItem, LinkEdge, StoredLink, Storyteller


@runtime_checkable
class StorytellerRepository(Protocol):
    """Persistence contract for storytellers."""

    def get(self, storyteller_id: UUID) -> Storyteller | None: ...

    def list_all(self) -> Sequence[Storyteller]: ...

    def add(self, storyteller: Storyteller) -> None: ...

    def save(self, storyteller: Storyteller) -> None: ...

    def remove(self, storyteller: Storyteller) -> None: ...


@runtime_checkable
class ContentRepository(Protocol):
    """Persistence contract for content items of every type."""

    def get(self, content_id: UUID) -> ContentItem | None: ...

    def page(self, *, offset: int, limit: int) -> Sequence[ContentItem]:
        """Return one page of content in stable id order."""
        ...

    def add(self, item: ContentItem) -> None: ...

    def find_by_owner_ref(self, ref: str) -> Sequence[ContentItem]:
        """Return items whose direct reference contains ``ref`` (case-insensitive)."""
        ...

    def find_by_member_refs(self, refs: Collection[str]) -> Sequence[ContentItem]:
        """Return items whose membership list overlaps ``refs``."""
        ...

    def search_attribution(self, text: str) -> Sequence[ContentItem]:
        """Return items whose attribution contains ``text`` (case-insensitive)."""
        ...


@runtime_checkable
class LinkRepository(Protocol):
    """Persistence contract for the resolved link state."""

    def stored_owners(self, content_ids: Collection[UUID]) -> Mapping[UUID, frozenset[UUID]]:
        """Return the persisted storyteller ids per content id (missing = no links)."""
        ...

    def links_for(self, content_id: UUID) -> Sequence[StoredLink]: ...

    def replace_links(self, content_id: UUID, edges: Sequence[LinkEdge]) -> None:
        """Idempotently make ``edges`` the complete link state of ``content_id``."""
        ...

    def remove_storyteller(self, storyteller_id: UUID) -> int:
        """Delete every link naming ``storyteller_id``; return the number removed."""
        ...
