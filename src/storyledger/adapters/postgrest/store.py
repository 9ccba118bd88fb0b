"""PostgREST-backed repositories and unit of work.

PostgREST offers no multi-request transaction, so writes are queued on the
unit of work and sent in order on ``commit``; ``rollback`` (or leaving the
block without committing) drops them. Reads always see the remote state.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final, Literal

from storyledger.domain.ports.unit_of_work import LedgerRepositories

from .client import PostgrestClient, eq, ilike_contains, in_list, overlaps
from .schema import ContentRow, LinkRow, OwnerRow, StorytellerRow
from .translator import (
    content_from_row,
    content_payload,
    link_payloads,
    parse_rows,
    storyteller_from_row,
    storyteller_payload,
    stored_link_from_row,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence
    from types import TracebackType
    from uuid import UUID

    from storyledger.domain.model import ContentItem, LinkEdge, StoredLink, Storyteller

log = getLogger(__name__)

STORYTELLERS: Final[str] = "storytellers"
CONTENT_ITEMS: Final[str] = "content_items"
CONTENT_LINKS: Final[str] = "content_links"

LIST_PAGE_SIZE: Final[int] = 1000
IN_FILTER_CHUNK: Final[int] = 100

type PendingWrite = Callable[[], None]


@dataclass(slots=True)
class PendingWrites:
    operations: list[PendingWrite] = field(default_factory=list[PendingWrite])

    def append(self, operation: PendingWrite) -> None:
        self.operations.append(operation)

    def flush(self) -> None:
        while self.operations:
            operation = self.operations.pop(0)
            operation()

    def clear(self) -> None:
        self.operations.clear()


class PostgrestStorytellerRepository:
    def __init__(self, client: PostgrestClient, pending: PendingWrites) -> None:
        self.client = client
        self.pending = pending

    def get(self, storyteller_id: UUID) -> Storyteller | None:
        payload = self.client.select(STORYTELLERS, filters={"id": eq(storyteller_id)}, limit=1)
        rows = parse_rows(StorytellerRow, payload)
        return storyteller_from_row(rows[0]) if rows else None

    def list_all(self) -> Sequence[Storyteller]:
        storytellers: list[Storyteller] = []
        offset = 0
        while True:
            payload = self.client.select(
                STORYTELLERS,
                order="id.asc",
                limit=LIST_PAGE_SIZE,
                offset=offset,
            )
            raw_count = len(payload) if isinstance(payload, list) else 0  # pyright: ignore[reportUnknownArgumentType]
            storytellers.extend(
                storyteller_from_row(row) for row in parse_rows(StorytellerRow, payload)
            )
            if raw_count < LIST_PAGE_SIZE:
                return storytellers
            offset += LIST_PAGE_SIZE

    def add(self, storyteller: Storyteller) -> None:
        body = storyteller_payload(storyteller)
        self.pending.append(lambda: self.client.insert(STORYTELLERS, [body]))

    def save(self, storyteller: Storyteller) -> None:
        body = storyteller_payload(storyteller)
        storyteller_id = body.pop("id")
        self.pending.append(
            lambda: self.client.update(
                STORYTELLERS,
                filters={"id": eq(storyteller_id)},
                values=body,
            )
        )

    def remove(self, storyteller: Storyteller) -> None:
        storyteller_id = storyteller.id
        self.pending.append(
            lambda: self.client.delete(STORYTELLERS, filters={"id": eq(storyteller_id)})
        )


class PostgrestContentRepository:
    def __init__(self, client: PostgrestClient, pending: PendingWrites) -> None:
        self.client = client
        self.pending = pending

    def get(self, content_id: UUID) -> ContentItem | None:
        payload = self.client.select(CONTENT_ITEMS, filters={"id": eq(content_id)}, limit=1)
        rows = parse_rows(ContentRow, payload)
        return content_from_row(rows[0]) if rows else None

    def page(self, *, offset: int, limit: int) -> Sequence[ContentItem]:
        payload = self.client.select(CONTENT_ITEMS, order="id.asc", limit=limit, offset=offset)
        return self._items(payload)

    def add(self, item: ContentItem) -> None:
        body = content_payload(item)
        self.pending.append(lambda: self.client.insert(CONTENT_ITEMS, [body]))

    def find_by_owner_ref(self, ref: str) -> Sequence[ContentItem]:
        payload = self.client.select(
            CONTENT_ITEMS,
            filters={"owner_ref": ilike_contains(ref.strip())},
            order="id.asc",
        )
        return self._items(payload)

    def find_by_member_refs(self, refs: Collection[str]) -> Sequence[ContentItem]:
        if not refs:
            return []
        payload = self.client.select(
            CONTENT_ITEMS,
            filters={"member_refs": overlaps(refs)},
            order="id.asc",
        )
        return self._items(payload)

    def search_attribution(self, text: str) -> Sequence[ContentItem]:
        if not text.strip():
            return []
        payload = self.client.select(
            CONTENT_ITEMS,
            filters={"attribution": ilike_contains(text.strip())},
            order="id.asc",
        )
        return self._items(payload)

    @staticmethod
    def _items(payload: object) -> list[ContentItem]:
        return [content_from_row(row) for row in parse_rows(ContentRow, payload)]


class PostgrestLinkRepository:
    def __init__(self, client: PostgrestClient, pending: PendingWrites) -> None:
        self.client = client
        self.pending = pending

    def stored_owners(self, content_ids: Collection[UUID]) -> Mapping[UUID, frozenset[UUID]]:
        owners: defaultdict[UUID, set[UUID]] = defaultdict(set)
        ids = list(content_ids)
        for start in range(0, len(ids), IN_FILTER_CHUNK):
            chunk = ids[start : start + IN_FILTER_CHUNK]
            payload = self.client.select(
                CONTENT_LINKS,
                columns="content_id,storyteller_id",
                filters={"content_id": in_list(chunk)},
            )
            for row in parse_rows(OwnerRow, payload):
                owners[row.content_id].add(row.storyteller_id)
        return {content_id: frozenset(found) for content_id, found in owners.items()}

    def links_for(self, content_id: UUID) -> Sequence[StoredLink]:
        payload = self.client.select(
            CONTENT_LINKS,
            filters={"content_id": eq(content_id)},
            order="storyteller_id.asc",
        )
        return [stored_link_from_row(row) for row in parse_rows(LinkRow, payload)]

    def replace_links(self, content_id: UUID, edges: Sequence[LinkEdge]) -> None:
        rows = link_payloads(content_id, edges, applied_at=datetime.now(UTC))

        def write() -> None:
            self.client.delete(CONTENT_LINKS, filters={"content_id": eq(content_id)})
            self.client.insert(CONTENT_LINKS, rows)

        self.pending.append(write)

    def remove_storyteller(self, storyteller_id: UUID) -> int:
        payload = self.client.select(
            CONTENT_LINKS,
            columns="content_id,storyteller_id",
            filters={"storyteller_id": eq(storyteller_id)},
        )
        existing = len(parse_rows(OwnerRow, payload))
        if existing:
            self.pending.append(
                lambda: self.client.delete(
                    CONTENT_LINKS,
                    filters={"storyteller_id": eq(storyteller_id)},
                )
            )
        return existing


def _default_client() -> PostgrestClient:
    return PostgrestClient()


class PostgrestLedgerUnitOfWork:
    """Unit of work over the remote store; see module docstring for write semantics."""

    def __init__(self, client_factory: Callable[[], PostgrestClient] = _default_client) -> None:
        self.client_factory = client_factory
        self._client: PostgrestClient | None = None
        self._pending = PendingWrites()
        self._repositories: LedgerRepositories | None = None

    def __enter__(self) -> PostgrestLedgerUnitOfWork:
        client = self.client_factory()
        client.__enter__()
        self._client = client
        self._pending = PendingWrites()
        self._repositories = LedgerRepositories(
            storytellers=PostgrestStorytellerRepository(client, self._pending),
            content=PostgrestContentRepository(client, self._pending),
            links=PostgrestLinkRepository(client, self._pending),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if self._pending.operations:
            log.debug(f"Discarding {len(self._pending.operations)} uncommitted PostgREST writes")
        self.rollback()
        client, self._client = self._client, None
        self._repositories = None
        if client is not None:
            client.__exit__(exc_type, exc_value, traceback)
        return False

    @property
    def repositories(self) -> LedgerRepositories:
        if self._repositories is None:
            raise RuntimeError("Unit of work not entered")
        return self._repositories

    def commit(self) -> None:
        self._pending.flush()

    def rollback(self) -> None:
        self._pending.clear()


if TYPE_CHECKING:
    from storyledger.domain.ports import LedgerUnitOfWork

    _uow_check: LedgerUnitOfWork = PostgrestLedgerUnitOfWork()
