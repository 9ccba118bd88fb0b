"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, insert, select, true
from sqlalchemy.exc import DBAPIError, OperationalError

from storyledger.adapters.sqlalchemy.mappings import (
    content_item_table,
    content_link_table,
    storyteller_table,
)
from storyledger.domain.errors import StoreUnavailableError
from storyledger.domain.model import ContentItem, StoredLink, Storyteller

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator, Mapping, Sequence
    from uuid import UUID

    from sqlalchemy.orm import Session

    from storyledger.domain.model import LinkEdge


@contextmanager
def translate_store_errors() -> Iterator[None]:
    """Re-raise connectivity failures as ``StoreUnavailableError``."""

    try:
        yield
    except OperationalError as exc:
        raise StoreUnavailableError(f"Database unavailable: {exc.orig or exc}") from exc
    except DBAPIError as exc:
        if exc.connection_invalidated:
            raise StoreUnavailableError(f"Database connection lost: {exc.orig or exc}") from exc
        raise


class SqlAlchemyStorytellerRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, storyteller_id: UUID) -> Storyteller | None:
        with translate_store_errors():
            return self.session.get(Storyteller, storyteller_id)

    def list_all(self) -> Sequence[Storyteller]:
        stmt = select(Storyteller).order_by(storyteller_table.c.id)
        with translate_store_errors():
            return self.session.execute(stmt).scalars().all()

    def add(self, storyteller: Storyteller) -> None:
        self.session.add(storyteller)

    def save(self, storyteller: Storyteller) -> None:
        self.session.add(storyteller)

    def remove(self, storyteller: Storyteller) -> None:
        with translate_store_errors():
            self.session.delete(storyteller)


class SqlAlchemyContentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, content_id: UUID) -> ContentItem | None:
        with translate_store_errors():
            return self.session.get(ContentItem, content_id)

    def page(self, *, offset: int, limit: int) -> Sequence[ContentItem]:
        stmt = select(ContentItem).order_by(content_item_table.c.id).offset(offset).limit(limit)
        with translate_store_errors():
            return self.session.execute(stmt).scalars().all()

    def add(self, item: ContentItem) -> None:
        self.session.add(item)

    def find_by_owner_ref(self, ref: str) -> Sequence[ContentItem]:
        stmt = (
            select(ContentItem)
            .where(content_item_table.c.owner_ref.icontains(ref.strip(), autoescape=True))
            .order_by(content_item_table.c.id)
        )
        with translate_store_errors():
            return self.session.execute(stmt).scalars().all()

    def find_by_member_refs(self, refs: Collection[str]) -> Sequence[ContentItem]:
        if not refs:
            return []
        member = func.json_each(content_item_table.c.member_refs).table_valued("value")
        matching_ids = (
            select(content_item_table.c.id)
            .select_from(content_item_table)
            .join(member, true())
            .where(content_item_table.c.member_refs.is_not(None))
            .where(member.c.value.in_(list(refs)))
        )
        stmt = (
            select(ContentItem)
            .where(content_item_table.c.id.in_(matching_ids))
            .order_by(content_item_table.c.id)
        )
        with translate_store_errors():
            return self.session.execute(stmt).scalars().all()

    def search_attribution(self, text: str) -> Sequence[ContentItem]:
        if not text.strip():
            return []
        stmt = (
            select(ContentItem)
            .where(content_item_table.c.attribution.icontains(text.strip(), autoescape=True))
            .order_by(content_item_table.c.id)
        )
        with translate_store_errors():
            return self.session.execute(stmt).scalars().all()


class SqlAlchemyLinkRepository:
    """Link rows are written with Core statements; they are not domain entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def stored_owners(self, content_ids: Collection[UUID]) -> Mapping[UUID, frozenset[UUID]]:
        if not content_ids:
            return {}
        stmt = select(
            content_link_table.c.content_id,
            content_link_table.c.storyteller_id,
        ).where(content_link_table.c.content_id.in_(list(content_ids)))
        owners: defaultdict[UUID, set[UUID]] = defaultdict(set)
        with translate_store_errors():
            for content_id, storyteller_id in self.session.execute(stmt):
                owners[content_id].add(storyteller_id)
        return {content_id: frozenset(ids) for content_id, ids in owners.items()}

    def links_for(self, content_id: UUID) -> Sequence[StoredLink]:
        stmt = (
            select(content_link_table)
            .where(content_link_table.c.content_id == content_id)
            .order_by(content_link_table.c.storyteller_id)
        )
        with translate_store_errors():
            rows = self.session.execute(stmt).mappings().all()
        return [
            StoredLink(
                content_id=row["content_id"],
                storyteller_id=row["storyteller_id"],
                content_type=row["content_type"],
                method=row["method"],
                confidence=row["confidence"],
            )
            for row in rows
        ]

    def replace_links(self, content_id: UUID, edges: Sequence[LinkEdge]) -> None:
        applied_at = datetime.now(UTC)
        rows: dict[UUID, dict[str, object]] = {}
        for edge in edges:
            rows.setdefault(
                edge.storyteller_id,
                {
                    "content_id": content_id,
                    "storyteller_id": edge.storyteller_id,
                    "content_type": edge.content_type,
                    "method": edge.method,
                    "confidence": edge.confidence,
                    "applied_at": applied_at,
                },
            )
        with translate_store_errors():
            self.session.execute(
                delete(content_link_table).where(content_link_table.c.content_id == content_id)
            )
            if rows:
                self.session.execute(insert(content_link_table), list(rows.values()))

    def remove_storyteller(self, storyteller_id: UUID) -> int:
        stmt = delete(content_link_table).where(
            content_link_table.c.storyteller_id == storyteller_id
        )
        with translate_store_errors():
            result = self.session.execute(stmt)
        return result.rowcount or 0
