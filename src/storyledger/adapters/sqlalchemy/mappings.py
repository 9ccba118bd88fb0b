"""SQLAlchemy mapping metadata for the storyledger domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, Final, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import composite, configure_mappers

from storyledger.domain.model import (
    Confidence,
    ContentItem,
    EntityType,
    LinkMethod,
    MediaAsset,
    PrivacyProfile,
    Quote,
    Story,
    Storyteller,
    Theme,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class RefListType(TypeDecorator[tuple[str, ...]]):
    """Membership list as JSON text; SQL ``NULL`` keeps "field absent" apart from ``[]``."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: tuple[str, ...] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[str, ...] | None:
        _ = dialect
        if value is None:
            return None
        try:
            loaded = json.loads(value)
        except ValueError:
            # imported garbage is surfaced to the resolver as a malformed entry
            return (value,)
        if not isinstance(loaded, list):
            return (str(loaded),)
        items = cast(list[Any], loaded)
        return tuple(str(item) for item in items if item is not None)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

storyteller_table = Table(
    "storyteller",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("display_name", String, nullable=False),
    Column("email", String, nullable=True),
    Column("organisation", String, nullable=True),
    Column("location", String, nullable=True),
    Column("bio", Text, nullable=True),
    Column("profile_image_url", String, nullable=True),
    Column("consent_given", Boolean, nullable=False, default=False),
    Column("public_display", Boolean, nullable=False, default=False),
    Column("show_photo", Boolean, nullable=False, default=False),
    Column("show_location", Boolean, nullable=False, default=False),
    Column("show_organisation", Boolean, nullable=False, default=False),
    Column("consent_recorded_at", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
)

content_item_table = Table(
    "content_item",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "content_type",
        Enum(EntityType, native_enum=False),
        key="_content_type",
        nullable=False,
    ),
    Column("title", String, nullable=True),
    Column("body", Text, nullable=False, default=""),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("owner_ref", String, nullable=True),
    Column("member_refs", RefListType(), nullable=True),
    Column("attribution", Text, nullable=True),
    Column("source_media_id", UUIDColumnType, nullable=True),
    Column("media_type", String, nullable=True),
    Column("url", String, nullable=True),
    Index("ix_content_item_owner_ref", "owner_ref"),
)

content_link_table = Table(
    "content_link",
    mapper_registry.metadata,
    Column(
        "content_id",
        UUIDColumnType,
        ForeignKey("content_item.id"),
        primary_key=True,
    ),
    Column(
        "storyteller_id",
        UUIDColumnType,
        ForeignKey("storyteller.id"),
        primary_key=True,
    ),
    Column("content_type", Enum(EntityType, native_enum=False), nullable=False),
    Column("method", Enum(LinkMethod, native_enum=False), nullable=False),
    Column("confidence", Enum(Confidence, native_enum=False), nullable=False),
    Column("applied_at", UTCDateTime(), nullable=False),
    Index("ix_content_link_storyteller_id", "storyteller_id"),
)

# Columns only one content subtype carries; every other mapper leaves them unmapped.
SUBTYPE_COLUMNS: Final[dict[type[ContentItem], frozenset[str]]] = {
    Quote: frozenset({"source_media_id"}),
    MediaAsset: frozenset({"media_type", "url"}),
}
_ALL_SUBTYPE_COLUMNS: Final[frozenset[str]] = frozenset().union(*SUBTYPE_COLUMNS.values())

CONTENT_SUBTYPES: Final[tuple[type[ContentItem], ...]] = (Story, Quote, Theme, MediaAsset)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        Storyteller,
        storyteller_table,
        properties={
            "privacy": composite(
                PrivacyProfile,
                storyteller_table.c.consent_given,
                storyteller_table.c.public_display,
                storyteller_table.c.show_photo,
                storyteller_table.c.show_location,
                storyteller_table.c.show_organisation,
            ),
        },
    )

    mapper_registry.map_imperatively(
        ContentItem,
        content_item_table,
        polymorphic_on=content_item_table.c._content_type,  # noqa: SLF001
        exclude_properties=_ALL_SUBTYPE_COLUMNS,
    )

    for subtype in CONTENT_SUBTYPES:
        mapper_registry.map_imperatively(
            subtype,
            inherits=ContentItem,
            polymorphic_identity=subtype.ENTITY_TYPE,
            exclude_properties=_ALL_SUBTYPE_COLUMNS - SUBTYPE_COLUMNS.get(subtype, frozenset()),
        )

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
