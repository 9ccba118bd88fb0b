"""Translate PostgREST rows into domain entities and back."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from storyledger.domain.model import (
    CONTENT_CLASS_BY_TYPE,
    MediaAsset,
    PrivacyProfile,
    Quote,
    StoredLink,
    Storyteller,
)

from .schema import ContentRow, LinkRow, StorytellerRow

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from storyledger.domain.model import ContentItem, LinkEdge

log = getLogger(__name__)


def parse_rows[TModel: BaseModel](model: type[TModel], payload: object) -> list[TModel]:
    """Validate each row on its own; malformed rows are logged and skipped."""

    if not isinstance(payload, list):
        log.warning(f"Expected a JSON array of {model.__name__} rows, got {type(payload).__name__}")
        return []
    rows: list[TModel] = []
    for raw in payload:  # pyright: ignore[reportUnknownVariableType]
        try:
            rows.append(model.model_validate(raw))
        except ValidationError as exc:
            log.warning(f"Skipping malformed {model.__name__} row: {exc.error_count()} error(s)")
    return rows


def storyteller_from_row(row: StorytellerRow) -> Storyteller:
    return Storyteller(
        id=row.id,
        display_name=row.display_name,
        email=row.email,
        organisation=row.organisation,
        location=row.location,
        bio=row.bio,
        profile_image_url=row.profile_image_url,
        privacy=PrivacyProfile(
            consent_given=row.consent_given,
            public_display=row.public_display,
            show_photo=row.show_photo,
            show_location=row.show_location,
            show_organisation=row.show_organisation,
        ),
        consent_recorded_at=row.consent_recorded_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def storyteller_payload(storyteller: Storyteller) -> dict[str, object]:
    privacy = storyteller.privacy
    return {
        "id": str(storyteller.id),
        "display_name": storyteller.display_name,
        "email": storyteller.email,
        "organisation": storyteller.organisation,
        "location": storyteller.location,
        "bio": storyteller.bio,
        "profile_image_url": storyteller.profile_image_url,
        "consent_given": privacy.consent_given,
        "public_display": privacy.public_display,
        "show_photo": privacy.show_photo,
        "show_location": privacy.show_location,
        "show_organisation": privacy.show_organisation,
        "consent_recorded_at": _isoformat(storyteller.consent_recorded_at),
        "created_at": _isoformat(storyteller.created_at),
        "updated_at": _isoformat(storyteller.updated_at),
    }


def content_from_row(row: ContentRow) -> ContentItem:
    cls = CONTENT_CLASS_BY_TYPE[row.content_type]
    item = cls(
        id=row.id,
        title=row.title,
        body=row.body,
        created_at=row.created_at,
        owner_ref=row.owner_ref,
        member_refs=tuple(row.member_refs) if row.member_refs is not None else None,
        attribution=row.attribution,
    )
    if isinstance(item, Quote):
        item.source_media_id = row.source_media_id
    elif isinstance(item, MediaAsset):
        item.media_type = row.media_type
        item.url = row.url
    return item


def content_payload(item: ContentItem) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": str(item.id),
        "content_type": item.content_type.value,
        "title": item.title,
        "body": item.body,
        "created_at": _isoformat(item.created_at),
        "owner_ref": item.owner_ref,
        "member_refs": list(item.member_refs) if item.member_refs is not None else None,
        "attribution": item.attribution,
    }
    if isinstance(item, Quote):
        payload["source_media_id"] = str(item.source_media_id) if item.source_media_id else None
    elif isinstance(item, MediaAsset):
        payload["media_type"] = item.media_type
        payload["url"] = item.url
    return payload


def stored_link_from_row(row: LinkRow) -> StoredLink:
    return StoredLink(
        content_id=row.content_id,
        storyteller_id=row.storyteller_id,
        content_type=row.content_type,
        method=row.method,
        confidence=row.confidence,
    )


def link_payloads(
    content_id: UUID,
    edges: Iterable[LinkEdge],
    *,
    applied_at: datetime,
) -> list[dict[str, object]]:
    payloads: dict[UUID, dict[str, object]] = {}
    for edge in edges:
        payloads.setdefault(
            edge.storyteller_id,
            {
                "content_id": str(content_id),
                "storyteller_id": str(edge.storyteller_id),
                "content_type": edge.content_type.value,
                "method": edge.method.value,
                "confidence": edge.confidence.value,
                "applied_at": applied_at.isoformat(),
            },
        )
    return list(payloads.values())


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
