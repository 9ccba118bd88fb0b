"""Pydantic models describing PostgREST rows."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, cast
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from storyledger.domain.model import CONTENT_TYPES, Confidence, EntityType, LinkMethod


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class PostgrestBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StorytellerRow(PostgrestBaseModel):
    id: UUID
    display_name: str
    email: str | None = None
    organisation: str | None = None
    location: str | None = None
    bio: str | None = None
    profile_image_url: str | None = None
    consent_given: bool = False
    public_display: bool = False
    show_photo: bool = False
    show_location: bool = False
    show_organisation: bool = False
    consent_recorded_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    _normalize_optional = field_validator(
        "email",
        "organisation",
        "location",
        "profile_image_url",
        mode="before",
    )(_blank_to_none)

    @field_validator(
        "consent_given",
        "public_display",
        "show_photo",
        "show_location",
        "show_organisation",
        mode="before",
    )
    @classmethod
    def _null_is_false(cls, value: object) -> object:
        # unset flags must never widen visibility
        return False if value is None else value


class ContentRow(PostgrestBaseModel):
    id: UUID
    content_type: EntityType
    title: str | None = None
    body: str = ""
    created_at: datetime | None = None
    owner_ref: str | None = None
    member_refs: list[str] | None = None
    attribution: str | None = None
    source_media_id: UUID | None = None
    media_type: str | None = None
    url: str | None = None

    @field_validator("content_type")
    @classmethod
    def _content_only(cls, value: EntityType) -> EntityType:
        if value not in CONTENT_TYPES:
            raise ValueError(f"{value} is not a content type")
        return value

    @field_validator("body", mode="before")
    @classmethod
    def _null_body(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("owner_ref", mode="before")
    @classmethod
    def _stringify_ref(cls, value: object) -> object:
        return value if value is None or isinstance(value, str) else str(value)

    @field_validator("member_refs", mode="before")
    @classmethod
    def _stringify_members(cls, value: object) -> object:
        if value is None or isinstance(value, str):
            # a scalar where an array is expected is kept as one (malformed) entry
            return None if value is None else [value]
        if isinstance(value, Sequence):
            items = cast(Sequence[Any], value)
            return [str(item) for item in items if item is not None]
        return value


class LinkRow(PostgrestBaseModel):
    content_id: UUID
    storyteller_id: UUID
    content_type: EntityType
    method: LinkMethod
    confidence: Confidence
    applied_at: datetime | None = None


class OwnerRow(PostgrestBaseModel):
    content_id: UUID
    storyteller_id: UUID
