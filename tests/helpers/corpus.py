"""Builders for storytellers and content items used across tests."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from storyledger.domain.model import (
    MediaAsset,
    PrivacyProfile,
    Quote,
    Story,
    Storyteller,
    Theme,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from storyledger.domain.model import ContentItem


def make_storyteller(
    display_name: str = "Aunty May Collins",
    *,
    storyteller_id: UUID | None = None,
    email: str | None = None,
    organisation: str | None = "Palm Island Community Company",
    location: str | None = "Palm Island",
    bio: str | None = "Elder and keeper of language.",
    profile_image_url: str | None = "https://cdn.example.org/may.jpg",
    privacy: PrivacyProfile | None = None,
) -> Storyteller:
    storyteller = Storyteller(
        display_name=display_name,
        email=email,
        organisation=organisation,
        location=location,
        bio=bio,
        profile_image_url=profile_image_url,
        privacy=privacy or PrivacyProfile(),
    )
    if storyteller_id is not None:
        storyteller.id = storyteller_id
    return storyteller


def public_privacy(
    *,
    show_photo: bool = True,
    show_location: bool = True,
    show_organisation: bool = True,
) -> PrivacyProfile:
    return PrivacyProfile(
        consent_given=True,
        public_display=True,
        show_photo=show_photo,
        show_location=show_location,
        show_organisation=show_organisation,
    )


def make_story(
    title: str = "Fishing with my grandfather",
    *,
    owner: Storyteller | str | None = None,
    members: Sequence[Storyteller | str] | None = None,
    attribution: str | None = None,
    body: str = "We went out past the reef before sunrise.",
) -> Story:
    return Story(
        title=title,
        body=body,
        owner_ref=_ref(owner),
        member_refs=_refs(members),
        attribution=attribution,
    )


def make_quote(
    body: str = "The sea remembers everyone who fished it.",
    *,
    owner: Storyteller | str | None = None,
    members: Sequence[Storyteller | str] | None = None,
    attribution: str | None = None,
    source_media_id: UUID | None = None,
) -> Quote:
    return Quote(
        body=body,
        owner_ref=_ref(owner),
        member_refs=_refs(members),
        attribution=attribution,
        source_media_id=source_media_id,
    )


def make_theme(
    title: str = "Connection to Country",
    *,
    members: Sequence[Storyteller | str] | None = None,
    attribution: str | None = None,
) -> Theme:
    return Theme(title=title, member_refs=_refs(members), attribution=attribution)


def make_media_asset(
    title: str = "Interview recording",
    *,
    owner: Storyteller | str | None = None,
    members: Sequence[Storyteller | str] | None = None,
    attribution: str | None = None,
) -> MediaAsset:
    return MediaAsset(
        title=title,
        owner_ref=_ref(owner),
        member_refs=_refs(members),
        attribution=attribution,
        media_type="video",
        url="https://cdn.example.org/interview.mp4",
    )


def content_ids(items: Sequence[ContentItem]) -> list[UUID]:
    return [item.id for item in items]


def _ref(value: Storyteller | str | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return str(value.id)


def _refs(values: Sequence[Storyteller | str] | None) -> tuple[str, ...] | None:
    if values is None:
        return None
    return tuple(_ref(value) or "" for value in values)
