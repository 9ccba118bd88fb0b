"""Consent/privacy gate.

``visibility_flags`` is the one decision function for the cascade

    consent_given -> public_display -> show_photo / show_location / show_organisation

and every read path renders storyteller data through ``visible_profile``.
Without consent, or without public display, only a non-identifying
placeholder comes back. Name and bio have no per-field switch: they are shown
once both top-level gates pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from uuid import UUID

    from storyledger.domain.model import PrivacyProfile, Storyteller

PLACEHOLDER_LABEL = "Community storyteller"


class ProfileField(StrEnum):
    NAME = "name"
    PHOTO = "photo"
    LOCATION = "location"
    ORGANISATION = "organisation"
    BIO = "bio"


ALL_PROFILE_FIELDS: frozenset[ProfileField] = frozenset(ProfileField)


@dataclass(frozen=True, slots=True)
class VisibilityFlags:
    """Derived visibility; every flag is False unless ``listed`` is True."""

    listed: bool = False
    photo: bool = False
    location: bool = False
    organisation: bool = False

    def permits(self, profile_field: ProfileField) -> bool:
        if not self.listed:
            return False
        match profile_field:
            case ProfileField.NAME | ProfileField.BIO:
                return True
            case ProfileField.PHOTO:
                return self.photo
            case ProfileField.LOCATION:
                return self.location
            case ProfileField.ORGANISATION:
                return self.organisation


HIDDEN = VisibilityFlags()


def visibility_flags(profile: PrivacyProfile) -> VisibilityFlags:
    if not profile.consent_given or not profile.public_display:
        return HIDDEN
    return VisibilityFlags(
        listed=True,
        photo=profile.show_photo,
        location=profile.show_location,
        organisation=profile.show_organisation,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class RedactedProfile:
    """What an anonymous viewer may see of one storyteller.

    ``fields`` holds only the permitted subset of the requested fields; a
    permitted field whose source value is empty maps to ``None``.
    """

    label: str
    is_placeholder: bool
    storyteller_id: UUID | None = None
    fields: Mapping[ProfileField, str | None] = field(
        default_factory=lambda: MappingProxyType({})
    )


PLACEHOLDER = RedactedProfile(label=PLACEHOLDER_LABEL, is_placeholder=True)


def visible_profile(
    storyteller: Storyteller | None,
    requested: Iterable[ProfileField] = ALL_PROFILE_FIELDS,
) -> RedactedProfile:
    """Return the redacted view of ``storyteller`` for the requested fields.

    Pure: the storyteller is not modified and nothing is read besides it.
    """

    if storyteller is None:
        return PLACEHOLDER
    flags = visibility_flags(storyteller.privacy)
    if not flags.listed:
        return PLACEHOLDER

    wanted = frozenset(requested)
    permitted = {
        profile_field: _field_value(storyteller, profile_field)
        for profile_field in ProfileField
        if profile_field in wanted and flags.permits(profile_field)
    }
    return RedactedProfile(
        label=storyteller.display_name,
        is_placeholder=False,
        storyteller_id=storyteller.id,
        fields=MappingProxyType(permitted),
    )


def parse_profile_fields(raw: str) -> frozenset[ProfileField]:
    """Parse a comma separated field list such as ``"name,photo"``."""

    names = [part.strip().lower() for part in raw.split(",") if part.strip()]
    return frozenset(ProfileField(name) for name in names)


def _field_value(storyteller: Storyteller, profile_field: ProfileField) -> str | None:
    match profile_field:
        case ProfileField.NAME:
            value = storyteller.display_name
        case ProfileField.PHOTO:
            value = storyteller.profile_image_url
        case ProfileField.LOCATION:
            value = storyteller.location
        case ProfileField.ORGANISATION:
            value = storyteller.organisation
        case ProfileField.BIO:
            value = storyteller.bio
    return value or None
