"""Storyteller identity records and their consent/privacy settings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, ClassVar

from storyledger.domain.model.base import Entity
from storyledger.domain.model.enums import EntityType

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True)
class PrivacyProfile:
    """Consent and per-attribute display preferences.

    Everything defaults to ``False``: an imported storyteller is not shown until
    consent and public display have been recorded explicitly.
    """

    consent_given: bool = False
    public_display: bool = False
    show_photo: bool = False
    show_location: bool = False
    show_organisation: bool = False

    def __composite_values__(self) -> tuple[bool, bool, bool, bool, bool]:
        """For SQLAlchemy composite columns (adapter-side convenience)."""
        return (
            self.consent_given,
            self.public_display,
            self.show_photo,
            self.show_location,
            self.show_organisation,
        )


@dataclass(eq=False, kw_only=True)
class Storyteller(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.STORYTELLER

    display_name: str
    email: str | None = None
    organisation: str | None = None
    location: str | None = None
    bio: str | None = None
    profile_image_url: str | None = None

    privacy: PrivacyProfile = field(default_factory=PrivacyProfile)
    consent_recorded_at: datetime | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def update_privacy(
        self,
        *,
        now: datetime,
        consent_given: bool | None = None,
        public_display: bool | None = None,
        show_photo: bool | None = None,
        show_location: bool | None = None,
        show_organisation: bool | None = None,
    ) -> PrivacyProfile:
        """Replace the privacy profile with the given flags; ``None`` keeps a flag."""

        current = self.privacy
        updated = replace(
            current,
            consent_given=_pick(consent_given, current.consent_given),
            public_display=_pick(public_display, current.public_display),
            show_photo=_pick(show_photo, current.show_photo),
            show_location=_pick(show_location, current.show_location),
            show_organisation=_pick(show_organisation, current.show_organisation),
        )
        if updated.consent_given and not current.consent_given:
            self.consent_recorded_at = now
        elif not updated.consent_given:
            self.consent_recorded_at = None
        if updated != current:
            self.updated_at = now
        self.privacy = updated
        return updated


def _pick(value: bool | None, fallback: bool) -> bool:
    return fallback if value is None else value
