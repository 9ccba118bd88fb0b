"""Visibility audit sweep over the storyteller corpus."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .gate import visibility_flags

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from storyledger.domain.model import Storyteller


@dataclass(slots=True)
class VisibilityAudit:
    total: int = 0
    hidden_no_consent: int = 0
    hidden_not_public: int = 0
    listed: int = 0
    photo_visible: int = 0
    location_visible: int = 0
    organisation_visible: int = 0
    # show_photo set but there is no image to show
    photo_without_image: list[UUID] = field(default_factory=list["UUID"])

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "hidden_no_consent": self.hidden_no_consent,
            "hidden_not_public": self.hidden_not_public,
            "listed": self.listed,
            "photo_visible": self.photo_visible,
            "location_visible": self.location_visible,
            "organisation_visible": self.organisation_visible,
            "photo_without_image": len(self.photo_without_image),
        }


def audit_visibility(storytellers: Iterable[Storyteller]) -> VisibilityAudit:
    audit = VisibilityAudit()
    for storyteller in storytellers:
        audit.total += 1
        privacy = storyteller.privacy
        if privacy.show_photo and not storyteller.profile_image_url:
            audit.photo_without_image.append(storyteller.id)

        if not privacy.consent_given:
            audit.hidden_no_consent += 1
            continue
        if not privacy.public_display:
            audit.hidden_not_public += 1
            continue

        flags = visibility_flags(privacy)
        audit.listed += 1
        if flags.photo and storyteller.profile_image_url:
            audit.photo_visible += 1
        if flags.location:
            audit.location_visible += 1
        if flags.organisation:
            audit.organisation_visible += 1
    return audit
