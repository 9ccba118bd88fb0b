from __future__ import annotations

from .audit import VisibilityAudit, audit_visibility
from .gate import (
    ALL_PROFILE_FIELDS,
    HIDDEN,
    PLACEHOLDER,
    PLACEHOLDER_LABEL,
    ProfileField,
    RedactedProfile,
    VisibilityFlags,
    parse_profile_fields,
    visibility_flags,
    visible_profile,
)

__all__ = [
    "ALL_PROFILE_FIELDS",
    "HIDDEN",
    "PLACEHOLDER",
    "PLACEHOLDER_LABEL",
    "ProfileField",
    "RedactedProfile",
    "VisibilityAudit",
    "VisibilityFlags",
    "audit_visibility",
    "parse_profile_fields",
    "visibility_flags",
    "visible_profile",
]
