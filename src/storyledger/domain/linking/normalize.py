"""Text normalization for attribution matching.

Attribution text, display names and emails are compared after NFKC
normalization, case folding and whitespace collapsing. Punctuation is kept so
email addresses survive; only decoration at the edges of a fragment is trimmed.
"""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_EMAIL = re.compile(r"[^\s<>()\[\],;:\"']+@[^\s<>()\[\],;:\"']+\.[^\s<>()\[\],;:\"'.]+")
_SEPARATORS = re.compile(r"\s*(?:;|&|/|\n|\r|\band\b)\s*", re.IGNORECASE)
_EDGE_DECORATION = " \t-–—\"'“”‘’<>()[]:,."


def normalize_text(value: str | None) -> str | None:
    """Return the comparison key for free text, or ``None`` when nothing is left."""

    if value is None:
        return None
    text = unicodedata.normalize("NFKC", value)
    text = text.casefold()
    text = _WHITESPACE.sub(" ", text).strip()
    return text or None


def normalize_email(value: str | None) -> str | None:
    text = normalize_text(value)
    if text is None:
        return None
    text = text.removeprefix("mailto:").strip(_EDGE_DECORATION)
    return text if "@" in text else None


def extract_emails(text: str | None) -> tuple[str, ...]:
    """Return normalized email addresses embedded in ``text`` (first occurrence order)."""

    if not text:
        return ()
    found: list[str] = []
    for match in _EMAIL.finditer(text):
        email = normalize_email(match.group(0))
        if email is not None and email not in found:
            found.append(email)
    return tuple(found)


def split_attribution(text: str | None) -> tuple[str, ...]:
    """Split a byline into normalized author fragments.

    ``"Jane Doe & John Smith"`` -> ``("jane doe", "john smith")``. Embedded
    email addresses are removed; use :func:`extract_emails` for those.
    """

    if not text:
        return ()
    without_emails = _EMAIL.sub(" ", text)
    fragments: list[str] = []
    for raw in _SEPARATORS.split(without_emails):
        fragment = normalize_text(raw)
        if fragment is None:
            continue
        fragment = fragment.strip(_EDGE_DECORATION)
        fragment = _WHITESPACE.sub(" ", fragment).strip()
        if fragment and fragment not in fragments:
            fragments.append(fragment)
    return tuple(fragments)
