"""Link resolution: which storytellers does a content item belong to.

Strategies run in strict priority order:

1. direct reference (``owner_ref``)        -> high
2. membership array (``member_refs``)      -> high for one entry, else medium
3. attribution text match (fallback only)  -> email: high, name: low

A direct reference that the membership array contradicts is reported as a
``LinkConflict`` instead of being arbitrated here. The resolver is a pure
function of its inputs: it never raises for data-shape problems (those become
``ResolutionIssue`` values) and never mutates the item or the index.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from storyledger.domain.model import Confidence, LinkEdge, LinkMethod

from .normalize import extract_emails, split_attribution

if TYPE_CHECKING:
    from collections.abc import Iterable

    from storyledger.domain.model import ContentItem, EntityType

    from .index import StorytellerIndex

MIN_CONTAINMENT_LENGTH = 4
TEXT_MATCH_METHODS = frozenset({LinkMethod.EMAIL_MATCH, LinkMethod.NAME_MATCH})


class ResolutionIssueKind(StrEnum):
    MISSING_STORYTELLER = "missing_storyteller"
    MALFORMED_REFERENCE = "malformed_reference"
    NO_LINK_FIELDS = "no_link_fields"


@dataclass(frozen=True, slots=True)
class ResolutionIssue:
    """A data-shape finding on one content item (never an exception)."""

    kind: ResolutionIssueKind
    field: str | None = None
    value: str | None = None


@dataclass(frozen=True, slots=True)
class LinkConflict:
    """Direct reference names a storyteller the membership array does not contain."""

    direct: UUID
    members: tuple[UUID, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class LinkResolution:
    """Ranked candidate owners of one content item."""

    content_id: UUID
    content_type: EntityType
    edges: tuple[LinkEdge, ...] = ()
    conflict: LinkConflict | None = None
    issues: tuple[ResolutionIssue, ...] = ()

    @property
    def is_orphaned(self) -> bool:
        return not self.edges

    @property
    def top_confidence(self) -> Confidence | None:
        return self.edges[0].confidence if self.edges else None

    @property
    def top_edges(self) -> tuple[LinkEdge, ...]:
        top = self.top_confidence
        return tuple(edge for edge in self.edges if edge.confidence is top)

    @property
    def recommended_owner_ids(self) -> frozenset[UUID]:
        return frozenset(edge.storyteller_id for edge in self.top_edges)

    @property
    def has_competing_text_matches(self) -> bool:
        """More than one storyteller matched the attribution text at the top confidence."""

        top = self.top_edges
        return len(top) > 1 and all(edge.method in TEXT_MATCH_METHODS for edge in top)

    @property
    def is_confident(self) -> bool:
        """True when the top edges may be shown or written without review."""

        if not self.edges or self.conflict is not None:
            return False
        if self.top_confidence is Confidence.LOW:
            return False
        if self.has_competing_text_matches:
            return False
        return not any(edge.requires_review for edge in self.top_edges)


def resolve_links(item: ContentItem, index: StorytellerIndex) -> LinkResolution:
    """Return the ranked candidate edges for ``item`` against ``index``."""

    if not item.has_link_fields:
        return LinkResolution(
            content_id=item.id,
            content_type=item.content_type,
            issues=(ResolutionIssue(ResolutionIssueKind.NO_LINK_FIELDS),),
        )

    issues: list[ResolutionIssue] = []
    direct = _direct_reference(item, index, issues)
    members = _membership_array(item, index, issues)

    conflict: LinkConflict | None = None
    if direct and members:
        direct_id = direct[0].storyteller_id
        member_ids = tuple(edge.storyteller_id for edge in members)
        if direct_id in member_ids:
            edges = direct
        else:
            conflict = LinkConflict(direct=direct_id, members=member_ids)
            edges = direct + members
    elif direct or members:
        edges = direct or members
    else:
        edges = _attribution_match(item, index)

    return LinkResolution(
        content_id=item.id,
        content_type=item.content_type,
        edges=_ranked(edges),
        conflict=conflict,
        issues=tuple(issues),
    )


def parse_ref(ref: str | None) -> UUID | None:
    """Parse a raw storyteller reference; ``None`` for blank or malformed values."""

    if ref is None or not ref.strip():
        return None
    try:
        return UUID(ref.strip())
    except ValueError:
        return None


def _direct_reference(
    item: ContentItem,
    index: StorytellerIndex,
    issues: list[ResolutionIssue],
) -> tuple[LinkEdge, ...]:
    ref = item.owner_ref
    if ref is None or not ref.strip():
        return ()
    storyteller_id = parse_ref(ref)
    if storyteller_id is None:
        issues.append(ResolutionIssue(ResolutionIssueKind.MALFORMED_REFERENCE, "owner_ref", ref))
        return ()
    if storyteller_id not in index:
        issues.append(ResolutionIssue(ResolutionIssueKind.MISSING_STORYTELLER, "owner_ref", ref))
        return ()
    return (_edge(item, storyteller_id, LinkMethod.DIRECT_REFERENCE, Confidence.HIGH),)


def _membership_array(
    item: ContentItem,
    index: StorytellerIndex,
    issues: list[ResolutionIssue],
) -> tuple[LinkEdge, ...]:
    if not item.member_refs:
        return ()

    entries: list[UUID | str] = []
    for ref in item.member_refs:
        if not ref or not ref.strip():
            continue
        entry = parse_ref(ref) or ref.strip()
        if entry not in entries:
            entries.append(entry)

    confidence = Confidence.HIGH if len(entries) == 1 else Confidence.MEDIUM
    edges: list[LinkEdge] = []
    for entry in entries:
        if not isinstance(entry, UUID):
            issues.append(
                ResolutionIssue(ResolutionIssueKind.MALFORMED_REFERENCE, "member_refs", entry)
            )
            continue
        if entry not in index:
            issues.append(
                ResolutionIssue(ResolutionIssueKind.MISSING_STORYTELLER, "member_refs", str(entry))
            )
            continue
        edges.append(_edge(item, entry, LinkMethod.MEMBERSHIP_ARRAY, confidence))
    return tuple(edges)


def _attribution_match(item: ContentItem, index: StorytellerIndex) -> tuple[LinkEdge, ...]:
    text = item.attribution
    if not text or not text.strip():
        return ()

    best: dict[UUID, LinkEdge] = {}
    for email in extract_emails(text):
        for storyteller_id in index.match_email(email):
            _keep_best(best, _edge(item, storyteller_id, LinkMethod.EMAIL_MATCH, Confidence.HIGH))

    for fragment in split_attribution(text):
        for storyteller_id in index.match_name(fragment):
            _keep_best(best, _edge(item, storyteller_id, LinkMethod.NAME_MATCH, Confidence.LOW))
        for storyteller_id in index.match_name_containment(
            fragment,
            min_length=MIN_CONTAINMENT_LENGTH,
        ):
            _keep_best(
                best,
                _edge(
                    item,
                    storyteller_id,
                    LinkMethod.NAME_MATCH,
                    Confidence.LOW,
                    requires_review=True,
                ),
            )
    return tuple(best.values())


def _keep_best(best: dict[UUID, LinkEdge], edge: LinkEdge) -> None:
    current = best.get(edge.storyteller_id)
    if current is None or edge.sort_key < current.sort_key:
        best[edge.storyteller_id] = edge


def _ranked(edges: Iterable[LinkEdge]) -> tuple[LinkEdge, ...]:
    return tuple(sorted(edges, key=lambda edge: edge.sort_key))


def _edge(
    item: ContentItem,
    storyteller_id: UUID,
    method: LinkMethod,
    confidence: Confidence,
    *,
    requires_review: bool = False,
) -> LinkEdge:
    return LinkEdge(
        storyteller_id=storyteller_id,
        content_id=item.id,
        content_type=item.content_type,
        method=method,
        confidence=confidence,
        requires_review=requires_review,
    )
