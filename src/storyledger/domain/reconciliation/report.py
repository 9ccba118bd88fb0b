"""Reconciliation reporter.

Runs the link resolver over content items, compares the top-confidence edge
set with the stored link state and classifies every item. Pure: no reads, no
writes. Dry runs over the whole corpus are just this module without the
orchestrator's apply step.

Classification order:
- no candidate edges                               -> orphaned
- direct reference contradicted by membership      -> ambiguous
- recommended ids equal the stored ids             -> unchanged
- several storytellers matched by attribution text -> ambiguous
- top confidence low                               -> ambiguous
- top confidence medium but stored names others    -> ambiguous
- otherwise                                        -> corrected
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from storyledger.domain.linking import resolve_links
from storyledger.domain.model import Confidence

from .contracts import Classification, ReconciliationEntry, ReconciliationReport

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from uuid import UUID

    from storyledger.domain.linking import LinkResolution, StorytellerIndex
    from storyledger.domain.model import ContentItem


def classify(
    resolution: LinkResolution,
    stored: frozenset[UUID],
    *,
    label: str = "",
) -> ReconciliationEntry:
    """Classify one resolution against the stored owner ids."""

    classification, reason = _classify(resolution, stored)
    return ReconciliationEntry(
        content_id=resolution.content_id,
        content_type=resolution.content_type,
        label=label,
        classification=classification,
        reason=reason,
        stored=stored,
        recommended=resolution.top_edges,
        resolution=resolution,
    )


def build_report(
    items: Iterable[ContentItem],
    index: StorytellerIndex,
    stored_by_content: Mapping[UUID, frozenset[UUID]],
) -> ReconciliationReport:
    """Resolve and classify ``items``; missing stored entries mean no stored links."""

    report = ReconciliationReport()
    for item in items:
        resolution = resolve_links(item, index)
        stored = stored_by_content.get(item.id, frozenset())
        report.add(classify(resolution, stored, label=item.label))
    return report


def _classify(resolution: LinkResolution, stored: frozenset[UUID]) -> tuple[Classification, str]:
    if resolution.is_orphaned:
        return Classification.ORPHANED, "no_candidates"

    if resolution.conflict is not None:
        return Classification.AMBIGUOUS, "direct_membership_conflict"

    if resolution.recommended_owner_ids == stored:
        return Classification.UNCHANGED, "matches_stored_state"

    if resolution.has_competing_text_matches:
        return Classification.AMBIGUOUS, "competing_text_matches"

    top = resolution.top_confidence
    if top is Confidence.LOW:
        return Classification.AMBIGUOUS, "low_confidence"

    if top is Confidence.MEDIUM and stored:
        return Classification.AMBIGUOUS, "shared_authorship_disagreement"

    if stored:
        return Classification.CORRECTED, "stored_state_differs"
    return Classification.CORRECTED, "stored_state_empty"
