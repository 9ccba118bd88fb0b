"""Reconciliation report types shared by the reporter and the orchestrator.

A report is ephemeral: it is produced per page, consumed once by the
orchestrator, and only survives as log output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator
    from uuid import UUID

    from storyledger.domain.linking import LinkResolution
    from storyledger.domain.model import EntityType, LinkEdge


class Classification(StrEnum):
    """Outcome of comparing resolver output with the stored link state."""

    UNCHANGED = "unchanged"
    CORRECTED = "corrected"
    AMBIGUOUS = "ambiguous"
    ORPHANED = "orphaned"


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationEntry:
    """Prior stored state, recommended state and classification of one item."""

    content_id: UUID
    content_type: EntityType
    label: str
    classification: Classification
    reason: str
    stored: frozenset[UUID]
    recommended: tuple[LinkEdge, ...]
    resolution: LinkResolution

    @property
    def recommended_ids(self) -> frozenset[UUID]:
        return frozenset(edge.storyteller_id for edge in self.recommended)

    @property
    def should_write(self) -> bool:
        return self.classification is Classification.CORRECTED


@dataclass(slots=True)
class ReconciliationReport:
    """Entries for one batch of content items."""

    entries: list[ReconciliationEntry] = field(default_factory=list["ReconciliationEntry"])

    def add(self, entry: ReconciliationEntry) -> None:
        self.entries.append(entry)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ReconciliationEntry]:
        return iter(self.entries)

    def counts(self) -> dict[Classification, int]:
        counts = dict.fromkeys(Classification, 0)
        for entry in self.entries:
            counts[entry.classification] += 1
        return counts

    def by_classification(self, classification: Classification) -> tuple[ReconciliationEntry, ...]:
        return tuple(entry for entry in self.entries if entry.classification is classification)

    def sample(
        self,
        classification: Classification,
        limit: int,
    ) -> tuple[ReconciliationEntry, ...]:
        return self.by_classification(classification)[: max(limit, 0)]
