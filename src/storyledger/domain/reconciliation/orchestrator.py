"""Batch reconciliation over the whole corpus.

Pages through content in stable id order, runs the reporter per page and, in
apply mode, writes corrected link sets. Each page is its own unit of work:
ambiguous and orphaned items are never written, and a page that keeps failing
with a transient store error is logged, counted and skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from storyledger.domain.errors import StoreUnavailableError
from storyledger.domain.linking import StorytellerIndex

from .contracts import Classification, ReconciliationReport
from .report import build_report

if TYPE_CHECKING:
    from collections.abc import Callable

    from storyledger.domain.ports import LedgerUnitOfWork

    from .contracts import ReconciliationEntry

log = logging.getLogger(__name__)

DEFAULT_MAX_CONSECUTIVE_FAILURES = 3


class RunMode(StrEnum):
    DRY_RUN = "dry-run"
    APPLY = "apply"


@dataclass(frozen=True, slots=True)
class PageRetryPolicy:
    """Retry schedule for one page hitting a transient store error."""

    attempts: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0

    def build(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(max(self.attempts, 1)),
            wait=wait_exponential(multiplier=self.backoff_factor, max=self.max_backoff_wait),
            retry=retry_if_exception_type(StoreUnavailableError),
            before_sleep=before_sleep_log(log, logging.WARNING),
            reraise=True,
        )


@dataclass(slots=True)
class PageOutcome:
    index: int
    offset: int
    items: int = 0
    attempts: int = 0
    written: int = 0
    counts: dict[Classification, int] = field(default_factory=dict[Classification, int])
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(slots=True)
class ReconciliationResult:
    """Run summary: counters plus per-page outcomes and sample entries."""

    mode: RunMode
    pages_processed: int = 0
    unchanged: int = 0
    corrected: int = 0
    ambiguous_flagged: int = 0
    orphaned: int = 0
    errors: int = 0
    aborted: bool = False
    page_outcomes: list[PageOutcome] = field(default_factory=list[PageOutcome])
    samples: dict[Classification, list[ReconciliationEntry]] = field(
        default_factory=dict[Classification, list["ReconciliationEntry"]]
    )

    @property
    def failed_pages(self) -> list[PageOutcome]:
        return [outcome for outcome in self.page_outcomes if outcome.failed]

    def summary(self) -> dict[str, int]:
        return {
            "pages_processed": self.pages_processed,
            "unchanged": self.unchanged,
            "corrected": self.corrected,
            "ambiguous_flagged": self.ambiguous_flagged,
            "orphaned": self.orphaned,
            "errors": self.errors,
        }

    def record_page(
        self,
        outcome: PageOutcome,
        report: ReconciliationReport,
        *,
        sample_limit: int,
    ) -> None:
        counts = report.counts()
        outcome.counts = counts
        self.page_outcomes.append(outcome)
        self.pages_processed += 1
        self.unchanged += counts[Classification.UNCHANGED]
        self.corrected += counts[Classification.CORRECTED]
        self.ambiguous_flagged += counts[Classification.AMBIGUOUS]
        self.orphaned += counts[Classification.ORPHANED]
        for classification in (Classification.AMBIGUOUS, Classification.ORPHANED):
            bucket = self.samples.setdefault(classification, [])
            room = sample_limit - len(bucket)
            if room > 0:
                bucket.extend(report.sample(classification, room))

    def record_failure(self, outcome: PageOutcome) -> None:
        self.page_outcomes.append(outcome)
        self.errors += 1


def run_reconciliation(
    *,
    unit_of_work_factory: Callable[[], LedgerUnitOfWork],
    page_size: int,
    mode: RunMode = RunMode.DRY_RUN,
    retry: PageRetryPolicy | None = None,
    sample_limit: int = 10,
    max_consecutive_failures: int = DEFAULT_MAX_CONSECUTIVE_FAILURES,
) -> ReconciliationResult:
    """Reconcile every content item, one page per unit of work.

    Dry-run mode never writes. Apply mode writes only entries classified as
    corrected; re-running apply over an unchanged corpus writes nothing.
    """

    if page_size <= 0:
        raise ValueError("page_size must be positive")

    policy = retry or PageRetryPolicy()
    index = _load_index(unit_of_work_factory, policy)
    log.info(
        "Reconciliation started: mode=%s page_size=%d storytellers=%d",
        mode,
        page_size,
        len(index),
    )

    result = ReconciliationResult(mode=mode)
    page_index = 0
    consecutive_failures = 0
    while True:
        outcome = PageOutcome(index=page_index, offset=page_index * page_size)
        try:
            report = _run_page(unit_of_work_factory, index, outcome, page_size, mode, policy)
        except StoreUnavailableError as exc:
            outcome.error = str(exc)
            result.record_failure(outcome)
            consecutive_failures += 1
            log.error(
                "Page %d (offset %d) failed after %d attempts: %s",
                outcome.index,
                outcome.offset,
                outcome.attempts,
                exc,
            )
            if consecutive_failures >= max_consecutive_failures:
                result.aborted = True
                log.error(
                    "Stopping after %d consecutive failed pages; remaining pages were not visited",
                    consecutive_failures,
                )
                break
        else:
            consecutive_failures = 0
            if outcome.items == 0:
                break
            result.record_page(outcome, report, sample_limit=sample_limit)
            _log_page(outcome, report)
            if outcome.items < page_size:
                break
        page_index += 1

    log.info("Reconciliation finished: %s", result.summary())
    return result


def _load_index(
    unit_of_work_factory: Callable[[], LedgerUnitOfWork],
    policy: PageRetryPolicy,
) -> StorytellerIndex:
    for attempt in policy.build():
        with attempt, unit_of_work_factory() as uow:
            return StorytellerIndex(uow.repositories.storytellers.list_all())
    raise AssertionError("unreachable")  # pragma: no cover


def _run_page(
    unit_of_work_factory: Callable[[], LedgerUnitOfWork],
    index: StorytellerIndex,
    outcome: PageOutcome,
    page_size: int,
    mode: RunMode,
    policy: PageRetryPolicy,
) -> ReconciliationReport:
    for attempt in policy.build():
        with attempt:
            outcome.attempts = attempt.retry_state.attempt_number
            return _process_page(unit_of_work_factory, index, outcome, page_size, mode)
    raise AssertionError("unreachable")  # pragma: no cover


def _process_page(
    unit_of_work_factory: Callable[[], LedgerUnitOfWork],
    index: StorytellerIndex,
    outcome: PageOutcome,
    page_size: int,
    mode: RunMode,
) -> ReconciliationReport:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        items = list(repositories.content.page(offset=outcome.offset, limit=page_size))
        outcome.items = len(items)
        if not items:
            return ReconciliationReport()

        stored = repositories.links.stored_owners([item.id for item in items])
        report = build_report(items, index, stored)
        if mode is RunMode.APPLY:
            outcome.written = 0
            for entry in report:
                if entry.should_write:
                    repositories.links.replace_links(entry.content_id, entry.recommended)
                    outcome.written += 1
            uow.commit()
        return report


def _log_page(outcome: PageOutcome, report: ReconciliationReport) -> None:
    log.info(
        "Page %d: items=%d unchanged=%d corrected=%d ambiguous=%d orphaned=%d written=%d",
        outcome.index,
        outcome.items,
        outcome.counts[Classification.UNCHANGED],
        outcome.counts[Classification.CORRECTED],
        outcome.counts[Classification.AMBIGUOUS],
        outcome.counts[Classification.ORPHANED],
        outcome.written,
    )
    for entry in report.by_classification(Classification.AMBIGUOUS):
        log.warning(
            "Flagged %s %s (%s): %s",
            entry.content_type,
            entry.content_id,
            entry.label,
            entry.reason,
        )
    for entry in report.by_classification(Classification.ORPHANED):
        log.debug("Orphaned %s %s (%s)", entry.content_type, entry.content_id, entry.label)
