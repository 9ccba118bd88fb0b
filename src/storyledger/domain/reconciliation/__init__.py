from __future__ import annotations

from .contracts import Classification, ReconciliationEntry, ReconciliationReport
from .orchestrator import (
    PageOutcome,
    PageRetryPolicy,
    ReconciliationResult,
    RunMode,
    run_reconciliation,
)
from .report import build_report, classify

__all__ = [
    "Classification",
    "PageOutcome",
    "PageRetryPolicy",
    "ReconciliationEntry",
    "ReconciliationReport",
    "ReconciliationResult",
    "RunMode",
    "build_report",
    "classify",
    "run_reconciliation",
]
