"""Reconciliation run defaults."""

from __future__ import annotations

from dataclasses import dataclass, field

from storyledger.domain.reconciliation.orchestrator import PageRetryPolicy

from .env import int_env_var
from .errors import ConfigurationError

DEFAULT_PAGE_SIZE = 100
DEFAULT_SAMPLE_LIMIT = 10


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    page_size: int = DEFAULT_PAGE_SIZE
    sample_limit: int = DEFAULT_SAMPLE_LIMIT
    retry: PageRetryPolicy = field(default_factory=PageRetryPolicy)


def get_reconciliation_config() -> ReconciliationConfig:
    page_size = int_env_var("STORYLEDGER_PAGE_SIZE", default=DEFAULT_PAGE_SIZE)
    if page_size <= 0:
        raise ConfigurationError("STORYLEDGER_PAGE_SIZE must be positive")
    return ReconciliationConfig(page_size=page_size)
