"""Application configuration helpers."""

from __future__ import annotations

from .env import int_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .postgrest import PostgrestConfig, get_postgrest_config
from .reconciliation import ReconciliationConfig, get_reconciliation_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    StoreBackend,
    get_database_config,
    get_storage_config,
    get_store_backend,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "PostgrestConfig",
    "RateLimit",
    "ReconciliationConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "StoreBackend",
    "configure_logging",
    "get_database_config",
    "get_postgrest_config",
    "get_reconciliation_config",
    "get_storage_config",
    "get_store_backend",
    "int_env_var",
    "require_env_var",
    "require_env_vars",
]
