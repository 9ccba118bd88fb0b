"""PostgREST store configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

POSTGREST_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True, slots=True)
class PostgrestConfig:
    """Holds the remote store endpoint and credentials."""

    base_url: str
    api_key: str
    resilience: ResilienceConfig


def get_postgrest_config(*, resilience: ResilienceConfig | None = None) -> PostgrestConfig:
    values = require_env_vars(("STORYLEDGER_POSTGREST_URL", "STORYLEDGER_POSTGREST_KEY"))
    base_url = values["STORYLEDGER_POSTGREST_URL"].rstrip("/")
    api_key = values["STORYLEDGER_POSTGREST_KEY"]
    return PostgrestConfig(
        base_url=base_url,
        api_key=api_key,
        resilience=resilience
        or ResilienceConfig(
            name="postgrest",
            base_url=base_url,
            timeout_seconds=POSTGREST_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
        ),
    )
