"""Synchronous PostgREST client over the async resilient HTTP client."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx

from storyledger.adapters.http_resilience import ResilientClient
from storyledger.config import PostgrestConfig, get_postgrest_config
from storyledger.domain.errors import StoreRequestError, StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Iterable, Mapping
    from types import TracebackType

    from storyledger.config import ResilienceConfig

log = getLogger(__name__)

_UNAVAILABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def eq(value: object) -> str:
    return f"eq.{value}"


def in_list(values: Iterable[object]) -> str:
    return "in.(" + ",".join(_quote(str(value)) for value in values) + ")"


def overlaps(values: Iterable[str]) -> str:
    return "ov.{" + ",".join(_quote(value) for value in values) + "}"


def ilike_contains(text: str) -> str:
    # PostgREST spells the LIKE wildcard "*"; literal % and _ are escaped
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    escaped = escaped.replace("*", " ")
    return f"ilike.*{escaped}*"


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(slots=True)
class PostgrestClient:
    """One event loop and one HTTP client per ``with`` block.

    Repositories are synchronous; every call drives a coroutine on a private
    ``asyncio.Runner`` so the rate limiter and connection pool are shared for
    the lifetime of the block.
    """

    config: PostgrestConfig = field(default_factory=get_postgrest_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _runner: asyncio.Runner | None = field(default=None, init=False)
    _client: ResilientClient | None = field(default=None, init=False)

    def __enter__(self) -> PostgrestClient:
        self._runner = asyncio.Runner()
        self._client = self.client_factory(self.config.resilience)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        runner, client = self._runner, self._client
        self._runner = None
        self._client = None
        if runner is None:
            return
        try:
            if client is not None:
                runner.run(client.aclose())
        finally:
            runner.close()

    def select(
        self,
        resource: str,
        *,
        filters: Mapping[str, str] | None = None,
        columns: str = "*",
        order: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Any:
        params: dict[str, str | int] = {"select": columns}
        if filters:
            params.update(filters)
        if order is not None:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        response = self._run(self._active_client().get(f"/{resource}", params=params))
        return response.json()

    def insert(self, resource: str, rows: list[dict[str, object]]) -> None:
        if not rows:
            return
        self._run(
            self._active_client().post(
                f"/{resource}",
                json=rows,
                headers={"Prefer": "return=minimal"},
            )
        )

    def update(
        self,
        resource: str,
        *,
        filters: Mapping[str, str],
        values: dict[str, object],
    ) -> None:
        self._run(
            self._active_client().patch(
                f"/{resource}",
                params=dict(filters),
                json=values,
                headers={"Prefer": "return=minimal"},
            )
        )

    def delete(self, resource: str, *, filters: Mapping[str, str]) -> None:
        if not filters:
            raise ValueError("Refusing to DELETE without filters")
        self._run(
            self._active_client().delete(
                f"/{resource}",
                params=dict(filters),
                headers={"Prefer": "return=minimal"},
            )
        )

    def _active_client(self) -> ResilientClient:
        if self._client is None:
            raise RuntimeError("PostgrestClient used outside of a with block")
        return self._client

    def _run(self, request: Coroutine[Any, Any, httpx.Response]) -> httpx.Response:
        if self._runner is None:
            request.close()
            raise RuntimeError("PostgrestClient used outside of a with block")
        try:
            response = self._runner.run(request)
        except httpx.TransportError as exc:
            log.warning(f"PostgREST transport failure: {exc!r}")
            raise StoreUnavailableError(f"PostgREST unreachable: {exc}") from exc
        return _checked(response)


def _checked(response: httpx.Response) -> httpx.Response:
    status = response.status_code
    if status < 400:
        return response
    request = response.request
    detail = response.text[:200]
    message = f"{request.method} {request.url.path} returned {status}: {detail}"
    if status in _UNAVAILABLE_STATUSES:
        raise StoreUnavailableError(message)
    raise StoreRequestError(message)
