"""Shared fixtures for PostgREST adapter tests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx
import pytest

from storyledger.adapters.http_resilience import ResilientClient
from storyledger.adapters.postgrest import PostgrestClient, PostgrestLedgerUnitOfWork
from storyledger.config import PostgrestConfig, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable

BASE_URL = "https://store.example.org/rest/v1"

type Responder = Callable[[httpx.Request], httpx.Response]


@dataclass
class FakePostgrest:
    """Records requests; answers GETs from per-resource row lists."""

    tables: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    overrides: list[Responder] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.overrides:
            return self.overrides.pop(0)(request)
        resource = request.url.path.rsplit("/", 1)[-1]
        if request.method != "GET":
            return httpx.Response(201 if request.method == "POST" else 204)
        rows = self.tables.get(resource, [])
        offset = int(request.url.params.get("offset", 0))
        limit = request.url.params.get("limit")
        end = offset + int(limit) if limit is not None else None
        return httpx.Response(200, json=rows[offset:end])

    def calls(self, method: str | None = None) -> list[tuple[str, str]]:
        return [
            (request.method, request.url.path.rsplit("/", 1)[-1])
            for request in self.requests
            if method is None or request.method == method
        ]

    def writes(self) -> list[tuple[str, str]]:
        return [call for call in self.calls() if call[0] != "GET"]

    @staticmethod
    def body(request: httpx.Request) -> object:
        return json.loads(request.content)


@pytest.fixture
def fake_postgrest() -> FakePostgrest:
    return FakePostgrest()


@pytest.fixture
def postgrest_config() -> PostgrestConfig:
    return PostgrestConfig(
        base_url=BASE_URL,
        api_key="service-key",
        resilience=ResilienceConfig(
            name="postgrest-test",
            base_url=BASE_URL,
            retry=RetryPolicy(total=0),
            default_headers={"apikey": "service-key", "Authorization": "Bearer service-key"},
        ),
    )


@pytest.fixture
def postgrest_client_factory(
    fake_postgrest: FakePostgrest,
    postgrest_config: PostgrestConfig,
) -> Callable[[], PostgrestClient]:
    def client_factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(fake_postgrest))

    def factory() -> PostgrestClient:
        return PostgrestClient(config=postgrest_config, client_factory=client_factory)

    return factory


@pytest.fixture
def postgrest_unit_of_work(
    postgrest_client_factory: Callable[[], PostgrestClient],
) -> Callable[[], PostgrestLedgerUnitOfWork]:
    return lambda: PostgrestLedgerUnitOfWork(client_factory=postgrest_client_factory)
