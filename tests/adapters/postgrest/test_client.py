from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from storyledger.adapters.postgrest.client import eq, ilike_contains, in_list, overlaps
from storyledger.domain.errors import StoreRequestError, StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable

    from storyledger.adapters.postgrest import PostgrestClient

    from .conftest import FakePostgrest


def test_filter_helpers_render_postgrest_operators() -> None:
    assert eq("abc") == "eq.abc"
    assert in_list(["a", 'b"c']) == 'in.("a","b\\"c")'
    assert overlaps(["x", "y z"]) == 'ov.{"x","y z"}'
    assert ilike_contains("50%_off*") == "ilike.*50\\%\\_off *"


def test_select_sends_query_and_auth_headers(
    fake_postgrest: FakePostgrest,
    postgrest_client_factory: Callable[[], PostgrestClient],
) -> None:
    fake_postgrest.tables["storytellers"] = [{"id": "1"}, {"id": "2"}, {"id": "3"}]

    with postgrest_client_factory() as client:
        rows = client.select(
            "storytellers",
            filters={"consent_given": eq("true")},
            order="id.asc",
            limit=2,
            offset=1,
        )

    assert rows == [{"id": "2"}, {"id": "3"}]
    request = fake_postgrest.requests[0]
    assert request.url.path == "/rest/v1/storytellers"
    assert request.url.params["select"] == "*"
    assert request.url.params["consent_given"] == "eq.true"
    assert request.url.params["order"] == "id.asc"
    assert request.headers["apikey"] == "service-key"


def test_insert_posts_minimal_return(
    fake_postgrest: FakePostgrest,
    postgrest_client_factory: Callable[[], PostgrestClient],
) -> None:
    with postgrest_client_factory() as client:
        client.insert("content_links", [{"content_id": "c1"}])
        client.insert("content_links", [])

    assert fake_postgrest.calls() == [("POST", "content_links")]
    request = fake_postgrest.requests[0]
    assert request.headers["Prefer"] == "return=minimal"
    assert fake_postgrest.body(request) == [{"content_id": "c1"}]


@pytest.mark.parametrize("status", [408, 429, 500, 503])
def test_transient_statuses_raise_unavailable(
    status: int,
    fake_postgrest: FakePostgrest,
    postgrest_client_factory: Callable[[], PostgrestClient],
) -> None:
    fake_postgrest.overrides.append(lambda _request: httpx.Response(status, text="busy"))

    with postgrest_client_factory() as client, pytest.raises(StoreUnavailableError, match="busy"):
        client.select("content_items")


def test_client_errors_raise_request_error(
    fake_postgrest: FakePostgrest,
    postgrest_client_factory: Callable[[], PostgrestClient],
) -> None:
    fake_postgrest.overrides.append(
        lambda _request: httpx.Response(400, json={"message": "column does not exist"})
    )

    with postgrest_client_factory() as client, pytest.raises(StoreRequestError, match="400"):
        client.select("content_items")


def test_transport_errors_raise_unavailable(
    fake_postgrest: FakePostgrest,
    postgrest_client_factory: Callable[[], PostgrestClient],
) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    fake_postgrest.overrides.append(refuse)

    with postgrest_client_factory() as client, pytest.raises(StoreUnavailableError):
        client.select("content_items")


def test_delete_requires_filters(postgrest_client_factory: Callable[[], PostgrestClient]) -> None:
    with postgrest_client_factory() as client, pytest.raises(ValueError, match="filters"):
        client.delete("content_links", filters={})


def test_client_must_be_entered(postgrest_client_factory: Callable[[], PostgrestClient]) -> None:
    client = postgrest_client_factory()

    with pytest.raises(RuntimeError, match="with block"):
        client.select("storytellers")
