from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from storyledger.adapters.postgrest import store
from storyledger.domain.model import Confidence, LinkEdge, LinkMethod, MediaAsset, Quote, Story
from tests.helpers.corpus import make_storyteller

if TYPE_CHECKING:
    from collections.abc import Callable

    from storyledger.adapters.postgrest import PostgrestLedgerUnitOfWork

    from .conftest import FakePostgrest

    UowFactory = Callable[[], PostgrestLedgerUnitOfWork]


def _storyteller_row(name: str, **overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": str(uuid4()),
        "display_name": name,
        "email": "",
        "consent_given": None,
        "public_display": True,
    }
    row.update(overrides)
    return row


def _content_row(content_type: str, **overrides: object) -> dict[str, object]:
    row: dict[str, object] = {"id": str(uuid4()), "content_type": content_type, "body": None}
    row.update(overrides)
    return row


def test_page_translates_rows_into_content_subtypes(
    fake_postgrest: FakePostgrest,
    postgrest_unit_of_work: UowFactory,
) -> None:
    media_id = str(uuid4())
    fake_postgrest.tables["content_items"] = [
        _content_row("story", title="Fishing", member_refs=["a", "b"]),
        _content_row("quote", source_media_id=media_id, owner_ref=42),
        _content_row("media_asset", url="https://cdn.example.org/x.mp4", member_refs="solo"),
        _content_row("storyteller"),
        {"content_type": "story"},
    ]

    with postgrest_unit_of_work() as uow:
        items = uow.repositories.content.page(offset=0, limit=10)

    story, quote, asset = items
    assert isinstance(story, Story)
    assert story.member_refs == ("a", "b")
    assert story.body == ""
    assert isinstance(quote, Quote)
    assert str(quote.source_media_id) == media_id
    assert quote.owner_ref == "42"
    assert isinstance(asset, MediaAsset)
    assert asset.url == "https://cdn.example.org/x.mp4"
    assert asset.member_refs == ("solo",)
    request = fake_postgrest.requests[0]
    assert request.url.params["order"] == "id.asc"
    assert request.url.params["limit"] == "10"


def test_storyteller_rows_never_widen_visibility(
    fake_postgrest: FakePostgrest,
    postgrest_unit_of_work: UowFactory,
) -> None:
    fake_postgrest.tables["storytellers"] = [_storyteller_row("Jane Doe")]

    with postgrest_unit_of_work() as uow:
        (jane,) = uow.repositories.storytellers.list_all()

    assert jane.email is None
    assert not jane.privacy.consent_given
    assert jane.privacy.public_display


def test_list_all_follows_pages(
    monkeypatch: pytest.MonkeyPatch,
    fake_postgrest: FakePostgrest,
    postgrest_unit_of_work: UowFactory,
) -> None:
    monkeypatch.setattr(store, "LIST_PAGE_SIZE", 2)
    fake_postgrest.tables["storytellers"] = [_storyteller_row(f"Teller {n}") for n in range(5)]

    with postgrest_unit_of_work() as uow:
        everyone = uow.repositories.storytellers.list_all()

    assert [s.display_name for s in everyone] == [f"Teller {n}" for n in range(5)]
    offsets = [request.url.params["offset"] for request in fake_postgrest.requests]
    assert offsets == ["0", "2", "4"]


def test_writes_wait_for_commit(
    fake_postgrest: FakePostgrest,
    postgrest_unit_of_work: UowFactory,
) -> None:
    content_id = uuid4()
    storyteller_id = uuid4()
    edge = LinkEdge(
        storyteller_id=storyteller_id,
        content_id=content_id,
        content_type=Story.ENTITY_TYPE,
        method=LinkMethod.DIRECT_REFERENCE,
        confidence=Confidence.HIGH,
    )

    with postgrest_unit_of_work() as uow:
        uow.repositories.links.replace_links(content_id, [edge, edge])
        assert fake_postgrest.writes() == []
        uow.commit()

    assert fake_postgrest.writes() == [("DELETE", "content_links"), ("POST", "content_links")]
    delete, insert = fake_postgrest.requests
    assert delete.url.params["content_id"] == f"eq.{content_id}"
    (row,) = fake_postgrest.body(insert)  # type: ignore[misc]
    assert row["storyteller_id"] == str(storyteller_id)
    assert row["method"] == "direct_reference"
    assert row["confidence"] == "high"


def test_uncommitted_writes_are_dropped(
    fake_postgrest: FakePostgrest,
    postgrest_unit_of_work: UowFactory,
) -> None:
    storyteller = make_storyteller()

    with postgrest_unit_of_work() as uow:
        uow.repositories.storytellers.add(storyteller)
        uow.repositories.storytellers.save(storyteller)

    with postgrest_unit_of_work() as uow:
        uow.repositories.storytellers.add(storyteller)
        uow.rollback()
        uow.commit()

    assert fake_postgrest.writes() == []


def test_save_patches_storyteller_by_id(
    fake_postgrest: FakePostgrest,
    postgrest_unit_of_work: UowFactory,
) -> None:
    storyteller = make_storyteller()

    with postgrest_unit_of_work() as uow:
        uow.repositories.storytellers.save(storyteller)
        uow.commit()

    (request,) = fake_postgrest.requests
    assert request.method == "PATCH"
    assert request.url.params["id"] == f"eq.{storyteller.id}"
    body = fake_postgrest.body(request)
    assert isinstance(body, dict)
    assert "id" not in body
    assert body["display_name"] == "Aunty May Collins"


def test_stored_owners_chunks_in_filters(
    monkeypatch: pytest.MonkeyPatch,
    fake_postgrest: FakePostgrest,
    postgrest_unit_of_work: UowFactory,
) -> None:
    monkeypatch.setattr(store, "IN_FILTER_CHUNK", 2)
    content_ids = [uuid4() for _ in range(3)]
    owner = uuid4()
    fake_postgrest.tables["content_links"] = [
        {"content_id": str(content_ids[0]), "storyteller_id": str(owner)},
        {"content_id": "garbage", "storyteller_id": str(owner)},
    ]

    with postgrest_unit_of_work() as uow:
        stored = uow.repositories.links.stored_owners(content_ids)

    assert stored == {content_ids[0]: frozenset({owner})}
    assert fake_postgrest.calls() == [("GET", "content_links"), ("GET", "content_links")]
    first = fake_postgrest.requests[0].url.params["content_id"]
    assert first == f'in.("{content_ids[0]}","{content_ids[1]}")'


def test_remove_storyteller_counts_then_deletes_on_commit(
    fake_postgrest: FakePostgrest,
    postgrest_unit_of_work: UowFactory,
) -> None:
    storyteller_id = uuid4()
    fake_postgrest.tables["content_links"] = [
        {"content_id": str(uuid4()), "storyteller_id": str(storyteller_id)},
        {"content_id": str(uuid4()), "storyteller_id": str(storyteller_id)},
    ]

    with postgrest_unit_of_work() as uow:
        removed = uow.repositories.links.remove_storyteller(storyteller_id)
        uow.commit()

    assert removed == 2
    assert fake_postgrest.writes() == [("DELETE", "content_links")]


def test_attribution_search_uses_ilike(
    fake_postgrest: FakePostgrest,
    postgrest_unit_of_work: UowFactory,
) -> None:
    with postgrest_unit_of_work() as uow:
        found = uow.repositories.content.search_attribution(" Jane Doe ")
        blank = uow.repositories.content.search_attribution("   ")

    assert found == []
    assert blank == []
    (request,) = fake_postgrest.requests
    assert request.url.params["attribution"] == "ilike.*Jane Doe*"


def test_repositories_require_entered_unit_of_work(postgrest_unit_of_work: UowFactory) -> None:
    uow = postgrest_unit_of_work()

    with pytest.raises(RuntimeError, match="not entered"):
        _ = uow.repositories


def test_owner_ref_lookup_ignores_case_and_padding(
    fake_postgrest: FakePostgrest,
    postgrest_unit_of_work: UowFactory,
) -> None:
    storyteller_id = uuid4()

    with postgrest_unit_of_work() as uow:
        uow.repositories.content.find_by_owner_ref(f" {storyteller_id} ")

    (request,) = fake_postgrest.requests
    assert request.url.params["owner_ref"] == f"ilike.*{storyteller_id}*"
