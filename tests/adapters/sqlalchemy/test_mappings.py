from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy import inspect, select, text

from storyledger.adapters.sqlalchemy import create_all_tables, start_mappers
from storyledger.domain.model import ContentItem, MediaAsset, Quote, Story, Storyteller, Theme
from tests.helpers.corpus import (
    make_media_asset,
    make_quote,
    make_story,
    make_storyteller,
    make_theme,
    public_privacy,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def test_start_mappers_is_idempotent() -> None:
    # First invocation happens in the sqlite_engine fixture; calling again should be harmless.
    start_mappers()
    start_mappers()


def test_create_all_tables_registers_core_tables(sqlite_engine: Engine) -> None:
    create_all_tables(sqlite_engine)
    table_names = set(inspect(sqlite_engine).get_table_names())
    assert {"storyteller", "content_item", "content_link"} <= table_names


def test_storyteller_privacy_round_trips_as_composite(sqlite_session: Session) -> None:
    storyteller = make_storyteller(privacy=public_privacy(show_location=False))
    sqlite_session.add(storyteller)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = sqlite_session.get(Storyteller, storyteller.id)

    assert loaded is not None
    assert loaded.privacy == public_privacy(show_location=False)
    assert loaded.display_name == "Aunty May Collins"


def test_content_subtypes_load_polymorphically(sqlite_session: Session) -> None:
    source = make_media_asset(attribution="Recorded by the youth team")
    items = [
        make_story(owner="not-a-uuid", members=["a", "b"]),
        make_quote(source_media_id=source.id),
        make_theme(members=[]),
        source,
    ]
    sqlite_session.add_all(items)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = {
        item.id: item for item in sqlite_session.execute(select(ContentItem)).scalars().all()
    }

    story, quote, theme, asset = (loaded[item.id] for item in items)
    assert isinstance(story, Story)
    assert story.owner_ref == "not-a-uuid"
    assert story.member_refs == ("a", "b")
    assert isinstance(quote, Quote)
    assert quote.source_media_id == source.id
    assert quote.member_refs is None
    assert isinstance(theme, Theme)
    assert theme.member_refs == ()
    assert isinstance(asset, MediaAsset)
    assert asset.url == "https://cdn.example.org/interview.mp4"
    assert asset.attribution == "Recorded by the youth team"


def test_member_refs_keep_unparseable_json_as_single_entry(sqlite_session: Session) -> None:
    story = make_story()
    sqlite_session.add(story)
    sqlite_session.commit()
    sqlite_session.execute(
        text("UPDATE content_item SET member_refs = :raw WHERE id = :id"),
        {"raw": "Jane Doe; John Smith", "id": story.id.hex},
    )
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = sqlite_session.get(Story, story.id)

    assert loaded is not None
    assert loaded.member_refs == ("Jane Doe; John Smith",)


def test_datetimes_are_stored_as_utc(sqlite_session: Session) -> None:
    local = datetime(2025, 1, 5, 10, 0, tzinfo=timezone(timedelta(hours=10)))
    storyteller = make_storyteller()
    storyteller.update_privacy(now=local, consent_given=True)
    sqlite_session.add(storyteller)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = sqlite_session.get(Storyteller, storyteller.id)

    assert loaded is not None
    assert loaded.consent_recorded_at == datetime(2025, 1, 5, 0, 0, tzinfo=UTC)
    assert loaded.consent_recorded_at.tzinfo is UTC
