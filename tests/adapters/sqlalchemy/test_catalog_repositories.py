from __future__ import annotations

import base64
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from albumid.adapters.sqlalchemy.repositories import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyExclusionRepository,
    SqlAlchemyListEntryRepository,
    SqlAlchemyListRepository,
)
from albumid.domain.errors import CatalogLookupError
from albumid.domain.identity.exclusions import ExclusionPair
from albumid.domain.identity.lookup_cache import CatalogLookupCache
from albumid.domain.identity.overrides import CanonicalValueResolver, ListEntryDraft
from albumid.domain.model import AlbumField, CoverImage, ListEntry, MusicList, Override, Track
from tests.helpers.catalog import make_record

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def test_schema_has_no_genre_columns_on_entries(sqlite_engine: Engine) -> None:
    columns = {column["name"] for column in inspect(sqlite_engine).get_columns("list_entries")}

    assert "genre_1" not in columns
    assert "genre_2" not in columns
    assert {"artist", "title", "cover_image", "tracks"} <= columns


def test_catalog_round_trip(sqlite_session: Session) -> None:
    repository = SqlAlchemyCatalogRepository(sqlite_session)
    record = make_record(
        "rg-1",
        "Radiohead",
        "OK Computer",
        release_date="1997-05-21",
        tracks=(Track("Airbag", 284000), Track("Untitled")),
        cover_image=CoverImage(data=b"png", format="image/png"),
    )

    repository.add(record)
    sqlite_session.commit()

    assert repository.get("rg-1") == record
    assert repository.exists("rg-1")
    assert not repository.exists("rg-2")


def test_bulk_fetch_ignores_unknown_and_duplicate_ids(sqlite_session: Session) -> None:
    repository = SqlAlchemyCatalogRepository(sqlite_session)
    repository.add(make_record("a", "A", "One"))
    repository.add(make_record("b", "B", "Two"))

    records = repository.bulk_fetch_by_id(["a", "missing", "a", "b", ""])

    assert sorted(record.id for record in records) == ["a", "b"]


def test_bulk_fetch_handles_more_ids_than_one_chunk(sqlite_session: Session) -> None:
    repository = SqlAlchemyCatalogRepository(sqlite_session)
    for index in range(1200):
        repository.add(make_record(f"id-{index:04d}", "Artist", f"Album {index}"))

    records = repository.bulk_fetch_by_id([f"id-{index:04d}" for index in range(1200)])

    assert len(records) == 1200


def test_store_failures_surface_as_lookup_errors(
    sqlite_session: Session, monkeypatch: pytest.MonkeyPatch
) -> None:
    repository = SqlAlchemyCatalogRepository(sqlite_session)

    def broken_execute(*_: object, **__: object) -> object:
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(sqlite_session, "execute", broken_execute)

    with pytest.raises(CatalogLookupError):
        repository.bulk_fetch_by_id(["a"])
    with pytest.raises(CatalogLookupError):
        repository.get("a")


def test_update_and_delete(sqlite_session: Session) -> None:
    repository = SqlAlchemyCatalogRepository(sqlite_session)
    repository.add(make_record("a", "A", "One"))

    repository.update(make_record("a", "A", "One", country="Iceland"))
    stored = repository.get("a")

    assert stored is not None
    assert stored.country == "Iceland"
    assert repository.delete("a") == 1
    assert repository.delete("a") == 0


def test_list_entries_reassign_and_count(sqlite_session: Session) -> None:
    entries = SqlAlchemyListEntryRepository(sqlite_session)
    entries.add(ListEntry(list_id="l1", album_id="old", position=1, title="Override"))
    entries.add(ListEntry(list_id="l1", album_id="old", position=2))
    entries.add(ListEntry(list_id="l1", album_id="other", position=3))

    assert entries.reassign("old", "new") == 2
    assert entries.count_references("old") == 0
    assert entries.count_references("new") == 2
    stored = entries.for_list("l1")
    assert [entry.album_id for entry in stored] == ["new", "new", "other"]
    assert stored[0].title == "Override"


def test_cover_override_round_trips_as_bytes(sqlite_session: Session) -> None:
    albums = SqlAlchemyCatalogRepository(sqlite_session)
    albums.add(make_record("rg-1", "Radiohead", "OK Computer", cover_image=CoverImage(b"front")))
    entries = SqlAlchemyListEntryRepository(sqlite_session)
    resolver = CanonicalValueResolver(CatalogLookupCache(albums))
    scan = bytes(range(256))
    draft = ListEntryDraft(
        list_id="l1",
        album_id="rg-1",
        cover_image=base64.b64encode(scan).decode("ascii"),
        cover_image_format="image/jpeg",
    )

    entries.add(resolver.resolve_entry(draft))
    (stored,) = entries.for_list("l1")

    assert stored.cover_image == scan
    assert stored.cover_image_format == "image/jpeg"
    assert resolver.resolve(AlbumField.COVER_IMAGE, stored.cover_image, "rg-1") == Override(scan)


def test_list_delete_cascades_entries(sqlite_session: Session) -> None:
    lists = SqlAlchemyListRepository(sqlite_session)
    entries = SqlAlchemyListEntryRepository(sqlite_session)
    lists.add(MusicList(id="l1", name="Best of", year=2001, owner="ana"))
    entries.add(ListEntry(list_id="l1", album_id="a"))

    assert lists.get("l1") == MusicList(id="l1", name="Best of", year=2001, owner="ana")
    assert lists.delete("l1") == 1
    assert entries.for_list("l1") == []
    assert lists.get("l1") is None


def test_orphaned_and_dangling_references(sqlite_session: Session) -> None:
    SqlAlchemyCatalogRepository(sqlite_session).add(make_record("a", "A", "One"))
    SqlAlchemyListRepository(sqlite_session).add(MusicList(id="l1", name="Kept"))
    entries = SqlAlchemyListEntryRepository(sqlite_session)
    entries.add(ListEntry(list_id="l1", album_id="a"))
    entries.add(ListEntry(list_id="l1", album_id="ghost"))
    entries.add(ListEntry(list_id="l1", album_id=None, title="Unlinked"))
    entries.add(ListEntry(list_id="gone", album_id="a"))

    assert entries.orphaned_album_ids() == {"ghost": 1}
    assert entries.dangling_list_ids() == {"gone": 1}


def test_exclusion_insert_is_idempotent(sqlite_session: Session) -> None:
    exclusions = SqlAlchemyExclusionRepository(sqlite_session)
    pair = ExclusionPair.of("b", "a")

    assert exclusions.insert(pair) is True
    assert exclusions.insert(pair) is False
    assert exclusions.contains(ExclusionPair.of("a", "b"))
    assert exclusions.list_all() == [pair]


def test_exclusion_delete_involving(sqlite_session: Session) -> None:
    exclusions = SqlAlchemyExclusionRepository(sqlite_session)
    exclusions.insert(ExclusionPair.of("a", "b"))
    exclusions.insert(ExclusionPair.of("c", "a"))
    exclusions.insert(ExclusionPair.of("c", "d"))

    assert exclusions.delete_involving("a") == 2
    assert exclusions.list_all() == [ExclusionPair.of("c", "d")]
    assert exclusions.delete(ExclusionPair.of("c", "d")) is True
