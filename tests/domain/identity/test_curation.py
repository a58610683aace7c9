from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from albumid.domain.errors import IntegrityViolationError, InvalidInputError
from albumid.domain.identity.curation import CatalogCurator, fill_missing_metadata
from albumid.domain.identity.exclusions import ExclusionPair
from albumid.domain.model import CoverImage, MusicList, Track
from tests.helpers.catalog import make_record, reference, seed_catalog

if TYPE_CHECKING:
    from collections.abc import Callable

    from albumid.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork

    UowFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]


@pytest.fixture
def curator(sqlite_unit_of_work: UowFactory) -> CatalogCurator:
    seed_catalog(
        sqlite_unit_of_work,
        [
            make_record("a1", "Radiohead", "OK Computer", genre_1="Rock"),
            make_record(
                "a2",
                "radiohead",
                "OK Computer",
                release_date="1997-05-21",
                genre_1="Alternative",
                tracks=(Track("Airbag", 284000),),
                cover_image=CoverImage(data=b"large-cover", format="image/jpeg"),
            ),
            make_record("a3", "Portishead", "Dummy"),
            make_record("manual-1", "Radiohead", "Ok Computer"),
        ],
        lists=[MusicList(id="l1", name="Nineties"), MusicList(id="l2", name="Favourites")],
        entries=[
            reference("l1", "a2", 1),
            reference("l2", "a2", 1),
            reference("l2", "manual-1", 2),
        ],
        exclusions=[("a2", "a3"), ("a1", "manual-1")],
    )
    return CatalogCurator(sqlite_unit_of_work)


def test_fill_missing_metadata_fills_only_gaps() -> None:
    survivor = make_record("s", "A", "T", genre_1="Rock", cover_image=CoverImage(b"x"))
    loser = make_record(
        "l",
        "A",
        "T",
        genre_1="Pop",
        country="Iceland",
        tracks=(Track("One"),),
        cover_image=CoverImage(b"bigger"),
    )

    merged, filled = fill_missing_metadata(survivor, loser)

    assert merged.genre_1 == "Rock"
    assert merged.country == "Iceland"
    assert merged.tracks == (Track("One"),)
    assert merged.cover_image == CoverImage(b"bigger")
    assert set(filled) == {"country", "tracks", "cover_image"}


def test_fill_missing_metadata_keeps_larger_survivor_cover() -> None:
    survivor = make_record("s", "A", "T", cover_image=CoverImage(b"large-cover"))
    loser = make_record("l", "A", "T", cover_image=CoverImage(b"small"))

    merged, filled = fill_missing_metadata(survivor, loser)

    assert merged is survivor
    assert filled == ()


def test_merge_moves_references_and_deletes_loser(
    curator: CatalogCurator, sqlite_unit_of_work: UowFactory
) -> None:
    result = curator.merge("a1", "a2")

    assert result.references_moved == 2
    assert result.exclusions_removed == 1
    assert set(result.filled_fields) == {"release_date", "tracks", "cover_image"}

    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        assert repositories.albums.get("a2") is None
        assert repositories.entries.count_references("a2") == 0
        assert repositories.entries.count_references("a1") == 2
        assert not repositories.exclusions.contains(ExclusionPair.of("a2", "a3"))
        survivor = repositories.albums.get("a1")
        assert survivor is not None
        assert survivor.genre_1 == "Rock"
        assert survivor.release_date == "1997-05-21"
        assert survivor.cover_image == CoverImage(data=b"large-cover", format="image/jpeg")


def test_merge_rejects_self_merge(curator: CatalogCurator) -> None:
    with pytest.raises(InvalidInputError):
        curator.merge("a1", "a1")


def test_merge_with_missing_record_changes_nothing(
    curator: CatalogCurator, sqlite_unit_of_work: UowFactory
) -> None:
    with pytest.raises(IntegrityViolationError):
        curator.merge("a1", "does-not-exist")

    with pytest.raises(IntegrityViolationError):
        curator.merge("does-not-exist", "a2")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.entries.count_references("a2") == 2


def test_repeating_a_merge_is_rejected(
    curator: CatalogCurator, sqlite_unit_of_work: UowFactory
) -> None:
    curator.merge("a1", "a2")

    with pytest.raises(IntegrityViolationError):
        curator.merge("a1", "a2")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.albums.exists("a1")
        assert uow.repositories.entries.count_references("a1") == 2


def test_merge_manual_repoints_references(
    curator: CatalogCurator, sqlite_unit_of_work: UowFactory
) -> None:
    result = curator.merge_manual("manual-1", "a1")

    assert result.references_moved == 1
    assert result.exclusions_removed == 1
    with sqlite_unit_of_work() as uow:
        assert not uow.repositories.albums.exists("manual-1")
        entries = uow.repositories.entries.for_list("l2")
        assert [entry.album_id for entry in entries] == ["a2", "a1"]


def test_merge_manual_validates_ids(curator: CatalogCurator) -> None:
    with pytest.raises(InvalidInputError):
        curator.merge_manual("a3", "a1")
    with pytest.raises(InvalidInputError):
        curator.merge_manual("manual-1", "manual-2")
    with pytest.raises(IntegrityViolationError):
        curator.merge_manual("manual-1", "missing")


def test_mark_distinct_is_idempotent(curator: CatalogCurator) -> None:
    assert curator.mark_distinct("a3", "a1") is True
    assert curator.mark_distinct("a1", "a3") is False
    assert ExclusionPair.of("a1", "a3") in curator.list_exclusions()


def test_mark_distinct_requires_existing_albums(curator: CatalogCurator) -> None:
    with pytest.raises(IntegrityViolationError):
        curator.mark_distinct("a1", "nope")
    with pytest.raises(InvalidInputError):
        curator.mark_distinct("a1", "a1")


def test_unmark_distinct(curator: CatalogCurator) -> None:
    assert curator.unmark_distinct("a3", "a2") is True
    assert curator.unmark_distinct("a3", "a2") is False
    assert curator.list_exclusions() == [ExclusionPair.of("a1", "manual-1")]


def test_skip_manual_records_exclusion(curator: CatalogCurator) -> None:
    assert curator.skip_manual("manual-1", "a2") is True

    with pytest.raises(InvalidInputError):
        curator.skip_manual("a1", "a2")


def test_delete_orphaned_references(
    curator: CatalogCurator, sqlite_unit_of_work: UowFactory
) -> None:
    seed_catalog(sqlite_unit_of_work, entries=[reference("l1", "gone"), reference("l2", "gone")])

    assert curator.delete_orphaned_references("gone") == 2

    with pytest.raises(IntegrityViolationError):
        curator.delete_orphaned_references("a1")
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.entries.count_references("gone") == 0
