from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from albumid.domain.errors import InvalidInputError
from albumid.domain.identity.curation import CatalogCurator
from albumid.domain.identity.exclusions import ExclusionSet
from albumid.domain.identity.scan import DuplicateScanEngine, ScanSettings, find_candidate_pairs
from tests.helpers.catalog import make_record, seed_catalog

if TYPE_CHECKING:
    from collections.abc import Callable

    from albumid.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork

    UowFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]


CATALOG = [
    make_record("a1", "Radiohead", "OK Computer"),
    make_record("a2", "radiohead", "OK Computer"),
    make_record("a3", "Radiohead", "OK Computer (Remaster)"),
    make_record("a4", "Portishead", "Dummy"),
    make_record("a5", "", "Untitled"),
]


def test_find_candidate_pairs_orders_by_confidence_then_ids() -> None:
    pairs, suppressed = find_candidate_pairs(CATALOG, 0.35, ExclusionSet())

    assert [(pair.record_a.id, pair.record_b.id) for pair in pairs] == [
        ("a1", "a2"),
        ("a1", "a3"),
        ("a2", "a3"),
    ]
    assert pairs[0].confidence == 1.0
    assert suppressed == 0


def test_records_without_artist_or_title_are_never_compared() -> None:
    pairs, _ = find_candidate_pairs(CATALOG, 1.0, ExclusionSet())

    assert all("a5" not in (pair.record_a.id, pair.record_b.id) for pair in pairs)
    assert len(pairs) == 6


def test_pair_keys_are_sorted_regardless_of_input_order() -> None:
    pairs, _ = find_candidate_pairs(list(reversed(CATALOG)), 0.0, ExclusionSet())

    assert [(pair.record_a.id, pair.record_b.id) for pair in pairs] == [("a1", "a2")]


def test_scan_suppresses_excluded_pairs(sqlite_unit_of_work: UowFactory) -> None:
    seed_catalog(sqlite_unit_of_work, CATALOG, exclusions=[("a2", "a1")])
    engine = DuplicateScanEngine(sqlite_unit_of_work)

    report = engine.scan(0.35)

    assert ("a1", "a2") not in [(pair.record_a.id, pair.record_b.id) for pair in report.pairs]
    assert report.suppressed_pairs == 1
    assert report.excluded_pairs == 1
    assert report.total_records == 5


def test_scan_uses_configured_default_threshold(sqlite_unit_of_work: UowFactory) -> None:
    seed_catalog(sqlite_unit_of_work, CATALOG)
    engine = DuplicateScanEngine(sqlite_unit_of_work)

    report = engine.scan()

    assert [(pair.record_a.id, pair.record_b.id) for pair in report.pairs] == [("a1", "a2")]


def test_scan_truncates_but_reports_total(sqlite_unit_of_work: UowFactory) -> None:
    seed_catalog(sqlite_unit_of_work, CATALOG)
    engine = DuplicateScanEngine(sqlite_unit_of_work, ScanSettings(max_pairs=1))

    limited = engine.scan(1.0)
    unbounded = engine.scan(1.0, None)

    assert len(limited.pairs) == 1
    assert limited.total_candidates == 6
    assert len(unbounded.pairs) == 6


def test_scan_on_empty_catalog(sqlite_unit_of_work: UowFactory) -> None:
    report = DuplicateScanEngine(sqlite_unit_of_work).scan()

    assert report.pairs == []
    assert report.total_records == 0


@pytest.mark.parametrize("limit", [-1, 1.5, "3", True])
def test_scan_rejects_invalid_limits(sqlite_unit_of_work: UowFactory, limit: object) -> None:
    with pytest.raises(InvalidInputError):
        DuplicateScanEngine(sqlite_unit_of_work).scan(0.1, limit)  # type: ignore[arg-type]


def test_scan_rejects_invalid_threshold_before_reading(sqlite_unit_of_work: UowFactory) -> None:
    with pytest.raises(InvalidInputError):
        DuplicateScanEngine(sqlite_unit_of_work).scan(2.0)


def test_check_similar_flags_prospective_duplicates(sqlite_unit_of_work: UowFactory) -> None:
    seed_catalog(sqlite_unit_of_work, CATALOG)
    engine = DuplicateScanEngine(sqlite_unit_of_work)

    matches = engine.check_similar("Radiohead", "OK Computer", exclude_id="a1", threshold=0.35)

    assert [match.record.id for match in matches] == ["a2", "a3"]
    assert matches[0].score.confidence == 1.0


def test_check_similar_respects_limit(sqlite_unit_of_work: UowFactory) -> None:
    seed_catalog(sqlite_unit_of_work, CATALOG)
    engine = DuplicateScanEngine(sqlite_unit_of_work)

    matches = engine.check_similar("Radiohead", "OK Computer", threshold=1.0, limit=2)

    assert len(matches) == 2


def test_check_similar_requires_artist_and_title(sqlite_unit_of_work: UowFactory) -> None:
    with pytest.raises(InvalidInputError):
        DuplicateScanEngine(sqlite_unit_of_work).check_similar("Radiohead", " ")


def test_marking_a_near_duplicate_distinct_removes_it_from_later_scans(
    sqlite_unit_of_work: UowFactory,
) -> None:
    seed_catalog(
        sqlite_unit_of_work,
        [
            make_record("ok-1", "Radiohead", "OK Computer"),
            make_record("ok-2", "Radiohead", "OK Computrr"),
        ],
    )
    engine = DuplicateScanEngine(sqlite_unit_of_work)

    (pair,) = engine.scan().pairs
    assert pair.score.title_score > 0.85

    assert CatalogCurator(sqlite_unit_of_work).mark_distinct("ok-2", "ok-1")

    report = engine.scan()
    assert report.pairs == []
    assert report.suppressed_pairs == 1
