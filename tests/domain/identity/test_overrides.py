from __future__ import annotations

import base64
import json

import pytest

from albumid.domain.identity.lookup_cache import CatalogLookupCache
from albumid.domain.identity.overrides import (
    CanonicalValueResolver,
    ListEntryDraft,
    coerce_image_bytes,
    serialize_tracks,
)
from albumid.domain.model import INHERIT, AlbumField, CoverImage, Override, Track
from tests.helpers.catalog import FakeCatalogLookup, make_record

COVER = b"\x89PNG-cover-bytes"


@pytest.fixture
def ok_computer() -> FakeCatalogLookup:
    return FakeCatalogLookup(
        [
            make_record(
                "rg-1",
                "Radiohead",
                "OK Computer",
                release_date="1997-05-21",
                country="United Kingdom",
                genre_1="Alternative Rock",
                tracks=(Track("Airbag", 284000), Track("Paranoid Android", 383000)),
                cover_image=CoverImage(data=COVER, format="image/png"),
            )
        ]
    )


@pytest.fixture
def resolver(ok_computer: FakeCatalogLookup) -> CanonicalValueResolver:
    return CanonicalValueResolver(CatalogLookupCache(ok_computer))


def test_matching_text_inherits(resolver: CanonicalValueResolver) -> None:
    assert resolver.resolve(AlbumField.TITLE, "OK Computer", "rg-1") == INHERIT


def test_text_is_sanitised_before_comparison(resolver: CanonicalValueResolver) -> None:
    assert resolver.resolve(AlbumField.ARTIST, "  Radiohead ", "rg-1") == INHERIT


def test_case_difference_is_an_override(resolver: CanonicalValueResolver) -> None:
    decision = resolver.resolve(AlbumField.TITLE, "Ok computer", "rg-1")

    assert decision == Override("Ok computer")


def test_override_stores_sanitised_text(resolver: CanonicalValueResolver) -> None:
    decision = resolver.resolve(AlbumField.TITLE, "OK Computer — OKNOTOK", "rg-1")

    assert decision == Override("OK Computer - OKNOTOK")


@pytest.mark.parametrize("value", [None, "", "   "])
def test_empty_values_inherit(resolver: CanonicalValueResolver, value: str | None) -> None:
    assert resolver.resolve(AlbumField.COUNTRY, value, "rg-1") == INHERIT


def test_genres_always_inherit(resolver: CanonicalValueResolver) -> None:
    assert resolver.resolve(AlbumField.GENRE_1, "Jazz", "rg-1") == INHERIT
    assert resolver.resolve(AlbumField.GENRE_2, "Jazz", None) == INHERIT


def test_without_canonical_id_values_are_stored(resolver: CanonicalValueResolver) -> None:
    assert resolver.resolve(AlbumField.TITLE, "OK Computer", None) == Override("OK Computer")


def test_unknown_canonical_id_stores_value(resolver: CanonicalValueResolver) -> None:
    assert resolver.resolve(AlbumField.TITLE, "OK Computer", "nope") == Override("OK Computer")


def test_lookup_failure_degrades_to_storing_value(ok_computer: FakeCatalogLookup) -> None:
    ok_computer.fail = True
    resolver = CanonicalValueResolver(CatalogLookupCache(ok_computer))

    assert resolver.resolve(AlbumField.TITLE, "OK Computer", "rg-1") == Override("OK Computer")


def test_cover_in_base64_matching_canonical_inherits(resolver: CanonicalValueResolver) -> None:
    encoded = base64.b64encode(COVER).decode("ascii")

    assert resolver.resolve(AlbumField.COVER_IMAGE, encoded, "rg-1") == INHERIT
    assert resolver.resolve(AlbumField.COVER_IMAGE, f"data:image/png;base64,{encoded}", "rg-1") == (
        INHERIT
    )
    assert resolver.resolve(AlbumField.COVER_IMAGE, COVER, "rg-1") == INHERIT


def test_different_cover_is_stored_as_bytes(resolver: CanonicalValueResolver) -> None:
    decision = resolver.resolve(AlbumField.COVER_IMAGE, b"other", "rg-1")

    assert decision == Override(b"other")


def test_tracks_in_different_key_order_inherit(resolver: CanonicalValueResolver) -> None:
    submitted = json.dumps(
        [
            {"length": 284000, "name": "Airbag"},
            {"name": "Paranoid Android", "length": 383000},
        ]
    )

    assert resolver.resolve(AlbumField.TRACKS, submitted, "rg-1") == INHERIT


def test_different_tracks_are_stored_as_canonical_json(resolver: CanonicalValueResolver) -> None:
    decision = resolver.resolve(AlbumField.TRACKS, [{"name": "Airbag", "length": 1}], "rg-1")

    assert decision == Override('[{"length":1,"name":"Airbag"}]')


def test_resolve_entries_uses_a_single_bulk_lookup(ok_computer: FakeCatalogLookup) -> None:
    resolver = CanonicalValueResolver(CatalogLookupCache(ok_computer))
    drafts = [
        ListEntryDraft(list_id="l1", album_id="rg-1", position=1, title="OK Computer"),
        ListEntryDraft(list_id="l1", album_id="rg-1", position=2, artist="Radiohead"),
        ListEntryDraft(list_id="l1", album_id="missing", position=3, title="Kid A"),
    ]

    entries = resolver.resolve_entries(drafts)

    assert ok_computer.calls == [["rg-1", "missing"]]
    assert entries[0].title is None
    assert entries[1].artist is None
    assert entries[2].title == "Kid A"
    assert [entry.position for entry in entries] == [1, 2, 3]


def test_resolved_entry_keeps_only_overrides(resolver: CanonicalValueResolver) -> None:
    draft = ListEntryDraft(
        list_id="l1",
        album_id="rg-1",
        artist="Radiohead",
        title="OK Computer",
        release_date="1997",
        country="United Kingdom",
        genre_1="Rock",
        cover_image=b"scan",
        cover_image_format="image/jpeg",
    )

    entry = resolver.resolve_entry(draft)

    assert entry.artist is None
    assert entry.title is None
    assert entry.country is None
    assert entry.release_date == "1997"
    assert entry.cover_image == b"scan"
    assert entry.cover_image_format == "image/jpeg"
    assert entry.tracks is None
    assert entry.has_overrides


def test_resolve_entries_survives_prefetch_failure(ok_computer: FakeCatalogLookup) -> None:
    ok_computer.fail = True
    resolver = CanonicalValueResolver(CatalogLookupCache(ok_computer))

    entries = resolver.resolve_entries([ListEntryDraft(list_id="l1", album_id="rg-1", title="X")])

    assert entries[0].title == "X"


def test_coerce_image_bytes_handles_supported_inputs() -> None:
    assert coerce_image_bytes(None) is None
    assert coerce_image_bytes("") is None
    assert coerce_image_bytes(bytearray(b"ab")) == b"ab"
    assert coerce_image_bytes(CoverImage(data=b"cd")) == b"cd"
    assert coerce_image_bytes(base64.b64encode(b"ef").decode()) == b"ef"
    assert coerce_image_bytes(42) is None


def test_serialize_tracks_returns_none_for_empty_lists() -> None:
    assert serialize_tracks([]) is None
    assert serialize_tracks("  ") is None
    assert serialize_tracks((Track("A"),)) == '[{"length":null,"name":"A"}]'


@pytest.mark.parametrize(
    ("field", "value"),
    [
        (AlbumField.TITLE, "OK Computer — OKNOTOK"),
        (AlbumField.RELEASE_DATE, " 1997 "),
        (AlbumField.TRACKS, [{"name": "Airbag", "length": 1}]),
        (AlbumField.COVER_IMAGE, base64.b64encode(b"other").decode("ascii")),
    ],
)
def test_resolving_an_override_again_is_stable(
    resolver: CanonicalValueResolver, field: AlbumField, value: object
) -> None:
    first = resolver.resolve(field, value, "rg-1")
    assert isinstance(first, Override)

    assert resolver.resolve(field, first.value, "rg-1") == first


def test_cover_text_that_is_not_base64_is_ignored(resolver: CanonicalValueResolver) -> None:
    url = "https://example.com/covers/ok-computer.png"

    assert coerce_image_bytes(url) is None
    assert resolver.resolve(AlbumField.COVER_IMAGE, url, "rg-1") == INHERIT
