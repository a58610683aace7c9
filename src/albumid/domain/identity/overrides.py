"""Decide, per list-entry field, whether to store an override or inherit."""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from albumid.domain.errors import CatalogLookupError
from albumid.domain.model import (
    INHERIT,
    OVERRIDE_FIELDS,
    AlbumField,
    CoverImage,
    FieldDecision,
    ListEntry,
    Override,
    Track,
)

from .normalize import sanitize_for_storage

if TYPE_CHECKING:
    from collections.abc import Iterable

    from albumid.domain.model import CanonicalRecord

    from .lookup_cache import CatalogLookupCache

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ListEntryDraft:
    """Values submitted for a list entry before deduplication against the catalog.

    Genre values are accepted so callers can pass whole rows through, but they are
    never stored.
    """

    list_id: str
    album_id: str | None = None
    position: int = 0
    artist: str | None = None
    title: str | None = None
    release_date: str | None = None
    country: str | None = None
    genre_1: str | None = None
    genre_2: str | None = None
    cover_image: object = None
    cover_image_format: str | None = None
    tracks: object = None

    def value_for(self, field: AlbumField) -> object:
        return getattr(self, field.value)


class CanonicalValueResolver:
    """Resolve list-entry values against canonical records.

    Every comparison reads through the batch-scoped :class:`CatalogLookupCache`.
    A failing lookup degrades to storing the sanitised value as-is.
    """

    def __init__(self, cache: CatalogLookupCache) -> None:
        self._cache = cache

    @property
    def cache(self) -> CatalogLookupCache:
        return self._cache

    def resolve(
        self,
        field: AlbumField,
        value: object,
        canonical_id: str | None,
    ) -> FieldDecision:
        if field.is_genre:
            return INHERIT

        if field is AlbumField.COVER_IMAGE:
            image = coerce_image_bytes(value)
            if image is None:
                return INHERIT
            record = self._lookup(canonical_id)
            if record is not None and canonical_image_bytes(record) == image:
                return INHERIT
            return Override(image)

        if field is AlbumField.TRACKS:
            serialized = serialize_tracks(value)
            if serialized is None:
                return INHERIT
            record = self._lookup(canonical_id)
            if record is not None and serialize_tracks(record.tracks) == serialized:
                return INHERIT
            return Override(serialized)

        text = sanitize_for_storage(value if isinstance(value, str) else _text_or_none(value))
        if not text:
            return INHERIT
        record = self._lookup(canonical_id)
        if record is not None and sanitize_for_storage(getattr(record, field.value)) == text:
            return INHERIT
        return Override(text)

    def resolve_entry(self, draft: ListEntryDraft) -> ListEntry:
        decisions = {
            field: self.resolve(field, draft.value_for(field), draft.album_id)
            for field in OVERRIDE_FIELDS
        }
        cover = decisions[AlbumField.COVER_IMAGE].storable
        return ListEntry(
            list_id=draft.list_id,
            album_id=draft.album_id or None,
            position=draft.position,
            artist=_as_text(decisions[AlbumField.ARTIST].storable),
            title=_as_text(decisions[AlbumField.TITLE].storable),
            release_date=_as_text(decisions[AlbumField.RELEASE_DATE].storable),
            country=_as_text(decisions[AlbumField.COUNTRY].storable),
            cover_image=cover if isinstance(cover, bytes) else None,
            cover_image_format=draft.cover_image_format if cover is not None else None,
            tracks=_as_text(decisions[AlbumField.TRACKS].storable),
        )

    def resolve_entries(self, drafts: Iterable[ListEntryDraft]) -> list[ListEntry]:
        """Resolve a batch, loading every referenced record with one bulk lookup."""

        pending = list(drafts)
        try:
            self._cache.prefetch(draft.album_id for draft in pending)
        except CatalogLookupError as exc:
            log.warning("Catalog prefetch failed, resolving entries individually: %s", exc)
        return [self.resolve_entry(draft) for draft in pending]

    def _lookup(self, canonical_id: str | None) -> CanonicalRecord | None:
        if not canonical_id:
            return None
        try:
            return self._cache.get(canonical_id)
        except CatalogLookupError as exc:
            log.warning("Catalog lookup for %s failed, storing value as-is: %s", canonical_id, exc)
            return None


def coerce_image_bytes(value: object) -> bytes | None:
    """Normalise raw bytes, base64 text or ``data:`` URLs to raw bytes."""

    if value is None:
        return None
    if isinstance(value, CoverImage):
        data = value.data
    elif isinstance(value, bytes | bytearray | memoryview):
        data = bytes(value)
    elif isinstance(value, str):
        text = value.strip()
        if text.startswith("data:") and "," in text:
            text = text.split(",", 1)[1]
        if not text:
            return None
        try:
            data = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError):
            log.warning("Ignoring cover image that is neither base64 nor a data URL")
            return None
    else:
        return None
    return data or None


def canonical_image_bytes(record: CanonicalRecord) -> bytes | None:
    if record.cover_image is None:
        return None
    return record.cover_image.data or None


def serialize_tracks(value: object) -> str | None:
    """Serialise a track list to canonical JSON, or ``None`` when empty."""

    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return value.strip()
    if not isinstance(value, Sequence) or isinstance(value, str | bytes):
        return None
    tracks = [_track_dict(item) for item in value]
    if not tracks:
        return None
    return json.dumps(tracks, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _track_dict(item: object) -> dict[str, object]:
    if isinstance(item, Track):
        return item.as_dict()
    if isinstance(item, Mapping):
        return {"name": item.get("name"), "length": item.get("length")}
    return {"name": str(item), "length": None}


def _text_or_none(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def _as_text(value: object) -> str | None:
    return value if isinstance(value, str) else None
