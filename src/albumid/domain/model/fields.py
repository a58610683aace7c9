"""Field identifiers and the explicit inherit/override decision type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class AlbumField(StrEnum):
    ARTIST = "artist"
    TITLE = "title"
    RELEASE_DATE = "release_date"
    COUNTRY = "country"
    GENRE_1 = "genre_1"
    GENRE_2 = "genre_2"
    COVER_IMAGE = "cover_image"
    TRACKS = "tracks"

    @property
    def is_genre(self) -> bool:
        return self in GENRE_FIELDS

    @property
    def is_text(self) -> bool:
        return self in TEXT_FIELDS


GENRE_FIELDS: frozenset[AlbumField] = frozenset({AlbumField.GENRE_1, AlbumField.GENRE_2})
TEXT_FIELDS: frozenset[AlbumField] = frozenset(
    {AlbumField.ARTIST, AlbumField.TITLE, AlbumField.RELEASE_DATE, AlbumField.COUNTRY}
)
OVERRIDE_FIELDS: tuple[AlbumField, ...] = (
    AlbumField.ARTIST,
    AlbumField.TITLE,
    AlbumField.RELEASE_DATE,
    AlbumField.COUNTRY,
    AlbumField.COVER_IMAGE,
    AlbumField.TRACKS,
)


@dataclass(slots=True, frozen=True)
class Inherit:
    """Nothing is stored; the value comes from the canonical record."""

    @property
    def storable(self) -> None:
        return None


@dataclass(slots=True, frozen=True)
class Override[T]:
    """The entry intentionally differs from its canonical record."""

    value: T

    @property
    def storable(self) -> T:
        return self.value


INHERIT = Inherit()

type FieldDecision = Inherit | Override[str] | Override[bytes]
