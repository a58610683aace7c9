"""Catalog records and the small value objects they carry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

MANUAL_ID_PREFIX: Final[str] = "manual-"
INTERNAL_ID_PREFIX: Final[str] = "internal-"


@dataclass(slots=True, frozen=True)
class Track:
    name: str
    length: int | None = None  # milliseconds

    def as_dict(self) -> dict[str, object]:
        return {"name": self.name, "length": self.length}


@dataclass(slots=True, frozen=True)
class CoverImage:
    data: bytes
    format: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(slots=True, frozen=True)
class CanonicalRecord:
    """Single source of truth for an album that list entries may reference."""

    id: str
    artist: str
    title: str
    release_date: str | None = None
    country: str | None = None
    genre_1: str | None = None
    genre_2: str | None = None
    tracks: tuple[Track, ...] = ()
    cover_image: CoverImage | None = None
    summary: str | None = None

    @property
    def is_manual(self) -> bool:
        return is_manual_id(self.id)

    @property
    def is_internal(self) -> bool:
        return self.id.startswith(INTERNAL_ID_PREFIX)

    @property
    def has_identity_text(self) -> bool:
        return bool(self.artist and self.artist.strip() and self.title and self.title.strip())


def is_manual_id(album_id: str) -> bool:
    return album_id.startswith(MANUAL_ID_PREFIX)
