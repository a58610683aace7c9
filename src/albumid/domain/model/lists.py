"""User lists and the entries that point into the catalog."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class MusicList:
    id: str
    name: str
    year: int | None = None
    owner: str | None = None


@dataclass(slots=True, frozen=True)
class ListEntry:
    """A stored list entry.

    Override columns hold ``None`` when the value is inherited from the referenced
    catalog record. Genres are never stored on entries.
    """

    list_id: str
    album_id: str | None
    position: int = 0
    artist: str | None = None
    title: str | None = None
    release_date: str | None = None
    country: str | None = None
    cover_image: bytes | None = None
    cover_image_format: str | None = None
    tracks: str | None = None
    id: int | None = None

    @property
    def has_overrides(self) -> bool:
        return any(
            value is not None
            for value in (
                self.artist,
                self.title,
                self.release_date,
                self.country,
                self.cover_image,
                self.tracks,
            )
        )


@dataclass(slots=True, frozen=True)
class ListUsage:
    """Where a catalog record is referenced from."""

    list_id: str
    list_name: str
    year: int | None
    owner: str | None
