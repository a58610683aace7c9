"""MusicBrainz response schemas for release-group and artist lookups."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

type MBId = str
type MBDate = str  # YYYY, YYYY-MM or YYYY-MM-DD
type CountryCode = str  # ISO 3166-1 + specials, see https://musicbrainz.org/doc/Release/Country


class MusicBrainzBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "MusicBrainz %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class MusicBrainzArea(MusicBrainzBaseModel):
    id: MBId
    name: str
    iso_3166_1_codes: list[CountryCode] | None = Field(default=None, alias="iso-3166-1-codes")


class MusicBrainzArtist(MusicBrainzBaseModel):
    id: MBId
    name: str
    sort_name: str | None = Field(default=None, alias="sort-name")
    disambiguation: str | None = None
    country: CountryCode | None = None
    type: str | None = None
    area: MusicBrainzArea | None = None
    score: int | None = None

    @property
    def country_code(self) -> CountryCode | None:
        if self.country:
            return self.country
        if self.area is not None and self.area.iso_3166_1_codes:
            return self.area.iso_3166_1_codes[0]
        return None


class MusicBrainzArtistCredit(MusicBrainzBaseModel):
    artist: MusicBrainzArtist
    name: str
    join_phrase: str | None = Field(default=None, alias="joinphrase")


class MusicBrainzReleaseGroup(MusicBrainzBaseModel):
    id: MBId
    title: str
    primary_type: str | None = Field(default=None, alias="primary-type")
    secondary_types: list[str] | None = Field(default=None, alias="secondary-types")
    first_release_date: MBDate | None = Field(default=None, alias="first-release-date")
    artist_credit: list[MusicBrainzArtistCredit] = Field(
        default_factory=list, alias="artist-credit"
    )
    score: int | None = None

    @property
    def artist_name(self) -> str:
        return "".join(f"{credit.name}{credit.join_phrase or ''}" for credit in self.artist_credit)


class MusicBrainzReleaseGroupSearch(MusicBrainzBaseModel):
    count: int = 0
    offset: int = 0
    release_groups: list[MusicBrainzReleaseGroup] = Field(
        default_factory=list, alias="release-groups"
    )


class MusicBrainzArtistSearch(MusicBrainzBaseModel):
    count: int = 0
    offset: int = 0
    artists: list[MusicBrainzArtist] = Field(default_factory=list)
