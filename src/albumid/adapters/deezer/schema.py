"""Deezer album search response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DeezerBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class DeezerArtist(DeezerBaseModel):
    id: int | None = None
    name: str = ""


class DeezerAlbum(DeezerBaseModel):
    id: int
    title: str = ""
    cover: str | None = None
    cover_big: str | None = None
    cover_xl: str | None = None
    artist: DeezerArtist = Field(default_factory=DeezerArtist)

    @property
    def best_cover_url(self) -> str | None:
        return self.cover_xl or self.cover_big or None


class DeezerError(DeezerBaseModel):
    type: str | None = None
    message: str | None = None
    code: int | None = None


class DeezerAlbumSearch(DeezerBaseModel):
    data: list[DeezerAlbum] = Field(default_factory=list)
    total: int = 0
    error: DeezerError | None = None
