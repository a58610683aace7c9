"""Deezer adapter package."""

from __future__ import annotations

from .client import DeezerAPIError, DeezerClient, build_album_query
from .fetcher import ArtworkMatch, ArtworkService, pick_best_match
from .schema import DeezerAlbum, DeezerAlbumSearch, DeezerArtist

__all__ = [
    "ArtworkMatch",
    "ArtworkService",
    "DeezerAPIError",
    "DeezerAlbum",
    "DeezerAlbumSearch",
    "DeezerArtist",
    "DeezerClient",
    "build_album_query",
    "pick_best_match",
]
