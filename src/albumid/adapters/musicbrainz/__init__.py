"""MusicBrainz adapter package."""

from __future__ import annotations

from .client import MusicBrainzAPIError, MusicBrainzClient, build_release_group_query
from .fetcher import MusicBrainzMetadataService, ReleaseGroupSummary
from .schema import (
    MusicBrainzArtist,
    MusicBrainzArtistSearch,
    MusicBrainzReleaseGroup,
    MusicBrainzReleaseGroupSearch,
)

__all__ = [
    "MusicBrainzAPIError",
    "MusicBrainzArtist",
    "MusicBrainzArtistSearch",
    "MusicBrainzClient",
    "MusicBrainzMetadataService",
    "MusicBrainzReleaseGroup",
    "MusicBrainzReleaseGroupSearch",
    "ReleaseGroupSummary",
    "build_release_group_query",
]
