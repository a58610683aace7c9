"""Domain model for album identity resolution."""

from __future__ import annotations

from .catalog import (
    INTERNAL_ID_PREFIX,
    MANUAL_ID_PREFIX,
    CanonicalRecord,
    CoverImage,
    Track,
    is_manual_id,
)
from .fields import (
    GENRE_FIELDS,
    INHERIT,
    OVERRIDE_FIELDS,
    TEXT_FIELDS,
    AlbumField,
    FieldDecision,
    Inherit,
    Override,
)
from .lists import ListEntry, ListUsage, MusicList

__all__ = [
    "GENRE_FIELDS",
    "INHERIT",
    "INTERNAL_ID_PREFIX",
    "MANUAL_ID_PREFIX",
    "OVERRIDE_FIELDS",
    "TEXT_FIELDS",
    "AlbumField",
    "CanonicalRecord",
    "CoverImage",
    "FieldDecision",
    "Inherit",
    "ListEntry",
    "ListUsage",
    "MusicList",
    "Override",
    "Track",
    "is_manual_id",
]
