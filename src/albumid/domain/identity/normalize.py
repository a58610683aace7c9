"""Text normalisation shared by storage, comparison and cache keys."""

from __future__ import annotations

import re
import unicodedata

_DASHES = re.compile("[–—]")
_SINGLE_QUOTES = re.compile("[‘’`]")
_DOUBLE_QUOTES = re.compile("[“”]")
_WHITESPACE = re.compile(r"\s+")

QUERY_KEY_SEPARATOR = "::"


def sanitize_for_storage(value: str | None) -> str:
    """Unify visually equivalent punctuation so one encoding reaches storage.

    >>> sanitize_for_storage("  Sgt. Pepper’s — Remaster… ")
    "Sgt. Pepper's - Remaster..."
    """

    if value is None:
        return ""
    text = value.strip()
    if not text:
        return ""
    text = text.replace("…", "...")
    text = _DASHES.sub("-", text)
    text = _SINGLE_QUOTES.sub("'", text)
    text = _DOUBLE_QUOTES.sub('"', text)
    return _WHITESPACE.sub(" ", text)


def normalize_for_comparison(value: str | None) -> str:
    return sanitize_for_storage(value).casefold()


def normalize_query_key(*parts: str | None) -> str:
    """Build the cache key for an external lookup (case and spacing insensitive)."""

    cleaned = (_WHITESPACE.sub(" ", (part or "").strip()).casefold() for part in parts)
    return QUERY_KEY_SEPARATOR.join(cleaned)


def normalize_for_external_api(value: str | None) -> str:
    """Sanitise and strip diacritics for search queries sent to external services."""

    decomposed = unicodedata.normalize("NFD", sanitize_for_storage(value))
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()
