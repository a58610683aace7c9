"""Edit-distance similarity and pair confidence scoring.

Scoring is pure: no I/O and no state. Similarity is ``1 - distance / longest`` over
the case-folded, sanitised strings. Pair confidence is a weighted average that favours
the title (``0.4 * artist + 0.6 * title``), so raising either sub-score never lowers
the confidence and identical records score exactly ``1.0``.

Thresholds follow the operator convention: a *lower* threshold means a *stricter*
match, and a pair is a candidate when ``confidence >= 1 - threshold``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from rapidfuzz.distance import Levenshtein

from albumid.domain.errors import InvalidInputError

from .normalize import normalize_for_comparison

if TYPE_CHECKING:
    from collections.abc import Sequence

ARTIST_WEIGHT = 0.4
TITLE_WEIGHT = 0.6
HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.5

_TOLERANCE = 1e-9


class ConfidenceBand(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AlbumText(Protocol):
    @property
    def artist(self) -> str: ...

    @property
    def title(self) -> str: ...


@dataclass(slots=True, frozen=True)
class PairScore:
    artist_score: float
    title_score: float
    confidence: float

    @property
    def band(self) -> ConfidenceBand:
        return confidence_band(self.confidence)

    @property
    def percent(self) -> int:
        return round(self.confidence * 100)


def similarity(a: str | None, b: str | None) -> float:
    left = normalize_for_comparison(a)
    right = normalize_for_comparison(b)
    longest = max(len(left), len(right))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(left, right) / longest


def combine_scores(artist_score: float, title_score: float) -> float:
    return ARTIST_WEIGHT * artist_score + TITLE_WEIGHT * title_score


def confidence_band(confidence: float) -> ConfidenceBand:
    if confidence >= HIGH_CONFIDENCE:
        return ConfidenceBand.HIGH
    if confidence >= MEDIUM_CONFIDENCE:
        return ConfidenceBand.MEDIUM
    return ConfidenceBand.LOW


def validate_threshold(threshold: float) -> float:
    """Return ``threshold`` as a float or raise ``InvalidInputError``."""

    if isinstance(threshold, bool) or not isinstance(threshold, int | float):
        raise InvalidInputError(f"Threshold must be a number, got {threshold!r}")
    value = float(threshold)
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise InvalidInputError(f"Threshold must be within [0, 1], got {threshold!r}")
    return value


def meets_threshold(confidence: float, threshold: float) -> bool:
    return confidence + _TOLERANCE >= 1.0 - threshold


def score_texts(artist_a: str, title_a: str, artist_b: str, title_b: str) -> PairScore:
    artist_score = similarity(artist_a, artist_b)
    title_score = similarity(title_a, title_b)
    return PairScore(
        artist_score=artist_score,
        title_score=title_score,
        confidence=combine_scores(artist_score, title_score),
    )


def score_pair(record_a: AlbumText, record_b: AlbumText, threshold: float) -> PairScore | None:
    """Score two records, returning ``None`` unless they are a candidate pair."""

    limit = validate_threshold(threshold)
    score = score_texts(record_a.artist, record_a.title, record_b.artist, record_b.title)
    if not meets_threshold(score.confidence, limit):
        return None
    return score


def rank_matches[T: AlbumText](
    target: AlbumText,
    candidates: Sequence[T],
    threshold: float,
) -> list[tuple[T, PairScore]]:
    """Score ``target`` against every candidate, best first."""

    limit = validate_threshold(threshold)
    matches: list[tuple[T, PairScore]] = []
    for candidate in candidates:
        score = score_texts(target.artist, target.title, candidate.artist, candidate.title)
        if meets_threshold(score.confidence, limit):
            matches.append((candidate, score))
    matches.sort(key=lambda item: -item[1].confidence)
    return matches
