"""Order-independent "not a duplicate" pairs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from albumid.domain.errors import InvalidInputError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(slots=True, frozen=True, order=True)
class ExclusionPair:
    """Two record ids stored in sorted order, so ``(a, b)`` and ``(b, a)`` are one key."""

    first: str
    second: str

    def __post_init__(self) -> None:
        if self.first >= self.second:
            raise InvalidInputError("ExclusionPair ids must be distinct and sorted; use of()")

    @classmethod
    def of(cls, album_id_a: str, album_id_b: str) -> ExclusionPair:
        if not album_id_a or not album_id_b:
            raise InvalidInputError("Both album ids are required")
        if album_id_a == album_id_b:
            raise InvalidInputError("Cannot pair an album with itself")
        low, high = sorted((album_id_a, album_id_b))
        return cls(first=low, second=high)

    def involves(self, album_id: str) -> bool:
        return album_id in {self.first, self.second}


class ExclusionSet:
    """In-memory snapshot of the exclusion store used during a scan."""

    def __init__(self, pairs: Iterable[ExclusionPair] = ()) -> None:
        self._pairs: set[ExclusionPair] = set(pairs)

    def __contains__(self, pair: object) -> bool:
        return pair in self._pairs

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[ExclusionPair]:
        return iter(self._pairs)

    def add(self, pair: ExclusionPair) -> None:
        self._pairs.add(pair)

    def excludes(self, album_id_a: str, album_id_b: str) -> bool:
        if album_id_a == album_id_b:
            return False
        return ExclusionPair.of(album_id_a, album_id_b) in self._pairs
