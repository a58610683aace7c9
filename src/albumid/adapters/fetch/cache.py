"""Process-lifetime response cache with negative entries."""

from __future__ import annotations

from dataclasses import dataclass

from albumid.domain.identity.normalize import normalize_query_key


@dataclass(slots=True, frozen=True)
class CacheEntry:
    value: object | None

    @property
    def negative(self) -> bool:
        return self.value is None


class ResponseCache:
    """Responses keyed by ``(namespace, normalised query)``.

    A ``None`` value is a definitive "not found" and is served like any other hit.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def key(*parts: str | None) -> str:
        return normalize_query_key(*parts)

    def get(self, namespace: str, key: str) -> CacheEntry | None:
        entry = self._entries.get((namespace, key))
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    def store(self, namespace: str, key: str, value: object | None) -> None:
        self._entries[(namespace, key)] = CacheEntry(value=value)

    def clear(self, namespace: str | None = None) -> None:
        if namespace is None:
            self._entries.clear()
            return
        for cache_key in [cache_key for cache_key in self._entries if cache_key[0] == namespace]:
            del self._entries[cache_key]
