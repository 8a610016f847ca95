"""In-memory query cache keyed like the frontend's query keys."""

from collections.abc import Hashable
from typing import Any

QueryKey = tuple[Hashable, ...]


class QueryCache:
    """Keys are tuples; invalidating a key drops it and every key it prefixes."""

    def __init__(self) -> None:
        self._entries: dict[QueryKey, Any] = {}

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: QueryKey, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def set(self, key: QueryKey, value: Any) -> None:
        self._entries[key] = value

    def invalidate(self, prefix: QueryKey) -> int:
        """Drop every entry whose key starts with ``prefix``. Returns the count."""
        stale = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
