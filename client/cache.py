"""
Time-boxed in-memory cache for API responses.
"""

import copy
import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

ALL_POSTS_KEY = "all_posts"


def post_key(post_id) -> str:
    return f"post_{post_id}"


@dataclass
class CacheEntry:
    data: Any
    stored_at: float


class ResponseCache:
    """
    Maps cache keys to (data, stored_at).

    An entry is fresh while now - stored_at < ttl. Expired entries are
    dropped on read. Values are copied in and out, so callers never share
    the cached object.
    """

    def __init__(self, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str, allow_expired: bool = False) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if allow_expired or not self._is_expired(entry):
            return copy.deepcopy(entry.data)

        del self._entries[key]
        return None

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = CacheEntry(data=copy.deepcopy(data), stored_at=self._clock())

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or everything when key is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def stats(self) -> dict:
        now = self._clock()
        return {
            "totalEntries": len(self._entries),
            "entries": [
                {
                    "key": key,
                    "age": round(now - entry.stored_at),
                    "isExpired": self._is_expired(entry),
                    "size": len(json.dumps(entry.data, default=str)),
                }
                for key, entry in self._entries.items()
            ],
        }

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def _is_expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.stored_at >= self.ttl
