from __future__ import annotations

import hashlib
import time
from typing import Any, Dict, Hashable, Optional, Tuple

from ..config import SETTINGS


CacheEntry = Tuple[float, Any]


def digest(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


class ResultCache:
    def __init__(self, ttl: Optional[float] = None, max_entries: Optional[int] = None) -> None:
        self._ttl = SETTINGS.cache_ttl if ttl is None else ttl
        self._max_entries = SETTINGS.cache_size if max_entries is None else max_entries
        self._entries: Dict[Hashable, CacheEntry] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if not entry:
            return None
        timestamp, value = entry
        if time.time() - timestamp > self._ttl:
            self._entries.pop(key, None)
            return None
        return value

    def put(self, key: Hashable, value: Any) -> None:
        if key not in self._entries and len(self._entries) >= self._max_entries:
            oldest = min(self._entries.items(), key=lambda item: item[1][0])[0]
            self._entries.pop(oldest, None)
        self._entries[key] = (time.time(), value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


CACHE = ResultCache()
