from __future__ import annotations

import threading
from datetime import date

CacheKey = tuple[date, int, str, str | None]


class AvailabilityCache:
    """
    Best-effort memo of slot availability, keyed by (date, time, service_id, stylist_id).

    Populated on read, dropped per date on every booking write for that date.
    Never authoritative: the locked re-check reads the store directly.

    Each date carries a generation number bumped on invalidation; a value
    computed before an invalidation is discarded instead of cached.
    """

    def __init__(self) -> None:
        self._entries: dict[date, dict[CacheKey, bool]] = {}
        self._generations: dict[date, int] = {}
        self._lock = threading.Lock()

    def generation(self, day: date) -> int:
        with self._lock:
            return self._generations.get(day, 0)

    def get(self, key: CacheKey) -> bool | None:
        with self._lock:
            return self._entries.get(key[0], {}).get(key)

    def put(self, key: CacheKey, value: bool, generation: int) -> None:
        with self._lock:
            if self._generations.get(key[0], 0) != generation:
                return
            self._entries.setdefault(key[0], {})[key] = value

    def invalidate_date(self, day: date) -> None:
        with self._lock:
            self._entries.pop(day, None)
            self._generations[day] = self._generations.get(day, 0) + 1

    def __len__(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._entries.values())
