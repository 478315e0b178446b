from __future__ import annotations

import threading
from collections import Counter
from typing import Optional


class VisitCounter:
    """Per-URL request counter shared by all requests."""

    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def increment(self, url: str) -> None:
        with self._lock:
            self._counts[url] += 1

    def get_count(self, url: str) -> int:
        with self._lock:
            return self._counts.get(url, 0)

    def all_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def most_visited(self) -> Optional[tuple[str, int]]:
        with self._lock:
            top = self._counts.most_common(1)
        return top[0] if top else None


__all__ = ["VisitCounter"]
