from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time snapshot of one entity cache."""

    name: str
    entries: int
    usage_bytes: int
    ceiling_bytes: int
    hits: int = 0
    misses: int = 0
    rejected: int = 0
    evictions: int = 0
    sweeps: int = 0

    @property
    def hit_rate(self) -> float:
        """Hit rate in percent."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total * 100

    def as_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["hit_rate"] = round(self.hit_rate, 2)
        return payload


__all__ = ["CacheStats"]
