from __future__ import annotations

import enum
import typing as t
from dataclasses import dataclass


class CacheStatus(str, enum.Enum):
    HIT = "HIT"
    MISS = "MISS"
    UNAVAILABLE = "UNAVAILABLE"

    @property
    def header_value(self) -> str:
        """Value for the ``X-Cache`` response header; an unavailable store reads as a miss."""
        return "HIT" if self is CacheStatus.HIT else "MISS"


@dataclass(frozen=True)
class CacheResult:
    status: CacheStatus
    value: t.Any = None

    @property
    def hit(self) -> bool:
        return self.status is CacheStatus.HIT

    @classmethod
    def miss(cls) -> "CacheResult":
        return cls(CacheStatus.MISS)

    @classmethod
    def unavailable(cls) -> "CacheResult":
        return cls(CacheStatus.UNAVAILABLE)
