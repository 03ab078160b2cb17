from __future__ import annotations

import time
import typing as t
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass
class Counter:
    name: str
    help: str
    values: Dict[Tuple, float] = field(default_factory=dict)

    def inc(self, value: float = 1.0, **labels: Any) -> None:
        key = tuple(sorted(labels.items()))
        self.values[key] = self.values.get(key, 0.0) + value

    def get(self, **labels: Any) -> float:
        return self.values.get(tuple(sorted(labels.items())), 0.0)

    def reset(self) -> None:
        self.values.clear()


@dataclass
class Histogram:
    name: str
    help: str
    buckets: List[float]
    counts: Dict[Tuple, List[int]] = field(default_factory=dict)

    def observe(self, val: float, **labels: Any) -> None:
        key = tuple(sorted(labels.items()))
        if key not in self.counts:
            # last slot counts observations above the largest bucket
            self.counts[key] = [0 for _ in range(len(self.buckets) + 1)]
        for i, b in enumerate(self.buckets):
            if val <= b:
                self.counts[key][i] += 1
                break
        else:
            self.counts[key][-1] += 1

    @contextmanager
    def time(self, **labels: Any) -> t.Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(time.perf_counter() - start, **labels)

    def reset(self) -> None:
        self.counts.clear()


# Predefined metrics
cache_requests_total = Counter("cinetrack_cache_requests_total", "Cache lookups by result (hit/miss/unavailable)")
cache_evictions_total = Counter("cinetrack_cache_evictions_total", "Keys evicted from bounded namespaces")
store_latency_seconds = Histogram(
    "cinetrack_store_latency_seconds",
    "Key-value store command latency",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)
schedule_operations_total = Counter("cinetrack_schedule_operations_total", "Scheduler operations by outcome")


def reset_all() -> None:
    for metric in (cache_requests_total, cache_evictions_total, store_latency_seconds, schedule_operations_total):
        metric.reset()
