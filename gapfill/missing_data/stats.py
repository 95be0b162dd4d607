"""Run statistics for missing-data processing."""

import threading
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class MissingProcessingStats:
    """Counters for one gap-fill run (or one slice of it)."""
    fills: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    cumulative_fills: int = 0
    unresolved_points: int = 0
    periods_processed: int = 0
    cancelled: bool = False

    def merge(self, other: "MissingProcessingStats") -> None:
        """Add another stats object into this one in place."""
        self.fills += other.fills
        self.cache_hits += other.cache_hits
        self.cache_misses += other.cache_misses
        self.cumulative_fills += other.cumulative_fills
        self.unresolved_points += other.unresolved_points
        self.periods_processed += other.periods_processed
        self.cancelled = self.cancelled or other.cancelled

    def __add__(self, other: "MissingProcessingStats") -> "MissingProcessingStats":
        combined = MissingProcessingStats(**asdict(self))
        combined.merge(other)
        return combined

    @property
    def cache_hit_rate(self) -> float:
        total = self.cache_hits + self.cache_misses
        return self.cache_hits / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["cache_hit_rate"] = round(self.cache_hit_rate, 4)
        return data


class StatsCollector:
    """Aggregates stats produced by sequential and parallel column work.

    Workers never touch shared counters. Each column task returns its own
    ``MissingProcessingStats`` and the coordinator merges them here under a lock
    once the parallel section is done.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._totals = MissingProcessingStats()

    def add(self, stats: MissingProcessingStats) -> None:
        with self._lock:
            self._totals.merge(stats)

    def add_all(self, items: list[MissingProcessingStats]) -> None:
        with self._lock:
            for stats in items:
                self._totals.merge(stats)

    def mark_period_done(self) -> None:
        with self._lock:
            self._totals.periods_processed += 1

    def mark_cancelled(self) -> None:
        with self._lock:
            self._totals.cancelled = True

    def snapshot(self) -> MissingProcessingStats:
        """Copy of the totals so far."""
        with self._lock:
            return MissingProcessingStats(**asdict(self._totals))
