"""Computes and writes fill values for missing change cells."""

from collections.abc import Sequence

from gapfill.core.records import Record, Row
from gapfill.core.types import FillCacheProtocol, LoggerProtocol, SafeMathProtocol
from gapfill.settings import FillPolicy, GapFillConfig
from gapfill.utils.fill_cache import CacheKey

from .locator import ValidValueLocator
from .models import MissingDataPoint
from .reconciler import CumulativeReconciler
from .stats import MissingProcessingStats


class GapFillCalculator:
    """Resolves one (channel, timestamp, column) change cell at a time.

    Resolution order is cache, then the nearest known neighbors from the
    locator. Every written change value is followed by a cumulative
    reconciliation when enabled. The calculator is safe to call concurrently
    for distinct columns of the same row.
    """

    def __init__(
        self,
        config: GapFillConfig,
        locator: ValidValueLocator,
        safe_math: SafeMathProtocol,
        reconciler: CumulativeReconciler | None = None,
        cache: FillCacheProtocol | None = None,
        logger: LoggerProtocol | None = None,
    ) -> None:
        """Initialize the calculator.

        Args:
            config: Gap-fill settings (policy, weighting, precision)
            locator: Index of known values for the dataset being filled
            safe_math: Arithmetic collaborator used for every derived value
            reconciler: Cumulative reconciler, None to leave cumulative cells alone
            cache: Optional memoization cache of fill values
            logger: Optional logger for per-point debug output
        """
        self.config = config
        self.locator = locator
        self.safe_math = safe_math
        self.reconciler = reconciler
        self.cache = cache
        self.logger = logger
        self._source_module = "GapFillCalculator"

    def build_point(
        self,
        records: Sequence[Record],
        channel: str,
        column: int,
        position: int,
    ) -> MissingDataPoint | None:
        """Locate both known neighbors of a cell, None if either side has none."""
        previous_position = self.locator.nearest_before(channel, column, position)
        next_position = self.locator.nearest_after(channel, column, position)
        if previous_position is None or next_position is None:
            return None

        previous_row = records[previous_position].row(channel)
        next_row = records[next_position].row(channel)
        previous_value = previous_row.get(column) if previous_row is not None else None
        next_value = next_row.get(column) if next_row is not None else None
        if previous_value is None or next_value is None:
            return None

        return MissingDataPoint(
            channel=channel,
            column=column,
            timestamp=records[position].timestamp,
            previous_value=previous_value,
            next_value=next_value,
            previous_time=records[previous_position].timestamp,
            next_time=records[next_position].timestamp,
            base_value=self.safe_math.average([previous_value, next_value]),
        )

    def compute_fill(self, point: MissingDataPoint) -> float:
        """Apply the fill policy to a point, bounded by its neighbors."""
        value = point.base_value
        if self.config.fill_policy is FillPolicy.POSITION_WEIGHTED:
            weighted = self.safe_math.lerp(
                point.previous_value, point.next_value, point.position_fraction,
            )
            value = self.safe_math.lerp(value, weighted, self.config.time_factor_weight)

        value = self.safe_math.clamp(value, point.previous_value, point.next_value)
        return self.safe_math.round(value, self.config.precision_digits)

    def resolve_column(
        self,
        records: Sequence[Record],
        row: Row,
        position: int,
        column: int,
    ) -> MissingProcessingStats:
        """Fill one change cell of ``row`` and reconcile its cumulative partner.

        Returns the stats produced by this cell alone so parallel callers can
        merge them afterwards.
        """
        stats = MissingProcessingStats()

        current = row.get(column)
        if current is not None:
            # Change known, only the cumulative partner may be missing
            self._reconcile(records, row, position, column, current, stats)
            return stats

        timestamp = records[position].timestamp
        key = CacheKey(row.name, timestamp, column)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                row.set(column, cached)
                self.locator.record_fill(row.name, column, position)
                stats.cache_hits += 1
                self._reconcile(records, row, position, column, cached, stats)
                return stats

        point = self.build_point(records, row.name, column, position)
        if point is None:
            stats.cache_misses += 1
            stats.unresolved_points += 1
            if self.logger is not None:
                self.logger.debug(
                    f"No known neighbor on both sides of {key.as_string()}, leaving it absent",
                    source_module=self._source_module,
                )
            return stats

        value = self.compute_fill(point)
        row.set(column, value)
        self.locator.record_fill(row.name, column, position)
        if self.cache is not None:
            self.cache.set(key, value)
        stats.fills += 1
        self._reconcile(records, row, position, column, value, stats)
        return stats

    def _reconcile(
        self,
        records: Sequence[Record],
        row: Row,
        position: int,
        column: int,
        change_value: float,
        stats: MissingProcessingStats,
    ) -> None:
        if self.reconciler is None:
            return
        if self.reconciler.reconcile(records, row, position, column, change_value):
            stats.cumulative_fills += 1
