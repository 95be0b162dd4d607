"""Missing-period detection and gap-fill orchestration."""

import threading
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from enum import Enum
from functools import partial

from gapfill.core.records import Record
from gapfill.core.types import FillCacheProtocol, LoggerProtocol, SafeMathProtocol
from gapfill.exceptions import DuplicateChannelError, InconsistentRowLengthError
from gapfill.settings import GapFillConfig
from gapfill.utils.fill_cache import CacheConfig, FillValueCache
from gapfill.utils.safe_math import DecimalSafeMath

from .calculator import GapFillCalculator
from .column_executor import ColumnExecutor
from .locator import ValidValueLocator
from .models import MissingPeriod
from .period_detector import MissingPeriodDetector
from .reconciler import CumulativeReconciler
from .stats import MissingProcessingStats, StatsCollector
from .time_index import build_time_index, duplicate_positions


class RunPhase(str, Enum):
    """Phases of a run, always executed in this order."""
    INDEXING = "indexing"
    DETECTING = "detecting"
    FILLING = "filling"


class _RunContext:
    """Indices and collaborators shared by one FILLING phase."""

    def __init__(
        self,
        records: Sequence[Record],
        time_index: dict[datetime, int],
        change_columns: int,
        calculator: GapFillCalculator,
        executor: ColumnExecutor,
        collector: StatsCollector,
    ) -> None:
        self.records = records
        self.time_index = time_index
        self.change_columns = change_columns
        self.calculator = calculator
        self.executor = executor
        self.collector = collector


class GapFillEngine:
    """Detects missing periods in a record series and fills them in place.

    A run goes through three phases:

    * INDEXING: validate structure and build the time index and value locator
    * DETECTING: group incomplete timestamps into ``MissingPeriod`` objects
    * FILLING: resolve every missing change cell period by period, reconciling
      the paired cumulative cells as it goes

    Structural and configuration problems raise before any record is touched.
    Points that cannot be resolved are counted, never raised.
    """

    def __init__(
        self,
        config: GapFillConfig,
        logger: LoggerProtocol,
        cache: FillCacheProtocol | None = None,
        safe_math: SafeMathProtocol | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Gap-fill settings, validated here
            logger: Logging sink (``LoggerService`` or ``LineLogger``)
            cache: Fill-value cache shared across runs. When omitted, the engine
                keeps its own ``FillValueCache`` sized from the config and
                empties it at the start of every run. Ignored when caching is
                disabled.
            safe_math: Arithmetic collaborator, ``DecimalSafeMath`` by default
            clock: Monotonic clock used for progress reporting
        """
        config.validate()
        self.config = config
        self.logger = logger
        self.safe_math = safe_math if safe_math is not None else DecimalSafeMath()
        self._clock = clock
        self._source_module = self.__class__.__name__

        self.cache: FillCacheProtocol | None
        self._owns_cache = cache is None
        if not config.enable_caching:
            self.cache = None
        elif cache is not None:
            self.cache = cache
        else:
            self.cache = FillValueCache(
                CacheConfig(max_size=config.max_cache_size, ttl=config.cache_ttl_seconds),
            )

        self.detector = MissingPeriodDetector(logger)

    # --- Public API ---------------------------------------------------------

    def run(
        self,
        records: Sequence[Record],
        cancel_event: threading.Event | None = None,
    ) -> MissingProcessingStats:
        """Detect and fill every missing period of ``records`` in place."""
        if not records:
            self.logger.info("No records to process", source_module=self._source_module)
            return MissingProcessingStats()

        change_columns, time_index, locator = self._index(records)

        self._log_phase(RunPhase.DETECTING)
        periods = self.detector.detect(records, time_index, change_columns)
        self.logger.info(
            f"Identified {len(periods)} missing periods",
            source_module=self._source_module,
            context={
                "missing_timestamps": sum(p.missing_hours for p in periods),
                "records": len(records),
            },
        )

        return self._fill(records, periods, time_index, locator, change_columns, cancel_event)

    def identify_missing_periods(self, records: Sequence[Record]) -> list[MissingPeriod]:
        """Run INDEXING and DETECTING only; the records are not modified."""
        if not records:
            return []
        change_columns, time_index, _ = self._index(records)
        self._log_phase(RunPhase.DETECTING)
        return self.detector.detect(records, time_index, change_columns)

    def process_periods(
        self,
        records: Sequence[Record],
        periods: Sequence[MissingPeriod],
        cancel_event: threading.Event | None = None,
    ) -> MissingProcessingStats:
        """Fill caller-supplied periods.

        Periods are processed in chronological order regardless of the order
        they are given in.
        """
        if not records or not periods:
            return MissingProcessingStats()
        change_columns, time_index, locator = self._index(records)
        ordered = sorted(periods, key=MissingPeriod.sort_key)
        return self._fill(records, ordered, time_index, locator, change_columns, cancel_event)

    # --- Phases -------------------------------------------------------------

    def _index(
        self,
        records: Sequence[Record],
    ) -> tuple[int, dict[datetime, int], ValidValueLocator]:
        self._log_phase(RunPhase.INDEXING)
        change_columns = self._validate_structure(records)

        time_index = build_time_index(records)
        duplicates = duplicate_positions(records, time_index)
        if duplicates:
            self.logger.warning(
                f"Ignoring {len(duplicates)} records with a repeated timestamp",
                source_module=self._source_module,
                context={"positions": duplicates[:10]},
            )

        locator = ValidValueLocator.build(records, time_index.values())
        return change_columns, time_index, locator

    def _validate_structure(self, records: Sequence[Record]) -> int:
        """Check row shapes and return the number of change columns per row.

        Raises:
            InconsistentRowLengthError: If two rows hold different numbers of values
            DuplicateChannelError: If a record repeats a channel name
            InvalidChangeColumnsError: If the change/cumulative split does not fit
        """
        expected_length: int | None = None
        first_channel = ""
        for record in records:
            seen: set[str] = set()
            for row in record.rows:
                if row.name in seen:
                    raise DuplicateChannelError(row.name, record.timestamp)
                seen.add(row.name)

                if expected_length is None:
                    expected_length = len(row)
                    first_channel = row.name
                elif len(row) != expected_length:
                    raise InconsistentRowLengthError(
                        row.name, expected_length, len(row), record.timestamp,
                    )

        if expected_length is None:
            return 0

        change_columns = self.config.change_columns_for(expected_length)
        self.logger.debug(
            f"Rows hold {expected_length} values ({change_columns} change columns)",
            source_module=self._source_module,
            context={"first_channel": first_channel},
        )
        return change_columns

    def _fill(
        self,
        records: Sequence[Record],
        periods: Sequence[MissingPeriod],
        time_index: dict[datetime, int],
        locator: ValidValueLocator,
        change_columns: int,
        cancel_event: threading.Event | None,
    ) -> MissingProcessingStats:
        self._log_phase(RunPhase.FILLING)
        if self._owns_cache and self.cache is not None:
            # Values from an earlier dataset must never be replayed into this one
            self.cache.clear()
        reconciler = (
            CumulativeReconciler(
                locator, self.safe_math, change_columns, self.config.precision_digits,
            )
            if self.config.reconcile_cumulative
            else None
        )
        calculator = GapFillCalculator(
            self.config,
            locator,
            self.safe_math,
            reconciler=reconciler,
            cache=self.cache,
            logger=self.logger,
        )
        collector = StatsCollector()
        started = self._clock()

        parallel = self.config.enable_parallel_value_columns and change_columns > 1
        with ColumnExecutor(self.config.max_workers, parallel=parallel) as executor:
            context = _RunContext(
                records, time_index, change_columns, calculator, executor, collector,
            )
            for number, period in enumerate(periods, start=1):
                if cancel_event is not None and cancel_event.is_set():
                    self.logger.warning(
                        f"Cancelled after {number - 1} of {len(periods)} periods",
                        source_module=self._source_module,
                    )
                    collector.mark_cancelled()
                    break

                self._process_period(context, period, number, len(periods))
                collector.mark_period_done()

        stats = collector.snapshot()
        context_data = stats.to_dict()
        context_data["elapsed_seconds"] = round(self._clock() - started, 3)
        if self.cache is not None:
            context_data["cache_size"] = self.cache.stats().get("cache_size")
        self.logger.info(
            f"Gap fill finished: {stats.fills} fills, {stats.cache_hits} cache hits, "
            f"{stats.cache_misses} cache misses",
            source_module=self._source_module,
            context=context_data,
        )
        return stats

    def _process_period(
        self,
        context: _RunContext,
        period: MissingPeriod,
        number: int,
        total: int,
    ) -> None:
        self.logger.info(
            f"Processing period {number}/{total}: {period.missing_hours} timestamps "
            f"for {len(period.channels)} channels",
            source_module=self._source_module,
            context={
                "start_time": period.start_time,
                "end_time": period.end_time,
                "first_missing": period.first_missing,
            },
        )

        columns = range(context.change_columns)
        period_started = last_report = self._clock()
        for done, timestamp in enumerate(period.missing_times, start=1):
            position = context.time_index.get(timestamp)
            if position is None:
                self.logger.warning(
                    f"Timestamp {timestamp} is not in the dataset, skipping it",
                    source_module=self._source_module,
                )
                context.collector.add(
                    MissingProcessingStats(
                        unresolved_points=len(period.channels) * context.change_columns,
                    ),
                )
                continue

            rows = context.records[position].rows_by_name()
            for channel in period.channels:
                row = rows.get(channel)
                if row is None:
                    self.logger.warning(
                        f"Channel '{channel}' is missing from the record at {timestamp}",
                        source_module=self._source_module,
                    )
                    context.collector.add(
                        MissingProcessingStats(unresolved_points=context.change_columns),
                    )
                    continue

                task = partial(context.calculator.resolve_column, context.records, row, position)
                context.collector.add_all(context.executor.run(columns, task))

            now = self._clock()
            if (
                done % self.config.progress_every_timestamps == 0
                or now - last_report >= self.config.progress_interval_seconds
            ):
                self.logger.info(
                    f"Period {number}/{total}: {done}/{period.missing_hours} timestamps done",
                    source_module=self._source_module,
                    context={"elapsed_seconds": round(now - period_started, 3)},
                )
                last_report = now

    def _log_phase(self, phase: RunPhase) -> None:
        self.logger.debug(f"Entering {phase.value} phase", source_module=self._source_module)
