"""Groups missing timestamps into periods per affected channel set."""

from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime

from gapfill.core.records import Record, Row
from gapfill.core.types import LoggerProtocol

from .models import MissingPeriod


class MissingPeriodDetector:
    """Finds contiguous runs of incomplete timestamps for every channel.

    A channel is incomplete at a timestamp when one of its change columns is
    absent, or when a change value is present but its cumulative partner is
    not. Runs that cover exactly the same span are merged into one period so
    the fill phase visits each span once.
    """

    def __init__(self, logger: LoggerProtocol | None = None) -> None:
        self.logger = logger
        self._source_module = self.__class__.__name__

    @staticmethod
    def is_incomplete(row: Row, change_columns: int) -> bool:
        for column in range(change_columns):
            if not row.is_present(column):
                return True
            if not row.is_present(column + change_columns):
                return True
        return False

    def detect(
        self,
        records: Sequence[Record],
        time_index: dict[datetime, int],
        change_columns: int,
    ) -> list[MissingPeriod]:
        """Return the missing periods of the dataset, chronologically ordered."""
        timestamps = list(time_index)
        if not timestamps or change_columns <= 0:
            return []

        channels: list[str] = []
        seen: set[str] = set()
        for position in time_index.values():
            for name in records[position].channel_names:
                if name not in seen:
                    seen.add(name)
                    channels.append(name)

        spans: dict[tuple[int, int], list[str]] = defaultdict(list)
        for channel in channels:
            for span in self._channel_runs(records, time_index, channel, change_columns):
                spans[span].append(channel)

        periods = []
        for (first, last), members in spans.items():
            periods.append(
                MissingPeriod(
                    missing_times=timestamps[first:last + 1],
                    channels=members,
                    start_time=timestamps[first - 1] if first > 0 else None,
                    end_time=timestamps[last + 1] if last + 1 < len(timestamps) else None,
                ),
            )
        periods.sort(key=MissingPeriod.sort_key)

        if self.logger is not None and periods:
            self.logger.debug(
                f"Detected {len(periods)} missing periods across {len(channels)} channels",
                source_module=self._source_module,
            )
        return periods

    def _channel_runs(
        self,
        records: Sequence[Record],
        time_index: dict[datetime, int],
        channel: str,
        change_columns: int,
    ) -> list[tuple[int, int]]:
        """Inclusive (first, last) offsets into the time index of each run."""
        runs: list[tuple[int, int]] = []
        run_start: int | None = None
        for offset, position in enumerate(time_index.values()):
            row = records[position].row(channel)
            # A record without the channel is not something the fill phase can repair
            missing = row is not None and self.is_incomplete(row, change_columns)
            if missing and run_start is None:
                run_start = offset
            elif not missing and run_start is not None:
                runs.append((run_start, offset - 1))
                run_start = None
        if run_start is not None:
            runs.append((run_start, len(time_index) - 1))
        return runs
