"""Value objects produced while detecting and filling gaps."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class MissingPeriod:
    """A contiguous span of missing timestamps shared by a set of channels."""
    missing_times: list[datetime]
    channels: list[str]
    start_time: datetime | None = None  # last known timestamp before the gap
    end_time: datetime | None = None  # first known timestamp after the gap

    def __post_init__(self) -> None:
        self.missing_times = sorted(self.missing_times)
        self.channels = sorted(self.channels)

    @property
    def missing_hours(self) -> int:
        """Number of missing timestamps in the span."""
        return len(self.missing_times)

    @property
    def first_missing(self) -> datetime:
        return self.missing_times[0]

    @property
    def last_missing(self) -> datetime:
        return self.missing_times[-1]

    @property
    def is_bounded(self) -> bool:
        """True when known timestamps exist on both sides of the span."""
        return self.start_time is not None and self.end_time is not None

    def sort_key(self) -> tuple[bool, datetime, datetime, tuple[str, ...]]:
        # Leading gaps (no start_time) come before every bounded period
        anchor = self.start_time if self.start_time is not None else self.first_missing
        return (self.start_time is not None, anchor, self.last_missing, tuple(self.channels))


@dataclass(frozen=True)
class MissingDataPoint:
    """One unresolved change cell and the neighbors that bound it."""
    channel: str
    column: int
    timestamp: datetime
    previous_value: float
    next_value: float
    previous_time: datetime
    next_time: datetime
    base_value: float  # arithmetic mean of previous_value and next_value

    @property
    def position_fraction(self) -> float:
        """Relative time position of the point between its two neighbors, 0..1."""
        span = (self.next_time - self.previous_time).total_seconds()
        if span <= 0:
            return 0.5
        offset = (self.timestamp - self.previous_time).total_seconds()
        return min(1.0, max(0.0, offset / span))
