"""Completeness and data-quality summaries for record datasets."""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

import numpy as np
import pandas as pd

from gapfill.core.records import Record

DEFAULT_EXPECTED_HOURS = (0, 8, 16)

QUALITY_COLUMNS = [
    "timestamp",
    "source_name",
    "total_rows",
    "valid_rows",
    "rows_with_missing_data",
    "all_missing_rows",
    "average_completeness_pct",
]


@dataclass
class DateCompleteness:
    """Observed and missing hours for one calendar date."""
    date: date
    existing_hours: list[int] = field(default_factory=list)
    missing_hours: list[int] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing_hours


@dataclass
class CompletenessReport:
    """Per-date hour coverage of a dataset."""
    expected_hours: tuple[int, ...]
    dates: list[DateCompleteness] = field(default_factory=list)

    @property
    def is_all_complete(self) -> bool:
        return all(entry.is_complete for entry in self.dates)

    @property
    def incomplete_dates(self) -> list[date]:
        return [entry.date for entry in self.dates if not entry.is_complete]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "date": entry.date,
                    "existing_hours": entry.existing_hours,
                    "missing_hours": entry.missing_hours,
                    "is_complete": entry.is_complete,
                }
                for entry in self.dates
            ],
            columns=["date", "existing_hours", "missing_hours", "is_complete"],
        )


def check_completeness(
    records: Iterable[Record],
    expected_hours: Sequence[int] = DEFAULT_EXPECTED_HOURS,
) -> CompletenessReport:
    """Report which expected observation hours each date is missing."""
    expected = tuple(sorted(set(expected_hours)))
    hours_by_date: dict[date, set[int]] = defaultdict(set)
    for record in records:
        hours_by_date[record.date].add(record.hour)

    report = CompletenessReport(expected_hours=expected)
    for day in sorted(hours_by_date):
        existing = sorted(hours_by_date[day])
        report.dates.append(
            DateCompleteness(
                date=day,
                existing_hours=existing,
                missing_hours=[hour for hour in expected if hour not in hours_by_date[day]],
            ),
        )
    return report


def summarize_quality(records: Iterable[Record]) -> pd.DataFrame:
    """One row per record with row-level validity counts.

    ``valid_rows`` counts channels with every value present,
    ``rows_with_missing_data`` channels with at least one absent value and
    ``all_missing_rows`` channels with nothing present at all.
    """
    rows = []
    for record in records:
        completeness = [row.completeness_pct for row in record.rows]
        rows.append(
            {
                "timestamp": record.timestamp,
                "source_name": record.source_name,
                "total_rows": len(record.rows),
                "valid_rows": sum(1 for row in record.rows if row.is_all_valid),
                "rows_with_missing_data": sum(1 for row in record.rows if row.has_missing_data),
                "all_missing_rows": sum(1 for row in record.rows if row.is_all_missing),
                "average_completeness_pct": float(np.mean(completeness)) if completeness else 0.0,
            },
        )
    return pd.DataFrame(rows, columns=QUALITY_COLUMNS)


def overall_completeness(records: Iterable[Record]) -> float:
    """Percentage of channel rows across the dataset with every value present."""
    summary = summarize_quality(records)
    total = int(summary["total_rows"].sum())
    if total == 0:
        return 0.0
    return float(summary["valid_rows"].sum()) / total * 100
