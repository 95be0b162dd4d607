"""Timestamp -> position index over a record sequence."""

from collections.abc import Sequence
from datetime import datetime

from gapfill.core.records import Record


def build_time_index(records: Sequence[Record]) -> dict[datetime, int]:
    """Map each record timestamp to its position in the sequence.

    The first occurrence of a repeated timestamp wins; later duplicates are not
    indexed. Insertion order follows record order, so iterating the result walks
    the series chronologically when the records are sorted.
    """
    index: dict[datetime, int] = {}
    for position, record in enumerate(records):
        index.setdefault(record.timestamp, position)
    return index


def duplicate_positions(records: Sequence[Record], time_index: dict[datetime, int]) -> list[int]:
    """Positions of records shadowed by an earlier record with the same timestamp."""
    return [
        position
        for position, record in enumerate(records)
        if time_index.get(record.timestamp) != position
    ]
