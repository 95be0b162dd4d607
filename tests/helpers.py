"""Dataset builders shared by the unit and integration tests."""

from datetime import datetime, timedelta

from gapfill.core.records import Record, make_record

T0 = datetime(2024, 1, 1, 0)


def hours(n: int) -> datetime:
    """Timestamp ``n`` hours after the fixture epoch."""
    return T0 + timedelta(hours=n)


def build_series(channels: dict[str, list[list[float | None]]], step_hours: int = 1) -> list[Record]:
    """Build one record per index from per-channel value lists.

    ``channels["A"][i]`` is the full value sequence of channel A at the i-th
    timestamp.
    """
    length = max(len(values) for values in channels.values())
    return [
        make_record(
            hours(i * step_hours),
            {name: values[i] for name, values in channels.items() if i < len(values)},
            source_name="fixture.xlsx",
        )
        for i in range(length)
    ]


def change_and_cumulative(
    changes: list[float | None],
    cumulative: list[float | None],
) -> list[list[float | None]]:
    """Zip one change column and one cumulative column into row value lists."""
    return [[c, s] for c, s in zip(changes, cumulative, strict=True)]


def column(records: list[Record], channel: str, index: int) -> list[float | None]:
    """Values of one column of a channel across the series."""
    values = []
    for record in records:
        row = record.row(channel)
        values.append(row.get(index) if row is not None else None)
    return values
