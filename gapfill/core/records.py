"""Record model for multi-channel monitoring datasets.

A dataset is an ordered list of ``Record`` objects. Each record is one observation
time (a date plus an hour) and holds named ``Row`` channels. A row's values split
into a "change" half followed by a paired "cumulative" half.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Union

from gapfill.exceptions import AbsentValueError


class CellState(str, Enum):
    """Whether a value slot holds a number."""
    PRESENT = "present"
    ABSENT = "absent"


@dataclass(frozen=True, slots=True)
class Cell:
    """One value slot of a channel, either present with a number or absent."""
    state: CellState
    value: float | None = None

    def __post_init__(self) -> None:
        if self.state is CellState.PRESENT and self.value is None:
            raise ValueError("A present cell needs a value")
        if self.state is CellState.ABSENT and self.value is not None:
            raise ValueError("An absent cell cannot carry a value")

    @classmethod
    def present(cls, value: float) -> Cell:
        return cls(CellState.PRESENT, float(value))

    @classmethod
    def absent(cls) -> Cell:
        return _ABSENT

    @classmethod
    def of(cls, value: CellInput) -> Cell:
        """Build a cell from a number, None or an existing cell.

        NaN counts as absent, matching how spreadsheet readers mark empty cells.
        """
        if isinstance(value, Cell):
            return value
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return _ABSENT
        return cls.present(value)

    @property
    def is_present(self) -> bool:
        return self.state is CellState.PRESENT

    def get(self) -> float | None:
        return self.value

    def value_or_raise(self) -> float:
        if self.value is None:
            raise AbsentValueError("Cell holds no value")
        return self.value


_ABSENT = Cell(CellState.ABSENT)

CellInput = Union[Cell, float, int, None]


class Row:
    """A named channel holding an ordered sequence of cells."""

    __slots__ = ("name", "cells")

    def __init__(self, name: str, values: Iterable[CellInput] = ()) -> None:
        self.name = name
        self.cells: list[Cell] = [Cell.of(v) for v in values]

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __repr__(self) -> str:
        return f"Row({self.name!r}, {self.values!r})"

    @property
    def values(self) -> list[float | None]:
        """Plain view of the cells, None where absent."""
        return [cell.value for cell in self.cells]

    def get(self, index: int) -> float | None:
        if 0 <= index < len(self.cells):
            return self.cells[index].value
        return None

    def is_present(self, index: int) -> bool:
        return 0 <= index < len(self.cells) and self.cells[index].is_present

    def set(self, index: int, value: CellInput) -> None:
        """Replace one slot; the row never grows or shrinks."""
        if not 0 <= index < len(self.cells):
            raise IndexError(f"Column {index} out of range for channel '{self.name}'")
        self.cells[index] = Cell.of(value)

    @property
    def valid_count(self) -> int:
        return sum(1 for cell in self.cells if cell.is_present)

    @property
    def missing_count(self) -> int:
        return len(self.cells) - self.valid_count

    @property
    def has_missing_data(self) -> bool:
        return self.missing_count > 0

    @property
    def is_all_missing(self) -> bool:
        return self.valid_count == 0

    @property
    def is_all_valid(self) -> bool:
        return self.missing_count == 0

    @property
    def completeness_pct(self) -> float:
        if not self.cells:
            return 0.0
        return self.valid_count / len(self.cells) * 100


@dataclass
class Record:
    """All channels observed at one date and hour."""
    date: date
    hour: int
    rows: list[Row] = field(default_factory=list)
    source_name: str = ""

    def __post_init__(self) -> None:
        if isinstance(self.date, datetime):
            self.date = self.date.date()

    @property
    def timestamp(self) -> datetime:
        return datetime.combine(self.date, time()) + timedelta(hours=self.hour)

    def row(self, name: str) -> Row | None:
        for row in self.rows:
            if row.name == name:
                return row
        return None

    def rows_by_name(self) -> dict[str, Row]:
        """Name lookup table; the first row wins if a name repeats."""
        lookup: dict[str, Row] = {}
        for row in self.rows:
            lookup.setdefault(row.name, row)
        return lookup

    @property
    def channel_names(self) -> list[str]:
        return [row.name for row in self.rows]


def make_record(
    timestamp: datetime,
    channels: dict[str, Sequence[CellInput]],
    source_name: str = "",
) -> Record:
    """Build a record from a timestamp and a channel -> values mapping."""
    return Record(
        date=timestamp.date(),
        hour=timestamp.hour,
        rows=[Row(name, values) for name, values in channels.items()],
        source_name=source_name,
    )
