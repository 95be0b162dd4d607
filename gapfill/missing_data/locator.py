"""Per-(channel, column) index of record positions holding a value."""

import threading
from bisect import bisect_left, bisect_right, insort
from collections import defaultdict
from collections.abc import Iterable, Sequence

from gapfill.core.records import Record

ColumnKey = tuple[str, int]


class ValidValueLocator:
    """Answers nearest-known-neighbor queries over a record sequence.

    The present-value index is built once and never changes afterwards, so
    ``nearest_before``/``nearest_after`` always return values that were in the
    input. Cells written during a run go into a separate fill overlay which only
    ``nearest_resolved_before`` consults.
    """

    def __init__(self, present: dict[ColumnKey, list[int]] | None = None) -> None:
        self._present: dict[ColumnKey, list[int]] = present or {}
        self._filled: dict[ColumnKey, list[int]] = defaultdict(list)
        self._fill_lock = threading.Lock()

    @classmethod
    def build(
        cls,
        records: Sequence[Record],
        positions: Iterable[int] | None = None,
    ) -> "ValidValueLocator":
        """Index every present cell in one pass over the records.

        ``positions`` restricts the index to those records, e.g. the values of a
        time index so shadowed duplicates never act as neighbors. They must be
        ascending.
        """
        present: dict[ColumnKey, list[int]] = defaultdict(list)
        if positions is None:
            positions = range(len(records))
        for position in positions:
            record = records[position]
            for row in record.rows:
                for column, cell in enumerate(row.cells):
                    if cell.is_present:
                        present[(row.name, column)].append(position)
        # Positions are appended in ascending order already
        return cls(dict(present))

    def present_positions(self, channel: str, column: int) -> list[int]:
        return list(self._present.get((channel, column), ()))

    def nearest_before(self, channel: str, column: int, position: int) -> int | None:
        """Greatest position < ``position`` with a present value, or None."""
        positions = self._present.get((channel, column))
        if not positions:
            return None
        i = bisect_left(positions, position)
        return positions[i - 1] if i > 0 else None

    def nearest_after(self, channel: str, column: int, position: int) -> int | None:
        """Smallest position > ``position`` with a present value, or None."""
        positions = self._present.get((channel, column))
        if not positions:
            return None
        i = bisect_right(positions, position)
        return positions[i] if i < len(positions) else None

    def record_fill(self, channel: str, column: int, position: int) -> None:
        """Register a cell written during the run."""
        with self._fill_lock:
            filled = self._filled[(channel, column)]
            i = bisect_left(filled, position)
            if i == len(filled) or filled[i] != position:
                insort(filled, position)

    def filled_positions(self, channel: str, column: int) -> list[int]:
        with self._fill_lock:
            return list(self._filled.get((channel, column), ()))

    def nearest_resolved_before(self, channel: str, column: int, position: int) -> int | None:
        """Nearest earlier position that is either present or already filled."""
        candidate = self.nearest_before(channel, column, position)
        with self._fill_lock:
            filled = self._filled.get((channel, column))
            if filled:
                i = bisect_left(filled, position)
                if i > 0 and (candidate is None or filled[i - 1] > candidate):
                    candidate = filled[i - 1]
        return candidate
