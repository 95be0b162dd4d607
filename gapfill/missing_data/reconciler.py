"""Keeps the cumulative column consistent with filled change values."""

from collections.abc import Sequence

from gapfill.core.records import Record, Row
from gapfill.core.types import SafeMathProtocol

from .locator import ValidValueLocator


class CumulativeReconciler:
    """Derives an absent cumulative cell from the nearest earlier resolved one.

    ``cumulative[t] = cumulative[t_prev] + change[t]`` where ``t_prev`` is the
    closest earlier record whose cumulative cell was present in the input or
    has been written during this run.
    """

    def __init__(
        self,
        locator: ValidValueLocator,
        safe_math: SafeMathProtocol,
        change_columns: int,
        precision_digits: int = 10,
    ) -> None:
        self.locator = locator
        self.safe_math = safe_math
        self.change_columns = change_columns
        self.precision_digits = precision_digits

    def reconcile(
        self,
        records: Sequence[Record],
        row: Row,
        position: int,
        column: int,
        change_value: float,
    ) -> bool:
        """Fill the cumulative partner of ``column`` if it is absent.

        Returns True when a cumulative value was written.
        """
        cumulative_column = column + self.change_columns
        if row.is_present(cumulative_column):
            return False

        previous_position = self.locator.nearest_resolved_before(
            row.name, cumulative_column, position,
        )
        if previous_position is None:
            return False

        previous_row = records[previous_position].row(row.name)
        previous_cumulative = (
            previous_row.get(cumulative_column) if previous_row is not None else None
        )
        if previous_cumulative is None:
            return False

        new_value = self.safe_math.round(
            self.safe_math.add(previous_cumulative, change_value),
            self.precision_digits,
        )
        row.set(cumulative_column, new_value)
        self.locator.record_fill(row.name, cumulative_column, position)
        return True
