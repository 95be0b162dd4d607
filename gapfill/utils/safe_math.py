"""Decimal-backed arithmetic helpers.

Values are converted through ``Decimal(str(value))`` so that sums and averages of
measurement readings do not pick up binary floating point drift (``0.1 + 0.2``
stays ``0.3``). Results are returned as floats because that is what the record
model stores.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation
import math

DEFAULT_TOLERANCE = 1e-10
DEFAULT_DECIMAL_PRECISION = 28


class DecimalSafeMath:
    """High-precision arithmetic used by the gap-fill calculator and reconciler."""

    def __init__(self, precision: int = DEFAULT_DECIMAL_PRECISION) -> None:
        self._context = Context(prec=precision, rounding=ROUND_HALF_UP)

    @staticmethod
    def to_decimal(value: float) -> Decimal:
        """Convert a finite float to Decimal.

        Raises:
            ValueError: If the value is NaN or infinite
        """
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"Cannot convert non-finite value {value!r} to Decimal")
        return Decimal(str(value))

    def add(self, a: float, b: float) -> float:
        try:
            return float(self._context.add(self.to_decimal(a), self.to_decimal(b)))
        except ValueError:
            return a + b

    def subtract(self, a: float, b: float) -> float:
        try:
            return float(self._context.subtract(self.to_decimal(a), self.to_decimal(b)))
        except ValueError:
            return a - b

    def total(self, values: Sequence[float]) -> float:
        if not values:
            return 0.0
        try:
            acc = Decimal(0)
            for value in values:
                acc = self._context.add(acc, self.to_decimal(value))
            return float(acc)
        except ValueError:
            return math.fsum(values)

    def average(self, values: Sequence[float]) -> float:
        """Arithmetic mean; NaN for an empty sequence."""
        if not values:
            return math.nan
        try:
            acc = Decimal(0)
            for value in values:
                acc = self._context.add(acc, self.to_decimal(value))
            return float(self._context.divide(acc, Decimal(len(values))))
        except ValueError:
            return math.fsum(values) / len(values)

    def lerp(self, start: float, end: float, fraction: float) -> float:
        """start + (end - start) * fraction, computed in Decimal."""
        try:
            d_start = self.to_decimal(start)
            span = self._context.subtract(self.to_decimal(end), d_start)
            step = self._context.multiply(span, self.to_decimal(fraction))
            return float(self._context.add(d_start, step))
        except ValueError:
            return start + (end - start) * fraction

    @staticmethod
    def clamp(value: float, lower: float, upper: float) -> float:
        if lower > upper:
            lower, upper = upper, lower
        return max(lower, min(upper, value))

    def round(self, value: float, digits: int) -> float:
        """Round half away from zero; non-finite values pass through."""
        try:
            quantum = Decimal(1).scaleb(-digits)
            return float(self.to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
        except (ValueError, InvalidOperation):
            return value

    @staticmethod
    def are_equal(a: float, b: float, tolerance: float = DEFAULT_TOLERANCE) -> bool:
        if math.isnan(a) or math.isnan(b):
            return False
        return abs(a - b) <= tolerance
