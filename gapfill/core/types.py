"""Core type definitions for the gapfill engine.

This module contains the protocols the engine depends on. Collaborators (logger,
fill cache, safe math) are passed into the engine explicitly and only need to
satisfy these interfaces.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


# Protocol for logging service
@runtime_checkable
class LoggerProtocol(Protocol):
    """Protocol for the injected logging sink."""

    def debug(self, message: str, *args: object, **kwargs: Any) -> None:
        """Log a debug message."""
        ...

    def info(self, message: str, *args: object, **kwargs: Any) -> None:
        """Log an info message."""
        ...

    def warning(self, message: str, *args: object, **kwargs: Any) -> None:
        """Log a warning message."""
        ...

    def error(self, message: str, *args: object, **kwargs: Any) -> None:
        """Log an error message."""
        ...


# Protocol for the memoization cache
@runtime_checkable
class FillCacheProtocol(Protocol):
    """Protocol for a bounded store of previously computed fill values."""

    def get(self, key: Any) -> float | None:  # noqa: ANN401
        """Return the cached fill value, or None on a miss or expiry."""
        ...

    def set(self, key: Any, value: float) -> None:  # noqa: ANN401
        """Store a fill value."""
        ...

    def clear(self) -> None:
        """Drop every entry."""
        ...

    def stats(self) -> Mapping[str, Any]:
        """Return hit/miss/eviction counters."""
        ...


# Protocol for high-precision arithmetic
@runtime_checkable
class SafeMathProtocol(Protocol):
    """Protocol for the rounding, averaging and clamping helpers."""

    def average(self, values: Sequence[float]) -> float:
        """Arithmetic mean of the values."""
        ...

    def add(self, a: float, b: float) -> float:
        """Sum of two values without binary float drift."""
        ...

    def lerp(self, start: float, end: float, fraction: float) -> float:
        """Linear interpolation between start and end."""
        ...

    def clamp(self, value: float, lower: float, upper: float) -> float:
        """Restrict value to the closed interval [lower, upper]."""
        ...

    def round(self, value: float, digits: int) -> float:
        """Round half away from zero to the given number of digits."""
        ...
