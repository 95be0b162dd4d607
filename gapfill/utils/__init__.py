"""Utility components for the gapfill package."""

from .fill_cache import CacheConfig, CacheKey, FillValueCache
from .safe_math import DecimalSafeMath

__all__ = [
    "CacheConfig",
    "CacheKey",
    "DecimalSafeMath",
    "FillValueCache",
]
