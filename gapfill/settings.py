"""Typed settings for a gap-fill run."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from gapfill.config_manager import ConfigManager
from gapfill.exceptions import ConfigurationError, ConfigurationLoadingError, InvalidChangeColumnsError


class FillPolicy(str, Enum):
    """How a missing change value is derived from its two neighbors."""
    MIDPOINT = "midpoint"
    POSITION_WEIGHTED = "position_weighted"


@dataclass
class GapFillConfig:
    """Configuration for the gap-fill engine."""
    change_columns_per_row: int | None = None  # None: half of each row's length
    enable_parallel_value_columns: bool = False
    max_workers: int = 4
    fill_policy: FillPolicy = FillPolicy.POSITION_WEIGHTED
    time_factor_weight: float = 1.0  # 0 = midpoint, 1 = full position weighting
    precision_digits: int = 10
    enable_caching: bool = True
    max_cache_size: int = 10_000
    cache_ttl_seconds: float | None = 1800.0
    reconcile_cumulative: bool = True
    progress_every_timestamps: int = 5
    progress_interval_seconds: float = 20.0

    def __post_init__(self) -> None:
        """Coerce the policy from its string form."""
        if not isinstance(self.fill_policy, FillPolicy):
            try:
                self.fill_policy = FillPolicy(str(self.fill_policy).lower())
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown fill_policy '{self.fill_policy}', expected one of "
                    f"{[policy.value for policy in FillPolicy]}",
                ) from e

    def validate(self) -> None:
        """Raise ConfigurationError when a setting cannot be applied."""
        if self.change_columns_per_row is not None and self.change_columns_per_row <= 0:
            raise InvalidChangeColumnsError(self.change_columns_per_row)
        if self.max_workers <= 0:
            raise ConfigurationError(f"max_workers must be positive, got {self.max_workers}")
        if not 0.0 <= self.time_factor_weight <= 1.0:
            raise ConfigurationError(
                f"time_factor_weight must be between 0 and 1, got {self.time_factor_weight}",
            )
        if self.precision_digits < 0:
            raise ConfigurationError(
                f"precision_digits must not be negative, got {self.precision_digits}",
            )
        if self.max_cache_size <= 0:
            raise ConfigurationError(f"max_cache_size must be positive, got {self.max_cache_size}")
        if self.cache_ttl_seconds is not None and self.cache_ttl_seconds <= 0:
            raise ConfigurationError(
                f"cache_ttl_seconds must be positive or null, got {self.cache_ttl_seconds}",
            )
        if self.progress_every_timestamps <= 0:
            raise ConfigurationError(
                f"progress_every_timestamps must be positive, got {self.progress_every_timestamps}",
            )

    def change_columns_for(self, row_length: int) -> int:
        """Number of change columns for a row holding row_length values.

        Raises:
            InvalidChangeColumnsError: If the count is not positive or its
                cumulative partners would fall outside the row
        """
        change_columns = (
            self.change_columns_per_row
            if self.change_columns_per_row is not None
            else row_length // 2
        )
        if change_columns <= 0 or change_columns * 2 > row_length:
            raise InvalidChangeColumnsError(change_columns, row_length)
        return change_columns

    @classmethod
    def from_config_manager(
        cls,
        config: ConfigManager,
        section: str = "gap_fill",
    ) -> "GapFillConfig":
        """Read the settings from a ConfigManager section.

        Raises:
            ConfigurationLoadingError: If a value has the wrong type
        """
        defaults = cls()
        try:
            ttl_raw: Any = config.get(f"{section}.cache_ttl_seconds", defaults.cache_ttl_seconds)
            settings = cls(
                change_columns_per_row=config.get_optional_int(f"{section}.change_columns_per_row"),
                enable_parallel_value_columns=config.get_bool(
                    f"{section}.enable_parallel_value_columns",
                    default=defaults.enable_parallel_value_columns,
                ),
                max_workers=config.get_int(f"{section}.max_workers", defaults.max_workers),
                fill_policy=FillPolicy(
                    str(config.get(f"{section}.fill_policy", defaults.fill_policy.value)).lower(),
                ),
                time_factor_weight=config.get_float(
                    f"{section}.time_factor_weight", defaults.time_factor_weight,
                ),
                precision_digits=config.get_int(
                    f"{section}.precision_digits", defaults.precision_digits,
                ),
                enable_caching=config.get_bool(
                    f"{section}.enable_caching", default=defaults.enable_caching,
                ),
                max_cache_size=config.get_int(f"{section}.max_cache_size", defaults.max_cache_size),
                cache_ttl_seconds=None if ttl_raw is None else float(ttl_raw),
                reconcile_cumulative=config.get_bool(
                    f"{section}.reconcile_cumulative", default=defaults.reconcile_cumulative,
                ),
                progress_every_timestamps=config.get_int(
                    f"{section}.progress.every_timestamps", defaults.progress_every_timestamps,
                ),
                progress_interval_seconds=config.get_float(
                    f"{section}.progress.interval_seconds", defaults.progress_interval_seconds,
                ),
            )
        except (ValueError, TypeError) as e:
            raise ConfigurationLoadingError(section, str(e)) from e

        settings.validate()
        return settings
