"""Provide configuration management for the gapfill engine.

This module handles loading, validating, and accessing application configuration from
YAML files. Values can be overridden through environment variables, which makes it easy
to tweak a single gap-fill run without editing the shared configuration file.

Configuration changes require an explicit reload.
"""

import logging
import operator
import os
from functools import reduce
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)


class ConfigManager:
    """Manage loading, accessing, and explicit reloading of app configuration."""

    ENV_PREFIX = "GAPFILL_"
    _KNOWN_FILL_POLICIES = ("midpoint", "position_weighted")

    def __init__(
        self,
        config_path: str = "config/gapfill.yaml",
        logger_service: logging.Logger | None = None,
        *,
        config_data: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the ConfigManager and load configuration.

        Args:
            config_path: Path to the YAML configuration file.
            logger_service: Optional logger instance.
            config_data: Already-parsed configuration; the file is not read when given.
        """
        self._config_path_str = config_path
        self._config_file_path = Path(self._config_path_str).resolve()
        self._config: dict | None = None
        self.validation_errors: list[str] = []

        self._logger: logging.Logger = logger_service or logging.getLogger(__name__)

        if config_data is not None:
            self._config = dict(config_data)
        else:
            self._logger.info(
                "Initializing ConfigManager with path: %s",
                self._config_file_path,
            )
            self.load_config()

        self.validation_errors = self.validate_configuration()
        if not self.is_valid():
            self._logger.error("Initial configuration is invalid. Please check errors above.")

    @classmethod
    def from_dict(
        cls,
        config: dict[str, Any],
        logger_service: logging.Logger | None = None,
    ) -> "ConfigManager":
        """Build a manager around an in-memory configuration dictionary."""
        return cls(logger_service=logger_service, config_data=config)

    def load_config(self) -> None:
        """Load or reload the configuration from the specified YAML file."""
        self._logger.info(
            "Attempting to load configuration from: %s",
            self._config_file_path,
        )
        try:
            if not self._config_file_path.exists():
                self._logger.error(
                    "Configuration file not found at: %s",
                    self._config_file_path,
                )
                self._config = {}
                return

            with self._config_file_path.open("r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f)
            self._logger.info(
                "Successfully loaded configuration from %s",
                self._config_file_path,
            )
        except yaml.YAMLError as e:
            self._logger.exception(
                "Error parsing YAML configuration file: %s",
                self._config_file_path,
                exc_info=e,
            )
            self._config = {}
        except OSError as e:
            self._logger.exception(
                "Error reading configuration file: %s",
                self._config_file_path,
                exc_info=e,
            )
            self._config = {}

        if self._config is None:
            # An empty YAML document loads as None
            self._config = {}
        if not isinstance(self._config, dict):
            self._logger.error(
                "Configuration file %s did not load as a dictionary. "
                "Loaded type: %s. Setting config to empty dict.",
                self._config_file_path,
                type(self._config),
            )
            self._config = {}

    @classmethod
    def env_key_for(cls, key: str) -> str:
        """Map a dot-separated key to its environment override name.

        'gap_fill.max_workers' becomes 'GAPFILL_GAP_FILL__MAX_WORKERS'.
        """
        return cls.ENV_PREFIX + "__".join(part.upper() for part in key.split("."))

    def get(self, key: str, default: Any | None = None) -> Any:  # noqa: ANN401
        """Retrieve a configuration value using a dot-separated key.

        Environment overrides win over the file.

        Example:
            config.get('gap_fill.max_workers', 4)

        Args:
        ----
            key: The dot-separated key string.
            default: The value to return if the key is not found.

        Returns:
        -------
            The configuration value or the default.
        """
        env_value = os.getenv(self.env_key_for(key))
        if env_value is not None:
            return env_value

        if self._config is None:
            self._logger.warning(
                "Configuration accessed before it was loaded or after a loading error.",
            )
            return default

        try:
            return reduce(operator.getitem, key.split("."), self._config)
        except (KeyError, TypeError):
            # KeyError if a key in the path doesn't exist
            # TypeError if trying to index into a non-dictionary
            self._logger.debug(
                "Key '%s' not found in configuration. Returning default: %s",
                key,
                default,
            )
            return default

    def get_int(self, key: str, default: int = 0) -> int:
        """Retrieve a config value and attempt to cast it to an integer."""
        value = self.get(key, default)
        try:
            return int(value)
        except (ValueError, TypeError) as e:
            self._logger.warning(
                "Could not convert value for key '%s' ('%s') to int. "
                "Returning default %s. Error: %s",
                key,
                value,
                default,
                e,
            )
            return default

    def get_optional_int(self, key: str) -> int | None:
        """Retrieve an integer value, keeping None when the key is unset or null."""
        value = self.get(key, None)
        if value is None or (isinstance(value, str) and value.strip().lower() in ("", "none", "null")):
            return None
        try:
            return int(value)
        except (ValueError, TypeError) as e:
            self._logger.warning(
                "Could not convert value for key '%s' ('%s') to int. Returning None. Error: %s",
                key,
                value,
                e,
            )
            return None

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Retrieve a config value and attempt to cast it to a float."""
        value = self.get(key, default)
        try:
            return float(value)
        except (ValueError, TypeError) as e:
            self._logger.warning(
                "Could not convert value for key '%s' ('%s') to float. "
                "Returning default %s. Error: %s",
                key,
                value,
                default,
                e,
            )
            return default

    def get_bool(self, key: str, *, default: bool = False) -> bool:
        """Retrieve a config value and attempt to cast it to a boolean."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes", "on")
        try:
            return bool(value)
        except (ValueError, TypeError) as e:
            self._logger.warning(
                "Could not convert value for key '%s' ('%s') to bool. "
                "Returning default %s. Error: %s",
                key,
                value,
                default,
                e,
            )
            return default

    def get_dict(self, key: str, default: dict | None = None) -> dict:
        """Retrieve a config value and ensure it's a dictionary."""
        if default is None:
            default = {}
        value = self.get(key, default)
        if isinstance(value, dict):
            return value
        return default

    def validate_configuration(self) -> list[str]:
        """Validate the loaded configuration and return a list of errors."""
        errors: list[str] = []
        if self._config is None or not isinstance(self._config, dict):
            errors.append("Configuration could not be loaded or is not a valid dictionary")
            return errors

        self._validate_gap_fill_section(errors)
        self._validate_logging_section(errors)

        return errors

    def _validate_gap_fill_section(self, errors: list[str]) -> None:
        """Validate the gap_fill configuration section."""
        section = self.get("gap_fill", {})
        if not isinstance(section, dict):
            errors.append("'gap_fill' section must be a dictionary")
            return

        change_columns = section.get("change_columns_per_row")
        if change_columns is not None:
            try:
                if int(change_columns) <= 0:
                    errors.append("'gap_fill.change_columns_per_row' must be positive")
            except (ValueError, TypeError):
                errors.append("'gap_fill.change_columns_per_row' must be an integer or null")

        for field in ("max_workers", "max_cache_size"):
            value = section.get(field)
            if value is None:
                continue
            try:
                if int(value) <= 0:
                    errors.append(f"'gap_fill.{field}' must be positive")
            except (ValueError, TypeError):
                errors.append(f"'gap_fill.{field}' must be an integer")

        weight = section.get("time_factor_weight")
        if weight is not None:
            try:
                if not 0.0 <= float(weight) <= 1.0:
                    errors.append("'gap_fill.time_factor_weight' must be between 0 and 1")
            except (ValueError, TypeError):
                errors.append("'gap_fill.time_factor_weight' must be a valid number")

        policy = section.get("fill_policy")
        if policy is not None and str(policy).lower() not in self._KNOWN_FILL_POLICIES:
            errors.append(
                f"'gap_fill.fill_policy' must be one of {list(self._KNOWN_FILL_POLICIES)}",
            )

    def _validate_logging_section(self, errors: list[str]) -> None:
        """Validate the logging configuration section."""
        logging_config = self.get("logging", {})
        if not isinstance(logging_config, dict):
            errors.append("'logging' section must be a dictionary")
            return

        level = logging_config.get("level")
        if level is not None and str(level).upper() not in logging.getLevelNamesMapping():
            errors.append(f"'logging.level' has unknown level '{level}'")

    def get_gap_fill_parameters(self) -> dict[str, Any]:
        """Get the gap_fill section."""
        return self.get_dict("gap_fill", {})

    def reload_config(self) -> list[str]:
        """Explicitly reload configuration from file.

        Returns:
            List of validation errors (empty if successful)
        """
        self._logger.info("Explicitly reloading configuration...")

        backup_config = self._config
        backup_errors = self.validation_errors

        try:
            self.load_config()
            new_validation_errors = self.validate_configuration()

            if new_validation_errors:
                # Restore backup if new config is invalid
                self._config = backup_config
                self.validation_errors = backup_errors
                self._logger.error(
                    "Configuration reload failed validation. Restored previous configuration.",
                )
                return new_validation_errors
        except Exception as e:
            self._config = backup_config
            self.validation_errors = backup_errors
            self._logger.exception("Configuration reload failed. Restored previous configuration.")
            return [f"Configuration reload failed: {e!s}"]
        else:
            self.validation_errors = new_validation_errors
            self._logger.info("Configuration reloaded successfully.")
            return []

    def is_valid(self) -> bool:
        """Check if the current configuration is valid."""
        return len(self.validation_errors) == 0
