# Logger Service Module
"""Logging service module providing centralized logging for gap-fill runs.

This module configures the ``gapfill`` logger tree with a human-readable console
handler and an optional rotating JSON file handler. It also provides ``LineLogger``,
an adapter exposing the same interface on top of a plain ``str -> None`` callback so
callers that only have a line-oriented sink can still drive the engine.
"""

import logging
import logging.handlers
import re
import sys
import types
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol
from typing import TypeAlias as TypingTypeAlias

from pythonjsonlogger import jsonlogger

ExcInfoType: TypingTypeAlias = (
    bool | tuple[type[BaseException], BaseException, types.TracebackType] | BaseException | None
)

ROOT_LOGGER_NAME = "gapfill"


class ConfigManagerProtocol(Protocol):
    """Protocol defining the configuration lookups the logger needs."""

    def get(self, key: str, default: Any | None = None) -> Any:  # noqa: ANN401
        """Get a configuration value by dot-separated key."""
        ...

    def get_int(self, key: str, default: int = 0) -> int:
        """Get an integer configuration value by key."""
        ...


class ContextFormatter(logging.Formatter):
    """Format log records with context dictionary information.

    This formatter extends the standard logging formatter to include
    additional context information from the record's context dictionary.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with context information.

        Args:
        ----
            record: The log record to format

        Returns:
        -------
            Formatted log record as string with context information included
        """
        if not hasattr(record, "context"):
            record.context = {}

        s = super().format(record)

        context_str = ""
        if record.context:
            if isinstance(record.context, dict):
                context_str = ", ".join(f"{k}={v}" for k, v in record.context.items())
            else:
                context_str = str(record.context)

        # %(context)s renders the raw dict; swap it for the key=value form
        raw = str(record.context)
        if self._fmt is not None and "[%(context)s]" in self._fmt:
            if context_str:
                s = s.replace(f"[{raw}]", f"[{context_str}]")
            else:
                s = s.replace(f" - [{raw}]", "").replace(f"[{raw}]", "")

        return s


def filter_sensitive_data(context: Mapping[str, object] | None) -> dict[str, object] | None:
    """Recursively mask sensitive values in a log context.

    Args:
        context: Dictionary containing log context data to be filtered

    Returns:
        Filtered dictionary with sensitive data redacted, or None if input is None/empty
    """
    if not context:
        return None

    filtered: dict[str, object] = {}
    sensitive_keys = [
        "api_key",
        "secret",
        "password",
        "token",
        "credentials",
        "private_key",
    ]
    sensitive_value_pattern = re.compile(r"^[A-Za-z0-9/+]{32,}$")

    for key, value in context.items():
        key_lower = str(key).lower()
        is_sensitive = any(pattern in key_lower for pattern in sensitive_keys)

        if isinstance(value, dict):
            filtered[key] = filter_sensitive_data(value)
        elif isinstance(value, list):
            filtered[key] = [
                filter_sensitive_data(item) if isinstance(item, dict) else item
                for item in value
            ]
        elif is_sensitive or (isinstance(value, str) and sensitive_value_pattern.match(value)):
            filtered[key] = "********"
        else:
            filtered[key] = value
    return filtered


class LoggerService:
    """Logging service for the gap-fill engine.

    Configures console and rotating JSON file output for the ``gapfill`` logger tree
    with support for per-call context information.
    """

    def __init__(self, config_manager: ConfigManagerProtocol) -> None:
        """Initialize the logger service.

        Args:
        ----
            config_manager: Configuration provider for logger settings.
        """
        self._config_manager = config_manager
        self._log_level = str(self._config_manager.get("logging.level", "INFO")).upper()
        self._log_format = self._config_manager.get(
            "logging.format",
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s - [%(context)s]")
        self._log_date_format = self._config_manager.get(
            "logging.date_format",
            "%Y-%m-%d %H:%M:%S")
        self._root_logger: logging.Logger = logging.getLogger(ROOT_LOGGER_NAME)

        self._setup_logging()
        self.info("LoggerService initialized.", source_module="LoggerService")

    def _setup_logging(self) -> None:
        """Configure the package logger and its handlers."""
        self._root_logger.setLevel(self._log_level)

        for handler in self._root_logger.handlers[:]:
            self._root_logger.removeHandler(handler)
            handler.close()

        # --- Console Handler (Human-Readable) ---
        use_console = self._config_manager.get("logging.console.enabled", True)
        if _as_bool(use_console):
            console_formatter = ContextFormatter(self._log_format, datefmt=self._log_date_format)
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(console_formatter)
            console_handler.setLevel(self._log_level)
            self._root_logger.addHandler(console_handler)

        # --- File Handler (JSON Format) ---
        use_file = self._config_manager.get("logging.file.enabled", False)
        if _as_bool(use_file):
            log_dir = str(self._config_manager.get("logging.file.directory", "logs"))
            log_filename = str(self._config_manager.get("logging.file.filename", "gapfill.log"))
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            log_path = str(Path(log_dir) / log_filename)

            json_formatter = jsonlogger.JsonFormatter(
                "%(asctime)s %(name)s %(levelname)s %(message)s %(context)s",
                datefmt=self._log_date_format,
                rename_fields={"levelname": "level"})

            max_bytes = self._config_manager.get_int("logging.file.max_bytes", 10 * 1024 * 1024)
            backup_count = self._config_manager.get_int("logging.file.backup_count", 5)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8")
            file_handler.setFormatter(json_formatter)
            file_handler.setLevel(self._log_level)
            self._root_logger.addHandler(file_handler)

    def log(
        self,
        level: int,
        message: str,
        *args: object,
        source_module: str | None = None,
        context: Mapping[str, object] | None = None,
        exc_info: ExcInfoType = None) -> None:
        """Log a message to the configured handlers.

        Args:
        ----
            level: The logging level (e.g., logging.INFO, logging.WARNING)
            message: The primary log message string (can be a format string)
            *args: Arguments for the format string in 'message'
            source_module: Optional name of the module generating the log
            context: Optional dictionary of key-value pairs for extra context
            exc_info: Optional exception info
        """
        logger_name = f"{ROOT_LOGGER_NAME}.{source_module}" if source_module else ROOT_LOGGER_NAME
        logger = logging.getLogger(logger_name)

        filtered_context = filter_sensitive_data(context)
        extra_data = {"context": filtered_context if filtered_context is not None else {}}

        logger.log(
            level,
            message,
            *args,
            exc_info=exc_info,
            extra=extra_data,
            stacklevel=3)

    def debug(
        self,
        message: str,
        *args: object,
        source_module: str | None = None,
        context: Mapping[str, object] | None = None) -> None:
        """Log a message with DEBUG level."""
        self.log(logging.DEBUG, message, *args, source_module=source_module, context=context)

    def info(
        self,
        message: str,
        *args: object,
        source_module: str | None = None,
        context: Mapping[str, object] | None = None) -> None:
        """Log a message with INFO level."""
        self.log(logging.INFO, message, *args, source_module=source_module, context=context)

    def warning(
        self,
        message: str,
        *args: object,
        source_module: str | None = None,
        context: Mapping[str, object] | None = None) -> None:
        """Log a message with WARNING level."""
        self.log(logging.WARNING, message, *args, source_module=source_module, context=context)

    def error(
        self,
        message: str,
        *args: object,
        source_module: str | None = None,
        context: Mapping[str, object] | None = None,
        exc_info: ExcInfoType = None) -> None:
        """Log a message with ERROR level."""
        self.log(
            logging.ERROR,
            message,
            *args,
            source_module=source_module,
            context=context,
            exc_info=exc_info)

    def exception(
        self,
        message: str,
        *args: object,
        source_module: str | None = None,
        context: Mapping[str, object] | None = None) -> None:
        """Log a message with ERROR level and include exception information.

        This method should only be called from an exception handler.
        """
        self.log(
            logging.ERROR,
            message,
            *args,
            source_module=source_module,
            context=context,
            exc_info=True)

    def critical(
        self,
        message: str,
        *args: object,
        source_module: str | None = None,
        context: Mapping[str, object] | None = None,
        exc_info: ExcInfoType = None) -> None:
        """Log a message with CRITICAL level."""
        self.log(
            logging.CRITICAL,
            message,
            *args,
            source_module=source_module,
            context=context,
            exc_info=exc_info)

    def close(self) -> None:
        """Flush and detach every handler owned by the service."""
        for handler in self._root_logger.handlers[:]:
            handler.flush()
            self._root_logger.removeHandler(handler)
            handler.close()


class LineLogger:
    """Logger adapter that writes formatted lines to a plain callback.

    Lets callers hand the engine something as simple as ``print`` or
    ``lines.append`` instead of a configured ``LoggerService``.
    """

    def __init__(
        self,
        log_line: Callable[[str], None],
        min_level: int = logging.INFO,
    ) -> None:
        self._log_line = log_line
        self._min_level = min_level

    def log(
        self,
        level: int,
        message: str,
        *args: object,
        source_module: str | None = None,
        context: Mapping[str, object] | None = None,
        exc_info: ExcInfoType = None) -> None:
        """Format one line and pass it to the callback."""
        if level < self._min_level:
            return
        text = message % args if args else message
        prefix = f"[{logging.getLevelName(level)}]"
        if source_module:
            prefix += f" {source_module}:"
        line = f"{prefix} {text}"
        filtered = filter_sensitive_data(context)
        if filtered:
            line += " (" + ", ".join(f"{k}={v}" for k, v in filtered.items()) + ")"
        self._log_line(line)

    def debug(self, message: str, *args: object, **kwargs: Any) -> None:
        self.log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, *args: object, **kwargs: Any) -> None:
        self.log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, *args: object, **kwargs: Any) -> None:
        self.log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, *args: object, **kwargs: Any) -> None:
        self.log(logging.ERROR, message, *args, **kwargs)

    def exception(self, message: str, *args: object, **kwargs: Any) -> None:
        self.log(logging.ERROR, message, *args, **kwargs)

    def critical(self, message: str, *args: object, **kwargs: Any) -> None:
        self.log(logging.CRITICAL, message, *args, **kwargs)


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on")
    return bool(value)
