"""Missing-period detection and gap-fill reconciliation for monitoring datasets."""

from .config_manager import ConfigManager
from .core.records import Cell, CellState, Record, Row, make_record
from .exceptions import (
    ConfigurationError,
    DatasetStructureError,
    GapFillError,
    InvalidChangeColumnsError,
)
from .logger_service import LineLogger, LoggerService
from .missing_data import GapFillEngine, MissingPeriod, MissingProcessingStats
from .settings import FillPolicy, GapFillConfig
from .utils import CacheKey, DecimalSafeMath, FillValueCache

__version__ = "0.1.0"

__all__ = [
    "CacheKey",
    "Cell",
    "CellState",
    "ConfigManager",
    "ConfigurationError",
    "DatasetStructureError",
    "DecimalSafeMath",
    "FillPolicy",
    "FillValueCache",
    "GapFillConfig",
    "GapFillEngine",
    "GapFillError",
    "InvalidChangeColumnsError",
    "LineLogger",
    "LoggerService",
    "MissingPeriod",
    "MissingProcessingStats",
    "Record",
    "Row",
    "make_record",
]
