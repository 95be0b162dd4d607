"""Missing-period detection and gap filling."""

from .calculator import GapFillCalculator
from .column_executor import ColumnExecutor
from .engine import GapFillEngine, RunPhase
from .locator import ValidValueLocator
from .models import MissingDataPoint, MissingPeriod
from .period_detector import MissingPeriodDetector
from .reconciler import CumulativeReconciler
from .stats import MissingProcessingStats, StatsCollector
from .time_index import build_time_index

__all__ = [
    "ColumnExecutor",
    "CumulativeReconciler",
    "GapFillCalculator",
    "GapFillEngine",
    "MissingDataPoint",
    "MissingPeriod",
    "MissingPeriodDetector",
    "MissingProcessingStats",
    "RunPhase",
    "StatsCollector",
    "ValidValueLocator",
    "build_time_index",
]
