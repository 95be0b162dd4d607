"""Core record model and collaborator protocols."""

from .records import Cell, CellState, Record, Row, make_record
from .types import FillCacheProtocol, LoggerProtocol, SafeMathProtocol

__all__ = [
    "Cell",
    "CellState",
    "FillCacheProtocol",
    "LoggerProtocol",
    "Record",
    "Row",
    "SafeMathProtocol",
    "make_record",
]
