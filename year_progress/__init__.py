"""Top-level package for the year progress dot grid display."""

from __future__ import annotations

from .rendering import CutoutRect, GridLayoutConfig, InvalidLayoutConfig, Row, plan_rows
from .scheduler import Scheduler, next_local_midnight
from .yearinfo import DayYearInfo

__all__ = [
    "__version__",
    "CutoutRect",
    "DayYearInfo",
    "GridLayoutConfig",
    "InvalidLayoutConfig",
    "Row",
    "Scheduler",
    "next_local_midnight",
    "plan_rows",
]

__version__ = "0.1.0"
