"""Row planning for the year progress dot grid.

A plan is an ordered list of :class:`~year_progress.rendering.layout.Row` values
that partitions ``[0, days_in_year)``. Drawing the rows top to bottom and each
row left to right reproduces the grid, leaving the bottom-trailing cutout empty.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List

from .layout import CutoutRect, DisplayEnvironment, GridLayoutConfig, InvalidLayoutConfig, Row

LOGGER = logging.getLogger(__name__)

__all__ = ["CutoutMetrics", "cutout_metrics", "plan_full_rows", "plan_rows"]


@dataclass(frozen=True)
class CutoutMetrics:
    """How far a cutout reaches into the grid, in rows and columns."""

    rows_cut: int
    columns_cut: int
    short_columns: int


def cutout_metrics(
    layout: GridLayoutConfig,
    cutout: CutoutRect,
    environment: DisplayEnvironment = DisplayEnvironment.MOBILE,
) -> CutoutMetrics:
    """Return the rows and columns overlapped by ``cutout``.

    The environment's margin constants are subtracted first since the panel's
    own padding does not cover any dots.
    """

    step = layout.dot_step
    rows_cut = max(0, math.ceil((cutout.height - environment.margin_adjustment) / step))
    columns_cut = max(0, math.ceil((cutout.width - environment.width_adjustment) / step))
    short_columns = max(layout.columns - columns_cut, 1)
    return CutoutMetrics(rows_cut=rows_cut, columns_cut=columns_cut, short_columns=short_columns)


def _fill_rows(rows: List[Row], start: int, stop: int, width: int, limit: int | None = None) -> int:
    emitted = 0
    while start < stop and (limit is None or emitted < limit):
        count = min(width, stop - start)
        rows.append(Row(start=start, count=count))
        start += count
        emitted += 1
    return start


def _check_days(days_in_year: int) -> None:
    if isinstance(days_in_year, bool) or not isinstance(days_in_year, int):
        raise InvalidLayoutConfig(f"days_in_year must be an integer, got {days_in_year!r}")
    if days_in_year <= 0:
        raise InvalidLayoutConfig(f"days_in_year must be positive, got {days_in_year}")


def plan_full_rows(days_in_year: int, columns: int) -> List[Row]:
    """Split the year into rows of ``columns`` days; the last row may be shorter."""

    _check_days(days_in_year)
    if columns <= 0:
        raise InvalidLayoutConfig(f"columns must be positive, got {columns}")
    rows: List[Row] = []
    _fill_rows(rows, 0, days_in_year, columns)
    return rows


def plan_rows(
    days_in_year: int,
    layout: GridLayoutConfig,
    cutout: CutoutRect | None = None,
    environment: DisplayEnvironment = DisplayEnvironment.MOBILE,
) -> List[Row]:
    """Plan the grid rows for ``days_in_year`` days around an optional cutout.

    Rows above the cutout's vertical span use ``layout.columns``. Every row from
    there to the end of the year uses the shortened width, including rows that
    would sit below the cutout.
    """

    _check_days(days_in_year)
    if cutout is None or cutout.is_zero:
        return plan_full_rows(days_in_year, layout.columns)

    metrics = cutout_metrics(layout, cutout, environment)
    total_rows = math.ceil(days_in_year / layout.columns)
    full_rows = max(total_rows - metrics.rows_cut, 0)
    LOGGER.debug(
        "Planning %d days: %d full rows of %d, then rows of %d (rows_cut=%d, columns_cut=%d)",
        days_in_year,
        full_rows,
        layout.columns,
        metrics.short_columns,
        metrics.rows_cut,
        metrics.columns_cut,
    )

    rows: List[Row] = []
    start = _fill_rows(rows, 0, days_in_year, layout.columns, limit=full_rows)
    _fill_rows(rows, start, days_in_year, metrics.short_columns)
    return rows
