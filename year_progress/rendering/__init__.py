"""Grid planning and Pillow rendering for the year progress views."""

from .layout import (
    CutoutRect,
    DisplayEnvironment,
    EdgeInsets,
    GridLayoutConfig,
    InvalidLayoutConfig,
    Row,
    WidgetFamily,
    grid_layout_for,
)
from .planner import CutoutMetrics, cutout_metrics, plan_full_rows, plan_rows
from .renderer import RendererConfig, WidgetGeometry, YearProgressRenderer, format_grid_text

__all__ = [
    "CutoutMetrics",
    "CutoutRect",
    "DisplayEnvironment",
    "EdgeInsets",
    "GridLayoutConfig",
    "InvalidLayoutConfig",
    "RendererConfig",
    "Row",
    "WidgetFamily",
    "WidgetGeometry",
    "YearProgressRenderer",
    "cutout_metrics",
    "format_grid_text",
    "grid_layout_for",
    "plan_full_rows",
    "plan_rows",
]
