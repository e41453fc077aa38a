"""Layout constants and helpers for the year progress dot grid."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Final

__all__ = [
    "CutoutRect",
    "DisplayEnvironment",
    "EdgeInsets",
    "GridLayoutConfig",
    "InvalidLayoutConfig",
    "Row",
    "WidgetFamily",
    "grid_layout_for",
    "large_info_panel_size",
    "padding_for",
]


class InvalidLayoutConfig(ValueError):
    """Raised when grid geometry is malformed (negative, zero or non-finite dimensions)."""


@dataclass(frozen=True)
class GridLayoutConfig:
    """Column count and dot geometry of a grid, in layout units."""

    columns: int
    spacing: float
    dot_size: float

    def __post_init__(self) -> None:
        if isinstance(self.columns, bool) or not isinstance(self.columns, int):
            raise InvalidLayoutConfig(f"columns must be an integer, got {self.columns!r}")
        if self.columns <= 0:
            raise InvalidLayoutConfig(f"columns must be positive, got {self.columns}")
        if not (math.isfinite(self.spacing) and math.isfinite(self.dot_size)):
            raise InvalidLayoutConfig(
                f"spacing and dot_size must be finite, got {self.spacing} and {self.dot_size}"
            )
        if self.spacing < 0:
            raise InvalidLayoutConfig(f"spacing must not be negative, got {self.spacing}")
        if self.dot_size <= 0:
            raise InvalidLayoutConfig(f"dot_size must be positive, got {self.dot_size}")

    @property
    def dot_step(self) -> float:
        return self.dot_size + self.spacing

    def grid_width(self, columns: int | None = None) -> float:
        """Return the width occupied by ``columns`` dots (defaults to all columns)."""

        count = self.columns if columns is None else columns
        if count <= 0:
            return 0.0
        return count * self.dot_size + (count - 1) * self.spacing

    def grid_height(self, rows: int) -> float:
        if rows <= 0:
            return 0.0
        return rows * self.dot_size + (rows - 1) * self.spacing

    def scaled(self, factor: float) -> "GridLayoutConfig":
        """Return the same grid with dots and gaps multiplied by ``factor``."""

        return GridLayoutConfig(self.columns, self.spacing * factor, self.dot_size * factor)


@dataclass(frozen=True)
class CutoutRect:
    """Region at the bottom-trailing corner of the grid that must stay empty."""

    width: float = 0.0
    height: float = 0.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.width) and math.isfinite(self.height)):
            raise InvalidLayoutConfig(
                f"cutout dimensions must be finite, got {self.width}x{self.height}"
            )
        if self.width < 0 or self.height < 0:
            raise InvalidLayoutConfig(
                f"cutout dimensions must not be negative, got {self.width}x{self.height}"
            )

    @classmethod
    def zero(cls) -> "CutoutRect":
        return cls(0.0, 0.0)

    @property
    def is_zero(self) -> bool:
        return self.width == 0 and self.height == 0


@dataclass(frozen=True, slots=True)
class Row:
    """One line of the dot grid: zero-based index of its first day and its length."""

    start: int
    count: int

    @property
    def stop(self) -> int:
        return self.start + self.count


@dataclass(frozen=True)
class EdgeInsets:
    top: float = 0.0
    leading: float = 0.0
    bottom: float = 0.0
    trailing: float = 0.0

    @property
    def horizontal(self) -> float:
        return self.leading + self.trailing

    @property
    def vertical(self) -> float:
        return self.top + self.bottom


class WidgetFamily(str, Enum):
    MEDIUM = "medium"
    LARGE = "large"


class DisplayEnvironment(Enum):
    """Host environments with their empirical cutout margins and widget sizes.

    ``margin_adjustment`` is the vertical inset consumed by the info panel's own
    padding and ``width_adjustment`` the horizontal one. Both are in layout units.
    """

    MOBILE = ("mobile", 42.0, 22.0, (364.0, 170.0), (364.0, 382.0))
    DESKTOP = ("desktop", 48.0, 21.0, (329.0, 155.0), (329.0, 345.0))

    def __init__(
        self,
        label: str,
        margin_adjustment: float,
        width_adjustment: float,
        medium_size: tuple[float, float],
        large_size: tuple[float, float],
    ) -> None:
        self.label = label
        self.margin_adjustment = margin_adjustment
        self.width_adjustment = width_adjustment
        self._sizes = {
            WidgetFamily.MEDIUM: medium_size,
            WidgetFamily.LARGE: large_size,
        }

    @classmethod
    def from_label(cls, label: str) -> "DisplayEnvironment":
        for member in cls:
            if member.label == label.lower():
                return member
        raise ValueError(f"Unknown display environment: {label!r}")

    def widget_size(self, family: WidgetFamily) -> tuple[float, float]:
        """Return the nominal (width, height) of a widget family in layout units."""

        return self._sizes[WidgetFamily(family)]


LARGE_LAYOUT_WITH_INFO: Final[GridLayoutConfig] = GridLayoutConfig(columns=22, spacing=8, dot_size=4.9)
LARGE_LAYOUT_NO_INFO: Final[GridLayoutConfig] = GridLayoutConfig(columns=20, spacing=8, dot_size=7)
MEDIUM_LAYOUT_NO_INFO: Final[GridLayoutConfig] = GridLayoutConfig(columns=30, spacing=4.7, dot_size=5)
_MEDIUM_LAYOUT_WITH_INFO: Final[dict[DisplayEnvironment, GridLayoutConfig]] = {
    DisplayEnvironment.MOBILE: GridLayoutConfig(columns=27, spacing=3, dot_size=5),
    DisplayEnvironment.DESKTOP: GridLayoutConfig(columns=29, spacing=3, dot_size=5),
}

LARGE_PADDING_WITH_INFO: Final[EdgeInsets] = EdgeInsets(top=43, leading=32, bottom=12, trailing=16)
LARGE_PADDING_NO_INFO: Final[EdgeInsets] = EdgeInsets(top=26, leading=24, bottom=24, trailing=24)
MEDIUM_PADDING_WITH_INFO: Final[EdgeInsets] = EdgeInsets(top=27, leading=27, bottom=25, trailing=6)
MEDIUM_PADDING_NO_INFO: Final[EdgeInsets] = EdgeInsets(top=21, leading=0.5, bottom=25, trailing=27)

MEDIUM_INFO_WIDTH_RATIO: Final[float] = 0.33
LARGE_PANEL_WIDTH_DIVISOR: Final[float] = 3.47
LARGE_PANEL_HEIGHT_DIVISOR: Final[float] = 2.5


def grid_layout_for(
    family: WidgetFamily,
    show_day_info: bool,
    environment: DisplayEnvironment = DisplayEnvironment.MOBILE,
) -> GridLayoutConfig:
    """Return the grid preset used for a widget family."""

    family = WidgetFamily(family)
    if family is WidgetFamily.LARGE:
        return LARGE_LAYOUT_WITH_INFO if show_day_info else LARGE_LAYOUT_NO_INFO
    if show_day_info:
        return _MEDIUM_LAYOUT_WITH_INFO[environment]
    return MEDIUM_LAYOUT_NO_INFO


def padding_for(family: WidgetFamily, show_day_info: bool) -> EdgeInsets:
    if WidgetFamily(family) is WidgetFamily.LARGE:
        return LARGE_PADDING_WITH_INFO if show_day_info else LARGE_PADDING_NO_INFO
    return MEDIUM_PADDING_WITH_INFO if show_day_info else MEDIUM_PADDING_NO_INFO


def large_info_panel_size(widget_size: tuple[float, float]) -> CutoutRect:
    """Return the size of the large widget's corner panel, used as the grid cutout."""

    width, height = widget_size
    padding = LARGE_PADDING_WITH_INFO
    available_width = max(width - padding.horizontal, 0.0)
    available_height = max(height - padding.vertical, 0.0)
    return CutoutRect(
        width=available_width / LARGE_PANEL_WIDTH_DIVISOR,
        height=available_height / LARGE_PANEL_HEIGHT_DIVISOR,
    )
