"""Renderer for composing the year progress widget and summary images."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..timeline import TimelineEntry
from ..yearinfo import DayYearInfo, format_year_progress
from .layout import (
    MEDIUM_INFO_WIDTH_RATIO,
    CutoutRect,
    DisplayEnvironment,
    GridLayoutConfig,
    Row,
    WidgetFamily,
    grid_layout_for,
    large_info_panel_size,
    padding_for,
)
from .planner import plan_full_rows, plan_rows

Box = Tuple[float, float, float, float]

LARGE_PANEL_BOTTOM_INSET = 12.0
MEDIUM_PANEL_INSET = 16.0
SUMMARY_HINT = "Add the widget to your home screen."


def _font_length(font: ImageFont.ImageFont, text: str) -> float:
    try:
        return font.getlength(text)  # type: ignore[attr-defined]
    except AttributeError:  # pragma: no cover - fallback for older Pillow
        dummy_img = Image.new("L", (1, 1), color=255)
        draw = ImageDraw.Draw(dummy_img)
        return float(draw.textlength(text, font=font))


def _load_font(path_candidates: Sequence[Path], size: int) -> ImageFont.ImageFont:
    for candidate in path_candidates:
        if candidate and candidate.exists():
            return ImageFont.truetype(str(candidate), size=size)
    return ImageFont.load_default()


def _default_font_candidates(bold: bool) -> List[Path]:
    names = [
        "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf",
        "Arial Bold.ttf" if bold else "Arial.ttf",
    ]
    candidates: List[Path] = []
    search_dirs = [
        Path("/usr/share/fonts/truetype/dejavu"),
        Path("/usr/share/fonts"),
        Path("/Library/Fonts"),
        Path.home() / ".fonts",
    ]
    for name in names:
        for directory in search_dirs:
            candidates.append(directory / name)
    return candidates


def format_grid_text(
    rows: Sequence[Row],
    day_of_year: int,
    *,
    filled: str = "●",
    empty: str = "·",
) -> str:
    """Return the grid as text, one line per row."""

    lines = []
    for row in rows:
        marks = (filled if day + 1 <= day_of_year else empty for day in range(row.start, row.stop))
        lines.append(" ".join(marks))
    return "\n".join(lines)


@dataclass(frozen=True)
class WidgetGeometry:
    """Where the grid and the info panel sit inside a widget, in layout units."""

    size: Tuple[float, float]
    layout: GridLayoutConfig
    rows: List[Row]
    grid_box: Box
    panel_box: Box | None
    centered: bool

    def dot_boxes(self, scale: float = 1.0) -> List[Tuple[int, Box]]:
        """Return ``(day_index, bbox)`` for every dot, scaled to pixels."""

        layout = self.layout
        left, top, right, _ = self.grid_box
        if self.centered:
            free = (right - left) - layout.grid_width()
            left += max(free / 2, 0.0)

        boxes: List[Tuple[int, Box]] = []
        for row_index, row in enumerate(self.rows):
            y = top + row_index * layout.dot_step
            for column in range(row.count):
                x = left + column * layout.dot_step
                boxes.append(
                    (
                        row.start + column,
                        (
                            x * scale,
                            y * scale,
                            (x + layout.dot_size) * scale,
                            (y + layout.dot_size) * scale,
                        ),
                    )
                )
        return boxes


def _fit_layout(layout: GridLayoutConfig, row_count: int, box: Box) -> GridLayoutConfig:
    """Shrink ``layout`` uniformly until ``row_count`` rows fit inside ``box``."""

    left, top, right, bottom = box
    factor = min(
        1.0,
        max(right - left, 0.0) / layout.grid_width(),
        max(bottom - top, 0.0) / layout.grid_height(row_count),
    )
    if factor >= 1.0 or factor <= 0.0:
        return layout
    return layout.scaled(factor)


def widget_geometry(
    entry: TimelineEntry,
    family: WidgetFamily,
    environment: DisplayEnvironment = DisplayEnvironment.MOBILE,
) -> WidgetGeometry:
    family = WidgetFamily(family)
    show_info = entry.show_day_info
    width, height = environment.widget_size(family)
    layout = grid_layout_for(family, show_info, environment)
    padding = padding_for(family, show_info)
    days = entry.info.days_in_year

    if family is WidgetFamily.LARGE:
        grid_box = (padding.leading, padding.top, width - padding.trailing, height - padding.bottom)
        if not show_info:
            rows = plan_full_rows(days, layout.columns)
            fitted = _fit_layout(layout, len(rows), grid_box)
            return WidgetGeometry((width, height), fitted, rows, grid_box, None, True)
        cutout: CutoutRect = large_info_panel_size((width, height))
        panel_bottom = height - LARGE_PANEL_BOTTOM_INSET
        panel_box = (width - cutout.width, panel_bottom - cutout.height, width, panel_bottom)
        rows = plan_rows(days, layout, cutout, environment)
        return WidgetGeometry((width, height), layout, rows, grid_box, panel_box, False)

    info_width = width * MEDIUM_INFO_WIDTH_RATIO if show_info else 0.0
    grid_right = width - info_width
    grid_box = (padding.leading, padding.top, grid_right - padding.trailing, height - padding.bottom)
    panel_box = None
    if show_info:
        panel_box = (
            grid_right,
            MEDIUM_PANEL_INSET,
            width - MEDIUM_PANEL_INSET,
            height - MEDIUM_PANEL_INSET,
        )
    rows = plan_full_rows(days, layout.columns)
    fitted = _fit_layout(layout, len(rows), grid_box)
    return WidgetGeometry((width, height), fitted, rows, grid_box, panel_box, True)


@dataclass
class RendererConfig:
    """Configuration values and font management for the renderer."""

    environment: DisplayEnvironment = DisplayEnvironment.MOBILE
    scale: float = 2.0
    font_regular_path: Path | None = None
    font_bold_path: Path | None = None
    preview_output_dir: Path | None = None
    background_color: int = 255
    foreground_color: int = 0
    caption_color: int = 77
    filled_dot_color: int = 51
    empty_dot_color: int = 204
    panel_number_font_size: int = 41
    panel_secondary_font_size: int = 22
    caption_font_size: int = 12
    summary_size: Tuple[float, float] = (400.0, 240.0)
    summary_title_font_size: int = 34
    summary_progress_font_size: int = 24
    summary_hint_font_size: int = 14

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.preview_output_dir is not None:
            self.preview_output_dir = Path(self.preview_output_dir)
            self.preview_output_dir.mkdir(parents=True, exist_ok=True)

    def _font_candidates(self, bold: bool) -> List[Path]:
        provided = self.font_bold_path if bold else self.font_regular_path
        candidates: List[Path] = []
        if provided is not None:
            candidates.append(Path(provided))
        candidates.extend(_default_font_candidates(bold))
        return candidates

    def font(self, size: int, *, bold: bool = False) -> ImageFont.ImageFont:
        return _load_font(self._font_candidates(bold), max(int(round(size * self.scale)), 1))


class YearProgressRenderer:
    """Compose the widget and summary images."""

    def __init__(self, config: RendererConfig | None = None) -> None:
        self.config = config or RendererConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def geometry(self, entry: TimelineEntry, family: WidgetFamily) -> WidgetGeometry:
        return widget_geometry(entry, family, self.config.environment)

    def render_widget(
        self,
        entry: TimelineEntry,
        family: WidgetFamily,
        *,
        preview_name: str | None = None,
    ) -> Image.Image:
        """Render the dot grid widget for ``entry``.

        Args:
            entry: Timeline entry carrying the date and the info panel flag.
            family: Widget size family.
            preview_name: Optional name for the preview PNG when preview mode
                is enabled.
        Returns:
            A Pillow image of the widget.
        """

        geometry = self.geometry(entry, family)
        image = self._blank(geometry.size)
        draw = ImageDraw.Draw(image)
        info = entry.info

        self._draw_dots(draw, geometry, info)
        if geometry.panel_box is not None:
            if WidgetFamily(family) is WidgetFamily.LARGE:
                self._draw_compact_panel(draw, geometry.panel_box, info)
            else:
                self._draw_side_panel(draw, geometry.panel_box, info)

        suffix = f"{WidgetFamily(family).value}{'-info' if entry.show_day_info else ''}"
        self._save_preview(image, preview_name or f"{entry.date:%Y%m%d}-{suffix}")
        return image

    def render_summary(self, now: datetime, *, preview_name: str | None = None) -> Image.Image:
        """Render the standalone view: title, share of the year elapsed and a hint."""

        cfg = self.config
        image = self._blank(cfg.summary_size)
        draw = ImageDraw.Draw(image)
        width = image.width

        title_font = cfg.font(cfg.summary_title_font_size, bold=True)
        progress_font = cfg.font(cfg.summary_progress_font_size)
        hint_font = cfg.font(cfg.summary_hint_font_size)
        lines = [
            ("Year Progress", title_font, cfg.summary_title_font_size, cfg.foreground_color),
            (format_year_progress(now), progress_font, cfg.summary_progress_font_size, cfg.caption_color),
            (SUMMARY_HINT, hint_font, cfg.summary_hint_font_size, cfg.caption_color),
        ]
        gap = 20 * cfg.scale
        total_height = sum(size * cfg.scale for _, _, size, _ in lines) + gap * (len(lines) - 1)
        y = (image.height - total_height) / 2
        for text, font, size, color in lines:
            x = (width - _font_length(font, text)) / 2
            draw.text((x, y), text, font=font, fill=color)
            y += size * cfg.scale + gap

        self._save_preview(image, preview_name or f"{now:%Y%m%d}-summary")
        return image

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------
    def _blank(self, size: Tuple[float, float]) -> Image.Image:
        scale = self.config.scale
        pixels = (int(round(size[0] * scale)), int(round(size[1] * scale)))
        return Image.new("L", pixels, color=self.config.background_color)

    def _save_preview(self, image: Image.Image, name: str) -> None:
        output_dir = self.config.preview_output_dir
        if output_dir is not None:
            image.save(output_dir / f"{name}.png")

    def _draw_dots(self, draw: ImageDraw.ImageDraw, geometry: WidgetGeometry, info: DayYearInfo) -> None:
        cfg = self.config
        for day_index, bbox in geometry.dot_boxes(cfg.scale):
            color = cfg.filled_dot_color if info.is_elapsed(day_index) else cfg.empty_dot_color
            draw.ellipse(bbox, fill=color)

    def _draw_stat(
        self,
        draw: ImageDraw.ImageDraw,
        origin: Tuple[float, float],
        value: int,
        label: str,
        value_size: int,
    ) -> float:
        """Draw a number with its caption below; return the y below the caption."""

        cfg = self.config
        x, y = origin
        draw.text((x, y), str(value), font=cfg.font(value_size, bold=True), fill=cfg.foreground_color)
        y += value_size * cfg.scale
        draw.text((x, y), label, font=cfg.font(cfg.caption_font_size), fill=cfg.caption_color)
        return y + cfg.caption_font_size * cfg.scale

    def _draw_compact_panel(self, draw: ImageDraw.ImageDraw, box: Box, info: DayYearInfo) -> None:
        cfg = self.config
        scale = cfg.scale
        left, top, _, _ = box
        x = (left + 16) * scale
        y = (top + 23) * scale
        y = self._draw_stat(draw, (x, y), info.day_of_year, "Passed", cfg.panel_number_font_size)
        self._draw_stat(draw, (x, y + 4 * scale), info.days_remaining, "Left", cfg.panel_secondary_font_size)

    def _draw_side_panel(self, draw: ImageDraw.ImageDraw, box: Box, info: DayYearInfo) -> None:
        cfg = self.config
        scale = cfg.scale
        left, top, _, _ = box
        x = (left + 8) * scale
        y = (top + 8) * scale
        y = self._draw_stat(draw, (x, y), info.day_of_year, "Passed", cfg.panel_number_font_size)
        self._draw_stat(draw, (x, y), info.days_remaining, "Left", cfg.panel_secondary_font_size)


__all__ = [
    "RendererConfig",
    "WidgetGeometry",
    "YearProgressRenderer",
    "format_grid_text",
    "widget_geometry",
]
