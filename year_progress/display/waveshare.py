"""Waveshare 7.5"" e-ink adapter with a PNG preview implementation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Any, Optional

from PIL import Image, ImageChops

from .base import DisplayDriver

try:  # pragma: no cover - exercised indirectly when hardware is available
    from waveshare_epd import epd7in5_V2
except Exception:  # pragma: no cover - import fails on non-hardware hosts
    epd7in5_V2 = None


DEFAULT_RESOLUTION: tuple[int, int] = (800, 480)


class WaveshareEPDDriver(DisplayDriver):
    """Driver for the physical Waveshare EPD module.

    The grid changes once a day, so every changed frame gets a full refresh;
    identical frames are skipped to spare the panel.
    """

    def __init__(self, *, epd: Any | None = None, logger: logging.Logger | None = None) -> None:
        if epd is None:
            if epd7in5_V2 is None:
                raise RuntimeError("Waveshare vendor driver is unavailable on this host")
            epd = epd7in5_V2.EPD()
        self._epd = epd
        self._logger = logger or logging.getLogger(__name__)
        self._initialized = False
        self._last_frame: Image.Image | None = None

    @classmethod
    def is_supported(cls) -> bool:
        """Return True when the vendor library can be imported."""

        return epd7in5_V2 is not None

    @property
    def resolution(self) -> tuple[int, int]:
        return int(self._epd.width), int(self._epd.height)

    def initialize(self) -> None:
        if not self._initialized:
            self._logger.debug("Initializing Waveshare EPD")
            self._epd.init()
            self._initialized = True

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("Display has not been initialized. Call initialize() first.")

    def clear(self) -> None:
        self._require_initialized()
        self._logger.debug("Clearing display")
        self._epd.Clear()
        self._last_frame = None

    def display_image(self, image: Image.Image) -> None:
        self._require_initialized()
        processed = self._prepare_image(image)

        if self._last_frame is not None:
            if ImageChops.difference(self._last_frame, processed).getbbox() is None:
                self._logger.debug("Frame unchanged; skipping update")
                return

        self._logger.debug("Performing full refresh")
        self._epd.display(bytes(self._epd.getbuffer(processed)))
        self._last_frame = processed.copy()

    def sleep(self) -> None:
        if self._initialized:
            self._logger.debug("Putting display to sleep")
            self._epd.sleep()
            self._initialized = False

    def _prepare_image(self, image: Image.Image) -> Image.Image:
        if image.size != self.resolution:
            raise ValueError(
                f"Image has resolution {image.size}, expected {self.resolution} for this display."
            )
        grayscale = image.convert("L")
        return grayscale.convert("1", dither=Image.Dither.FLOYDSTEINBERG)


@dataclass
class PreviewDisplayDriver(DisplayDriver):
    """Display stand-in that records frames and optionally writes them as PNG files."""

    resolution: tuple[int, int] = DEFAULT_RESOLUTION
    output_dir: Optional[Path] = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))
    keep_history: bool = True

    def __post_init__(self) -> None:
        self._initialized = False
        self._history: list[Image.Image] = []
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
            self.output_dir.mkdir(parents=True, exist_ok=True)

    def initialize(self) -> None:
        if not self._initialized:
            self.logger.debug("Preview display initialized")
            self._initialized = True

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("Preview display has not been initialized. Call initialize() first.")

    def clear(self) -> None:
        self._require_initialized()
        self.logger.debug("Preview display cleared")
        if self.keep_history:
            self._history.append(Image.new("L", self.resolution, 255))

    def display_image(self, image: Image.Image) -> None:
        self._require_initialized()
        if image.size != self.resolution:
            raise ValueError(
                f"Image has resolution {image.size}, expected {self.resolution} for the preview display."
            )
        processed = image.convert("L")
        if self.keep_history:
            self._history.append(processed.copy())
        if self.output_dir is not None:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S-%fZ")
            output_path = self.output_dir / f"frame-{timestamp}.png"
            processed.save(output_path)
            self.logger.info("Saved preview frame to %s", output_path)

    def sleep(self) -> None:
        if self._initialized:
            self.logger.debug("Preview display sleeping")
            self._initialized = False

    @property
    def history(self) -> list[Image.Image]:
        """Return copies of the frames pushed to the display (if enabled)."""

        return [frame.copy() for frame in self._history]


def create_display_driver(
    *,
    prefer_preview: bool = False,
    output_dir: Optional[Path] = None,
    logger: Optional[logging.Logger] = None,
) -> DisplayDriver:
    """Create a display driver instance using the hardware driver when available."""

    if prefer_preview or not WaveshareEPDDriver.is_supported():
        return PreviewDisplayDriver(output_dir=output_dir, logger=logger or logging.getLogger(__name__))
    return WaveshareEPDDriver(logger=logger)
