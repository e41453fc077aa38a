"""Abstract display driver interface used by the application."""
from __future__ import annotations

from abc import ABC, abstractmethod

from PIL import Image, ImageOps


class DisplayDriver(ABC):
    """Defines the behaviour required from any display backend."""

    @property
    @abstractmethod
    def resolution(self) -> tuple[int, int]:
        """Return the (width, height) of the display in pixels."""

    @abstractmethod
    def initialize(self) -> None:
        """Power on and prepare the display for updates."""

    @abstractmethod
    def clear(self) -> None:
        """Clear the display to a blank white frame."""

    @abstractmethod
    def display_image(self, image: Image.Image) -> None:
        """Push a rendered PIL image to the display."""

    @abstractmethod
    def sleep(self) -> None:
        """Put the display into low power sleep mode."""


def fit_to_resolution(
    image: Image.Image,
    resolution: tuple[int, int],
    *,
    background: int = 255,
) -> Image.Image:
    """Scale ``image`` to fit ``resolution`` and center it on a blank canvas.

    The aspect ratio is preserved. Images already at the target size are returned
    as grayscale copies.
    """

    grayscale = image.convert("L")
    if grayscale.size == resolution:
        return grayscale
    fitted = ImageOps.contain(grayscale, resolution, Image.Resampling.LANCZOS)
    canvas = Image.new("L", resolution, background)
    offset = ((resolution[0] - fitted.width) // 2, (resolution[1] - fitted.height) // 2)
    canvas.paste(fitted, offset)
    return canvas
