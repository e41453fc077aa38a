"""Display driver adapters for the year progress grid."""
from __future__ import annotations

from .base import DisplayDriver, fit_to_resolution
from .waveshare import (
    DEFAULT_RESOLUTION,
    PreviewDisplayDriver,
    WaveshareEPDDriver,
    create_display_driver,
)

__all__ = [
    "DEFAULT_RESOLUTION",
    "DisplayDriver",
    "PreviewDisplayDriver",
    "WaveshareEPDDriver",
    "create_display_driver",
    "fit_to_resolution",
]
