"""Capture module - primary display screenshot provider."""

from screenlog.capture.screenshot import (
    IMAGE_EXTENSION,
    ScreenCapture,
    encode_png,
    select_primary_monitor,
)

__all__ = ["IMAGE_EXTENSION", "ScreenCapture", "encode_png", "select_primary_monitor"]
