"""Error types for screenlog."""

from pathlib import Path


class ScreenlogError(Exception):
    """Base error for screenlog."""


class ConfigError(ScreenlogError):
    """Raised when the output root or run parameters are unusable.

    Fatal: surfaced before the capture loop starts.
    """


class CaptureFailed(ScreenlogError):
    """Raised when the capture provider could not produce a frame."""


class IoFailed(ScreenlogError):
    """Raised when creating the day folder or writing the image fails."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path
