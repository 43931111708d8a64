"""Screenshot writer: capture, compare against the last write, persist.

Files land in a day folder under the output root:

    <root>/2026-10-19/2026-10-19T14.03.07.png

A second write within the same second gets a ``-1``, ``-2``... suffix
instead of replacing the earlier file.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from screenlog.capture import IMAGE_EXTENSION, ScreenCapture
from screenlog.errors import CaptureFailed, ConfigError, IoFailed
from screenlog.logging import log_screenshot_skipped, log_screenshot_written

logger = logging.getLogger(__name__)

DAY_FOLDER_FORMAT = "%Y-%m-%d"
FILENAME_FORMAT = "%Y-%m-%dT%H.%M.%S"


class WriteStatus(Enum):
    """What a single write_screenshot call did."""

    WRITTEN = "written"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class WriteOutcome:
    """Result of a write_screenshot call that did not fail."""

    status: WriteStatus
    path: Path | None = None

    @classmethod
    def written(cls, path: Path) -> "WriteOutcome":
        return cls(WriteStatus.WRITTEN, path)

    @classmethod
    def skipped(cls) -> "WriteOutcome":
        return cls(WriteStatus.SKIPPED)


def day_folder_name(moment: datetime) -> str:
    """Name of the day folder for a moment, e.g. ``2026-10-19``."""
    return moment.strftime(DAY_FOLDER_FORMAT)


def image_filename(moment: datetime, extension: str = IMAGE_EXTENSION, sequence: int = 0) -> str:
    """Image filename for a moment, e.g. ``2026-10-19T14.03.07.png``.

    A non-zero sequence number is appended as ``-N`` to disambiguate
    several images taken within the same second.
    """
    stem = moment.strftime(FILENAME_FORMAT)
    if sequence:
        stem = f"{stem}-{sequence}"
    return f"{stem}.{extension}"


def resolve_root(root: str | os.PathLike) -> Path:
    """Resolve an output root to an absolute path without touching it.

    Resolution is lexical against the current working directory; the
    path does not need to exist.

    Raises:
        ConfigError: If the path is malformed or the working directory
            cannot be determined.
    """
    try:
        raw = os.fsdecode(root)
    except TypeError as e:
        raise ConfigError(f"Invalid output path {root!r}: {e}") from e

    if not raw.strip():
        raise ConfigError("Output path must not be empty")
    if "\x00" in raw:
        raise ConfigError("Output path must not contain NUL bytes")

    try:
        return Path(os.path.abspath(os.path.expanduser(raw)))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot resolve output path {raw!r}: {e}") from e


class ScreenshotWriter:
    """Captures the screen and writes new frames into day folders.

    Holds the resolved output root and the bytes of the last frame that
    was actually written. With duplicate skipping enabled, a capture that
    is byte-identical to that frame is discarded. A failed write never
    becomes the new baseline.

    Example:
        writer = ScreenshotWriter("~/screenshots")
        outcome = writer.write_screenshot(skip_duplicates=True)
        if outcome.status is WriteStatus.WRITTEN:
            print(outcome.path)
    """

    def __init__(
        self,
        root: str | os.PathLike,
        capture: Callable[[], bytes] | None = None,
        extension: str = IMAGE_EXTENSION,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the writer.

        Args:
            root: Output root, relative paths resolve against the cwd
            capture: Provider returning one encoded frame. Defaults to the
                primary display, created on first use.
            extension: File extension matching the provider's encoding
            clock: Source of local wall-clock time

        Raises:
            ConfigError: If the root cannot be resolved
        """
        self._root = resolve_root(root)
        self._capture = capture
        self.extension = extension
        self._clock = clock
        self._last_capture: bytes | None = None

    @property
    def root(self) -> Path:
        """Absolute output root."""
        return self._root

    @property
    def last_capture(self) -> bytes | None:
        """Bytes of the most recently written frame, None before the first write."""
        return self._last_capture

    def date_folder_path(self) -> Path:
        """Day folder for the current date. Recomputed on every call."""
        return self._date_folder(self._clock())

    def _date_folder(self, moment: datetime) -> Path:
        return self._root / day_folder_name(moment)

    def _grab(self) -> bytes:
        if self._capture is None:
            self._capture = ScreenCapture().capture_primary
        try:
            frame = self._capture()
        except Exception as e:
            raise CaptureFailed(f"Screen capture failed: {e}") from e
        if not isinstance(frame, (bytes, bytearray, memoryview)):
            raise CaptureFailed(
                f"Screen capture returned {type(frame).__name__}, expected encoded image bytes"
            )
        return bytes(frame)

    def write_screenshot(self, skip_duplicates: bool = False) -> WriteOutcome:
        """Capture one frame and write it unless it duplicates the last write.

        Args:
            skip_duplicates: Discard a frame byte-identical to the last
                written one

        Returns:
            WriteOutcome with status WRITTEN and the file path, or SKIPPED

        Raises:
            CaptureFailed: If the capture provider failed
            IoFailed: If the day folder or image file could not be written
        """
        image = self._grab()

        if skip_duplicates and self._last_capture is not None and image == self._last_capture:
            log_screenshot_skipped(logger, "duplicate", file_size=len(image))
            return WriteOutcome.skipped()

        now = self._clock()
        folder = self._date_folder(now)
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoFailed(f"Failed to create directory {folder}: {e}", path=folder) from e

        path = self._write_new_file(folder, now, image)

        self._last_capture = image
        log_screenshot_written(logger, path, len(image))
        return WriteOutcome.written(path)

    def _write_new_file(self, folder: Path, moment: datetime, data: bytes) -> Path:
        """Create a fresh image file in folder and write data to it."""
        sequence = 0
        while True:
            path = folder / image_filename(moment, self.extension, sequence)
            try:
                f = open(path, "xb")
            except FileExistsError:
                sequence += 1
                continue
            except OSError as e:
                raise IoFailed(f"Failed to create {path}: {e}", path=path) from e
            break

        try:
            with f:
                f.write(data)
        except OSError as e:
            # Don't leave a truncated image behind
            try:
                path.unlink(missing_ok=True)
            except OSError:
                pass
            raise IoFailed(f"Failed to write {path}: {e}", path=path) from e

        return path
