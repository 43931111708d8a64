"""Primary-display screenshot capture with X11 and Wayland support."""

import os
import shutil
import subprocess
import tempfile
from io import BytesIO

from PIL import Image

# Single fixed encoding for every frame
IMAGE_FORMAT = "PNG"
IMAGE_EXTENSION = "png"


def encode_png(img: Image.Image) -> bytes:
    """Encode a PIL Image as PNG bytes.

    Args:
        img: PIL Image to encode

    Returns:
        PNG image as bytes
    """
    buffer = BytesIO()
    img.save(buffer, format=IMAGE_FORMAT, optimize=False)
    return buffer.getvalue()


def _is_wayland() -> bool:
    """Check if running on Wayland."""
    return os.environ.get("XDG_SESSION_TYPE") == "wayland" or "WAYLAND_DISPLAY" in os.environ


def _has_grim() -> bool:
    """Check if grim is available for Wayland screenshots."""
    return shutil.which("grim") is not None


def select_primary_monitor(monitors: list[dict]) -> dict:
    """Pick the primary display from an mss monitor list.

    mss reports the combined virtual screen at index 0 followed by the
    individual displays in backend order, which need not put the primary
    first. The primary is the display containing the origin (0, 0).
    Without one, the first individual display is used, then the combined
    screen when no individual display is listed.

    Raises:
        RuntimeError: If no monitor is available at all
    """
    displays = monitors[1:]
    for monitor in displays:
        if monitor.get("left") == 0 and monitor.get("top") == 0:
            return monitor
    if displays:
        return displays[0]
    if monitors:
        return monitors[0]
    raise RuntimeError("No display available to capture")


class ScreenCapture:
    """Captures the primary display as PNG bytes.

    Automatically detects X11 vs Wayland and uses appropriate backend:
    - X11 (and Windows/macOS): Uses mss library for fast capture
    - Wayland: Uses grim command-line tool

    Example:
        capture = ScreenCapture()
        png_bytes = capture.capture_primary()
    """

    def __init__(self, grim_timeout: float = 10.0):
        """Initialize screen capture.

        Args:
            grim_timeout: Seconds to wait for grim before giving up
        """
        self.grim_timeout = grim_timeout
        self._use_wayland = _is_wayland() and _has_grim()

    @property
    def extension(self) -> str:
        """File extension matching the encoded frames."""
        return IMAGE_EXTENSION

    def capture_primary(self) -> bytes:
        """Capture the primary display.

        Returns:
            PNG encoded image bytes

        Raises:
            RuntimeError: If capture fails
        """
        if self._use_wayland:
            return self._capture_wayland()
        return self._capture_mss()

    def _capture_wayland(self) -> bytes:
        """Capture screenshot using grim on Wayland.

        grim is run without -o, so with several outputs the frame spans
        all of them.
        """
        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            tmpfile = f.name

        try:
            result = subprocess.run(
                ["grim", "-t", "png", tmpfile],
                capture_output=True,
                timeout=self.grim_timeout,
                env={**os.environ, "G_MESSAGES_DEBUG": ""},  # Suppress GLib debug messages
            )

            stderr = result.stderr.decode() if result.stderr else ""
            if "GDBus.Error" in stderr or "org.freedesktop.portal" in stderr:
                raise RuntimeError(f"Wayland portal error (GDBus): {stderr.strip()}")

            if result.returncode != 0:
                raise RuntimeError(f"grim failed (exit {result.returncode}): {stderr.strip()}")

            if not os.path.exists(tmpfile) or os.path.getsize(tmpfile) == 0:
                raise RuntimeError(
                    "grim succeeded but produced no output file. "
                    "This may indicate a Wayland compositor issue."
                )

            with open(tmpfile, "rb") as f:
                return f.read()
        except subprocess.TimeoutExpired:
            raise RuntimeError(f"grim timed out after {self.grim_timeout} seconds")
        finally:
            try:
                os.unlink(tmpfile)
            except OSError:
                pass

    def _capture_mss(self) -> bytes:
        """Capture screenshot using mss."""
        import mss

        with mss.mss() as sct:
            monitor = select_primary_monitor(list(sct.monitors))
            screenshot = sct.grab(monitor)

            # Convert BGRA to RGB PIL Image
            img = Image.frombytes(
                "RGB",
                screenshot.size,
                screenshot.bgra,
                "raw",
                "BGRX",
            )

            return encode_png(img)
