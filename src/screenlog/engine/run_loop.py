"""Run loop driving the screenshot writer on a fixed cadence."""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from screenlog.engine.writer import ScreenshotWriter, WriteStatus
from screenlog.errors import CaptureFailed, ConfigError, IoFailed
from screenlog.logging import (
    log_capture_failed,
    log_run_finished,
    log_state_change,
    log_write_failed,
)

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the run loop."""

    RUNNING = "running"
    SLEEPING = "sleeping"
    STOPPED = "stopped"


@dataclass
class RunSummary:
    """Totals for one run of the loop."""

    iterations: int = 0
    written: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False

    def to_dict(self) -> dict:
        return {
            "iterations": self.iterations,
            "written": self.written,
            "skipped": self.skipped,
            "failed": self.failed,
            "cancelled": self.cancelled,
        }


class RunLoop:
    """Calls ScreenshotWriter.write_screenshot every ``interval`` seconds.

    Runs ``count`` iterations, or until stop() is called when ``forever``
    is set. Capture and write failures are logged and the loop carries on
    with the next scheduled iteration. stop() is cooperative: an in-flight
    capture finishes, a pending sleep is cut short.

    Example:
        loop = RunLoop(writer, interval=10, forever=True, skip_duplicates=True)
        signal.signal(signal.SIGINT, lambda *_: loop.stop())
        summary = loop.run()
    """

    def __init__(
        self,
        writer: ScreenshotWriter,
        interval: float = 10.0,
        count: int = 1,
        forever: bool = False,
        skip_duplicates: bool = False,
    ) -> None:
        """Initialize the run loop.

        Args:
            writer: Writer that captures and persists each frame
            interval: Seconds to wait between iterations, 0 for no wait
            count: Number of iterations, ignored when forever is set
            forever: Run until stop() is called
            skip_duplicates: Passed through to the writer on every iteration

        Raises:
            ConfigError: If interval or count is negative
        """
        if interval < 0:
            raise ConfigError(f"interval must not be negative, got {interval}")
        if count < 0:
            raise ConfigError(f"count must not be negative, got {count}")

        self.writer = writer
        self.interval = float(interval)
        self.count = count
        self.forever = forever
        self.skip_duplicates = skip_duplicates

        self._state = LoopState.STOPPED
        self._stop_event = threading.Event()
        self._finished = False
        self._state_change_callbacks: list[Callable[[LoopState], None]] = []

    @property
    def state(self) -> LoopState:
        """Get current loop state."""
        return self._state

    @property
    def cancelled(self) -> bool:
        """True once stop() has been called."""
        return self._stop_event.is_set()

    def on_state_change(self, callback: Callable[[LoopState], None]) -> None:
        """Register callback for state changes.

        Args:
            callback: Function called with new LoopState on state change
        """
        self._state_change_callbacks.append(callback)

    def _set_state(self, new_state: LoopState, trigger: str | None = None) -> None:
        """Set state and notify callbacks."""
        if self._state == new_state:
            return
        old_state = self._state
        self._state = new_state
        log_state_change(logger, old_state.value, new_state.value, trigger)
        for callback in self._state_change_callbacks:
            try:
                callback(new_state)
            except Exception:
                logger.exception("State change callback failed")

    def stop(self) -> None:
        """Request the loop to stop.

        Safe to call from a signal handler or another thread.
        """
        self._stop_event.set()

    def run(self) -> RunSummary:
        """Run the loop until the count is exhausted or stop() is called.

        Returns:
            RunSummary with per-outcome totals

        Raises:
            RuntimeError: If the loop has already run
        """
        if self._finished:
            raise RuntimeError("RunLoop has already stopped and cannot be restarted")

        summary = RunSummary()
        remaining = self.count

        logger.info(
            "Starting capture loop: root=%s, interval=%ss, count=%s, skip_duplicates=%s",
            self.writer.root,
            self.interval,
            "forever" if self.forever else self.count,
            self.skip_duplicates,
        )

        try:
            while self.forever or remaining > 0:
                if self.cancelled:
                    break

                self._set_state(LoopState.RUNNING)
                summary.iterations += 1
                self._iterate(summary)

                if not self.forever:
                    remaining -= 1
                    if remaining <= 0:
                        break

                if self.cancelled:
                    break

                self._set_state(LoopState.SLEEPING)
                if self.interval > 0 and self._stop_event.wait(self.interval):
                    break
        finally:
            self._finished = True
            summary.cancelled = self.cancelled
            self._set_state(LoopState.STOPPED, "cancelled" if summary.cancelled else "completed")
            log_run_finished(
                logger,
                summary.iterations,
                summary.written,
                summary.skipped,
                summary.failed,
                summary.cancelled,
            )

        return summary

    def _iterate(self, summary: RunSummary) -> None:
        """Single capture-compare-write step; failures are contained here."""
        try:
            outcome = self.writer.write_screenshot(self.skip_duplicates)
        except CaptureFailed as e:
            summary.failed += 1
            log_capture_failed(logger, str(e), summary.iterations)
            return
        except IoFailed as e:
            summary.failed += 1
            log_write_failed(logger, str(e), summary.iterations, e.path)
            return

        if outcome.status is WriteStatus.WRITTEN:
            summary.written += 1
        else:
            summary.skipped += 1
