"""Engine module: screenshot writer and the run loop driving it."""

from screenlog.engine.run_loop import LoopState, RunLoop, RunSummary
from screenlog.engine.writer import ScreenshotWriter, WriteOutcome, WriteStatus

__all__ = [
    "LoopState",
    "RunLoop",
    "RunSummary",
    "ScreenshotWriter",
    "WriteOutcome",
    "WriteStatus",
]
