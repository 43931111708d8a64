"""Shared test doubles for screenlog tests."""

import logging
import os
from datetime import datetime, timedelta

import pytest

from screenlog.config import get_settings


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class SequenceProvider:
    """Capture provider returning canned frames in order.

    An Exception instance in the sequence is raised instead of returned.
    After the sequence runs out the last item repeats.
    """

    def __init__(self, frames):
        self.frames = list(frames)
        self.calls = 0

    def __call__(self) -> bytes:
        index = min(self.calls, len(self.frames) - 1)
        self.calls += 1
        frame = self.frames[index]
        if isinstance(frame, Exception):
            raise frame
        return frame


@pytest.fixture
def clock():
    """Clock fixed at 2026-10-19 14:03:07."""
    return FakeClock(datetime(2026, 10, 19, 14, 3, 7))


@pytest.fixture
def clean_settings(monkeypatch, tmp_path):
    """Fresh settings with no SCREENLOG_* environment and no .env file."""
    for key in list(os.environ):
        if key.startswith("SCREENLOG_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() changes to the root logger."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def files_under(root):
    """All image files below root, sorted."""
    return sorted(p for p in root.rglob("*.png") if p.is_file())
