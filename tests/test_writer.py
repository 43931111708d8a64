"""Tests for ScreenshotWriter: path derivation, duplicate skipping, failures."""

import builtins
import errno
import os
from datetime import datetime
from pathlib import Path

import pytest

from conftest import FakeClock, SequenceProvider, files_under
from screenlog.engine.writer import (
    ScreenshotWriter,
    WriteStatus,
    day_folder_name,
    image_filename,
    resolve_root,
)
from screenlog.errors import CaptureFailed, ConfigError, IoFailed


class TestRootResolution:
    """Output root is made absolute without touching the filesystem."""

    def test_relative_root_resolves_against_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        writer = ScreenshotWriter("shots/../out", capture=SequenceProvider([b"x"]))

        assert writer.root == Path(os.path.abspath("out"))
        assert writer.root.is_absolute()

    def test_absolute_root_is_kept(self, tmp_path):
        writer = ScreenshotWriter(tmp_path / "out", capture=SequenceProvider([b"x"]))
        assert writer.root == tmp_path / "out"

    def test_construction_does_not_create_root(self, tmp_path):
        ScreenshotWriter(tmp_path / "not" / "yet", capture=SequenceProvider([b"x"]))
        assert not (tmp_path / "not").exists()

    def test_construction_does_not_capture(self, tmp_path):
        provider = SequenceProvider([b"x"])
        writer = ScreenshotWriter(tmp_path, capture=provider)

        assert provider.calls == 0
        assert writer.last_capture is None

    def test_home_is_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert resolve_root("~/shots") == tmp_path / "shots"

    @pytest.mark.parametrize("bad", ["", "   ", "shots\x00bad"])
    def test_malformed_root_is_config_error(self, bad):
        with pytest.raises(ConfigError):
            ScreenshotWriter(bad)


class TestNaming:
    """Day folder and filename formats."""

    def test_day_folder_name(self):
        assert day_folder_name(datetime(2026, 1, 5, 23, 59, 59)) == "2026-01-05"

    def test_image_filename(self):
        moment = datetime(2026, 1, 5, 9, 8, 7)
        assert image_filename(moment) == "2026-01-05T09.08.07.png"
        assert image_filename(moment, "png", 2) == "2026-01-05T09.08.07-2.png"

    def test_date_folder_path_recomputed_each_call(self, tmp_path, clock):
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([b"x"]), clock=clock)

        first = writer.date_folder_path()
        clock.advance(days=1)
        second = writer.date_folder_path()

        assert first == tmp_path / "2026-10-19"
        assert second == tmp_path / "2026-10-20"

    def test_date_folder_path_has_no_side_effects(self, tmp_path, clock):
        writer = ScreenshotWriter(tmp_path / "root", capture=SequenceProvider([b"x"]), clock=clock)
        writer.date_folder_path()
        assert not (tmp_path / "root").exists()


class TestWriteScreenshot:
    """Capture, compare, persist."""

    def test_write_creates_day_folder_and_file(self, tmp_path, clock):
        writer = ScreenshotWriter(tmp_path / "out", capture=SequenceProvider([b"\x01\x02\x03"]), clock=clock)

        outcome = writer.write_screenshot(skip_duplicates=False)

        assert outcome.status is WriteStatus.WRITTEN
        assert outcome.path == tmp_path / "out" / "2026-10-19" / "2026-10-19T14.03.07.png"
        assert outcome.path.read_bytes() == b"\x01\x02\x03"
        assert writer.last_capture == b"\x01\x02\x03"

    def test_no_skipping_writes_every_capture(self, tmp_path, clock):
        frames = [b"same", b"same", b"same", b"other"]
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider(frames), clock=clock)

        paths = []
        for _ in frames:
            outcome = writer.write_screenshot(skip_duplicates=False)
            assert outcome.status is WriteStatus.WRITTEN
            paths.append(outcome.path)
            clock.advance(seconds=1)

        assert len(files_under(tmp_path)) == 4
        assert [p.read_bytes() for p in paths] == frames
        assert all(p.parent == tmp_path / "2026-10-19" for p in paths)

    def test_identical_frames_skipped(self, tmp_path, clock):
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([b"B", b"B"]), clock=clock)

        first = writer.write_screenshot(skip_duplicates=True)
        clock.advance(seconds=1)
        second = writer.write_screenshot(skip_duplicates=True)

        assert first.status is WriteStatus.WRITTEN
        assert second.status is WriteStatus.SKIPPED
        assert second.path is None
        assert len(files_under(tmp_path)) == 1

    def test_different_frames_both_written(self, tmp_path, clock):
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([b"B", b"B'"]), clock=clock)

        writer.write_screenshot(skip_duplicates=True)
        clock.advance(seconds=1)
        writer.write_screenshot(skip_duplicates=True)

        assert len(files_under(tmp_path)) == 2
        assert writer.last_capture == b"B'"

    def test_first_capture_never_skipped(self, tmp_path, clock):
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([b""]), clock=clock)
        assert writer.write_screenshot(skip_duplicates=True).status is WriteStatus.WRITTEN

    def test_same_second_writes_are_disambiguated(self, tmp_path, clock):
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([b"a", b"b", b"c"]), clock=clock)

        names = [writer.write_screenshot().path.name for _ in range(3)]

        assert names == [
            "2026-10-19T14.03.07.png",
            "2026-10-19T14.03.07-1.png",
            "2026-10-19T14.03.07-2.png",
        ]
        day = tmp_path / "2026-10-19"
        assert (day / "2026-10-19T14.03.07.png").read_bytes() == b"a"
        assert (day / "2026-10-19T14.03.07-2.png").read_bytes() == b"c"

    def test_existing_day_folder_is_reused(self, tmp_path, clock):
        (tmp_path / "2026-10-19").mkdir()
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([b"x"]), clock=clock)

        outcome = writer.write_screenshot()

        assert outcome.path.parent == tmp_path / "2026-10-19"

    def test_date_rollover_between_writes(self, tmp_path):
        clock = FakeClock(datetime(2026, 10, 19, 23, 59, 59))
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([b"a", b"b"]), clock=clock)

        before = writer.write_screenshot().path
        clock.advance(seconds=2)
        after = writer.write_screenshot().path

        assert before.parent.name == "2026-10-19"
        assert after.parent.name == "2026-10-20"
        assert after.name == "2026-10-20T00.00.01.png"


class TestWriteFailures:
    """Failed captures and writes leave the baseline untouched."""

    def test_capture_failure_raises_capture_failed(self, tmp_path, clock):
        provider = SequenceProvider([b"B", RuntimeError("display gone")])
        writer = ScreenshotWriter(tmp_path, capture=provider, clock=clock)
        writer.write_screenshot(skip_duplicates=True)

        with pytest.raises(CaptureFailed) as exc_info:
            writer.write_screenshot(skip_duplicates=True)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert writer.last_capture == b"B"
        assert len(files_under(tmp_path)) == 1

    def test_unwritable_day_folder_raises_io_failed(self, tmp_path, clock):
        root = tmp_path / "root"
        root.write_bytes(b"not a directory")
        writer = ScreenshotWriter(root, capture=SequenceProvider([b"B"]), clock=clock)

        with pytest.raises(IoFailed) as exc_info:
            writer.write_screenshot()

        assert exc_info.value.path == root / "2026-10-19"
        assert writer.last_capture is None

    def test_failed_write_is_not_the_duplicate_baseline(self, tmp_path, clock):
        provider = SequenceProvider([b"A", b"B", b"B"])
        writer = ScreenshotWriter(tmp_path, capture=provider, clock=clock)
        writer.write_screenshot(skip_duplicates=True)

        # Block the next day's folder with a regular file
        clock.advance(days=1)
        blocker = tmp_path / "2026-10-20"
        blocker.write_bytes(b"")

        with pytest.raises(IoFailed):
            writer.write_screenshot(skip_duplicates=True)
        assert writer.last_capture == b"A"

        blocker.unlink()
        outcome = writer.write_screenshot(skip_duplicates=True)

        assert outcome.status is WriteStatus.WRITTEN
        assert outcome.path.read_bytes() == b"B"
        assert writer.last_capture == b"B"

    def test_file_creation_error_raises_io_failed(self, tmp_path, clock, monkeypatch):
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([b"A", b"B"]), clock=clock)
        writer.write_screenshot(skip_duplicates=True)
        clock.advance(seconds=1)

        def denied(path, mode="r", *args, **kwargs):
            raise PermissionError(errno.EACCES, "Permission denied", str(path))

        monkeypatch.setattr("screenlog.engine.writer.open", denied, raising=False)

        with pytest.raises(IoFailed) as exc_info:
            writer.write_screenshot(skip_duplicates=True)

        assert exc_info.value.path == tmp_path / "2026-10-19" / "2026-10-19T14.03.08.png"
        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert writer.last_capture == b"A"
        assert len(files_under(tmp_path)) == 1

    def test_write_error_removes_partial_file(self, tmp_path, clock, monkeypatch):
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([b"A", b"BBBB"]), clock=clock)
        first = writer.write_screenshot().path
        clock.advance(seconds=1)

        class DiskFullFile:
            def __init__(self, f):
                self._f = f

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                self._f.close()
                return False

            def write(self, data):
                self._f.write(data[:1])
                raise OSError(errno.ENOSPC, "No space left on device")

        def disk_full_open(path, mode="r", *args, **kwargs):
            return DiskFullFile(builtins.open(path, mode, *args, **kwargs))

        monkeypatch.setattr("screenlog.engine.writer.open", disk_full_open, raising=False)

        with pytest.raises(IoFailed) as exc_info:
            writer.write_screenshot()

        assert not exc_info.value.path.exists()
        assert files_under(tmp_path) == [first]
        assert writer.last_capture == b"A"

    def test_non_bytes_frame_raises_capture_failed(self, tmp_path, clock):
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([5]), clock=clock)

        with pytest.raises(CaptureFailed):
            writer.write_screenshot()

        assert writer.last_capture is None
        assert files_under(tmp_path) == []

    def test_bytearray_frame_is_accepted(self, tmp_path, clock):
        writer = ScreenshotWriter(tmp_path, capture=SequenceProvider([bytearray(b"xy")]), clock=clock)

        outcome = writer.write_screenshot()

        assert outcome.path.read_bytes() == b"xy"
        assert writer.last_capture == b"xy"
