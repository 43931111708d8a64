"""Capture command: run the screenshot loop from the command line."""

import json
import signal
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from screenlog.capture import ScreenCapture
from screenlog.config import Settings, get_settings
from screenlog.engine import RunLoop, ScreenshotWriter
from screenlog.errors import ConfigError
from screenlog.logging import setup_logging


def _output(data: dict, as_json: bool, human_message: str) -> None:
    """Output data as JSON or human-readable format."""
    if as_json:
        typer.echo(json.dumps(data))
    else:
        typer.echo(human_message)


def _load_settings(output_json: bool) -> Settings:
    """Load settings, turning validation errors into a clean exit."""
    try:
        return get_settings()
    except ValidationError as e:
        _output(
            {"status": "error", "message": str(e)},
            output_json,
            f"Invalid configuration: {e}",
        )
        raise typer.Exit(1)


def capture_command(
    path: Path = typer.Option(
        None,
        "--path",
        "-p",
        help="Folder to write screenshots into (default: from config, else current directory)",
    ),
    interval: float = typer.Option(
        None,
        "--interval",
        "-i",
        help="Seconds between screenshots (default: from config, else 10)",
    ),
    count: int = typer.Option(
        None,
        "--count",
        "-c",
        help="Number of screenshots to take (default: from config, else 1)",
    ),
    forever: Optional[bool] = typer.Option(
        None,
        "--forever/--no-forever",
        "-f",
        help="Keep capturing until interrupted, ignoring --count",
    ),
    skip_duplicates: Optional[bool] = typer.Option(
        None,
        "--skip-duplicates/--no-skip-duplicates",
        "-s",
        help="Don't write a screenshot identical to the previous one",
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Log level (default: from config, else INFO)",
    ),
    log_file: Path = typer.Option(
        None,
        "--log-file",
        help="Also write JSON logs to this rotating file",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Capture the primary display into <path>/YYYY-MM-DD/ folders.

    Takes COUNT screenshots INTERVAL seconds apart, or runs until Ctrl+C
    with --forever.
    """
    settings = _load_settings(output_json)

    level = (log_level or settings.log_level).upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        _output(
            {"status": "error", "message": f"Invalid log level: {log_level}"},
            output_json,
            f"Invalid log level: {log_level}",
        )
        raise typer.Exit(1)
    try:
        setup_logging(level, log_file or settings.log_file)
    except OSError as e:
        _output(
            {"status": "error", "message": str(e)},
            output_json,
            f"Cannot open log file: {e}",
        )
        raise typer.Exit(1)

    try:
        provider = ScreenCapture()
        writer = ScreenshotWriter(
            path if path is not None else settings.output_dir,
            capture=provider.capture_primary,
            extension=provider.extension,
        )
        loop = RunLoop(
            writer,
            interval=interval if interval is not None else settings.capture_interval,
            count=count if count is not None else settings.count,
            forever=forever if forever is not None else settings.forever,
            skip_duplicates=(
                skip_duplicates if skip_duplicates is not None else settings.skip_duplicates
            ),
        )
    except ConfigError as e:
        _output(
            {"status": "error", "message": str(e)},
            output_json,
            f"Configuration error: {e}",
        )
        raise typer.Exit(1)

    if not output_json:
        mode = "until Ctrl+C" if loop.forever else f"{loop.count} time(s)"
        typer.echo(f"Capturing to {writer.root} every {loop.interval:g}s, {mode}...")

    def handle_signal(signum: int, frame) -> None:
        if not output_json:
            typer.echo("\nStopping screenlog...")
        loop.stop()

    previous_handlers = {
        sig: signal.signal(sig, handle_signal) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        summary = loop.run()
    finally:
        for sig, handler in previous_handlers.items():
            signal.signal(sig, handler)

    _output(
        {
            "status": "cancelled" if summary.cancelled else "completed",
            "root": str(writer.root),
            **summary.to_dict(),
        },
        output_json,
        (
            f"Done: {summary.written} written, {summary.skipped} skipped, "
            f"{summary.failed} failed in {summary.iterations} iteration(s)."
        ),
    )
