"""Configuration CLI commands."""

import json

import typer
from pydantic import ValidationError

from screenlog.config import get_settings

config_app = typer.Typer(
    name="config",
    help="Configuration - view effective settings.",
    no_args_is_help=True,
)


@config_app.command()
def show(
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Show current configuration."""
    try:
        settings = get_settings()
    except ValidationError as e:
        typer.echo(f"Invalid configuration: {e}")
        raise typer.Exit(1)

    config_data = {
        "output_dir": str(settings.output_dir),
        "capture_interval": settings.capture_interval,
        "count": settings.count,
        "forever": settings.forever,
        "skip_duplicates": settings.skip_duplicates,
        "log_level": settings.log_level,
        "log_file": str(settings.log_file) if settings.log_file else None,
    }

    if output_json:
        typer.echo(json.dumps(config_data, indent=2))
    else:
        typer.echo("")
        typer.echo("screenlog Configuration")
        typer.echo("-----------------------")
        typer.echo(f"Output directory: {settings.output_dir}")
        typer.echo(f"Capture interval: {settings.capture_interval:g}s")
        typer.echo(f"Count: {settings.count}")
        typer.echo(f"Forever: {settings.forever}")
        typer.echo(f"Skip duplicates: {settings.skip_duplicates}")
        typer.echo(f"Log level: {settings.log_level}")
        typer.echo(f"Log file: {settings.log_file or '-'}")
        typer.echo("")
        typer.echo("Set values using environment variables with SCREENLOG_ prefix")
        typer.echo("Example: SCREENLOG_CAPTURE_INTERVAL=30")
