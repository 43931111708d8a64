"""screenlog CLI - command-line interface for the screenshot logger."""

import typer

from screenlog import __version__
from screenlog.cli_commands.capture import capture_command
from screenlog.cli_commands.config import config_app

app = typer.Typer(
    name="screenlog",
    help="Periodically capture the primary display into day folders.",
    no_args_is_help=True,
)

app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"screenlog {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """screenlog - periodic screenshots into YYYY-MM-DD folders."""
    pass


app.command(name="capture")(capture_command)


if __name__ == "__main__":
    app()
