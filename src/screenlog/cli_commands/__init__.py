"""CLI command modules for screenlog."""

from screenlog.cli_commands.capture import capture_command
from screenlog.cli_commands.config import config_app

__all__ = ["capture_command", "config_app"]
