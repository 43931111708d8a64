"""screenlog configuration settings using pydantic-settings."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration settings for the screenshot logger.

    Settings are loaded from environment variables with the SCREENLOG_ prefix.
    For example, SCREENLOG_CAPTURE_INTERVAL=30 sets capture_interval to 30.
    Command-line options override whatever is configured here.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCREENLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Output
    output_dir: Path = Path(".")

    # Run loop
    capture_interval: float = 10.0  # seconds between captures
    count: int = 1  # iterations unless forever is set
    forever: bool = False
    skip_duplicates: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None

    @field_validator("capture_interval")
    @classmethod
    def validate_capture_interval(cls, v: float) -> float:
        """Ensure capture interval is not negative. Zero means no wait."""
        if v < 0:
            raise ValueError("capture_interval must not be negative")
        return v

    @field_validator("count")
    @classmethod
    def validate_count(cls, v: int) -> int:
        """Ensure iteration count is not negative."""
        if v < 0:
            raise ValueError("count must not be negative")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_file")
    @classmethod
    def expand_log_file(cls, v: Path | None) -> Path | None:
        """Expand ~ in the log file path."""
        if v is None:
            return None
        return v.expanduser()
