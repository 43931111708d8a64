"""screenlog configuration module.

Provides centralized configuration management using pydantic-settings.

Usage:
    from screenlog.config import get_settings

    settings = get_settings()
    print(settings.capture_interval)
    print(settings.output_dir)
"""

from functools import lru_cache

from screenlog.config.settings import Settings

__all__ = ["Settings", "get_settings"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns a singleton Settings instance that is cached for the lifetime
    of the process. Values come from SCREENLOG_* environment variables or
    a .env file, falling back to the field defaults.

    To reload settings, call get_settings.cache_clear() first.

    Returns:
        Settings instance loaded from environment variables.

    Raises:
        pydantic.ValidationError: If an environment value is invalid.
    """
    return Settings()
