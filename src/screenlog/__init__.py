"""screenlog - periodic primary-display capture into day folders."""

__version__ = "0.1.0"
