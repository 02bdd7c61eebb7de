"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when an ``ANCHORID_*`` setting holds a value the engine cannot use."""
