"""Environment variable loaders for configuration."""

from __future__ import annotations

import os


def env_or_default(name: str, default: str) -> str:
    """Return a stripped environment value, falling back when unset or blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()
