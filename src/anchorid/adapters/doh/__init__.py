"""DNS-over-HTTPS adapter."""

from __future__ import annotations

from .cache import CachedTxtLookup, cache_key, cache_ttl_seconds
from .client import DohClient
from .schema import DnsCacheEntry, DohAnswer, DohResponse

__all__ = [
    "CachedTxtLookup",
    "DnsCacheEntry",
    "DohAnswer",
    "DohClient",
    "DohResponse",
    "cache_key",
    "cache_ttl_seconds",
]
