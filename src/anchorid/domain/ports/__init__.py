"""Domain ports."""

from __future__ import annotations

from .fetching import FetchResult, ProofFetcher, TxtLookup, TxtLookupResult, TxtResolver
from .storage import KeyValueStore

__all__ = [
    "FetchResult",
    "KeyValueStore",
    "ProofFetcher",
    "TxtLookup",
    "TxtLookupResult",
    "TxtResolver",
]
