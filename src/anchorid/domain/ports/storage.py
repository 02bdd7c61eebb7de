"""Port for the shared key-value store."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """String key-value store with optional per-key expiry.

    Implementations are expected to offer at-least-eventual consistency and no
    cross-key transactions. Expired keys read as absent.
    """

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str, *, ttl_seconds: float | None = None) -> None: ...

    def delete(self, key: str) -> None: ...
