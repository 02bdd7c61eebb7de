"""In-process key-value store with per-key expiry."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from anchorid.domain.model import utc_now
from anchorid.domain.ports import KeyValueStore

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime


@dataclass(slots=True)
class _Entry:
    value: str
    expires_at: datetime | None


@dataclass(slots=True)
class InMemoryKeyValueStore:
    """Single-process store; expired keys read as absent and are dropped lazily."""

    clock: Callable[[], datetime] = utc_now
    _entries: dict[str, _Entry] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        entry = self._live_entry(key)
        return entry.value if entry else None

    def put(self, key: str, value: str, *, ttl_seconds: float | None = None) -> None:
        expires_at = self.clock() + timedelta(seconds=ttl_seconds) if ttl_seconds else None
        self._entries[key] = _Entry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def _live_entry(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self.clock():
            del self._entries[key]
            return None
        return entry


if TYPE_CHECKING:
    _store_check: KeyValueStore = InMemoryKeyValueStore()
