"""TTL-aware cache in front of a TXT resolver."""

from __future__ import annotations

import math
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from anchorid.config.doh import DnsCachePolicy
from anchorid.domain.model import FailReason, utc_now
from anchorid.domain.ports import TxtLookupResult

from .schema import DnsCacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from anchorid.domain.ports import KeyValueStore, TxtResolver

log = getLogger(__name__)


def cache_ttl_seconds(result: TxtLookupResult, policy: DnsCachePolicy) -> int:
    """Successes live for the observed TTL capped by policy; failures for a short fixed time."""

    if not result.ok:
        return policy.failure_ttl_seconds
    if result.ttl is None:
        return policy.success_ttl_cap_seconds
    return min(result.ttl, policy.success_ttl_cap_seconds)


def cache_key(qname: str, policy: DnsCachePolicy) -> str:
    return f"{policy.key_prefix}{qname.strip().lower()}"


class CachedTxtLookup:
    """``TxtLookup`` backed by a resolver and a shared key-value store.

    The store is an optimization only: read or write faults are logged and the
    lookup falls through to a fresh query.
    """

    def __init__(
        self,
        *,
        resolver: TxtResolver,
        store: KeyValueStore,
        policy: DnsCachePolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._resolver = resolver
        self._store = store
        self._policy = policy or DnsCachePolicy()
        self._clock = clock

    async def lookup(self, qname: str, *, bypass_cache: bool = False) -> TxtLookupResult:
        key = cache_key(qname, self._policy)
        if not bypass_cache:
            cached = self._read(key)
            if cached is not None:
                log.debug("DNS cache hit for %s", key)
                return cached
            log.debug("DNS cache miss for %s", key)

        result = await self._resolver.query_txt(qname)
        self._write(key, qname, result)
        return result

    def _read(self, key: str) -> TxtLookupResult | None:
        try:
            raw = self._store.get(key)
        except Exception:  # noqa: BLE001
            log.warning("DNS cache read failed for %s", key, exc_info=True)
            return None
        if raw is None:
            return None

        try:
            entry = DnsCacheEntry.model_validate_json(raw)
            error = FailReason.parse(entry.error) if entry.error else None
        except (ValidationError, ValueError):
            log.warning("Discarding unreadable DNS cache entry %s", key)
            return None

        if entry.expires_at <= self._now_ms():
            return None
        return TxtLookupResult(
            ok=entry.ok,
            txt_values=list(entry.txt_values),
            error=error,
            ttl=entry.ttl,
        )

    def _write(self, key: str, qname: str, result: TxtLookupResult) -> None:
        ttl_seconds = cache_ttl_seconds(result, self._policy)
        now_ms = self._now_ms()
        entry = DnsCacheEntry(
            qname=qname.strip().lower(),
            ok=result.ok,
            txt_values=list(result.txt_values),
            error=str(result.error) if result.error is not None else None,
            ttl=result.ttl,
            cached_at=now_ms,
            expires_at=now_ms + ttl_seconds * 1000,
        )
        try:
            self._store.put(
                key,
                entry.model_dump_json(by_alias=True, exclude_none=True),
                ttl_seconds=ttl_seconds,
            )
        except Exception:  # noqa: BLE001
            log.warning("DNS cache write failed for %s", key, exc_info=True)

    def _now_ms(self) -> int:
        return math.floor(self._clock().timestamp() * 1000)

