from __future__ import annotations

import asyncio
import json

import pytest

from anchorid.adapters.doh import CachedTxtLookup, cache_key, cache_ttl_seconds
from anchorid.adapters.memory import InMemoryKeyValueStore
from anchorid.config import DnsCachePolicy
from anchorid.domain.model import FailReason, FailureCode
from anchorid.domain.ports import TxtLookupResult
from tests.support.fakes import BrokenStore, FakeClock, FakeTxtResolver

QNAME = "_anchor.example.com"
SUCCESS = TxtLookupResult(ok=True, txt_values=['"anchor=x"'], ttl=3600)
MISSING = TxtLookupResult(ok=False, error=FailReason(FailureCode.NO_TXT_RECORDS))


@pytest.mark.parametrize(
    ("result", "expected"),
    [
        (SUCCESS, 900),
        (TxtLookupResult(ok=True, txt_values=["a"], ttl=60), 60),
        (TxtLookupResult(ok=True, txt_values=["a"]), 900),
        (MISSING, 120),
        (TxtLookupResult(ok=False, error=FailReason(FailureCode.TIMEOUT)), 120),
    ],
)
def test_cache_ttl_policy(result: TxtLookupResult, expected: int) -> None:
    assert cache_ttl_seconds(result, DnsCachePolicy()) == expected


def _lookup(
    resolver: FakeTxtResolver,
    store: InMemoryKeyValueStore | BrokenStore,
    clock: FakeClock,
) -> CachedTxtLookup:
    return CachedTxtLookup(resolver=resolver, store=store, clock=clock)


def test_success_is_cached_for_capped_ttl(
    memory_store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    resolver = FakeTxtResolver([SUCCESS])
    lookup = _lookup(resolver, memory_store, clock)

    first = asyncio.run(lookup.lookup("_Anchor.Example.com"))
    clock.advance(899)
    second = asyncio.run(lookup.lookup(QNAME))
    clock.advance(2)
    third = asyncio.run(lookup.lookup(QNAME))

    assert first == second == third == SUCCESS
    assert resolver.queried == ["_Anchor.Example.com", QNAME]


def test_cache_entry_shape(memory_store: InMemoryKeyValueStore, clock: FakeClock) -> None:
    asyncio.run(_lookup(FakeTxtResolver([MISSING]), memory_store, clock).lookup(QNAME))

    raw = memory_store.get(cache_key(QNAME, DnsCachePolicy()))
    assert raw is not None
    entry = json.loads(raw)
    assert entry["qname"] == QNAME
    assert entry["ok"] is False
    assert entry["txtValues"] == []
    assert entry["error"] == "no_txt_records"
    assert entry["expiresAt"] - entry["cachedAt"] == 120_000


def test_failure_is_cached_briefly(memory_store: InMemoryKeyValueStore, clock: FakeClock) -> None:
    resolver = FakeTxtResolver([MISSING, SUCCESS])
    lookup = _lookup(resolver, memory_store, clock)

    assert asyncio.run(lookup.lookup(QNAME)) == MISSING
    assert asyncio.run(lookup.lookup(QNAME)) == MISSING
    clock.advance(121)
    assert asyncio.run(lookup.lookup(QNAME)) == SUCCESS
    assert resolver.queried == [QNAME, QNAME]


def test_bypass_skips_the_cached_answer(
    memory_store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    resolver = FakeTxtResolver([MISSING, SUCCESS])
    lookup = _lookup(resolver, memory_store, clock)

    asyncio.run(lookup.lookup(QNAME))
    fresh = asyncio.run(lookup.lookup(QNAME, bypass_cache=True))

    assert fresh == SUCCESS
    assert asyncio.run(lookup.lookup(QNAME)) == SUCCESS
    assert len(resolver.queried) == 2


def test_store_faults_degrade_to_fresh_queries(clock: FakeClock) -> None:
    resolver = FakeTxtResolver([SUCCESS])
    lookup = _lookup(resolver, BrokenStore(), clock)

    assert asyncio.run(lookup.lookup(QNAME)) == SUCCESS
    assert asyncio.run(lookup.lookup(QNAME)) == SUCCESS
    assert len(resolver.queried) == 2


def test_unreadable_entries_are_ignored(
    memory_store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    memory_store.put(cache_key(QNAME, DnsCachePolicy()), "{not json")
    resolver = FakeTxtResolver([SUCCESS])

    assert asyncio.run(_lookup(resolver, memory_store, clock).lookup(QNAME)) == SUCCESS
    assert resolver.queried == [QNAME]
