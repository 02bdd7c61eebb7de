from __future__ import annotations

from typing import TYPE_CHECKING

from anchorid.adapters.memory import InMemoryKeyValueStore

if TYPE_CHECKING:
    from tests.support.fakes import FakeClock


def test_put_get_delete(memory_store: InMemoryKeyValueStore) -> None:
    memory_store.put("claims:a", "[]")

    assert memory_store.get("claims:a") == "[]"
    memory_store.delete("claims:a")
    assert memory_store.get("claims:a") is None
    memory_store.delete("claims:a")


def test_values_expire_with_their_ttl(
    memory_store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    memory_store.put("dnscache:x", "cached", ttl_seconds=120)
    memory_store.put("profile:x", "kept")

    clock.advance(119)
    assert memory_store.get("dnscache:x") == "cached"
    clock.advance(1)
    assert memory_store.get("dnscache:x") is None
    assert memory_store.get("profile:x") == "kept"
