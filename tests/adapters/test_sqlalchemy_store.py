from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect, select

from anchorid.adapters.sqlalchemy import SqlAlchemyKeyValueStore, kv_table

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from tests.support.fakes import FakeClock


@pytest.fixture
def sql_store(sqlite_engine: Engine, clock: FakeClock) -> SqlAlchemyKeyValueStore:
    return SqlAlchemyKeyValueStore(sqlite_engine, clock=clock)


def test_put_overwrites_existing_value(sql_store: SqlAlchemyKeyValueStore) -> None:
    sql_store.put("claims:a", "[]")
    sql_store.put("claims:a", '[{"id":"website:example.com"}]')

    assert sql_store.get("claims:a") == '[{"id":"website:example.com"}]'
    with sql_store.engine.connect() as connection:
        rows = connection.execute(select(kv_table.c.key)).scalars().all()
    assert rows == ["claims:a"]


def test_delete_removes_value(sql_store: SqlAlchemyKeyValueStore) -> None:
    sql_store.put("profile:a", "{}")
    sql_store.delete("profile:a")

    assert sql_store.get("profile:a") is None


def test_expired_rows_read_as_absent_and_can_be_purged(
    sql_store: SqlAlchemyKeyValueStore, clock: FakeClock
) -> None:
    sql_store.put("dnscache:_anchor.example.com", "{}", ttl_seconds=120)
    sql_store.put("claims:a", "[]")

    clock.advance(60)
    assert sql_store.get("dnscache:_anchor.example.com") == "{}"
    clock.advance(61)
    assert sql_store.get("dnscache:_anchor.example.com") is None
    assert sql_store.purge_expired() == 1
    assert sql_store.get("claims:a") == "[]"


def test_from_uri_creates_the_table(tmp_path: Path) -> None:
    store = SqlAlchemyKeyValueStore.from_uri(f"sqlite+pysqlite:///{tmp_path / 'kv.db'}")

    store.put("claims:a", "[]")

    assert "kv_entries" in inspect(store.engine).get_table_names()
    assert store.get("claims:a") == "[]"
    store.engine.dispose()
