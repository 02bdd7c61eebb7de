"""Key-value store over a single SQLAlchemy Core table."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, delete, insert, or_, select

from anchorid.domain.model import utc_now
from anchorid.domain.ports import KeyValueStore

from .mappings import create_all_tables, kv_table

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from sqlalchemy.engine import Engine


class SqlAlchemyKeyValueStore:
    """Each call runs in its own transaction; there are no cross-key guarantees."""

    def __init__(self, engine: Engine, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._engine = engine
        self._clock = clock

    @classmethod
    def from_uri(cls, uri: str, *, create_tables: bool = True) -> SqlAlchemyKeyValueStore:
        engine = create_engine(uri, future=True)
        if create_tables:
            create_all_tables(engine)
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def get(self, key: str) -> str | None:
        now = self._clock()
        stmt = select(kv_table.c.value).where(
            kv_table.c.key == key,
            or_(kv_table.c.expires_at.is_(None), kv_table.c.expires_at > now),
        )
        with self._engine.connect() as connection:
            return connection.execute(stmt).scalar_one_or_none()

    def put(self, key: str, value: str, *, ttl_seconds: float | None = None) -> None:
        expires_at = self._clock() + timedelta(seconds=ttl_seconds) if ttl_seconds else None
        with self._engine.begin() as connection:
            connection.execute(delete(kv_table).where(kv_table.c.key == key))
            connection.execute(
                insert(kv_table).values(key=key, value=value, expires_at=expires_at)
            )

    def delete(self, key: str) -> None:
        with self._engine.begin() as connection:
            connection.execute(delete(kv_table).where(kv_table.c.key == key))

    def purge_expired(self) -> int:
        """Delete expired rows and return how many were removed."""

        stmt = delete(kv_table).where(kv_table.c.expires_at <= self._clock())
        with self._engine.begin() as connection:
            return connection.execute(stmt).rowcount


if TYPE_CHECKING:
    _store_check: KeyValueStore = SqlAlchemyKeyValueStore(create_engine("sqlite://"))
