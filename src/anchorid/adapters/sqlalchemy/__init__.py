"""SQLAlchemy-backed persistence adapter."""

from __future__ import annotations

from .mappings import UTCDateTime, create_all_tables, kv_table, metadata
from .store import SqlAlchemyKeyValueStore

__all__ = [
    "SqlAlchemyKeyValueStore",
    "UTCDateTime",
    "create_all_tables",
    "kv_table",
    "metadata",
]
