"""SQLite adapter module - Local database storage implementation."""

from yata_sync.adapters.sqlite.store import SqliteEntityStore, SqliteSession

__all__ = [
    "SqliteEntityStore",
    "SqliteSession",
]
