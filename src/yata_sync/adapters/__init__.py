"""Adapters module - Storage implementations of the repository ports.

- sqlite: Local SQLite database storage
"""

from .sqlite import SqliteEntityStore

__all__ = [
    "SqliteEntityStore",
]
