"""Database migration system for the SQLite entity store."""

from .m001_initial_schema import initial_migration
from .m002_store_clock import store_clock_migration
from .runner import Migration, MigrationRunner

ALL_MIGRATIONS = [initial_migration, store_clock_migration]

__all__ = [
    "ALL_MIGRATIONS",
    "Migration",
    "MigrationRunner",
]
