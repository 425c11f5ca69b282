"""Migration 002: persist the store clock's high-water mark.

Every transaction reads one row instead of scanning the entity tables for
their newest ``updated_at``, and watermarks handed out by pull-only syncs
are remembered across processes.
"""

import sqlite3

from yata_sync.adapters.sqlite import schema
from yata_sync.adapters.sqlite.utils import EPOCH, format_timestamp

from .runner import Migration


class StoreClockMigration(Migration):
    """Create store_clock and seed it from existing rows."""

    @property
    def version(self) -> int:
        return 2

    @property
    def description(self) -> str:
        return "Persist store clock high-water mark"

    def up(self, connection: sqlite3.Connection) -> None:
        connection.execute(schema.CREATE_STORE_CLOCK_TABLE)
        connection.execute(
            """
            INSERT OR IGNORE INTO store_clock (id, high_water)
            SELECT 1, COALESCE(MAX(ts), ?) FROM (
                SELECT MAX(updated_at) AS ts FROM users
                UNION ALL SELECT MAX(updated_at) FROM projects
                UNION ALL SELECT MAX(updated_at) FROM task_types
                UNION ALL SELECT MAX(updated_at) FROM tasks
            )
            """,
            (format_timestamp(EPOCH),),
        )


store_clock_migration = StoreClockMigration()
