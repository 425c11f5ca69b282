"""Migration framework for SQLite database schema evolution.

Migrations are sequential and forward-only. Each one runs in its own
``BEGIN IMMEDIATE`` transaction together with its version record, so a
failed migration leaves no partial schema behind and two processes starting
against the same database never apply the same migration twice.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from datetime import UTC, datetime

from yata_sync.utils.logger import get_logger


class Migration(ABC):
    """Base class for database migrations."""

    @property
    @abstractmethod
    def version(self) -> int:
        """Migration version number (sequential)."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of the migration."""

    @abstractmethod
    def up(self, connection: sqlite3.Connection) -> None:
        """Execute forward migration inside the runner's transaction.

        Args:
            connection: Database connection
        """


class MigrationRunner:
    """Manages and executes database migrations.

    Expects a connection in autocommit mode (``isolation_level=None``); the
    runner issues its own BEGIN/COMMIT.
    """

    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection
        self._ensure_version_table()

    def _ensure_version_table(self) -> None:
        self.connection.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                description TEXT NOT NULL,
                applied_at TEXT NOT NULL
            )
        """)

    def get_current_version(self) -> int:
        """Get current database schema version.

        Returns:
            Current version number (0 if no migrations applied)
        """
        cursor = self.connection.execute("SELECT MAX(version) FROM schema_version")
        result = cursor.fetchone()[0]
        return result if result is not None else 0

    def run_migration(self, migration: Migration) -> bool:
        """Run a single migration.

        Args:
            migration: Migration to execute

        Returns:
            True if applied, False if another process applied it first

        Raises:
            RuntimeError: If the migration fails; it is rolled back
        """
        self.connection.execute("BEGIN IMMEDIATE")
        try:
            # Re-check under the write lock
            if migration.version <= self.get_current_version():
                self.connection.execute("ROLLBACK")
                return False

            migration.up(self.connection)
            self.connection.execute(
                """
                INSERT INTO schema_version (version, description, applied_at)
                VALUES (?, ?, ?)
                """,
                (
                    migration.version,
                    migration.description,
                    datetime.now(UTC).isoformat(),
                ),
            )
            self.connection.execute("COMMIT")
        except Exception as e:
            if self.connection.in_transaction:
                self.connection.execute("ROLLBACK")
            raise RuntimeError(f"Migration {migration.version} failed: {str(e)}") from e

        get_logger("migrations").info(
            "applied migration %d: %s", migration.version, migration.description
        )
        return True

    def run_migrations(self, migrations: list[Migration]) -> int:
        """Run all pending migrations.

        Args:
            migrations: List of migrations to potentially run

        Returns:
            Number of migrations applied by this call
        """
        current_version = self.get_current_version()
        pending = sorted(
            (m for m in migrations if m.version > current_version),
            key=lambda m: m.version,
        )
        return sum(1 for migration in pending if self.run_migration(migration))

    def get_migration_history(self) -> list[dict]:
        """Get history of applied migrations.

        Returns:
            List of migration records with version, description, and applied_at
        """
        cursor = self.connection.execute("""
            SELECT version, description, applied_at
            FROM schema_version
            ORDER BY version
            """)

        return [
            {"version": row[0], "description": row[1], "applied_at": row[2]}
            for row in cursor.fetchall()
        ]
