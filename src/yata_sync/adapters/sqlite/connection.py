"""Database connection management for the SQLite entity store.

Each store transaction gets its own connection, so a failed or aborted sync
can never leave shared connection state behind. Connections run in
autocommit mode; the store issues ``BEGIN IMMEDIATE``/``COMMIT`` itself.
"""

from __future__ import annotations

import os
import sqlite3
import time
from pathlib import Path

from platformdirs import user_data_dir

from yata_sync.adapters.sqlite.migrations import ALL_MIGRATIONS, MigrationRunner
from yata_sync.utils.logger import get_logger

DEFAULT_DB_NAME = "yata.db"

logger = get_logger("sqlite")


def resolve_db_path(db_path: str | Path | None = None) -> Path:
    """Resolve the database file location.

    Args:
        db_path: Explicit path. If None, uses the platform data directory.

    Returns:
        Absolute database path
    """
    if db_path is None:
        return Path(user_data_dir("yata_sync")) / DEFAULT_DB_NAME
    return Path(db_path).expanduser()


def open_connection(db_path: str | Path, timeout: float = 30.0) -> sqlite3.Connection:
    """Open a configured connection.

    Provides:
    - Autocommit mode (explicit transactions only)
    - WAL mode for concurrent readers
    - Foreign key constraint enforcement
    - Automatic directory creation
    - Owner-only file permissions for new databases

    Args:
        db_path: Path to database file
        timeout: Seconds to wait on a locked database

    Returns:
        sqlite3.Connection
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    is_new_database = not db_path.exists()

    connection = sqlite3.connect(
        str(db_path),
        timeout=timeout,
        isolation_level=None,
        check_same_thread=False,
    )
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")
    connection.execute("PRAGMA journal_mode = WAL")

    if is_new_database:
        os.chmod(db_path, 0o600)

    return connection


def initialize_database(db_path: str | Path, timeout: float = 30.0) -> int:
    """Create the database if needed and apply pending migrations.

    Args:
        db_path: Path to database file
        timeout: Seconds to wait on a locked database

    Returns:
        Number of migrations applied
    """
    connection = open_connection(db_path, timeout=timeout)
    try:
        applied = MigrationRunner(connection).run_migrations(ALL_MIGRATIONS)
    finally:
        connection.close()
    if applied:
        logger.info("initialized database at %s (%d migrations)", db_path, applied)
    return applied


def execute_with_retry(
    connection: sqlite3.Connection,
    sql: str,
    params: tuple | dict | None = None,
    max_retries: int = 3,
) -> sqlite3.Cursor:
    """Execute SQL with retry logic for database locked errors.

    Args:
        connection: Database connection
        sql: SQL statement to execute
        params: Parameters for SQL statement
        max_retries: Maximum number of retry attempts

    Returns:
        Cursor after successful execution

    Raises:
        sqlite3.OperationalError: If database remains locked after retries
    """
    for attempt in range(max_retries):
        try:
            if params:
                return connection.execute(sql, params)
            return connection.execute(sql)
        except sqlite3.OperationalError as e:
            if "database is locked" in str(e) and attempt < max_retries - 1:
                # Exponential backoff: 0.1s, 0.2s, 0.4s
                delay = 0.1 * (2**attempt)
                logger.debug("database locked, retrying in %.1fs", delay)
                time.sleep(delay)
                continue
            raise

    raise sqlite3.OperationalError("Max retries exceeded")
