"""SQLite implementation of the entity store."""

from __future__ import annotations

import json
import sqlite3
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from yata_sync.adapters.sqlite.connection import (
    execute_with_retry,
    initialize_database,
    open_connection,
    resolve_db_path,
)
from yata_sync.adapters.sqlite.migrations import MigrationRunner
from yata_sync.adapters.sqlite.schema import (
    JSON_COLUMNS,
    TIMESTAMP_COLUMNS,
    WRITABLE_COLUMNS,
)
from yata_sync.adapters.sqlite.utils import (
    MonotonicClock,
    build_update_clause,
    build_where_clause,
    chunked,
    format_timestamp,
    parse_timestamp,
    quote_identifier,
    row_to_dict,
)
from yata_sync.errors import (
    ConflictError,
    DeadlineExceededError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from yata_sync.models.config_models import AppConfig
from yata_sync.models.sync import EntityKind
from yata_sync.repositories import EntityStore, StoreSession
from yata_sync.utils.logger import get_logger

logger = get_logger("sqlite")

# Progress handler granularity, in SQLite VM instructions
_PROGRESS_STEPS = 1000

_ORDER_BY = {
    EntityKind.PROJECT: "created_at, id",
    EntityKind.TASK_TYPE: "created_at, id",
    EntityKind.TASK: 'section, "order", created_at, id',
}

_FILTER_COLUMNS = {
    kind: frozenset(columns) | {"id"} for kind, columns in WRITABLE_COLUMNS.items()
}


def _encode(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert model values to column values."""
    encoded = {}
    for key, value in fields.items():
        if key in JSON_COLUMNS:
            value = json.dumps(list(value or []))
        elif isinstance(value, datetime):
            value = format_timestamp(value)
        encoded[key] = value
    return encoded


def _decode(row: sqlite3.Row) -> dict[str, Any]:
    """Convert a stored row to storage-form dict."""
    data = row_to_dict(row)
    for key in TIMESTAMP_COLUMNS & data.keys():
        data[key] = parse_timestamp(data[key])
    for key in JSON_COLUMNS & data.keys():
        data[key] = json.loads(data[key]) if data[key] else []
    return data


class SqliteSession(StoreSession):
    """One ``BEGIN IMMEDIATE`` transaction on a dedicated connection."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        clock: MonotonicClock,
        deadline: float | None = None,
        deadline_seconds: float | None = None,
    ):
        self.connection = connection
        self._clock = clock
        self._deadline = deadline
        self._deadline_seconds = deadline_seconds
        self._issued: datetime | None = None

    def deadline_passed(self) -> bool:
        return self._deadline is not None and time.monotonic() > self._deadline

    def check_deadline(self) -> None:
        if self.deadline_passed():
            raise DeadlineExceededError(
                f"Transaction exceeded its {self._deadline_seconds}s deadline"
            )

    def commit(self) -> None:
        self.check_deadline()
        if self._issued is not None:
            self._execute(
                "UPDATE store_clock SET high_water = MAX(high_water, ?) WHERE id = 1",
                (format_timestamp(self._issued),),
            )
        self._execute("COMMIT")

    def now(self) -> datetime:
        self._issued = self._clock()
        return self._issued

    def sync_clock(self) -> None:
        """Move the clock past every timestamp any transaction has issued."""
        row = self._execute(
            "SELECT high_water FROM store_clock WHERE id = 1"
        ).fetchone()
        if row is not None:
            self._clock.observe(parse_timestamp(row[0]))

    def _execute(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        """Execute SQL, translating driver errors into store errors."""
        try:
            return self.connection.execute(sql, tuple(params))
        except sqlite3.IntegrityError as e:
            raise ValidationError(f"Constraint violated: {e}") from e
        except sqlite3.OperationalError as e:
            if "interrupted" in str(e) and self._deadline is not None:
                raise DeadlineExceededError(
                    f"Transaction exceeded its {self._deadline_seconds}s deadline"
                ) from e
            raise StoreUnavailableError(f"Store operation failed: {e}") from e
        except sqlite3.DatabaseError as e:
            raise StoreUnavailableError(f"Store operation failed: {e}") from e
        except (OverflowError, UnicodeError) as e:
            raise ValidationError(f"Value cannot be stored: {e}") from e

    def _writable(self, kind: EntityKind, fields: dict[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - set(WRITABLE_COLUMNS[kind])
        if unknown:
            raise ValidationError(
                f"Unknown {kind.label} fields: {', '.join(sorted(unknown))}"
            )
        return _encode(fields)

    def _exists(self, table: str, entity_id: str) -> bool:
        cursor = self._execute(f"SELECT 1 FROM {table} WHERE id = ?", (entity_id,))
        return cursor.fetchone() is not None

    def create_row(
        self, kind: EntityKind, entity_id: str, fields: dict[str, Any], *, user_id: str
    ) -> dict[str, Any]:
        self.check_deadline()
        values = self._writable(kind, fields)
        # Ids are global, so a tombstoned or foreign row still blocks the id
        if self._exists(kind.value, entity_id):
            raise ConflictError(kind.label, entity_id)

        timestamp = format_timestamp(self.now())
        values.update(
            id=entity_id, user_id=user_id, created_at=timestamp, updated_at=timestamp
        )
        columns = ", ".join(quote_identifier(key) for key in values)
        placeholders = ", ".join("?" for _ in values)
        self._execute(
            f"INSERT INTO {kind.value} ({columns}) VALUES ({placeholders})",
            values.values(),
        )
        return self.get_row(kind, entity_id, user_id=user_id)

    def update_row(
        self, kind: EntityKind, entity_id: str, fields: dict[str, Any], *, user_id: str
    ) -> dict[str, Any]:
        self.check_deadline()
        values = self._writable(kind, fields)
        values["updated_at"] = format_timestamp(self.now())
        set_clause, params = build_update_clause(values)
        cursor = self._execute(
            f"""
            UPDATE {kind.value} SET {set_clause}
            WHERE id = ? AND user_id = ? AND deleted_at IS NULL
            """,
            [*params, entity_id, user_id],
        )
        if cursor.rowcount == 0:
            raise NotFoundError(kind.label, entity_id)
        return self.get_row(kind, entity_id, user_id=user_id)

    def delete_rows(
        self, kind: EntityKind, entity_ids: Iterable[str], *, user_id: str
    ) -> list[str]:
        deleted: list[str] = []
        for chunk in chunked(dict.fromkeys(entity_ids)):
            self.check_deadline()
            placeholders = ", ".join("?" for _ in chunk)
            live = self._execute(
                f"""
                SELECT id FROM {kind.value}
                WHERE user_id = ? AND deleted_at IS NULL AND id IN ({placeholders})
                """,
                [user_id, *chunk],
            ).fetchall()
            for row in live:
                timestamp = format_timestamp(self.now())
                self._execute(
                    f"UPDATE {kind.value} SET deleted_at = ?, updated_at = ? WHERE id = ?",
                    (timestamp, timestamp, row["id"]),
                )
                deleted.append(row["id"])
        return deleted

    def get_row(
        self,
        kind: EntityKind,
        entity_id: str,
        *,
        user_id: str,
        include_deleted: bool = False,
    ) -> dict[str, Any] | None:
        sql = f"SELECT * FROM {kind.value} WHERE id = ? AND user_id = ?"
        if not include_deleted:
            sql += " AND deleted_at IS NULL"
        row = self._execute(sql, (entity_id, user_id)).fetchone()
        return _decode(row) if row is not None else None

    def list_rows(
        self,
        kind: EntityKind,
        *,
        user_id: str,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        filters = filters or {}
        unknown = set(filters) - _FILTER_COLUMNS[kind]
        if unknown:
            raise ValidationError(
                f"Cannot filter {kind.label} by: {', '.join(sorted(unknown))}"
            )
        where_clause, params = build_where_clause(_encode(filters))
        cursor = self._execute(
            f"""
            SELECT * FROM {kind.value}
            WHERE user_id = ? AND deleted_at IS NULL AND {where_clause}
            ORDER BY {_ORDER_BY[kind]}
            """,
            [user_id, *params],
        )
        return [_decode(row) for row in cursor.fetchall()]

    def query_updated_since(
        self, kind: EntityKind, user_id: str, since: datetime
    ) -> list[dict[str, Any]]:
        self.check_deadline()
        cursor = self._execute(
            f"""
            SELECT * FROM {kind.value}
            WHERE user_id = ? AND updated_at > ?
            ORDER BY updated_at, id
            """,
            (user_id, format_timestamp(since)),
        )
        return [_decode(row) for row in cursor.fetchall()]

    def create_user(self, user_id: str, email: str) -> dict[str, Any]:
        if self._exists("users", user_id):
            raise ConflictError("User", user_id)
        taken = self._execute("SELECT 1 FROM users WHERE email = ?", (email,))
        if taken.fetchone() is not None:
            raise ConflictError("User", email)

        timestamp = format_timestamp(self.now())
        self._execute(
            "INSERT INTO users (id, email, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (user_id, email, timestamp, timestamp),
        )
        return self.get_user(user_id)

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        row = self._execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return _decode(row) if row is not None else None


class SqliteEntityStore(EntityStore):
    """Entity store backed by a single SQLite database file.

    Every transaction opens its own connection and takes the database write
    lock up front (``BEGIN IMMEDIATE``), so transactions are serialized
    across threads and processes.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        busy_timeout: float = 30.0,
        lock_retries: int = 3,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize SQLite entity store.

        Args:
            db_path: Optional database file path. If None, uses default location.
            busy_timeout: Seconds SQLite waits on a locked database
            lock_retries: Attempts at taking the write lock
            clock: Optional wall clock source, for tests
        """
        self.db_path = resolve_db_path(db_path)
        self.busy_timeout = busy_timeout
        self.lock_retries = lock_retries
        self._clock = MonotonicClock(clock)
        self._initialized = False

    @classmethod
    def from_config(cls, config: AppConfig) -> SqliteEntityStore:
        return cls(
            config.database.path,
            busy_timeout=config.database.busy_timeout,
            lock_retries=config.database.lock_retries,
        )

    def initialize(self) -> int:
        """Create the database and apply pending migrations.

        Returns:
            Number of migrations applied
        """
        try:
            applied = initialize_database(self.db_path, timeout=self.busy_timeout)
        except (sqlite3.Error, OSError, RuntimeError) as e:
            raise StoreUnavailableError(
                f"Cannot initialize store at {self.db_path}: {e}"
            ) from e
        self._initialized = True
        return applied

    def _connect(self) -> sqlite3.Connection:
        if not self._initialized:
            self.initialize()
        try:
            return open_connection(self.db_path, timeout=self.busy_timeout)
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailableError(f"Cannot open store at {self.db_path}: {e}") from e

    @contextmanager
    def transaction(
        self, *, deadline_seconds: float | None = None
    ) -> Iterator[SqliteSession]:
        connection = self._connect()
        deadline = None
        if deadline_seconds is not None:
            deadline = time.monotonic() + deadline_seconds
        session = SqliteSession(connection, self._clock, deadline, deadline_seconds)
        if deadline is not None:
            # A non-zero return aborts the running statement with "interrupted"
            connection.set_progress_handler(session.deadline_passed, _PROGRESS_STEPS)

        try:
            try:
                execute_with_retry(
                    connection, "BEGIN IMMEDIATE", max_retries=self.lock_retries
                )
            except sqlite3.Error as e:
                raise StoreUnavailableError(f"Cannot lock store: {e}") from e

            session.sync_clock()
            yield session
            session.commit()
        except BaseException:
            connection.set_progress_handler(None, 0)
            if connection.in_transaction:
                try:
                    connection.execute("ROLLBACK")
                except sqlite3.Error as rollback_error:
                    logger.warning("rollback failed: %s", rollback_error)
            raise
        finally:
            connection.close()

    def health(self) -> dict[str, Any]:
        checked_at = datetime.now(UTC)
        try:
            connection = open_connection(self.db_path, timeout=self.busy_timeout)
            try:
                connection.execute("SELECT 1").fetchone()
                version = MigrationRunner(connection).get_current_version()
            finally:
                connection.close()
        except (sqlite3.Error, OSError) as e:
            logger.warning("health check failed for %s: %s", self.db_path, e)
            return {
                "status": "unavailable",
                "path": str(self.db_path),
                "error": str(e),
                "timestamp": checked_at,
            }

        return {
            "status": "ok",
            "path": str(self.db_path),
            "schema_version": version,
            "timestamp": checked_at,
        }

    def migration_history(self) -> list[dict[str, Any]]:
        try:
            connection = open_connection(self.db_path, timeout=self.busy_timeout)
            try:
                return MigrationRunner(connection).get_migration_history()
            finally:
                connection.close()
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailableError(f"Cannot open store at {self.db_path}: {e}") from e
