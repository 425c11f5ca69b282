"""Utility functions for SQLite adapter."""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Iterable, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# SQLite's default SQLITE_MAX_VARIABLE_NUMBER is 999 on older builds.
MAX_SQL_PARAMS = 500


def generate_uuid() -> str:
    """Generate a new UUID as string.

    Returns:
        UUID string (e.g., "123e4567-e89b-12d3-a456-426614174000")
    """
    return str(uuid.uuid4())


def format_timestamp(value: datetime) -> str:
    """Encode a datetime for storage.

    Timestamps are stored as fixed-width UTC strings with microsecond
    precision (``2024-01-01T09:30:00.000000Z``), so comparing the text in SQL
    orders them chronologically.

    Args:
        value: Aware or naive (assumed UTC) datetime

    Returns:
        Storage string
    """
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.isoformat(timespec="microseconds") + "Z"


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Decode a stored timestamp into an aware UTC datetime.

    Args:
        value: String, datetime object, or None

    Returns:
        datetime object or None
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary.

    Args:
        row: sqlite3.Row object

    Returns:
        Dictionary with column names as keys
    """
    if row is None:
        return {}
    return dict(row)


def quote_identifier(name: str) -> str:
    """Quote a column name; ``order`` is a reserved word."""
    return '"' + name.replace('"', '""') + '"'


def build_where_clause(filters: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build SQL WHERE clause from filter dictionary.

    A ``None`` value matches SQL NULL.

    Args:
        filters: Dictionary of column names to values

    Returns:
        Tuple of (WHERE clause string, parameters list)
    """
    conditions = []
    params = []

    for key, value in filters.items():
        if value is None:
            conditions.append(f"{quote_identifier(key)} IS NULL")
        else:
            conditions.append(f"{quote_identifier(key)} = ?")
            params.append(value)

    where_clause = " AND ".join(conditions) if conditions else "1=1"
    return where_clause, params


def build_update_clause(updates: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build SQL UPDATE SET clause from updates dictionary.

    Unlike a filter, a ``None`` value is written as NULL, which is how a
    sparse patch clears a nullable column.

    Args:
        updates: Dictionary of column names to new values

    Returns:
        Tuple of (SET clause string, parameters list)
    """
    set_parts = [f"{quote_identifier(key)} = ?" for key in updates]
    return ", ".join(set_parts), list(updates.values())


def chunked(items: Iterable[str], size: int = MAX_SQL_PARAMS) -> Iterator[list[str]]:
    """Split ids into chunks that fit in one ``IN (...)`` clause."""
    chunk: list[str] = []
    for item in items:
        chunk.append(item)
        if len(chunk) == size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


class MonotonicClock:
    """UTC clock whose readings strictly increase.

    Two writes never share a timestamp and the watermark handed to a client is
    always later than every timestamp already issued, even if the wall clock
    steps backwards. Readings have microsecond resolution to match storage.
    """

    def __init__(self, source: Callable[[], datetime] | None = None):
        self._source = source or (lambda: datetime.now(UTC))
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            now = parse_timestamp(self._source())
            if self._last is not None and now <= self._last:
                now = self._last + timedelta(microseconds=1)
            self._last = now
            return now

    def observe(self, timestamp: datetime) -> None:
        """Ensure future readings come after ``timestamp``.

        Used to absorb timestamps written by other processes whose clocks
        may run ahead of ours.
        """
        timestamp = parse_timestamp(timestamp)
        with self._lock:
            if self._last is None or timestamp > self._last:
                self._last = timestamp
