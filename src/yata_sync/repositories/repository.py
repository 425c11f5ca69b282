"""Storage port for the sync engine.

This module defines the abstract base classes (interfaces) the services talk
to, following the hexagonal architecture (Ports & Adapters) pattern. The
SQLite adapter is the only implementation today; services never see a
connection or SQL.

Rows cross this boundary as plain dicts in storage form: snake_case keys,
aware UTC datetimes, ``urls`` as a list. Every read and write is scoped to a
user id so one user can never touch another user's rows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any

from yata_sync.models.sync import EntityKind


class StoreSession(ABC):
    """Operations available inside one store transaction.

    A session is only valid inside the ``with`` block that produced it.
    Everything done through it commits together or not at all.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the next store timestamp.

        Successive calls return strictly increasing values, and every value
        is later than any ``updated_at`` already committed.
        """

    @abstractmethod
    def check_deadline(self) -> None:
        """Raise DeadlineExceededError if the transaction ran out of time."""

    @abstractmethod
    def create_row(
        self, kind: EntityKind, entity_id: str, fields: dict[str, Any], *, user_id: str
    ) -> dict[str, Any]:
        """Insert a row with ``created_at == updated_at == now()``.

        Raises:
            ConflictError: If a row with this id exists, tombstoned or not
        """

    @abstractmethod
    def update_row(
        self, kind: EntityKind, entity_id: str, fields: dict[str, Any], *, user_id: str
    ) -> dict[str, Any]:
        """Apply a sparse update to a live row and bump ``updated_at``.

        Raises:
            NotFoundError: If no live row with this id belongs to the user
        """

    @abstractmethod
    def delete_rows(
        self, kind: EntityKind, entity_ids: Iterable[str], *, user_id: str
    ) -> list[str]:
        """Tombstone the user's live rows among ``entity_ids``.

        Unknown, foreign or already deleted ids are ignored.

        Returns:
            Ids that were tombstoned by this call
        """

    @abstractmethod
    def get_row(
        self,
        kind: EntityKind,
        entity_id: str,
        *,
        user_id: str,
        include_deleted: bool = False,
    ) -> dict[str, Any] | None:
        """Fetch one of the user's rows, or None."""

    @abstractmethod
    def list_rows(
        self,
        kind: EntityKind,
        *,
        user_id: str,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """List the user's live rows matching equality ``filters``."""

    @abstractmethod
    def query_updated_since(
        self, kind: EntityKind, user_id: str, since: datetime
    ) -> list[dict[str, Any]]:
        """Return the user's rows with ``updated_at > since``, tombstones included."""

    @abstractmethod
    def create_user(self, user_id: str, email: str) -> dict[str, Any]:
        """Insert a user.

        Raises:
            ConflictError: If the id or email is taken
        """

    @abstractmethod
    def get_user(self, user_id: str) -> dict[str, Any] | None:
        """Fetch a user, or None."""


class EntityStore(ABC):
    """Durable store of users, projects, task types and tasks."""

    @abstractmethod
    def transaction(
        self, *, deadline_seconds: float | None = None
    ) -> AbstractContextManager[StoreSession]:
        """Open a serialized transaction.

        Commits when the block exits normally and rolls back when it raises.

        Args:
            deadline_seconds: Abort with DeadlineExceededError after this long

        Raises:
            StoreUnavailableError: If the store cannot be reached or locked
        """

    @abstractmethod
    def initialize(self) -> int:
        """Create the schema or migrate it to the latest version.

        Returns:
            Number of migrations applied
        """

    @abstractmethod
    def migration_history(self) -> list[dict[str, Any]]:
        """List applied schema migrations, oldest first."""

    @abstractmethod
    def health(self) -> dict[str, Any]:
        """Report store reachability and schema version."""
