"""Change applier - writes a client's pending mutations into the store.

The applier runs inside a store transaction owned by the caller. It raises on
the first invalid mutation and leaves rollback to the transaction, so a batch
is applied completely or not at all.
"""

from __future__ import annotations

from yata_sync.errors import NotFoundError, ValidationError
from yata_sync.models import (
    APPLY_ORDER,
    ChangeSet,
    EntityKind,
    PatchModel,
    SyncChanges,
)
from yata_sync.repositories import StoreSession
from yata_sync.utils.logger import get_logger

logger = get_logger("applier")

# Task columns that point at another entity of the same user
TASK_REFERENCES = {
    "project_id": EntityKind.PROJECT,
    "type_id": EntityKind.TASK_TYPE,
    "parent_id": EntityKind.TASK,
}


class ApplyStats:
    """Counts of applied mutations, for logging."""

    def __init__(self):
        self.created = 0
        self.updated = 0
        self.deleted = 0
        self.skipped = 0

    def __repr__(self) -> str:
        return (
            f"ApplyStats(created={self.created}, updated={self.updated}, "
            f"deleted={self.deleted}, skipped={self.skipped})"
        )


class ChangeApplier:
    """Applies a change batch for one user within a store session."""

    def __init__(self, session: StoreSession, user_id: str):
        self.session = session
        self.user_id = user_id

    def apply(self, changes: SyncChanges) -> ApplyStats:
        """Apply every change set in dependency order.

        Projects and task types go first so tasks in the same batch can
        reference them. Within a kind, creates run before updates and updates
        before deletes.

        Args:
            changes: Validated change batch

        Returns:
            ApplyStats for the batch

        Raises:
            NotFoundError: Unknown user, or an update/reference to a row the
                user does not own
            ConflictError: Create of an existing id
            ValidationError: Owner mismatch on a created record
            DeadlineExceededError: Transaction ran out of time
        """
        stats = ApplyStats()
        if changes.is_empty():
            return stats

        if self.session.get_user(self.user_id) is None:
            raise NotFoundError("User", self.user_id)

        for kind in APPLY_ORDER:
            changeset = changes.for_kind(kind)
            if changeset is not None and not changeset.is_empty():
                self._apply_kind(kind, changeset, stats)

        logger.debug("applied changes for user %s: %r", self.user_id, stats)
        return stats

    def _apply_kind(
        self, kind: EntityKind, changeset: ChangeSet, stats: ApplyStats
    ) -> None:
        for record in changeset.created:
            self.session.check_deadline()
            self.create(kind, record)
            stats.created += 1

        for patch in changeset.updated:
            self.session.check_deadline()
            if self.update(kind, patch.id, patch):
                stats.updated += 1
            else:
                stats.skipped += 1

        if changeset.deleted:
            self.session.check_deadline()
            stats.deleted += len(
                self.session.delete_rows(kind, changeset.deleted, user_id=self.user_id)
            )

    def create(self, kind: EntityKind, record) -> dict:
        """Insert one client-created record."""
        if record.user_id is not None and record.user_id != self.user_id:
            raise ValidationError(
                f"{kind.label} {record.id} belongs to user {record.user_id}, "
                f"not {self.user_id}"
            )
        fields = record.model_dump(exclude={"id", "user_id"})
        if kind is EntityKind.TASK:
            self._check_references(record.id, fields)
        return self.session.create_row(kind, record.id, fields, user_id=self.user_id)

    def update(
        self, kind: EntityKind, entity_id: str, patch: PatchModel
    ) -> dict | None:
        """Apply one sparse update.

        Returns:
            The updated row, or None when the row is tombstoned and the
            update was skipped
        """
        row = self.session.get_row(
            kind, entity_id, user_id=self.user_id, include_deleted=True
        )
        if row is None:
            raise NotFoundError(kind.label, entity_id)
        if row["deleted_at"] is not None:
            logger.info("skipping update to deleted %s %s", kind.label, entity_id)
            return None

        fields = patch.changed_fields()
        if kind is EntityKind.TASK:
            self._check_references(entity_id, fields)
        return self.session.update_row(kind, entity_id, fields, user_id=self.user_id)

    def _check_references(self, task_id: str, fields: dict) -> None:
        for column, target in TASK_REFERENCES.items():
            target_id = fields.get(column)
            if target_id is None:
                continue
            if column == "parent_id" and target_id == task_id:
                raise ValidationError(f"Task {task_id} cannot be its own parent")
            # Tombstoned targets still exist for reference purposes
            if (
                self.session.get_row(
                    target, target_id, user_id=self.user_id, include_deleted=True
                )
                is None
            ):
                raise NotFoundError(target.label, target_id)
