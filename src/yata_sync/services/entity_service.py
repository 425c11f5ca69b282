"""Shared CRUD plumbing for the user-owned entity services.

Every operation runs in its own store transaction and is scoped to one user.
Creates and updates go through the ChangeApplier so plain CRUD and sync
enforce the same ownership and reference rules.
"""

from __future__ import annotations

from typing import Any, ClassVar

from yata_sync.adapters.sqlite.utils import generate_uuid
from yata_sync.errors import NotFoundError
from yata_sync.models import EntityKind, PatchModel, WireModel
from yata_sync.repositories import EntityStore, StoreSession
from yata_sync.services.change_applier import ChangeApplier


def require_user(session: StoreSession, user_id: str) -> None:
    """Raise NotFoundError unless ``user_id`` is a registered user."""
    if session.get_user(user_id) is None:
        raise NotFoundError("User", user_id)


class EntityService:
    """Base class for project, task type and task services."""

    kind: ClassVar[EntityKind]
    model: ClassVar[type[WireModel]]
    create_model: ClassVar[type[WireModel]]

    def __init__(self, store: EntityStore):
        """Initialize the service.

        Args:
            store: EntityStore implementation for data access
        """
        self.store = store

    def _list(self, user_id: str, filters: dict[str, Any] | None = None) -> list:
        with self.store.transaction() as session:
            rows = session.list_rows(self.kind, user_id=user_id, filters=filters)
        return [self.model.model_validate(row) for row in rows]

    def _get(self, user_id: str, entity_id: str):
        with self.store.transaction() as session:
            row = session.get_row(self.kind, entity_id, user_id=user_id)
        if row is None:
            raise NotFoundError(self.kind.label, entity_id)
        return self.model.model_validate(row)

    def _create(self, user_id: str, draft: WireModel):
        record = self.create_model(id=generate_uuid(), **draft.model_dump())
        with self.store.transaction() as session:
            require_user(session, user_id)
            row = ChangeApplier(session, user_id).create(self.kind, record)
        return self.model.model_validate(row)

    def _update(self, user_id: str, entity_id: str, patch: PatchModel):
        with self.store.transaction() as session:
            if session.get_row(self.kind, entity_id, user_id=user_id) is None:
                raise NotFoundError(self.kind.label, entity_id)
            row = ChangeApplier(session, user_id).update(self.kind, entity_id, patch)
        return self.model.model_validate(row)

    def _delete(self, user_id: str, entity_id: str) -> None:
        with self.store.transaction() as session:
            if not session.delete_rows(self.kind, [entity_id], user_id=user_id):
                raise NotFoundError(self.kind.label, entity_id)
