"""Task type service - Business logic for task type operations."""

from __future__ import annotations

from yata_sync.models import (
    EntityKind,
    TaskType,
    TaskTypeCreate,
    TaskTypeDraft,
    TaskTypePatch,
)
from yata_sync.services.entity_service import EntityService


class TaskTypeService(EntityService):
    """Service for task type business logic."""

    kind = EntityKind.TASK_TYPE
    model = TaskType
    create_model = TaskTypeCreate

    def list_task_types(self, user_id: str) -> list[TaskType]:
        return self._list(user_id)

    def get_task_type(self, user_id: str, type_id: str) -> TaskType:
        return self._get(user_id, type_id)

    def create_task_type(self, user_id: str, name: str, icon: str) -> TaskType:
        """Create a new task type.

        Args:
            user_id: Owner of the task type
            name: Display name
            icon: Icon identifier or emoji shown by clients

        Returns:
            Created TaskType object
        """
        return self._create(user_id, TaskTypeDraft(name=name, icon=icon))

    def update_task_type(
        self, user_id: str, type_id: str, patch: TaskTypePatch
    ) -> TaskType:
        return self._update(user_id, type_id, patch)

    def delete_task_type(self, user_id: str, type_id: str) -> None:
        self._delete(user_id, type_id)


def get_task_type_service() -> TaskTypeService:
    """Factory function to get a TaskTypeService instance."""
    from yata_sync.services.config_service import get_entity_store

    return TaskTypeService(get_entity_store())
