"""Task service - Business logic for task operations.

This service layer sits between commands and the entity store, providing
a clean API for task-related business logic.
"""

from __future__ import annotations

from typing import Any

from yata_sync.errors import NotFoundError
from yata_sync.models import (
    EntityKind,
    Project,
    Task,
    TaskCreate,
    TaskDetail,
    TaskDraft,
    TaskPatch,
    TaskPosition,
    TaskType,
)
from yata_sync.services.entity_service import EntityService
from yata_sync.utils.logger import get_logger

logger = get_logger("tasks")


class TaskService(EntityService):
    """Service for task business logic."""

    kind = EntityKind.TASK
    model = Task
    create_model = TaskCreate

    def list_tasks(
        self,
        user_id: str,
        *,
        project_id: str | None = None,
        section: str | None = None,
        status: str | None = None,
        parent_id: str | None = None,
    ) -> list[Task]:
        """List the user's live tasks.

        Args:
            user_id: Owner of the tasks
            project_id: Filter by project ID
            section: Filter by section name
            status: Filter by status
            parent_id: Filter by parent task (subtasks of one task)

        Returns:
            Tasks ordered by section, then position
        """
        filters: dict[str, Any] = {
            key: value
            for key, value in (
                ("project_id", project_id),
                ("section", section),
                ("status", status),
                ("parent_id", parent_id),
            )
            if value is not None
        }
        return self._list(user_id, filters)

    def get_task(self, user_id: str, task_id: str) -> TaskDetail:
        """Get a task with its project, type, parent and subtasks resolved.

        Deleted related rows resolve to None.

        Raises:
            NotFoundError: If the user has no live task with this ID
        """
        with self.store.transaction() as session:
            row = session.get_row(self.kind, task_id, user_id=user_id)
            if row is None:
                raise NotFoundError(self.kind.label, task_id)

            def related(kind: EntityKind, entity_id: str | None):
                if entity_id is None:
                    return None
                return session.get_row(kind, entity_id, user_id=user_id)

            project = related(EntityKind.PROJECT, row["project_id"])
            task_type = related(EntityKind.TASK_TYPE, row["type_id"])
            parent = related(EntityKind.TASK, row["parent_id"])
            subtasks = session.list_rows(
                self.kind, user_id=user_id, filters={"parent_id": task_id}
            )

        return TaskDetail(
            **row,
            project=Project.model_validate(project) if project else None,
            type=TaskType.model_validate(task_type) if task_type else None,
            parent=Task.model_validate(parent) if parent else None,
            subtasks=[Task.model_validate(subtask) for subtask in subtasks],
        )

    def create_task(self, user_id: str, draft: TaskDraft) -> Task:
        """Create a new task with a server-generated ID.

        Raises:
            NotFoundError: If a referenced project, type or parent is unknown
        """
        return self._create(user_id, draft)

    def update_task(self, user_id: str, task_id: str, patch: TaskPatch) -> Task:
        """Apply a sparse update; only fields set on ``patch`` change."""
        return self._update(user_id, task_id, patch)

    def delete_task(self, user_id: str, task_id: str) -> None:
        """Delete a task.

        Subtasks are not deleted with their parent.
        """
        self._delete(user_id, task_id)

    def reorder_tasks(
        self, user_id: str, positions: list[TaskPosition]
    ) -> list[Task]:
        """Move tasks to new sections and positions.

        All moves apply in one transaction; an unknown ID aborts the
        whole reorder.

        Args:
            user_id: Owner of the tasks
            positions: New section and order per task

        Returns:
            The moved tasks
        """
        with self.store.transaction() as session:
            rows = [
                session.update_row(
                    self.kind,
                    position.id,
                    {"section": position.section, "order": position.order},
                    user_id=user_id,
                )
                for position in positions
            ]
        logger.info("reordered %d tasks for user %s", len(rows), user_id)
        return [Task.model_validate(row) for row in rows]


def get_task_service() -> TaskService:
    """Factory function to get a TaskService instance."""
    from yata_sync.services.config_service import get_entity_store

    return TaskService(get_entity_store())
