"""Project service - Business logic for project operations."""

from __future__ import annotations

from yata_sync.models import (
    EntityKind,
    Project,
    ProjectCreate,
    ProjectDraft,
    ProjectPatch,
)
from yata_sync.services.entity_service import EntityService


class ProjectService(EntityService):
    """Service for project business logic."""

    kind = EntityKind.PROJECT
    model = Project
    create_model = ProjectCreate

    def list_projects(self, user_id: str) -> list[Project]:
        """List the user's live projects, oldest first."""
        return self._list(user_id)

    def get_project(self, user_id: str, project_id: str) -> Project:
        """Get a specific project by ID.

        Raises:
            NotFoundError: If the user has no live project with this ID
        """
        return self._get(user_id, project_id)

    def create_project(self, user_id: str, name: str) -> Project:
        """Create a new project with a server-generated ID.

        Args:
            user_id: Owner of the project
            name: Project name (required)

        Returns:
            Created Project object
        """
        return self._create(user_id, ProjectDraft(name=name))

    def update_project(
        self, user_id: str, project_id: str, patch: ProjectPatch
    ) -> Project:
        """Apply a sparse update to a project."""
        return self._update(user_id, project_id, patch)

    def delete_project(self, user_id: str, project_id: str) -> None:
        """Delete a project.

        Tasks keep their ``project_id``; clients resolve the dangling
        reference from the tombstone in their next delta.
        """
        self._delete(user_id, project_id)


def get_project_service() -> ProjectService:
    """Factory function to get a ProjectService instance."""
    from yata_sync.services.config_service import get_entity_store

    return ProjectService(get_entity_store())
