"""Sync protocol models: the change batch pushed by a client and the delta
returned to it."""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from yata_sync.errors import ValidationError
from yata_sync.models.core import (
    Project,
    ProjectCreate,
    ProjectUpdate,
    Task,
    TaskCreate,
    TaskType,
    TaskTypeCreate,
    TaskTypeUpdate,
    TaskUpdate,
    UtcDatetime,
    WireModel,
)

CreateT = TypeVar("CreateT", bound=WireModel)
UpdateT = TypeVar("UpdateT", bound=WireModel)
EntityT = TypeVar("EntityT", bound=WireModel)


class EntityKind(str, Enum):
    """Synchronised entity kinds; values are the store table names."""

    PROJECT = "projects"
    TASK_TYPE = "task_types"
    TASK = "tasks"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    EntityKind.PROJECT: "Project",
    EntityKind.TASK_TYPE: "TaskType",
    EntityKind.TASK: "Task",
}

# Tasks reference projects and task types, so those are applied first.
APPLY_ORDER = (EntityKind.PROJECT, EntityKind.TASK_TYPE, EntityKind.TASK)

ENTITY_MODELS: dict[EntityKind, type[WireModel]] = {
    EntityKind.PROJECT: Project,
    EntityKind.TASK_TYPE: TaskType,
    EntityKind.TASK: Task,
}


class ChangeSet(WireModel, Generic[CreateT, UpdateT]):
    """Client mutations for one entity kind."""

    created: list[CreateT] = Field(default_factory=list)
    updated: list[UpdateT] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.created or self.updated or self.deleted)


class SyncChanges(WireModel):
    """Change batch across all entity kinds."""

    tasks: ChangeSet[TaskCreate, TaskUpdate] | None = None
    projects: ChangeSet[ProjectCreate, ProjectUpdate] | None = None
    task_types: ChangeSet[TaskTypeCreate, TaskTypeUpdate] | None = None

    def for_kind(self, kind: EntityKind) -> ChangeSet | None:
        """Return the change set for ``kind``, if the client sent one."""
        if kind is EntityKind.PROJECT:
            return self.projects
        if kind is EntityKind.TASK_TYPE:
            return self.task_types
        return self.tasks

    def is_empty(self) -> bool:
        return all(
            changeset is None or changeset.is_empty()
            for changeset in (self.tasks, self.projects, self.task_types)
        )


class SyncRequest(WireModel):
    """Body of a sync call."""

    last_pulled_at: UtcDatetime | None = None
    changes: SyncChanges | None = None

    @classmethod
    def parse(cls, payload: str | bytes | dict[str, Any]) -> SyncRequest:
        """Validate a raw payload, raising the boundary ``ValidationError``.

        Args:
            payload: JSON text or an already-decoded mapping

        Returns:
            Validated SyncRequest

        Raises:
            ValidationError: If the payload is not valid JSON or has the
                wrong shape
        """
        try:
            if isinstance(payload, (str, bytes)):
                return cls.model_validate_json(payload)
            return cls.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(_summarize(e)) from e


class KindDelta(WireModel, Generic[EntityT]):
    """Server changes for one entity kind since the client's watermark."""

    created: list[EntityT] = Field(default_factory=list)
    updated: list[EntityT] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)

    def count(self) -> int:
        return len(self.created) + len(self.updated) + len(self.deleted)


class SyncDelta(WireModel):
    """Server changes across all entity kinds."""

    tasks: KindDelta[Task] = Field(default_factory=KindDelta[Task])
    projects: KindDelta[Project] = Field(default_factory=KindDelta[Project])
    task_types: KindDelta[TaskType] = Field(default_factory=KindDelta[TaskType])

    def for_kind(self, kind: EntityKind) -> KindDelta:
        if kind is EntityKind.PROJECT:
            return self.projects
        if kind is EntityKind.TASK_TYPE:
            return self.task_types
        return self.tasks

    def is_empty(self) -> bool:
        return not any(self.for_kind(kind).count() for kind in EntityKind)


class SyncResponse(WireModel):
    """Successful sync result: the delta and the client's next watermark."""

    changes: SyncDelta
    timestamp: UtcDatetime


def _summarize(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "body"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)
