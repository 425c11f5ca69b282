"""Yata sync domain models.

This package contains Pydantic models for the synchronised entities, the sync
protocol (change batches and deltas) and application configuration.
"""

from .config_models import AppConfig
from .core import (
    PatchModel,
    Project,
    ProjectCreate,
    ProjectDraft,
    ProjectPatch,
    ProjectUpdate,
    Task,
    TaskCreate,
    TaskDependency,
    TaskDetail,
    TaskDraft,
    TaskPatch,
    TaskPosition,
    TaskType,
    TaskTypeCreate,
    TaskTypeDraft,
    TaskTypePatch,
    TaskTypeUpdate,
    TaskUpdate,
    User,
    UserCreate,
    WireModel,
)
from .sync import (
    APPLY_ORDER,
    ENTITY_MODELS,
    ChangeSet,
    EntityKind,
    KindDelta,
    SyncChanges,
    SyncDelta,
    SyncRequest,
    SyncResponse,
)

__all__ = [
    # Base models
    "WireModel",
    "PatchModel",
    # Entity models
    "User",
    "UserCreate",
    "Project",
    "ProjectCreate",
    "ProjectDraft",
    "ProjectPatch",
    "ProjectUpdate",
    "TaskType",
    "TaskTypeCreate",
    "TaskTypeDraft",
    "TaskTypePatch",
    "TaskTypeUpdate",
    "Task",
    "TaskCreate",
    "TaskDraft",
    "TaskPatch",
    "TaskUpdate",
    "TaskPosition",
    "TaskDetail",
    "TaskDependency",
    # Sync protocol
    "EntityKind",
    "APPLY_ORDER",
    "ENTITY_MODELS",
    "ChangeSet",
    "SyncChanges",
    "SyncRequest",
    "KindDelta",
    "SyncDelta",
    "SyncResponse",
    # Config
    "AppConfig",
]
