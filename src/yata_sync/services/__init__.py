"""Services module for yata-sync - Business logic layer."""

from .change_applier import ChangeApplier
from .delta_selector import DeltaSelector, classify_row
from .project_service import ProjectService
from .sync_service import SyncCoordinator, SyncResult
from .task_service import TaskService
from .task_type_service import TaskTypeService
from .user_service import UserService

__all__ = [
    "ChangeApplier",
    "DeltaSelector",
    "classify_row",
    "SyncCoordinator",
    "SyncResult",
    "TaskService",
    "ProjectService",
    "TaskTypeService",
    "UserService",
]
