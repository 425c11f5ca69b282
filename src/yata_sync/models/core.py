"""Entity data models.

Python attributes are snake_case; the wire representation is camelCase
(``userId``, ``dueDate`` ...) so payloads produced by the offline client can be
validated as-is. Timestamps are always normalised to aware UTC datetimes.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, ClassVar

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    try:
        return value.astimezone(UTC)
    except OverflowError:
        raise ValueError("date out of range") from None


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]
EntityId = Annotated[str, Field(min_length=1)]


class WireModel(BaseModel):
    """Base model accepting both camelCase (wire) and snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump as a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class PatchModel(WireModel):
    """Sparse patch: only fields explicitly present in the payload apply.

    Subclasses list the fields that may be omitted but never set to null.
    """

    NON_NULLABLE: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_null_required_fields(self):
        for name in self.NON_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changed_fields(self) -> dict:
        """Return the fields present in the payload, excluding ``id``."""
        return self.model_dump(exclude_unset=True, exclude={"id"})


class User(WireModel):
    """User model."""

    id: str
    email: EmailStr
    created_at: UtcDatetime
    updated_at: UtcDatetime


class UserCreate(WireModel):
    """Input for registering a user."""

    id: EntityId
    email: EmailStr


class Project(WireModel):
    """Project model representing a complete project entity.

    Attributes:
        id: Client-generated unique identifier
        name: Project name
        user_id: Owner of the project
        created_at: Creation timestamp (assigned by the store)
        updated_at: Last mutation timestamp (assigned by the store)
    """

    id: str
    name: str
    user_id: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class ProjectDraft(WireModel):
    """Fields for creating a project."""

    name: str = Field(min_length=1)
    user_id: str | None = None


class ProjectCreate(ProjectDraft):
    """Project create record carrying its client-generated id."""

    id: EntityId


class ProjectPatch(PatchModel):
    """Sparse project update."""

    NON_NULLABLE: ClassVar[tuple[str, ...]] = ("name",)

    name: str | None = Field(default=None, min_length=1)


class ProjectUpdate(ProjectPatch):
    """Sparse project update addressed by id."""

    id: EntityId


class TaskType(WireModel):
    """Task type model (e.g. "Bug", "Errand") with a display icon."""

    id: str
    name: str
    icon: str
    user_id: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TaskTypeDraft(WireModel):
    """Fields for creating a task type."""

    name: str = Field(min_length=1)
    icon: str
    user_id: str | None = None


class TaskTypeCreate(TaskTypeDraft):
    """Task type create record carrying its client-generated id."""

    id: EntityId


class TaskTypePatch(PatchModel):
    """Sparse task type update."""

    NON_NULLABLE: ClassVar[tuple[str, ...]] = ("name", "icon")

    name: str | None = Field(default=None, min_length=1)
    icon: str | None = None


class TaskTypeUpdate(TaskTypePatch):
    """Sparse task type update addressed by id."""

    id: EntityId


class Task(WireModel):
    """Task model representing a complete task entity.

    Attributes:
        id: Client-generated unique identifier
        title: Short task title
        content: Optional long-form notes
        status: Workflow status (e.g. "todo", "doing", "done")
        section: Board section the task is shown in
        order: Position within the section; a client convention, neither
            unique nor contiguous
        urls: Ordered list of attached links
        due_date: When the task is due
        when_date: When the user plans to work on it
        started_date: When work started
        completed_date: When the task was completed
        user_id: Owner of the task
        project_id: Optional parent project
        type_id: Optional task type
        parent_id: Optional parent task (makes this a subtask)
        created_at: Creation timestamp (assigned by the store)
        updated_at: Last mutation timestamp (assigned by the store)
    """

    id: str
    title: str
    content: str | None = None
    status: str
    section: str
    order: int
    urls: list[str] = Field(default_factory=list)
    due_date: UtcDatetime | None = None
    when_date: UtcDatetime | None = None
    started_date: UtcDatetime | None = None
    completed_date: UtcDatetime | None = None
    user_id: str
    project_id: str | None = None
    type_id: str | None = None
    parent_id: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TaskDraft(WireModel):
    """Fields for creating a task.

    Defaults mirror the client's: new tasks land in the "Inbox" section with
    status "todo".
    """

    title: str = Field(min_length=1)
    content: str | None = None
    status: str = "todo"
    section: str = "Inbox"
    order: int = 0
    urls: list[str] = Field(default_factory=list)
    due_date: UtcDatetime | None = None
    when_date: UtcDatetime | None = None
    started_date: UtcDatetime | None = None
    completed_date: UtcDatetime | None = None
    user_id: str | None = None
    project_id: str | None = None
    type_id: str | None = None
    parent_id: str | None = None


class TaskCreate(TaskDraft):
    """Task create record carrying its client-generated id."""

    id: EntityId


class TaskPatch(PatchModel):
    """Sparse task update.

    Absent fields are left untouched; an explicit ``null`` clears a nullable
    field such as ``dueDate`` or ``projectId``.
    """

    NON_NULLABLE: ClassVar[tuple[str, ...]] = (
        "title",
        "status",
        "section",
        "order",
        "urls",
    )

    title: str | None = Field(default=None, min_length=1)
    content: str | None = None
    status: str | None = None
    section: str | None = None
    order: int | None = None
    urls: list[str] | None = None
    due_date: UtcDatetime | None = None
    when_date: UtcDatetime | None = None
    started_date: UtcDatetime | None = None
    completed_date: UtcDatetime | None = None
    project_id: str | None = None
    type_id: str | None = None
    parent_id: str | None = None


class TaskUpdate(TaskPatch):
    """Sparse task update addressed by id."""

    id: EntityId


class TaskPosition(WireModel):
    """New position of a task, used by bulk reordering."""

    id: EntityId
    section: str
    order: int


class TaskDetail(Task):
    """Task with its related rows resolved."""

    project: Project | None = None
    type: TaskType | None = None
    parent: Task | None = None
    subtasks: list[Task] = Field(default_factory=list)


class TaskDependency(WireModel):
    """Directed edge: ``blocked_by_id`` cannot complete before ``blocking_id``."""

    id: str
    blocking_id: str
    blocked_by_id: str
    created_at: UtcDatetime
