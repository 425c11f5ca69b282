"""Tests for TaskService."""

from __future__ import annotations

import uuid

import pytest

from yata_sync.errors import NotFoundError
from yata_sync.models import TaskDraft, TaskPatch, TaskPosition
from yata_sync.services.project_service import ProjectService
from yata_sync.services.task_service import TaskService
from yata_sync.services.task_type_service import TaskTypeService


@pytest.fixture()
def service(store):
    return TaskService(store)


class TestCreateTask:
    def test_generates_uuid_and_defaults(self, service, user_id):
        task = service.create_task(user_id, TaskDraft(title="Write report"))

        assert uuid.UUID(task.id)
        assert task.user_id == user_id
        assert task.status == "todo"
        assert task.section == "Inbox"
        assert task.created_at == task.updated_at

    def test_unknown_project(self, service, user_id):
        with pytest.raises(NotFoundError, match="Project not found"):
            service.create_task(user_id, TaskDraft(title="x", project_id="nope"))

    def test_unknown_user(self, service):
        with pytest.raises(NotFoundError, match="User not found"):
            service.create_task("ghost", TaskDraft(title="x"))


class TestListTasks:
    def test_filters_and_ordering(self, service, user_id, store):
        project = ProjectService(store).create_project(user_id, "Work")
        later = service.create_task(
            user_id, TaskDraft(title="b", section="Today", order=2, project_id=project.id)
        )
        first = service.create_task(
            user_id, TaskDraft(title="a", section="Today", order=1, project_id=project.id)
        )
        service.create_task(user_id, TaskDraft(title="c", section="Inbox"))

        today = service.list_tasks(user_id, section="Today")
        in_project = service.list_tasks(user_id, project_id=project.id)

        assert [t.id for t in today] == [first.id, later.id]
        assert {t.id for t in in_project} == {first.id, later.id}
        assert [t.title for t in service.list_tasks(user_id)] == ["c", "a", "b"]

    def test_hides_deleted_and_foreign_tasks(self, service, user_id, other_user_id):
        kept = service.create_task(user_id, TaskDraft(title="kept"))
        gone = service.create_task(user_id, TaskDraft(title="gone"))
        service.create_task(other_user_id, TaskDraft(title="theirs"))
        service.delete_task(user_id, gone.id)

        assert [t.id for t in service.list_tasks(user_id)] == [kept.id]

    def test_subtasks_of_parent(self, service, user_id):
        parent = service.create_task(user_id, TaskDraft(title="parent"))
        child = service.create_task(
            user_id, TaskDraft(title="child", parent_id=parent.id)
        )

        assert [t.id for t in service.list_tasks(user_id, parent_id=parent.id)] == [
            child.id
        ]


class TestGetTask:
    def test_resolves_related_rows(self, service, user_id, store):
        project = ProjectService(store).create_project(user_id, "Home")
        task_type = TaskTypeService(store).create_task_type(user_id, "Errand", "cart")
        parent = service.create_task(
            user_id,
            TaskDraft(title="Shopping", project_id=project.id, type_id=task_type.id),
        )
        child = service.create_task(
            user_id, TaskDraft(title="Milk", parent_id=parent.id)
        )

        detail = service.get_task(user_id, parent.id)
        child_detail = service.get_task(user_id, child.id)

        assert detail.project.name == "Home"
        assert detail.type.icon == "cart"
        assert [t.id for t in detail.subtasks] == [child.id]
        assert child_detail.parent.id == parent.id

    def test_deleted_relations_resolve_to_none(self, service, user_id, store):
        projects = ProjectService(store)
        project = projects.create_project(user_id, "Old")
        task = service.create_task(
            user_id, TaskDraft(title="x", project_id=project.id)
        )
        projects.delete_project(user_id, project.id)

        detail = service.get_task(user_id, task.id)

        assert detail.project_id == project.id
        assert detail.project is None

    def test_missing(self, service, user_id):
        with pytest.raises(NotFoundError, match="Task not found: nope"):
            service.get_task(user_id, "nope")


class TestUpdateDelete:
    def test_sparse_update(self, service, user_id):
        task = service.create_task(user_id, TaskDraft(title="x", content="notes"))
        updated = service.update_task(
            user_id, task.id, TaskPatch.model_validate({"status": "done"})
        )

        assert updated.status == "done"
        assert updated.content == "notes"
        assert updated.updated_at > task.updated_at

    def test_update_deleted_task_not_found(self, service, user_id):
        task = service.create_task(user_id, TaskDraft(title="x"))
        service.delete_task(user_id, task.id)
        with pytest.raises(NotFoundError):
            service.update_task(user_id, task.id, TaskPatch(title="y"))

    def test_delete_twice_not_found(self, service, user_id):
        task = service.create_task(user_id, TaskDraft(title="x"))
        service.delete_task(user_id, task.id)
        with pytest.raises(NotFoundError):
            service.delete_task(user_id, task.id)


class TestReorder:
    def test_moves_tasks(self, service, user_id):
        a = service.create_task(user_id, TaskDraft(title="a"))
        b = service.create_task(user_id, TaskDraft(title="b"))

        moved = service.reorder_tasks(
            user_id,
            [
                TaskPosition(id=a.id, section="Today", order=1),
                TaskPosition(id=b.id, section="Today", order=0),
            ],
        )

        assert [(t.section, t.order) for t in moved] == [("Today", 1), ("Today", 0)]
        assert [t.id for t in service.list_tasks(user_id, section="Today")] == [
            b.id,
            a.id,
        ]

    def test_unknown_task_aborts_all_moves(self, service, user_id):
        a = service.create_task(user_id, TaskDraft(title="a"))
        with pytest.raises(NotFoundError):
            service.reorder_tasks(
                user_id,
                [
                    TaskPosition(id=a.id, section="Today", order=0),
                    TaskPosition(id="missing", section="Today", order=1),
                ],
            )

        assert service.get_task(user_id, a.id).section == "Inbox"
