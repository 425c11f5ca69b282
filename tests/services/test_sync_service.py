"""Tests for the SyncCoordinator: end-to-end push/pull behaviour."""

from __future__ import annotations

import time
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from yata_sync.adapters.sqlite import SqliteEntityStore
from yata_sync.adapters.sqlite.utils import EPOCH
from yata_sync.errors import (
    ConflictError,
    DeadlineExceededError,
    NotFoundError,
    StoreUnavailableError,
    SyncFailedError,
    ValidationError,
)
from yata_sync.models import EntityKind, SyncChanges, SyncDelta, SyncRequest
from yata_sync.services.change_applier import ChangeApplier
from yata_sync.services.sync_service import SyncCoordinator


def _changes(payload: dict) -> SyncChanges:
    return SyncChanges.model_validate(payload)


P1 = {"id": "p1", "name": "Home"}
T1 = {"id": "t1", "title": "Buy milk", "projectId": "p1"}


class TestScenarios:
    def test_first_sync_returns_own_creates(self, coordinator, user_id):
        result = coordinator.synchronize(
            user_id,
            None,
            _changes({"projects": {"created": [P1]}, "tasks": {"created": [T1]}}),
        )

        assert [p.id for p in result.changes.projects.created] == ["p1"]
        assert [t.id for t in result.changes.tasks.created] == ["t1"]
        assert result.changes.tasks.created[0].project_id == "p1"
        assert result.changes.tasks.updated == []
        assert result.changes.tasks.deleted == []

    def test_update_after_watermark_lands_in_updated(self, coordinator, user_id):
        first = coordinator.synchronize(
            user_id,
            None,
            _changes({"projects": {"created": [P1]}, "tasks": {"created": [T1]}}),
        )
        second = coordinator.synchronize(
            user_id,
            first.timestamp,
            _changes({"tasks": {"updated": [{"id": "t1", "status": "done"}]}}),
        )

        assert [t.id for t in second.changes.tasks.updated] == ["t1"]
        assert second.changes.tasks.updated[0].status == "done"
        assert second.changes.tasks.created == []
        assert second.changes.projects.count() == 0

    def test_pull_only_sync_sees_other_device_changes(self, coordinator, user_id):
        device_a = coordinator.synchronize(user_id)
        coordinator.synchronize(
            user_id, device_a.timestamp, _changes({"projects": {"created": [P1]}})
        )
        pulled = coordinator.synchronize(user_id, device_a.timestamp)

        assert [p.id for p in pulled.changes.projects.created] == ["p1"]

    def test_deletion_propagates_as_tombstone(self, coordinator, user_id):
        first = coordinator.synchronize(
            user_id, None, _changes({"projects": {"created": [P1]}})
        )
        coordinator.synchronize(
            user_id, first.timestamp, _changes({"projects": {"deleted": ["p1"]}})
        )
        pulled = coordinator.synchronize(user_id, first.timestamp)

        assert pulled.changes.projects.deleted == ["p1"]
        assert pulled.changes.projects.created == []
        assert pulled.changes.projects.updated == []

    def test_nothing_changed_returns_empty_delta(self, coordinator, user_id):
        first = coordinator.synchronize(
            user_id, None, _changes({"projects": {"created": [P1]}})
        )
        second = coordinator.synchronize(user_id, first.timestamp)
        assert second.changes.is_empty()


class TestWatermark:
    def test_strictly_increases(self, coordinator, user_id):
        first = coordinator.synchronize(user_id)
        second = coordinator.synchronize(user_id, first.timestamp)
        assert second.timestamp > first.timestamp

    def test_later_than_every_returned_row(self, coordinator, user_id):
        result = coordinator.synchronize(
            user_id,
            None,
            _changes({"projects": {"created": [P1]}, "tasks": {"created": [T1]}}),
        )
        rows = result.changes.projects.created + result.changes.tasks.created
        assert all(row.updated_at < result.timestamp for row in rows)

    def test_no_change_slips_between_syncs(self, store, coordinator, user_id):
        first = coordinator.synchronize(user_id)
        with store.transaction() as session:
            session.create_row(EntityKind.PROJECT, "p1", {"name": "x"}, user_id=user_id)
        second = coordinator.synchronize(user_id, first.timestamp)
        assert [p.id for p in second.changes.projects.created] == ["p1"]

    def test_missing_watermark_means_epoch(self, store, user_id):
        coordinator = SyncCoordinator(store)
        with patch("yata_sync.services.sync_service.DeltaSelector") as selector_cls:
            selector_cls.return_value.select.return_value = SyncDelta()
            coordinator.synchronize(user_id)
        selector_cls.return_value.select.assert_called_once_with(EPOCH)


class TestFailures:
    def test_write_failure_wraps_cause(self, coordinator, user_id):
        coordinator.synchronize(user_id, None, _changes({"projects": {"created": [P1]}}))

        with pytest.raises(SyncFailedError) as exc_info:
            coordinator.synchronize(
                user_id, None, _changes({"projects": {"created": [P1]}})
            )

        assert isinstance(exc_info.value.cause, ConflictError)
        assert exc_info.value.to_dict()["reason"] == "conflict"

    def test_write_failure_applies_nothing(self, store, coordinator, user_id):
        with pytest.raises(SyncFailedError):
            coordinator.synchronize(
                user_id,
                None,
                _changes(
                    {
                        "projects": {"created": [P1]},
                        "tasks": {"updated": [{"id": "ghost", "title": "x"}]},
                    }
                ),
            )

        with store.transaction() as session:
            assert (
                session.get_row(
                    EntityKind.PROJECT, "p1", user_id=user_id, include_deleted=True
                )
                is None
            )

    def test_unstorable_value_wraps_validation_error(
        self, store, coordinator, user_id
    ):
        with pytest.raises(SyncFailedError) as exc_info:
            coordinator.synchronize(
                user_id,
                None,
                _changes(
                    {
                        "projects": {"created": [P1]},
                        "tasks": {"created": [{**T1, "order": 2**70}]},
                    }
                ),
            )

        assert isinstance(exc_info.value.cause, ValidationError)
        assert exc_info.value.to_dict()["reason"] == "validation_error"
        with store.transaction() as session:
            assert (
                session.get_row(
                    EntityKind.PROJECT, "p1", user_id=user_id, include_deleted=True
                )
                is None
            )

    def test_unknown_user_with_changes(self, coordinator):
        with pytest.raises(SyncFailedError) as exc_info:
            coordinator.synchronize(
                "nobody", None, _changes({"projects": {"created": [P1]}})
            )
        assert isinstance(exc_info.value.cause, NotFoundError)

    def test_unknown_user_pull_only_is_empty(self, coordinator):
        assert coordinator.synchronize("nobody").changes.is_empty()

    def test_read_failure_is_store_unavailable(self, coordinator, user_id):
        with patch(
            "yata_sync.services.sync_service.DeltaSelector.select",
            side_effect=StoreUnavailableError("disk I/O error"),
        ):
            with pytest.raises(StoreUnavailableError, match="Could not read changes"):
                coordinator.synchronize(
                    user_id, None, _changes({"projects": {"created": [P1]}})
                )

    def test_read_failure_rolls_back_writes(self, store, coordinator, user_id):
        with patch(
            "yata_sync.services.sync_service.DeltaSelector.select",
            side_effect=StoreUnavailableError("disk I/O error"),
        ):
            with pytest.raises(StoreUnavailableError):
                coordinator.synchronize(
                    user_id, None, _changes({"projects": {"created": [P1]}})
                )
        with store.transaction() as session:
            assert session.get_row(EntityKind.PROJECT, "p1", user_id=user_id) is None

    def test_unreachable_store(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        coordinator = SyncCoordinator(SqliteEntityStore(blocker / "yata.db"))
        with pytest.raises(StoreUnavailableError):
            coordinator.synchronize("anyone")

    def test_deadline_overrun_rolls_back(self, store, user_id):
        coordinator = SyncCoordinator(store, deadline_seconds=0.2)
        original_apply = ChangeApplier.apply

        def slow_apply(self, changes):
            stats = original_apply(self, changes)
            time.sleep(0.4)
            return stats

        with patch(
            "yata_sync.services.change_applier.ChangeApplier.apply", slow_apply
        ):
            with pytest.raises(SyncFailedError) as exc_info:
                coordinator.synchronize(
                    user_id, None, _changes({"projects": {"created": [P1]}})
                )

        assert isinstance(exc_info.value.cause, DeadlineExceededError)
        assert exc_info.value.to_dict()["reason"] == "deadline_exceeded"
        with store.transaction() as session:
            assert session.get_row(EntityKind.PROJECT, "p1", user_id=user_id) is None


class TestScoping:
    def test_other_users_rows_are_invisible(self, coordinator, user_id, other_user_id):
        coordinator.synchronize(
            other_user_id, None, _changes({"projects": {"created": [P1]}})
        )
        result = coordinator.synchronize(user_id)
        assert result.changes.is_empty()


class TestHandle:
    def test_wire_round_trip(self, coordinator, user_id):
        request = SyncRequest.parse(
            {
                "lastPulledAt": None,
                "changes": {
                    "projects": {"created": [P1]},
                    "tasks": {
                        "created": [
                            {
                                **T1,
                                "dueDate": "2024-05-01T10:00:00Z",
                                "urls": ["https://example.com"],
                            }
                        ]
                    },
                },
            }
        )
        body = coordinator.handle(request, user_id).to_wire()

        task = body["changes"]["tasks"]["created"][0]
        assert task["projectId"] == "p1"
        assert task["userId"] == user_id
        assert task["urls"] == ["https://example.com"]
        assert task["dueDate"].startswith("2024-05-01T10:00:00")
        assert set(body["changes"]) == {"tasks", "projects", "taskTypes"}
        assert set(body["changes"]["taskTypes"]) == {"created", "updated", "deleted"}
        assert datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00")) > (
            datetime(2000, 1, 1, tzinfo=UTC)
        )
