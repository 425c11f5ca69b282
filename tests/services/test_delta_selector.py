"""Tests for the DeltaSelector and row classification."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from yata_sync.adapters.sqlite.utils import EPOCH
from yata_sync.models import EntityKind, Project
from yata_sync.services.delta_selector import DeltaSelector, classify_row

T = datetime(2024, 1, 1, 12, tzinfo=UTC)
BEFORE = T - timedelta(hours=1)
AFTER = T + timedelta(hours=1)


class TestClassifyRow:
    @pytest.mark.parametrize(
        ("created_at", "updated_at", "deleted_at", "expected"),
        [
            (BEFORE, BEFORE, None, "excluded"),
            (BEFORE, T, None, "excluded"),
            (AFTER, AFTER, None, "created"),
            (BEFORE, AFTER, None, "updated"),
            (T, AFTER, None, "updated"),
            (BEFORE, AFTER, AFTER, "deleted"),
            (AFTER, AFTER, AFTER, "deleted"),
            (BEFORE, BEFORE, BEFORE, "excluded"),
        ],
    )
    def test_partition(self, created_at, updated_at, deleted_at, expected):
        row = {
            "created_at": created_at,
            "updated_at": updated_at,
            "deleted_at": deleted_at,
        }
        assert classify_row(row, T) == expected


class TestDeltaSelector:
    def _seed(self, store, user_id):
        with store.transaction() as session:
            session.create_row(
                EntityKind.PROJECT, "p-old", {"name": "Old"}, user_id=user_id
            )
            session.create_row(
                EntityKind.PROJECT, "p-gone", {"name": "Gone"}, user_id=user_id
            )
            watermark = session.now()
        with store.transaction() as session:
            session.create_row(
                EntityKind.PROJECT, "p-new", {"name": "New"}, user_id=user_id
            )
            session.update_row(
                EntityKind.PROJECT, "p-old", {"name": "Renamed"}, user_id=user_id
            )
            session.delete_rows(EntityKind.PROJECT, ["p-gone"], user_id=user_id)
        return watermark

    def test_buckets_since_watermark(self, store, user_id):
        watermark = self._seed(store, user_id)
        with store.transaction() as session:
            delta = DeltaSelector(session, user_id).select_kind(
                EntityKind.PROJECT, watermark
            )

        assert [p.id for p in delta.created] == ["p-new"]
        assert [p.id for p in delta.updated] == ["p-old"]
        assert delta.updated[0].name == "Renamed"
        assert delta.deleted == ["p-gone"]
        assert all(isinstance(p, Project) for p in delta.created + delta.updated)

    def test_from_epoch_everything_live_is_created(self, store, user_id):
        self._seed(store, user_id)
        with store.transaction() as session:
            delta = DeltaSelector(session, user_id).select_kind(EntityKind.PROJECT, EPOCH)

        assert {p.id for p in delta.created} == {"p-new", "p-old"}
        assert delta.updated == []
        assert delta.deleted == ["p-gone"]

    def test_select_covers_every_kind(self, store, user_id, other_user_id):
        with store.transaction() as session:
            session.create_row(
                EntityKind.TASK_TYPE, "k1", {"name": "Bug", "icon": "bug"}, user_id=user_id
            )
            session.create_row(
                EntityKind.TASK,
                "t1",
                {"title": "x", "status": "todo", "section": "Inbox"},
                user_id=user_id,
            )
            session.create_row(
                EntityKind.TASK,
                "t2",
                {"title": "y", "status": "todo", "section": "Inbox"},
                user_id=other_user_id,
            )
            delta = DeltaSelector(session, user_id).select(EPOCH)

        assert [t.id for t in delta.tasks.created] == ["t1"]
        assert [k.id for k in delta.task_types.created] == ["k1"]
        assert delta.projects.count() == 0
