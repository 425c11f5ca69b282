"""Delta selector - computes what changed for a user since a watermark."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from yata_sync.models import ENTITY_MODELS, EntityKind, KindDelta, SyncDelta
from yata_sync.repositories import StoreSession

RowClass = Literal["excluded", "created", "updated", "deleted"]


def classify_row(row: dict[str, Any], watermark: datetime) -> RowClass:
    """Place a row in exactly one delta bucket relative to ``watermark``.

    - excluded: not touched since the watermark
    - deleted: tombstoned since the watermark
    - created: live and created after the watermark
    - updated: live, created before and modified after the watermark
    """
    if row["updated_at"] <= watermark:
        return "excluded"
    if row.get("deleted_at") is not None:
        return "deleted"
    if row["created_at"] > watermark:
        return "created"
    return "updated"


class DeltaSelector:
    """Reads the per-kind delta for one user inside a store session."""

    def __init__(self, session: StoreSession, user_id: str):
        self.session = session
        self.user_id = user_id

    def select_kind(self, kind: EntityKind, since: datetime) -> KindDelta:
        """Classify every row of ``kind`` modified after ``since``."""
        model = ENTITY_MODELS[kind]
        delta = KindDelta[model]()
        for row in self.session.query_updated_since(kind, self.user_id, since):
            bucket = classify_row(row, since)
            if bucket == "deleted":
                delta.deleted.append(row["id"])
            elif bucket == "created":
                delta.created.append(model.model_validate(row))
            elif bucket == "updated":
                delta.updated.append(model.model_validate(row))
        return delta

    def select(self, since: datetime) -> SyncDelta:
        """Compute the delta for every entity kind."""
        return SyncDelta(
            **{kind.value: self.select_kind(kind, since) for kind in EntityKind}
        )
