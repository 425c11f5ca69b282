"""Sync coordinator - one push/pull round trip for an offline client.

A sync applies the client's pending changes and then reads back everything
that changed for that user since the client's last watermark. Both phases run
in a single store transaction holding the write lock, so the new watermark
is taken while no other writer can be mid-transaction and no change can
fall between two consecutive syncs.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime

from yata_sync.adapters.sqlite.utils import EPOCH
from yata_sync.errors import (
    DeadlineExceededError,
    StoreUnavailableError,
    SyncFailedError,
    YataError,
)
from yata_sync.models import SyncChanges, SyncDelta, SyncRequest, SyncResponse
from yata_sync.repositories import EntityStore
from yata_sync.services.change_applier import ChangeApplier
from yata_sync.services.delta_selector import DeltaSelector
from yata_sync.utils.logger import get_logger

logger = get_logger("sync")


@dataclass
class SyncResult:
    """Delta for the client and the watermark to send next time."""

    changes: SyncDelta
    timestamp: datetime

    def to_response(self) -> SyncResponse:
        return SyncResponse(changes=self.changes, timestamp=self.timestamp)


class SyncCoordinator:
    """Stateless orchestration of apply-then-select."""

    def __init__(self, store: EntityStore, deadline_seconds: float | None = 30.0):
        """Initialize the coordinator.

        Args:
            store: Entity store to sync against
            deadline_seconds: Per-sync transaction deadline (None disables it)
        """
        self.store = store
        self.deadline_seconds = deadline_seconds

    def synchronize(
        self,
        user_id: str,
        last_pulled_at: datetime | None = None,
        changes: SyncChanges | None = None,
    ) -> SyncResult:
        """Apply ``changes`` for ``user_id`` and return the delta since ``last_pulled_at``.

        Args:
            user_id: Authenticated caller
            last_pulled_at: Client watermark; None means a first sync
            changes: Pending client mutations, if any

        Returns:
            SyncResult with the delta and the new watermark

        Raises:
            SyncFailedError: Applying the changes failed or the deadline
                passed; nothing was applied
            StoreUnavailableError: The store could not be reached or read
        """
        since = last_pulled_at or EPOCH
        started = time.perf_counter()

        phase = "open"
        try:
            with self.store.transaction(deadline_seconds=self.deadline_seconds) as session:
                phase = "apply"
                if changes is not None and not changes.is_empty():
                    ChangeApplier(session, user_id).apply(changes)

                phase = "read"
                timestamp = session.now()
                delta = DeltaSelector(session, user_id).select(since)
                phase = "commit"
        except YataError as e:
            if phase == "open":
                logger.error("sync for user %s could not start: %s", user_id, e)
                raise
            if phase == "read" and not isinstance(e, DeadlineExceededError):
                logger.error("sync read failed for user %s: %s", user_id, e)
                raise StoreUnavailableError(f"Could not read changes: {e}") from e
            logger.warning("sync rejected for user %s: %s", user_id, e)
            raise SyncFailedError(e) from e

        logger.info(
            "synced user %s since %s in %.3fs: %d projects, %d task types, %d tasks",
            user_id,
            since.isoformat(),
            time.perf_counter() - started,
            delta.projects.count(),
            delta.task_types.count(),
            delta.tasks.count(),
        )
        return SyncResult(changes=delta, timestamp=timestamp)

    def handle(self, request: SyncRequest, user_id: str) -> SyncResponse:
        """Run a sync for a validated wire request."""
        return self.synchronize(
            user_id, request.last_pulled_at, request.changes
        ).to_response()


def get_sync_coordinator() -> SyncCoordinator:
    """Build a coordinator from the application configuration."""
    from yata_sync.services.config_service import get_config_service, get_entity_store

    config = get_config_service().config
    return SyncCoordinator(get_entity_store(), config.sync.deadline_seconds)
