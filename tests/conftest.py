"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem state: every
store lives in a temporary SQLite file and config files land in tmp_path.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from yata_sync.adapters.sqlite import SqliteEntityStore
from yata_sync.services.sync_service import SyncCoordinator

USER_ID = "user-alice"
OTHER_USER_ID = "user-bob"


class SteppingClock:
    """Wall clock stand-in that advances one second per reading."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 1, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "yata.db"


@pytest.fixture()
def store(db_path):
    """A migrated store in a temporary file (connections are per transaction,
    so an in-memory database would not survive between them)."""
    entity_store = SqliteEntityStore(db_path, busy_timeout=1.0)
    entity_store.initialize()
    return entity_store


@pytest.fixture()
def user_id(store):
    with store.transaction() as session:
        session.create_user(USER_ID, "alice@example.com")
    return USER_ID


@pytest.fixture()
def other_user_id(store):
    with store.transaction() as session:
        session.create_user(OTHER_USER_ID, "bob@example.com")
    return OTHER_USER_ID


@pytest.fixture()
def coordinator(store):
    return SyncCoordinator(store, deadline_seconds=30.0)


@pytest.fixture()
def stepping_clock():
    return SteppingClock()


# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only and
    points the database at a temporary file. Also clears the lru_cache so
    each test gets a fresh service instance.
    """
    from yata_sync.services.config_service import get_config_service

    get_config_service.cache_clear()
    config_dir = str(tmp_path / "config")
    data_dir = str(tmp_path / "data")
    with patch(
        "yata_sync.services.config_service.user_config_dir", return_value=config_dir
    ):
        with patch(
            "yata_sync.services.config_service.user_data_dir", return_value=data_dir
        ):
            service = get_config_service()
            service.set("database.path", str(tmp_path / "cli.db"))
            yield service
    get_config_service.cache_clear()


@pytest.fixture()
def cli_user(tmp_config):
    """Register a user in the store the CLI commands resolve from config."""
    from yata_sync.services.user_service import get_user_service

    return get_user_service().create_user("cli@example.com", user_id=USER_ID).id


@pytest.fixture()
def parse_json():
    """Decode the JSON document in command output, skipping status lines."""

    def parse(output: str):
        starts = [i for i in (output.find("{"), output.find("[")) if i >= 0]
        return json.loads(output[min(starts):])

    return parse
