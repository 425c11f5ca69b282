"""Configuration service for managing yata-sync configuration.

This module provides the ConfigService class, the single source of truth for
configuration. It handles:

- Loading and saving config.json
- Reading and updating individual settings by dotted key
- Config file initialization with sensible defaults
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError as PydanticValidationError

from yata_sync.errors import ValidationError
from yata_sync.models.config_models import AppConfig
from yata_sync.repositories import EntityStore
from yata_sync.utils.logger import get_logger, set_level


class ConfigService:
    """Service for managing application configuration."""

    def __init__(self, config_dir: str | Path | None = None):
        """Initialize the config service.

        Args:
            config_dir: Override for the config directory (tests)
        """
        self.config_dir = Path(config_dir or user_config_dir("yata_sync"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("yata_sync"))

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage, writing defaults on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Expected on first run
            self._config = AppConfig()
            self.save_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        set_level(self._config.logging.level)
        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))
            self.config_path.chmod(0o600)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self) -> AppConfig:
        """Reset configuration to defaults."""
        self._config = AppConfig()
        self.save_config()
        set_level(self._config.logging.level)
        return self._config

    def get(self, key: str) -> Any:
        """Read a setting by dotted key, e.g. ``sync.deadline_seconds``.

        Raises:
            ValidationError: If the key does not exist
        """
        value: Any = self.config.model_dump()
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                raise ValidationError(f"Unknown config key: {key}")
            value = value[part]
        return value

    def set(self, key: str, value: Any) -> AppConfig:
        """Update a setting by dotted key and save.

        Raises:
            ValidationError: If the key does not exist or the value is invalid
        """
        self.get(key)
        data = self.config.model_dump()
        *parents, leaf = key.split(".")
        target = data
        for part in parents:
            target = target[part]
        target[leaf] = value

        try:
            self._config = AppConfig.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid value for {key}: {value}") from e
        self.save_config()
        set_level(self._config.logging.level)
        return self._config


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service


def get_entity_store() -> EntityStore:
    """Build the configured entity store."""
    from yata_sync.adapters.sqlite import SqliteEntityStore

    return SqliteEntityStore.from_config(get_config_service().config)
