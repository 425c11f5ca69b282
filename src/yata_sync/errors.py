"""Exceptions raised by the Yata sync engine and its services."""

from __future__ import annotations


class YataError(Exception):
    """Base exception for all Yata sync errors."""

    code = "error"

    def to_dict(self) -> dict[str, str]:
        """Render the error as the single error object returned to callers."""
        return {"error": self.code, "message": str(self)}


class ValidationError(YataError):
    """Raised when a request or record has a malformed shape."""

    code = "validation_error"


class ConflictError(YataError):
    """Raised when creating an entity whose id already exists."""

    code = "conflict"

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} already exists: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class NotFoundError(YataError):
    """Raised when an entity does not exist or is not owned by the caller."""

    code = "not_found"

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class DeadlineExceededError(YataError):
    """Raised when a transaction runs past its deadline and is rolled back."""

    code = "deadline_exceeded"


class StoreUnavailableError(YataError):
    """Raised when the entity store cannot be reached or read."""

    code = "store_unavailable"


class SyncFailedError(YataError):
    """Raised when the write phase of a sync fails; nothing was applied."""

    code = "sync_failed"

    def __init__(self, cause: Exception):
        super().__init__(f"Sync failed: {cause}")
        self.cause = cause

    def to_dict(self) -> dict[str, str]:
        data = super().to_dict()
        if isinstance(self.cause, YataError):
            data["reason"] = self.cause.code
        return data
