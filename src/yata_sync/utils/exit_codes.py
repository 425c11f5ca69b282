"""
Exit codes for the Yata sync CLI.

Each error class of the sync engine maps to its own exit code so scripts can
tell a retryable failure (store unavailable, deadline) from a bad request.
"""

from __future__ import annotations

from yata_sync.errors import (
    ConflictError,
    DeadlineExceededError,
    NotFoundError,
    StoreUnavailableError,
    SyncFailedError,
    ValidationError,
    YataError,
)

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or malformed request
ERROR_INVALID_ARGS = 2

# Entity already exists
ERROR_CONFLICT = 3

# Store unreachable or deadline exceeded (safe to retry)
ERROR_UNAVAILABLE = 4

# Resource not found
ERROR_NOT_FOUND = 5

# Sync write phase failed and was rolled back
ERROR_SYNC_FAILED = 6

_CODE_NAMES = {
    SUCCESS: "SUCCESS",
    ERROR_GENERAL: "ERROR_GENERAL",
    ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
    ERROR_CONFLICT: "ERROR_CONFLICT",
    ERROR_UNAVAILABLE: "ERROR_UNAVAILABLE",
    ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
    ERROR_SYNC_FAILED: "ERROR_SYNC_FAILED",
}

_DESCRIPTIONS = {
    SUCCESS: "Command executed successfully",
    ERROR_GENERAL: "A general error occurred",
    ERROR_INVALID_ARGS: "Invalid arguments or malformed request",
    ERROR_CONFLICT: "Entity already exists",
    ERROR_UNAVAILABLE: "Store unavailable or deadline exceeded - retry later",
    ERROR_NOT_FOUND: "Resource not found",
    ERROR_SYNC_FAILED: "Sync failed; no changes were applied",
}

# Checked in order, so subclasses must precede their bases.
_ERROR_CODES: tuple[tuple[type[YataError], int], ...] = (
    (SyncFailedError, ERROR_SYNC_FAILED),
    (ValidationError, ERROR_INVALID_ARGS),
    (ConflictError, ERROR_CONFLICT),
    (NotFoundError, ERROR_NOT_FOUND),
    (StoreUnavailableError, ERROR_UNAVAILABLE),
    (DeadlineExceededError, ERROR_UNAVAILABLE),
)


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    return _CODE_NAMES.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    return _DESCRIPTIONS.get(code, "Unknown error")


def exit_code_for(error: BaseException) -> int:
    """Map an exception to the exit code the CLI terminates with."""
    for error_type, code in _ERROR_CODES:
        if isinstance(error, error_type):
            return code
    return ERROR_GENERAL
