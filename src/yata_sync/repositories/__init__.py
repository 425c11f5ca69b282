"""Storage ports for yata-sync."""

from .repository import EntityStore, StoreSession

__all__ = [
    "EntityStore",
    "StoreSession",
]
