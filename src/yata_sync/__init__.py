"""Yata sync server - delta synchronization engine for the Yata task manager."""

__version__ = "0.1.0"
