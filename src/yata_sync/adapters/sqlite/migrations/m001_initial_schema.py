"""Initial database schema migration.

Creates users, projects, task_types, tasks and task_dependencies with their
delta-scan indexes.
"""

import sqlite3

from yata_sync.adapters.sqlite import schema

from .runner import Migration


class InitialSchemaMigration(Migration):
    """Migration 001: Create initial database schema."""

    @property
    def version(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "Initial schema with tombstoned entities"

    def up(self, connection: sqlite3.Connection) -> None:
        for create_statement in schema.ALL_TABLES:
            connection.execute(create_statement)

        for index_sql in schema.CREATE_INDEXES:
            connection.execute(index_sql)


initial_migration = InitialSchemaMigration()
