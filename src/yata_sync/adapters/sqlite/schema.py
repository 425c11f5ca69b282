"""Database schema definitions for the SQLite entity store.

Every synchronised table carries store-assigned ``created_at``/``updated_at``
timestamps and a ``deleted_at`` tombstone. Deletes only set the tombstone, so
a deletion shows up in the delta stream like any other update.
"""

from __future__ import annotations

from yata_sync.models.sync import EntityKind

# Users table - identity supplied by the authentication layer
CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

# Projects table
CREATE_PROJECTS_TABLE = """
CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    user_id TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    deleted_at TEXT,
    CHECK (updated_at >= created_at),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
)
"""

# Task types table
CREATE_TASK_TYPES_TABLE = """
CREATE TABLE IF NOT EXISTS task_types (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    icon TEXT NOT NULL,
    user_id TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    deleted_at TEXT,
    CHECK (updated_at >= created_at),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
)
"""

# Tasks table - "order" is a client-maintained position within a section
CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    content TEXT,
    status TEXT NOT NULL,
    section TEXT NOT NULL,
    "order" INTEGER NOT NULL DEFAULT 0,
    urls TEXT NOT NULL DEFAULT '[]',
    due_date TEXT,
    when_date TEXT,
    started_date TEXT,
    completed_date TEXT,
    user_id TEXT NOT NULL,
    project_id TEXT,
    type_id TEXT,
    parent_id TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    deleted_at TEXT,
    CHECK (updated_at >= created_at),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE SET NULL,
    FOREIGN KEY (type_id) REFERENCES task_types(id) ON DELETE SET NULL,
    FOREIGN KEY (parent_id) REFERENCES tasks(id) ON DELETE SET NULL
)
"""

# Task dependency edges (no sync or CRUD surface yet)
CREATE_TASK_DEPENDENCIES_TABLE = """
CREATE TABLE IF NOT EXISTS task_dependencies (
    id TEXT PRIMARY KEY,
    blocking_id TEXT NOT NULL,
    blocked_by_id TEXT NOT NULL,
    created_at TEXT NOT NULL,
    CHECK (blocking_id != blocked_by_id),
    UNIQUE (blocking_id, blocked_by_id),
    FOREIGN KEY (blocking_id) REFERENCES tasks(id) ON DELETE CASCADE,
    FOREIGN KEY (blocked_by_id) REFERENCES tasks(id) ON DELETE CASCADE
)
"""

# Highest timestamp any transaction has issued (a single row, id 1)
CREATE_STORE_CLOCK_TABLE = """
CREATE TABLE IF NOT EXISTS store_clock (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    high_water TEXT NOT NULL
)
"""

# Delta scans filter on (user_id, updated_at)
CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_projects_user_updated ON projects(user_id, updated_at)",
    "CREATE INDEX IF NOT EXISTS idx_task_types_user_updated ON task_types(user_id, updated_at)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_updated ON tasks(user_id, updated_at)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_section ON tasks(user_id, section)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_project ON tasks(project_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_type ON tasks(type_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_parent ON tasks(parent_id)",
    "CREATE INDEX IF NOT EXISTS idx_task_dependencies_blocking ON task_dependencies(blocking_id)",
    "CREATE INDEX IF NOT EXISTS idx_task_dependencies_blocked_by ON task_dependencies(blocked_by_id)",
]

# All table creation statements in dependency order
ALL_TABLES = [
    CREATE_USERS_TABLE,
    CREATE_PROJECTS_TABLE,
    CREATE_TASK_TYPES_TABLE,
    CREATE_TASKS_TABLE,
    CREATE_TASK_DEPENDENCIES_TABLE,
]

# Columns a client may set; id, user_id and timestamps are handled by the store
WRITABLE_COLUMNS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.PROJECT: ("name",),
    EntityKind.TASK_TYPE: ("name", "icon"),
    EntityKind.TASK: (
        "title",
        "content",
        "status",
        "section",
        "order",
        "urls",
        "due_date",
        "when_date",
        "started_date",
        "completed_date",
        "project_id",
        "type_id",
        "parent_id",
    ),
}

TIMESTAMP_COLUMNS = frozenset(
    {
        "due_date",
        "when_date",
        "started_date",
        "completed_date",
        "created_at",
        "updated_at",
        "deleted_at",
    }
)

JSON_COLUMNS = frozenset({"urls"})
