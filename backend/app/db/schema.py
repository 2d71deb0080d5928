from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.engine import Connection

# Bootstrap DDL kept to the subset of SQL shared by SQLite and PostgreSQL.
SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        user_id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT UNIQUE,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS startups (
        startup_id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL REFERENCES users (user_id),
        name TEXT NOT NULL,
        idea TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS team_members (
        member_id TEXT PRIMARY KEY,
        startup_id TEXT NOT NULL REFERENCES startups (startup_id),
        user_id TEXT REFERENCES users (user_id),
        name TEXT NOT NULL DEFAULT '',
        email TEXT,
        role TEXT NOT NULL DEFAULT '',
        skills TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        task_id TEXT PRIMARY KEY,
        startup_id TEXT NOT NULL REFERENCES startups (startup_id),
        title TEXT NOT NULL,
        description TEXT,
        status TEXT NOT NULL DEFAULT 'todo',
        priority TEXT NOT NULL DEFAULT 'medium',
        due_date TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS task_assignees (
        task_id TEXT NOT NULL REFERENCES tasks (task_id),
        member_id TEXT NOT NULL REFERENCES team_members (member_id),
        PRIMARY KEY (task_id, member_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_startups_owner ON startups (owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_team_members_startup ON team_members (startup_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_startup ON tasks (startup_id)",
)

TABLES_IN_DELETE_ORDER = ("task_assignees", "tasks", "team_members", "startups", "users")


def create_schema(conn: Connection) -> None:
    for stmt in SCHEMA_STATEMENTS:
        conn.execute(text(stmt))
