from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping
from uuid import uuid4

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection

_MEMBER_COLUMNS = {"name": "name", "email": "email", "role": "role", "skills": "skills"}
_TASK_COLUMNS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "dueDate": "due_date",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


def _set_clause(changes: Mapping[str, Any], columns: Mapping[str, str]) -> tuple[str, dict[str, Any]]:
    assignments: list[str] = []
    params: dict[str, Any] = {}
    for field, column in columns.items():
        if field not in changes:
            continue
        assignments.append(f"{column} = :{column}")
        params[column] = changes[field]
    return ", ".join(assignments), params


def fetch_user(conn: Connection, user_id: str) -> dict[str, Any] | None:
    row = conn.execute(
        text("SELECT user_id, name, email FROM users WHERE user_id = :user_id"),
        {"user_id": user_id},
    ).mappings().first()
    return dict(row) if row else None


def fetch_user_by_email(conn: Connection, email: str) -> dict[str, Any] | None:
    row = conn.execute(
        text("SELECT user_id, name, email FROM users WHERE email = :email"),
        {"email": email},
    ).mappings().first()
    return dict(row) if row else None


def insert_user(conn: Connection, *, user_id: str, name: str, email: str | None = None) -> None:
    conn.execute(
        text(
            """
            INSERT INTO users (user_id, name, email, created_at)
            VALUES (:user_id, :name, :email, :created_at)
            """
        ),
        {"user_id": user_id, "name": name, "email": email, "created_at": _now()},
    )


def _to_startup(row: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": row["startup_id"],
        "ownerId": row["owner_id"],
        "name": row["name"],
        "idea": row["idea"],
        "createdAt": row["created_at"],
    }


def fetch_startups(conn: Connection, owner_id: str) -> list[dict[str, Any]]:
    rows = conn.execute(
        text(
            """
            SELECT s.startup_id, s.owner_id, s.name, s.idea, s.created_at,
                   (SELECT COUNT(*) FROM team_members m WHERE m.startup_id = s.startup_id) AS member_count,
                   (SELECT COUNT(*) FROM tasks t WHERE t.startup_id = s.startup_id) AS task_count
            FROM startups s
            WHERE s.owner_id = :owner_id
            ORDER BY s.created_at DESC, s.startup_id
            """
        ),
        {"owner_id": owner_id},
    ).mappings().all()
    startups: list[dict[str, Any]] = []
    for row in rows:
        startup = _to_startup(row)
        startup["memberCount"] = int(row["member_count"] or 0)
        startup["taskCount"] = int(row["task_count"] or 0)
        startups.append(startup)
    return startups


def fetch_startup(conn: Connection, startup_id: str, *, owner_id: str) -> dict[str, Any] | None:
    row = conn.execute(
        text(
            """
            SELECT startup_id, owner_id, name, idea, created_at
            FROM startups
            WHERE startup_id = :startup_id AND owner_id = :owner_id
            """
        ),
        {"startup_id": startup_id, "owner_id": owner_id},
    ).mappings().first()
    return _to_startup(row) if row else None


def create_startup(conn: Connection, *, owner_id: str, name: str, idea: str | None = None) -> dict[str, Any]:
    startup_id = _new_id("st")
    conn.execute(
        text(
            """
            INSERT INTO startups (startup_id, owner_id, name, idea, created_at)
            VALUES (:startup_id, :owner_id, :name, :idea, :created_at)
            """
        ),
        {
            "startup_id": startup_id,
            "owner_id": owner_id,
            "name": name,
            "idea": idea,
            "created_at": _now(),
        },
    )
    startup = fetch_startup(conn, startup_id, owner_id=owner_id)
    if startup is None:
        raise RuntimeError(f"startup {startup_id} missing after insert")
    return startup


def _to_member(row: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": row["member_id"],
        "startupId": row["startup_id"],
        "userId": row["user_id"],
        "name": row["name"] or "",
        "email": row["email"],
        "role": row["role"] or "",
        "skills": row["skills"],
        "createdAt": row["created_at"],
    }


_MEMBER_SELECT = """
    SELECT member_id, startup_id, user_id, name, email, role, skills, created_at
    FROM team_members
"""


def fetch_team_members(conn: Connection, startup_id: str) -> list[dict[str, Any]]:
    """Roster in creation order; that order breaks ties in contribution ranking."""
    rows = conn.execute(
        text(_MEMBER_SELECT + " WHERE startup_id = :startup_id ORDER BY created_at, member_id"),
        {"startup_id": startup_id},
    ).mappings().all()
    return [_to_member(row) for row in rows]


def fetch_team_member(conn: Connection, startup_id: str, member_id: str) -> dict[str, Any] | None:
    row = conn.execute(
        text(_MEMBER_SELECT + " WHERE startup_id = :startup_id AND member_id = :member_id"),
        {"startup_id": startup_id, "member_id": member_id},
    ).mappings().first()
    return _to_member(row) if row else None


def create_team_member(
    conn: Connection,
    startup_id: str,
    *,
    name: str,
    role: str,
    email: str | None = None,
    skills: str | None = None,
) -> dict[str, Any]:
    user = fetch_user_by_email(conn, email) if email else None
    member_id = _new_id("mem")
    conn.execute(
        text(
            """
            INSERT INTO team_members
              (member_id, startup_id, user_id, name, email, role, skills, created_at)
            VALUES
              (:member_id, :startup_id, :user_id, :name, :email, :role, :skills, :created_at)
            """
        ),
        {
            "member_id": member_id,
            "startup_id": startup_id,
            "user_id": user["user_id"] if user else None,
            "name": (user or {}).get("name") or name,
            "email": email or None,
            "role": role,
            "skills": skills,
            "created_at": _now(),
        },
    )
    member = fetch_team_member(conn, startup_id, member_id)
    if member is None:
        raise RuntimeError(f"team member {member_id} missing after insert")
    return member


def update_team_member(
    conn: Connection, startup_id: str, member_id: str, changes: Mapping[str, Any]
) -> dict[str, Any] | None:
    if fetch_team_member(conn, startup_id, member_id) is None:
        return None
    clause, params = _set_clause(changes, _MEMBER_COLUMNS)
    if clause:
        conn.execute(
            text(f"UPDATE team_members SET {clause} WHERE startup_id = :startup_id AND member_id = :member_id"),
            {**params, "startup_id": startup_id, "member_id": member_id},
        )
    return fetch_team_member(conn, startup_id, member_id)


def delete_team_member(conn: Connection, startup_id: str, member_id: str) -> bool:
    if fetch_team_member(conn, startup_id, member_id) is None:
        return False
    conn.execute(text("DELETE FROM task_assignees WHERE member_id = :member_id"), {"member_id": member_id})
    conn.execute(
        text("DELETE FROM team_members WHERE startup_id = :startup_id AND member_id = :member_id"),
        {"startup_id": startup_id, "member_id": member_id},
    )
    return True


def _load_assignees(conn: Connection, task_ids: Iterable[str]) -> dict[str, list[str]]:
    ids = list(task_ids)
    if not ids:
        return {}
    stmt = text(
        """
        SELECT a.task_id, a.member_id
        FROM task_assignees a
        JOIN team_members m ON m.member_id = a.member_id
        WHERE a.task_id IN :ids
        ORDER BY m.created_at, a.member_id
        """
    ).bindparams(bindparam("ids", expanding=True))
    grouped: dict[str, list[str]] = defaultdict(list)
    for row in conn.execute(stmt, {"ids": ids}).mappings():
        grouped[row["task_id"]].append(row["member_id"])
    return grouped


def _ensure_members(conn: Connection, startup_id: str, member_ids: Iterable[str]) -> list[str]:
    wanted = list(dict.fromkeys(member_ids))
    if not wanted:
        return []
    stmt = text(
        "SELECT member_id FROM team_members WHERE startup_id = :startup_id AND member_id IN :ids"
    ).bindparams(bindparam("ids", expanding=True))
    known = set(conn.execute(stmt, {"startup_id": startup_id, "ids": wanted}).scalars())
    missing = [member_id for member_id in wanted if member_id not in known]
    if missing:
        raise ValueError(f"Unknown assignee: {', '.join(missing)}")
    return wanted


def _replace_assignees(conn: Connection, task_id: str, member_ids: list[str]) -> None:
    conn.execute(text("DELETE FROM task_assignees WHERE task_id = :task_id"), {"task_id": task_id})
    if member_ids:
        conn.execute(
            text("INSERT INTO task_assignees (task_id, member_id) VALUES (:task_id, :member_id)"),
            [{"task_id": task_id, "member_id": member_id} for member_id in member_ids],
        )


_TASK_SELECT = """
    SELECT task_id, startup_id, title, description, status, priority, due_date, created_at
    FROM tasks
"""


def _to_task(row: Mapping[str, Any], assignee_ids: list[str]) -> dict[str, Any]:
    return {
        "id": row["task_id"],
        "startupId": row["startup_id"],
        "title": row["title"],
        "description": row["description"],
        "status": row["status"],
        "priority": row["priority"],
        "dueDate": row["due_date"],
        "createdAt": row["created_at"],
        "assigneeIds": list(assignee_ids),
    }


def fetch_tasks(conn: Connection, startup_id: str) -> list[dict[str, Any]]:
    rows = conn.execute(
        text(_TASK_SELECT + " WHERE startup_id = :startup_id ORDER BY created_at, task_id"),
        {"startup_id": startup_id},
    ).mappings().all()
    assignees = _load_assignees(conn, [row["task_id"] for row in rows])
    return [_to_task(row, assignees.get(row["task_id"], [])) for row in rows]


def fetch_task(conn: Connection, startup_id: str, task_id: str) -> dict[str, Any] | None:
    row = conn.execute(
        text(_TASK_SELECT + " WHERE startup_id = :startup_id AND task_id = :task_id"),
        {"startup_id": startup_id, "task_id": task_id},
    ).mappings().first()
    if not row:
        return None
    return _to_task(row, _load_assignees(conn, [task_id]).get(task_id, []))


def create_task(
    conn: Connection,
    startup_id: str,
    *,
    title: str,
    description: str | None = None,
    status: str = "todo",
    priority: str = "medium",
    due_date: str | None = None,
    assignee_ids: Iterable[str] = (),
) -> dict[str, Any]:
    members = _ensure_members(conn, startup_id, assignee_ids)
    task_id = _new_id("task")
    conn.execute(
        text(
            """
            INSERT INTO tasks
              (task_id, startup_id, title, description, status, priority, due_date, created_at)
            VALUES
              (:task_id, :startup_id, :title, :description, :status, :priority, :due_date, :created_at)
            """
        ),
        {
            "task_id": task_id,
            "startup_id": startup_id,
            "title": title,
            "description": description or None,
            "status": status,
            "priority": priority,
            "due_date": due_date,
            "created_at": _now(),
        },
    )
    _replace_assignees(conn, task_id, members)
    task = fetch_task(conn, startup_id, task_id)
    if task is None:
        raise RuntimeError(f"task {task_id} missing after insert")
    return task


def update_task(
    conn: Connection,
    startup_id: str,
    task_id: str,
    changes: Mapping[str, Any],
    *,
    assignee_ids: Iterable[str] | None = None,
) -> dict[str, Any] | None:
    if fetch_task(conn, startup_id, task_id) is None:
        return None
    members = _ensure_members(conn, startup_id, assignee_ids) if assignee_ids is not None else None
    clause, params = _set_clause(changes, _TASK_COLUMNS)
    if clause:
        conn.execute(
            text(f"UPDATE tasks SET {clause} WHERE startup_id = :startup_id AND task_id = :task_id"),
            {**params, "startup_id": startup_id, "task_id": task_id},
        )
    if members is not None:
        _replace_assignees(conn, task_id, members)
    return fetch_task(conn, startup_id, task_id)


def delete_task(conn: Connection, startup_id: str, task_id: str) -> bool:
    if fetch_task(conn, startup_id, task_id) is None:
        return False
    conn.execute(text("DELETE FROM task_assignees WHERE task_id = :task_id"), {"task_id": task_id})
    conn.execute(
        text("DELETE FROM tasks WHERE startup_id = :startup_id AND task_id = :task_id"),
        {"startup_id": startup_id, "task_id": task_id},
    )
    return True
