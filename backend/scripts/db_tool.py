from __future__ import annotations

import argparse
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from app.env import load_env  # noqa: E402

load_env()

from sqlalchemy import text  # noqa: E402

from app.auth import issue_token  # noqa: E402
from app.data.seed import get_startups, get_users  # noqa: E402
from app.db import db_connection  # noqa: E402
from app.db.repository import fetch_user  # noqa: E402
from app.db.schema import TABLES_IN_DELETE_ORDER, create_schema  # noqa: E402


def init_schema() -> None:
    with db_connection() as conn:
        create_schema(conn)
    print("Schema ready.")


def _wipe_tables(conn) -> None:
    for table in TABLES_IN_DELETE_ORDER:
        conn.execute(text(f"DELETE FROM {table}"))


def _timestamps(start: datetime):
    # strictly increasing so roster order survives ORDER BY created_at
    step = 0
    while True:
        yield (start + timedelta(milliseconds=step)).isoformat()
        step += 1


def _member_rows(startup: dict[str, Any], clock) -> list[dict[str, Any]]:
    rows = []
    for member in startup.get("members", []):
        rows.append(
            {
                "member_id": member["id"],
                "startup_id": startup["id"],
                "user_id": member.get("userId"),
                "name": member.get("name") or "",
                "email": member.get("email"),
                "role": member.get("role") or "",
                "skills": member.get("skills"),
                "created_at": next(clock),
            }
        )
    return rows


def _task_rows(startup: dict[str, Any], clock) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    tasks = []
    assignees = []
    for task in startup.get("tasks", []):
        tasks.append(
            {
                "task_id": task["id"],
                "startup_id": startup["id"],
                "title": task["title"],
                "description": task.get("description"),
                "status": task.get("status") or "todo",
                "priority": task.get("priority") or "medium",
                "due_date": task.get("dueDate"),
                "created_at": next(clock),
            }
        )
        for member_id in task.get("assigneeIds", []):
            assignees.append({"task_id": task["id"], "member_id": member_id})
    return tasks, assignees


def seed_data(force: bool = False) -> None:
    users = get_users()
    startups = get_startups()
    clock = _timestamps(datetime.now(timezone.utc))

    with db_connection() as conn:
        create_schema(conn)
        if force:
            _wipe_tables(conn)
        else:
            existing = conn.execute(text("SELECT COUNT(*) FROM users")).scalar() or 0
            if existing:
                print("Seed skipped: users already exist. Use --force to reseed.")
                return

        conn.execute(
            text(
                """
                INSERT INTO users (user_id, name, email, created_at)
                VALUES (:user_id, :name, :email, :created_at)
                """
            ),
            [
                {"user_id": u["id"], "name": u["name"], "email": u.get("email"), "created_at": next(clock)}
                for u in users
            ],
        )
        user_ids_by_email = {u["email"]: u["id"] for u in users if u.get("email")}

        for startup in startups:
            conn.execute(
                text(
                    """
                    INSERT INTO startups (startup_id, owner_id, name, idea, created_at)
                    VALUES (:startup_id, :owner_id, :name, :idea, :created_at)
                    """
                ),
                {
                    "startup_id": startup["id"],
                    "owner_id": startup["ownerId"],
                    "name": startup["name"],
                    "idea": startup.get("idea"),
                    "created_at": next(clock),
                },
            )
            members = _member_rows(startup, clock)
            for member in members:
                member["user_id"] = member["user_id"] or user_ids_by_email.get(member["email"])
            if members:
                conn.execute(
                    text(
                        """
                        INSERT INTO team_members
                          (member_id, startup_id, user_id, name, email, role, skills, created_at)
                        VALUES
                          (:member_id, :startup_id, :user_id, :name, :email, :role, :skills, :created_at)
                        """
                    ),
                    members,
                )
            tasks, assignees = _task_rows(startup, clock)
            if tasks:
                conn.execute(
                    text(
                        """
                        INSERT INTO tasks
                          (task_id, startup_id, title, description, status, priority, due_date, created_at)
                        VALUES
                          (:task_id, :startup_id, :title, :description, :status, :priority, :due_date, :created_at)
                        """
                    ),
                    tasks,
                )
            if assignees:
                conn.execute(
                    text("INSERT INTO task_assignees (task_id, member_id) VALUES (:task_id, :member_id)"),
                    assignees,
                )
    print(f"Seeded {len(users)} users and {len(startups)} startups.")


def print_token(user_id: str, ttl_minutes: int | None) -> int:
    with db_connection() as conn:
        user = fetch_user(conn, user_id)
    if not user:
        print(f"Unknown user: {user_id}", file=sys.stderr)
        return 1
    print(issue_token(user_id, ttl_minutes=ttl_minutes))
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="DB bootstrap and seed tool")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="create tables if missing")
    seed_parser = sub.add_parser("seed", help="seed demo data")
    seed_parser.add_argument("--force", action="store_true", help="wipe data before seeding")
    token_parser = sub.add_parser("token", help="print a bearer token for a user")
    token_parser.add_argument("user_id")
    token_parser.add_argument("--ttl-minutes", type=int, default=None)

    args = parser.parse_args()
    if args.command == "init":
        init_schema()
    elif args.command == "seed":
        seed_data(force=args.force)
    elif args.command == "token":
        return print_token(args.user_id, args.ttl_minutes)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
