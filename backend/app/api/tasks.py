from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Connection

from app.api.startups import get_owned_startup
from app.db import get_db
from app.db.repository import create_task, delete_task, fetch_tasks, update_task
from app.domain.models import TaskCreate, TaskUpdate

router = APIRouter(prefix="/startups/{startup_id}/tasks", tags=["tasks"])

_REQUIRED_FIELDS = {"title", "status", "priority"}


@router.get("")
def list_tasks(
    startup: dict[str, Any] = Depends(get_owned_startup),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    return {"tasks": fetch_tasks(conn, startup["id"])}


@router.post("")
def create_task_api(
    req: TaskCreate,
    startup: dict[str, Any] = Depends(get_owned_startup),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    try:
        task = create_task(
            conn,
            startup["id"],
            title=req.title,
            description=req.description,
            status=req.status,
            priority=req.priority,
            due_date=req.dueDate,
            assignee_ids=req.assigneeIds,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"task": task}


@router.patch("/{task_id}")
def update_task_api(
    task_id: str,
    req: TaskUpdate,
    startup: dict[str, Any] = Depends(get_owned_startup),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    data = req.model_dump(exclude_unset=True)
    assignee_ids = data.pop("assigneeIds", None)
    changes = {k: v for k, v in data.items() if v is not None or k not in _REQUIRED_FIELDS}
    try:
        task = update_task(conn, startup["id"], task_id, changes, assignee_ids=assignee_ids)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"task": task}


@router.delete("/{task_id}")
def delete_task_api(
    task_id: str,
    startup: dict[str, Any] = Depends(get_owned_startup),
    conn: Connection = Depends(get_db),
) -> dict[str, bool]:
    if not delete_task(conn, startup["id"], task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"success": True}
