from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Connection

from app.auth import AuthUser, get_current_user
from app.db import get_db
from app.db.repository import (
    create_startup,
    fetch_startup,
    fetch_startups,
    fetch_tasks,
    fetch_team_members,
)
from app.domain.models import StartupCreate

router = APIRouter(prefix="/startups", tags=["startups"])


def get_owned_startup(
    startup_id: str,
    user: AuthUser = Depends(get_current_user),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    startup = fetch_startup(conn, startup_id, owner_id=user.user_id)
    if not startup:
        raise HTTPException(status_code=404, detail="Startup not found")
    return startup


@router.get("")
def list_startups(
    user: AuthUser = Depends(get_current_user),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    return {"startups": fetch_startups(conn, user.user_id)}


@router.post("")
def create_startup_api(
    req: StartupCreate,
    user: AuthUser = Depends(get_current_user),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    startup = create_startup(conn, owner_id=user.user_id, name=req.name, idea=req.idea)
    return {"startup": startup}


@router.get("/{startup_id}")
def get_startup(
    startup: dict[str, Any] = Depends(get_owned_startup),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    detail = dict(startup)
    detail["teamMembers"] = fetch_team_members(conn, startup["id"])
    detail["tasks"] = fetch_tasks(conn, startup["id"])
    return {"startup": detail}
