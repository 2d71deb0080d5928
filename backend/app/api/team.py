from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Connection

from app.api.startups import get_owned_startup
from app.db import get_db
from app.db.repository import (
    create_team_member,
    delete_team_member,
    fetch_team_members,
    update_team_member,
)
from app.domain.models import TeamMemberCreate, TeamMemberUpdate

router = APIRouter(prefix="/startups/{startup_id}/team", tags=["team"])

_REQUIRED_FIELDS = {"name", "role"}


@router.get("")
def list_team(
    startup: dict[str, Any] = Depends(get_owned_startup),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    return {"members": fetch_team_members(conn, startup["id"])}


@router.post("")
def add_team_member(
    req: TeamMemberCreate,
    startup: dict[str, Any] = Depends(get_owned_startup),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    member = create_team_member(
        conn,
        startup["id"],
        name=req.name,
        role=req.role,
        email=req.email or None,
        skills=req.skills,
    )
    return {"member": member}


@router.patch("/{member_id}")
def update_team_member_api(
    member_id: str,
    req: TeamMemberUpdate,
    startup: dict[str, Any] = Depends(get_owned_startup),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    changes = {
        key: value
        for key, value in req.model_dump(exclude_unset=True).items()
        if value is not None or key not in _REQUIRED_FIELDS
    }
    member = update_team_member(conn, startup["id"], member_id, changes)
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return {"member": member}


@router.delete("/{member_id}")
def remove_team_member(
    member_id: str,
    startup: dict[str, Any] = Depends(get_owned_startup),
    conn: Connection = Depends(get_db),
) -> dict[str, bool]:
    if not delete_team_member(conn, startup["id"], member_id):
        raise HTTPException(status_code=404, detail="Member not found")
    return {"success": True}
