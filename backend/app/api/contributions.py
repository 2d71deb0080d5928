from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Connection

from app.auth import AuthUser, get_current_user
from app.db import get_db
from app.db.repository import fetch_startup, fetch_tasks, fetch_team_members
from app.domain.contributions import Task, TeamMember, compute_contributions
from app.domain.models import ContributionsResponse
from app.settings import settings

router = APIRouter(prefix="/startups", tags=["contributions"])

logger = logging.getLogger("incubator.api.contributions")


@router.get("/{startup_id}/contributions", response_model=ContributionsResponse)
def get_contributions(
    startup_id: str,
    user: AuthUser = Depends(get_current_user),
    conn: Connection = Depends(get_db),
) -> dict[str, Any]:
    report = None
    try:
        startup = fetch_startup(conn, startup_id, owner_id=user.user_id)
        if startup:
            members = [TeamMember.from_mapping(row) for row in fetch_team_members(conn, startup_id)]
            tasks = [Task.from_mapping(row) for row in fetch_tasks(conn, startup_id)]
            report = compute_contributions(members, tasks, weights=settings.priority_weights)
    except Exception as exc:
        logger.exception("Contributions failed for startup %s", startup_id)
        raise HTTPException(status_code=500, detail="Internal server error") from exc

    if report is None:
        raise HTTPException(status_code=404, detail="Not found")

    logger.info(
        "Contributions computed startup=%s members=%d tasks=%d",
        startup_id,
        report.summary.total_members,
        report.summary.total_tasks,
    )
    return report.to_dict()
