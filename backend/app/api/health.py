from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.db import db_connection

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    try:
        with db_connection() as conn:
            conn.execute(text("SELECT 1")).scalar()
    except SQLAlchemyError:
        return {"status": "degraded", "database": "error"}
    return {"status": "ok", "database": "ok"}
