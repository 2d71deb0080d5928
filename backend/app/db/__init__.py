from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException
from sqlalchemy.engine import Connection
from sqlalchemy.exc import OperationalError

from app.db.connection import engine, get_database_url, is_sqlite_engine

logger = logging.getLogger("incubator.db")


@contextmanager
def db_connection() -> Iterator[Connection]:
    with engine.begin() as conn:
        yield conn


def get_db() -> Iterator[Connection]:
    """Request-scoped connection; the transaction commits when the handler returns."""
    try:
        ctx = engine.begin()
        conn = ctx.__enter__()
    except OperationalError as exc:
        logger.warning("Database connection failed: %s", exc)
        raise HTTPException(status_code=503, detail="Database unavailable") from exc

    try:
        yield conn
    except BaseException as exc:
        ctx.__exit__(type(exc), exc, exc.__traceback__)
        raise
    else:
        ctx.__exit__(None, None, None)


__all__ = [
    "db_connection",
    "engine",
    "get_database_url",
    "get_db",
    "is_sqlite_engine",
]
