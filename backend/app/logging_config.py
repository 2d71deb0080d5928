from __future__ import annotations

import logging
import os
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"
PROPAGATED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


def _file_handler(log_file: str, backup_count: int) -> logging.Handler:
    log_path = Path(log_file)
    if str(log_path.parent) not in {".", ""}:
        os.makedirs(log_path.parent, exist_ok=True)
    return TimedRotatingFileHandler(
        log_path,
        when="midnight",
        interval=1,
        backupCount=backup_count,
        encoding="utf-8",
        delay=True,
    )


def configure_logging(
    *, level: str = "INFO", log_file: str | None = None, backup_count: int = 7
) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    request_id_filter = RequestIdFilter()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(_file_handler(log_file, backup_count))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(request_id_filter)
        root.addHandler(handler)

    # uvicorn installs its own handlers; route everything through root instead
    for name in PROPAGATED_LOGGERS:
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = True
