from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from app.domain.contributions import DEFAULT_PRIORITY_WEIGHTS, Priority


def _env_flag(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def parse_priority_weights(raw: str | None) -> dict[Priority, float]:
    """Parse ``high=3,medium=2,low=1`` on top of the default weight table."""
    weights = dict(DEFAULT_PRIORITY_WEIGHTS)
    raw = (raw or "").strip()
    if not raw:
        return weights
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, sep, value = chunk.partition("=")
        try:
            priority = Priority(key.strip().lower())
            weight = float(value)
        except ValueError as exc:
            raise RuntimeError(
                "CONTRIBUTION_PRIORITY_WEIGHTS must look like `high=3,medium=2,low=1`, "
                f"got {chunk!r}"
            ) from exc
        if not sep or weight < 0:
            raise RuntimeError(f"invalid priority weight {chunk!r}")
        weights[priority] = weight
    return weights


@dataclass(frozen=True)
class Settings:
    cors_origins: list[str]
    log_level: str = "INFO"
    log_file: str | None = None
    log_http_requests: bool = True
    log_http_bodies: bool = False
    log_http_body_max_chars: int = 2000
    priority_weights: Mapping[Priority, float] = field(
        default_factory=lambda: dict(DEFAULT_PRIORITY_WEIGHTS)
    )


def load_settings() -> Settings:
    return Settings(
        cors_origins=_env_list(
            "CORS_ORIGINS",
            ["http://localhost:3000", "http://127.0.0.1:3000"],
        ),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        log_file=(os.getenv("LOG_FILE") or "").strip() or None,
        log_http_requests=_env_flag("LOG_HTTP_REQUESTS", True),
        log_http_bodies=_env_flag("LOG_HTTP_BODIES", False),
        log_http_body_max_chars=int(os.getenv("LOG_HTTP_BODY_MAX_CHARS", "2000") or "2000"),
        priority_weights=parse_priority_weights(os.getenv("CONTRIBUTION_PRIORITY_WEIGHTS")),
    )


settings = load_settings()
