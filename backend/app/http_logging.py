from __future__ import annotations

import json
from typing import Any, Iterable
from urllib.parse import urlparse

from starlette.requests import Request
from starlette.responses import Response, StreamingResponse

REDACTED = "***REDACTED***"

_SENSITIVE_KEYS = frozenset(
    {
        "password",
        "jwt",
        "jwt_secret",
        "secret",
        "authorization",
        "api_key",
        "apikey",
        "access_token",
        "refresh_token",
        "token",
        "email",
    }
)
_SENSITIVE_FRAGMENTS = ("password", "secret", "token", "authorization")


def is_frontend_request(request: Request, *, allowed_origins: Iterable[str]) -> bool:
    allowed = set(allowed_origins)
    origin = (request.headers.get("origin") or "").strip()
    if origin:
        return origin in allowed

    referer = (request.headers.get("referer") or "").strip()
    if not referer:
        return False
    try:
        parsed = urlparse(referer)
    except ValueError:
        return False
    if not parsed.scheme or not parsed.netloc:
        return False
    return f"{parsed.scheme}://{parsed.netloc}" in allowed


def _media_type(content_type: str) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def _is_json(content_type: str) -> bool:
    base = _media_type(content_type)
    return base == "application/json" or base.endswith("+json")


def _is_text(content_type: str) -> bool:
    base = _media_type(content_type)
    return base.startswith("text/") or base == "application/x-www-form-urlencoded"


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    if lowered == "token_type":
        return False
    return lowered in _SENSITIVE_KEYS or any(f in lowered for f in _SENSITIVE_FRAGMENTS)


def redact(value: Any, *, depth: int = 0, max_depth: int = 20) -> Any:
    if depth >= max_depth:
        return "{max_depth_reached}"
    if isinstance(value, dict):
        return {
            str(k): REDACTED if is_sensitive_key(str(k)) else redact(v, depth=depth + 1, max_depth=max_depth)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item, depth=depth + 1, max_depth=max_depth) for item in value]
    return value


def truncate(text: str, max_chars: int) -> str:
    max_chars = max(0, int(max_chars))
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}...(truncated,{len(text)}chars)"


def _dump(payload: Any, *, max_chars: int) -> str:
    try:
        dumped = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        dumped = "{unserializable_json}"
    return truncate(dumped, max_chars)


def describe_body(content_type: str, body: bytes, *, max_chars: int) -> str:
    if not body:
        return "-"
    if _is_json(content_type):
        try:
            parsed = json.loads(body)
        except ValueError:
            return truncate(body.decode("utf-8", errors="replace"), max_chars)
        return _dump(redact(parsed), max_chars=max_chars)
    if _is_text(content_type):
        return truncate(body.decode("utf-8", errors="replace"), max_chars)
    return f"<{_media_type(content_type) or 'binary'} {len(body)} bytes>"


def format_query_params(request: Request, *, max_chars: int) -> str:
    query = dict(request.query_params)
    if not query:
        return "-"
    return _dump(redact(query), max_chars=max_chars)


async def format_request_body(request: Request, *, max_chars: int) -> str:
    content_type = request.headers.get("content-type") or ""
    if not (_is_json(content_type) or _is_text(content_type)):
        length = (request.headers.get("content-length") or "").strip() or "unknown"
        return f"<{_media_type(content_type) or 'binary'} {length} bytes>"
    body = await request.body()
    return describe_body(content_type, body, max_chars=max_chars)


def format_response_body(response: Response, *, max_chars: int) -> str:
    if isinstance(response, StreamingResponse):
        return f"<streaming {response.media_type or '-'}>"
    content_type = response.headers.get("content-type") or (response.media_type or "")
    return describe_body(content_type, getattr(response, "body", b"") or b"", max_chars=max_chars)
