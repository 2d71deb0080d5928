from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, Header, HTTPException
from sqlalchemy.engine import Connection

from app.db import get_db
from app.db.repository import fetch_user

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")
JWT_TTL_MINUTES = int(os.getenv("JWT_TTL_MINUTES", "480"))


@dataclass(frozen=True)
class AuthUser:
    user_id: str
    name: str
    email: str | None = None


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(raw: str) -> bytes:
    padding = "=" * (-len(raw) % 4)
    return base64.urlsafe_b64decode(raw + padding)


def _sign(message: bytes) -> str:
    digest = hmac.new(JWT_SECRET.encode("utf-8"), message, hashlib.sha256).digest()
    return _b64url_encode(digest)


def _encode_segment(data: dict[str, Any]) -> str:
    return _b64url_encode(json.dumps(data, separators=(",", ":")).encode("utf-8"))


def encode_jwt(payload: dict[str, Any]) -> str:
    signing_input = f"{_encode_segment({'alg': 'HS256', 'typ': 'JWT'})}.{_encode_segment(payload)}"
    return f"{signing_input}.{_sign(signing_input.encode('utf-8'))}"


def decode_jwt(token: str) -> dict[str, Any]:
    try:
        header_b64, payload_b64, signature = token.split(".")
    except ValueError as exc:
        raise ValueError("invalid token") from exc

    expected = _sign(f"{header_b64}.{payload_b64}".encode("utf-8"))
    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii")):
        raise ValueError("invalid signature")

    try:
        payload = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("invalid payload") from exc
    if not isinstance(payload, dict):
        raise ValueError("invalid payload")
    exp = payload.get("exp")
    if isinstance(exp, (int, float)) and datetime.now(timezone.utc).timestamp() > exp:
        raise ValueError("token expired")
    return payload


def issue_token(user_id: str, *, ttl_minutes: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=JWT_TTL_MINUTES if ttl_minutes is None else ttl_minutes)
    return encode_jwt({"sub": user_id, "iat": int(now.timestamp()), "exp": int(exp.timestamp())})


def get_current_user(
    authorization: str | None = Header(default=None),
    conn: Connection = Depends(get_db),
) -> AuthUser:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_jwt(token)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")
    user_id = payload.get("sub")
    if not isinstance(user_id, str):
        raise HTTPException(status_code=401, detail="Invalid token")
    user = fetch_user(conn, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return AuthUser(user_id=user["user_id"], name=user["name"], email=user.get("email"))
