import logging
import time
from urllib.parse import urlparse
from uuid import uuid4

from app.env import load_env

load_env()

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.router import api_router
from app.db import get_database_url
from app.http_logging import (
    format_query_params,
    format_request_body,
    format_response_body,
    is_frontend_request,
)
from app.logging_config import configure_logging, request_id_var
from app.settings import settings

configure_logging(level=settings.log_level, log_file=settings.log_file)
http_logger = logging.getLogger("incubator.http")
startup_logger = logging.getLogger("incubator.startup")


def describe_database_url(database_url: str) -> str:
    database_url = (database_url or "").strip()
    if not database_url or database_url.startswith("sqlite"):
        return database_url or "sqlite:///./incubator.db"
    parsed = urlparse(database_url)
    host = parsed.hostname or "-"
    port = parsed.port or "-"
    database = parsed.path.lstrip("/") or "-"
    return f"{parsed.scheme or 'db'}://{host}:{port}/{database}"


startup_logger.info("Database target: %s", describe_database_url(get_database_url()))
startup_logger.info(
    "Priority weights: %s",
    ", ".join(f"{p.value}={w:g}" for p, w in settings.priority_weights.items()),
)

app = FastAPI(title="Incubator API", version="0.1.0")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg") or "invalid value"
    return f"{field}: {message}" if field else message


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"error": _validation_message(exc)}, status_code=400)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc: Exception) -> JSONResponse:
    http_logger.exception("%s %s -> internal error", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


@app.middleware("http")
async def http_request_logger(request, call_next):
    if not settings.log_http_requests:
        return await call_next(request)

    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    log_body = settings.log_http_bodies and is_frontend_request(
        request, allowed_origins=settings.cors_origins
    )
    if log_body:
        http_logger.info(
            "payload %s %s query=%s body=%s",
            request.method,
            request.url.path,
            format_query_params(request, max_chars=settings.log_http_body_max_chars),
            await format_request_body(request, max_chars=settings.log_http_body_max_chars),
        )
    try:
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        http_logger.info(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        if log_body:
            http_logger.info(
                "response %s %s -> %s body=%s",
                request.method,
                request.url.path,
                response.status_code,
                format_response_body(response, max_chars=settings.log_http_body_max_chars),
            )
        return response
    except Exception:
        http_logger.exception("%s %s -> unhandled exception", request.method, request.url.path)
        raise
    finally:
        request_id_var.reset(token)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
