from __future__ import annotations

import time
import uuid
from collections.abc import Callable
from typing import Any, cast

import structlog
from fastapi import Request
from starlette.responses import Response

from .config import settings

REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id() -> str | None:
    rid = structlog.contextvars.get_contextvars().get("request_id")
    return str(rid) if rid is not None else None


def bind_request_id(request_id: str) -> None:
    structlog.contextvars.bind_contextvars(request_id=request_id)


def clear_request_id() -> None:
    structlog.contextvars.unbind_contextvars("request_id")


def configure_logging() -> None:
    processors: list[Callable[..., Any]] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_to_numeric(settings.LOG_LEVEL)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _level_to_numeric(level: str) -> int:
    mapping = {
        "CRITICAL": 50,
        "ERROR": 40,
        "WARNING": 30,
        "INFO": 20,
        "DEBUG": 10,
        "NOTSET": 0,
    }
    return mapping.get(level.upper(), 20)


async def request_id_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Tag every log line of a request with its id and echo the id back.

    Monitor and estimate runs log per listing and per term; the id ties those
    lines to the inbound call that triggered them.
    """
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    bind_request_id(rid)
    start = time.perf_counter()
    try:
        response = cast(Response, await call_next(request))
        structlog.get_logger().info(
            "request",
            method=request.method,
            path=request.url.path,
            status_code=getattr(response, "status_code", 0),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
    finally:
        clear_request_id()
    response.headers[REQUEST_ID_HEADER] = rid
    return response


def get_logger() -> Any:
    return structlog.get_logger()
