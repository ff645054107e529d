"""
Structured Logging
structlog everywhere; coloured console in development, JSON lines otherwise.

Every request gets a request id (taken from `X-Request-ID` or generated),
bound into the structlog context so service events and error envelopes
carry the same id.
"""
import logging
import sys
import uuid
from typing import Any

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from structlog.types import EventDict, Processor

from src.core.config import settings

REQUEST_ID_HEADER = "X-Request-ID"

# stdlib loggers that flood the output at INFO
_QUIET_LOGGERS = ("uvicorn.access", "python_multipart", "httpx", "httpcore")


def _add_service(_, __, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", "edas-backoffice")
    event_dict.setdefault("env", settings.environment)
    return event_dict


def configure_logging() -> None:
    """Configure structlog and route stdlib logging to stdout. Safe to call twice."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.environment == "development":
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            _add_service,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if settings.debug else logging.INFO,
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db_echo else logging.WARNING
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach key/values (user_id, notification_id...) to every later log line of this request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def request_id_for(request: Request) -> str:
    """Request id assigned by RequestContextMiddleware, or the inbound header."""
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
    return request_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request_id/method/path for the lifetime of a request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        structlog.contextvars.clear_contextvars()
        request_id = request_id_for(request)
        bind_context(request_id=request_id, method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response
