"""
Logging configuration for TestBook Backend

structlog on top of stdlib logging. Every record emitted while serving a
request carries that request's ID, which is also echoed back to the client
in the X-Request-ID header.
"""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from testbook.core.config import settings

REQUEST_ID_HEADER = b"x-request-id"
MAX_REQUEST_ID_LENGTH = 64

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def add_request_id(logger: Any, method_name: str, event_dict: dict) -> dict:
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def setup_logging() -> None:
    """Configure stdlib handlers and structlog processors once per process"""

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.is_production:
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(request_id)s"
        )
        renderer = structlog.processors.JSONRenderer()
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)-8s %(name)s | %(message)s")
        renderer = structlog.dev.ConsoleRenderer()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    # uvicorn --reload re-runs the lifespan; replace rather than stack handlers
    root_logger.handlers = [handler]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_request_id,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiomysql"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    if settings.db_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def _inbound_request_id(scope) -> str:
    for key, value in scope.get("headers", []):
        if key == REQUEST_ID_HEADER:
            candidate = value.decode("latin-1").strip()
            if 0 < len(candidate) <= MAX_REQUEST_ID_LENGTH:
                return candidate
    return ""


class RequestIDMiddleware:
    """Reuse the caller's X-Request-ID when sane, otherwise mint one"""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _inbound_request_id(scope) or uuid.uuid4().hex
        token = request_id_var.set(request_id)

        async def send_with_request_id(message):
            if message["type"] == "http.response.start":
                headers = [(k, v) for k, v in message.get("headers", []) if k != REQUEST_ID_HEADER]
                headers.append((REQUEST_ID_HEADER, request_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            request_id_var.reset(token)


class RequestLoggingMiddleware:
    """One access record per HTTP request, health checks excluded"""

    def __init__(self, app):
        self.app = app
        self.logger = get_logger("testbook.request")
        self.quiet_paths = {f"{settings.api_prefix}/health"}

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope.get("path") in self.quiet_paths:
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = None
        client = scope.get("client") or (None, None)

        async def send_with_status(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status")
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        except Exception:
            self.logger.exception(
                "request.error",
                method=scope.get("method"),
                path=scope.get("path"),
                client_host=client[0],
            )
            raise
        finally:
            status_code = status_code or 500
            log = self.logger.warning if status_code >= 500 else self.logger.info
            log(
                "request.end",
                method=scope.get("method"),
                path=scope.get("path"),
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                client_host=client[0],
            )
