"""
Structured logging for the Restaurant Review API.

Console output in development, JSON lines in production. Every entry carries
the service name and, inside a request, the request id.
"""
import logging.config
import sys
import time
import uuid
from typing import Any, Dict, Optional

import structlog

from app.core.config import settings

SERVICE_NAME = "restaurant-review-api"
SERVICE_VERSION = "1.0.0"


def setup_logging() -> None:
    is_production = settings.ENVIRONMENT == "production"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
            "console": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if is_production else "console",
                "stream": sys.stdout,
            },
        },
        "root": {"handlers": ["console"], "level": settings.LOG_LEVEL},
        "loggers": {
            # Slow queries are reported by app.db.database; engine chatter stays quiet
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    })

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            add_service_context,
            structlog.processors.JSONRenderer() if is_production else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict["service"] = SERVICE_NAME
    event_dict["version"] = SERVICE_VERSION
    return event_dict


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name or "app")


class LoggingMiddleware:
    """ASGI middleware: one start/finish entry per request and an ``x-request-id`` header.

    The request id is bound into structlog's context, so review and auth events
    logged while handling the request carry it too.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = uuid.uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id)
        request_logger = get_logger("request").bind(method=scope["method"], path=scope["path"])

        start_time = time.perf_counter()
        response_status = 500

        async def send_wrapper(message):
            nonlocal response_status
            if message["type"] == "http.response.start":
                response_status = message["status"]
                message["headers"] = list(message.get("headers", [])) + [(b"x-request-id", request_id.encode())]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            request_logger.error("Request failed", error=str(e), exc_info=True)
            raise
        finally:
            request_logger.info(
                "Request completed",
                status_code=response_status,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")


def log_auth_event(event_type: str, user_email: Optional[str] = None, success: bool = True, **kwargs):
    """Signup, login, refresh and token verification outcomes."""
    get_logger("auth").info("Authentication event", event_type=event_type, user_email=user_email, success=success, **kwargs)


def log_business_event(event_type: str, user_id: Optional[str] = None, **kwargs):
    """Review lifecycle: created, updated, deleted."""
    get_logger("business").info("Business event", event_type=event_type, user_id=user_id, **kwargs)


def log_security_event(event_type: str, severity: str = "medium", **kwargs):
    """Denied review edits/deletes (warning) and role changes (info)."""
    security_logger = get_logger("security")
    log_method = security_logger.info if severity == "low" else security_logger.warning
    log_method("Security event", event_type=event_type, severity=severity, **kwargs)
