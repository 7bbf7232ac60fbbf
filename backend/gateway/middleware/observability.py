"""Logging setup and request logging."""

import json
import logging
import sys
import time
from collections.abc import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from gateway.config import get_settings
from gateway.middleware.request_id import request_id_var

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s"


class RequestIDFilter(logging.Filter):
    """Attach the current request ID to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of each request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        logging.getLogger("gateway.access").info(
            f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms"
        )
        return response


def configure_logging(level: str = "INFO", structured: bool = False) -> None:
    """Configure the root logger."""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())
    handler.setFormatter(JSONFormatter() if structured else logging.Formatter(PLAIN_FORMAT))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    """Get a logger (configured in setup_observability)."""
    return logging.getLogger(name)


def setup_observability(app: FastAPI) -> None:
    """Configure logging and register request logging."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.enable_structured_logging)
    app.add_middleware(RequestLoggingMiddleware)
