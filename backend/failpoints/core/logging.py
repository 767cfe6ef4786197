from __future__ import annotations

import logging
import logging.config
from uuid import uuid4

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from failpoints.core.config import Settings

TRACE_HEADER = "X-Trace-ID"
_ROTATE_BYTES = 5 * 1024 * 1024
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

logger = structlog.stdlib.get_logger("failpoints.api.request")


def bind_log_context(*, trace_id: str | None = None, failpoint: str | None = None) -> None:
    values = {"trace_id": trace_id, "failpoint": failpoint}
    payload = {key: value.strip() for key, value in values.items() if value and value.strip()}
    if payload:
        structlog.contextvars.bind_contextvars(**payload)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


def _handlers(settings: Settings, level: str) -> dict[str, dict[str, object]]:
    handlers: dict[str, dict[str, object]] = {
        "stderr": {"class": "logging.StreamHandler", "formatter": "structured", "level": level},
    }
    if settings.log_file is not None:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "structured",
            "level": level,
            "filename": settings.log_file,
            "maxBytes": _ROTATE_BYTES,
            "backupCount": 3,
            "encoding": "utf-8",
        }
    return handlers


def configure_logging(settings: Settings) -> None:
    """Route structlog and uvicorn records through one stdlib formatter."""
    level = settings.log_level.upper()
    # Applied to structlog events before wrapping and to plain stdlib records in the formatter.
    pre_chain: list[object] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    renderer: object = (
        structlog.dev.ConsoleRenderer()
        if settings.log_format == "console"
        else structlog.processors.JSONRenderer()
    )
    handlers = _handlers(settings, level)
    routed = {"handlers": list(handlers), "level": level}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        structlog.processors.format_exc_info,
                        structlog.processors.EventRenamer("message"),
                        renderer,
                    ],
                }
            },
            "handlers": handlers,
            "loggers": {
                "": dict(routed),
                **{name: {**routed, "propagate": False} for name in _SERVER_LOGGERS},
            },
        }
    )

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class TraceContextMiddleware(BaseHTTPMiddleware):
    """Tags every control-plane request with a trace id, echoed back in the response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = (request.headers.get(TRACE_HEADER) or "").strip()
        trace_id = incoming or f"trace-http-{uuid4().hex}"
        structlog.contextvars.clear_contextvars()
        bind_log_context(trace_id=trace_id)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request.failed", method=request.method, path=request.url.path)
            raise
        finally:
            structlog.contextvars.clear_contextvars()
        response.headers[TRACE_HEADER] = trace_id
        logger.info(
            "request.completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            trace_id=trace_id,
        )
        return response
