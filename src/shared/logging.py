"""Request-scoped logging and tracing.

Every HTTP request is bound to a :class:`RequestContext` (id, method, path)
by the app middleware. Log records and spans produced while serving it are
tagged with that context, and call sites can attach structured fields with
``extra={"fields": {...}}``.
"""

from __future__ import annotations

import contextvars
import json
import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider

from src.shared.config import settings


@dataclass(frozen=True)
class RequestContext:
    request_id: str
    method: str
    path: str


_request_var: contextvars.ContextVar[RequestContext | None] = contextvars.ContextVar(
    "request_context", default=None
)


def bind_request(request_id: str, method: str, path: str) -> contextvars.Token:
    """Bind the current async context to a request; pass the token to :func:`reset_request`."""
    return _request_var.set(RequestContext(request_id, method, path))


def reset_request(token: contextvars.Token) -> None:
    _request_var.reset(token)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

class RequestContextFilter(logging.Filter):
    """Copy the bound request onto each record as ``request_id``/``method``/``path``."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _request_var.get()
        record.request_id = ctx.request_id if ctx else ""  # type: ignore[attr-defined]
        record.method = ctx.method if ctx else ""  # type: ignore[attr-defined]
        record.path = ctx.path if ctx else ""  # type: ignore[attr-defined]
        return True


def _fields(record: logging.LogRecord) -> dict[str, Any]:
    fields = getattr(record, "fields", None)
    return fields if isinstance(fields, dict) else {}


class JsonFormatter(logging.Formatter):
    """One JSON object per line; request context and ``fields`` become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", "")
        if request_id:
            payload["request_id"] = request_id
            payload["method"] = getattr(record, "method", "")
            payload["path"] = getattr(record, "path", "")
        payload.update(_fields(record))
        if record.exc_info and record.exc_info[1] is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


_LEVEL_COLORS: dict[str, str] = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"


class ConsoleFormatter(logging.Formatter):
    """``LEVEL [id METHOD path] logger: message key=value ...`` with a colored level."""

    def format(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelname, "")
        request_id = getattr(record, "request_id", "")
        prefix = ""
        if request_id:
            prefix = f" [{request_id} {getattr(record, 'method', '')} {getattr(record, 'path', '')}]"
        line = f"{color}{record.levelname}{_RESET}{prefix} {record.name}: {record.getMessage()}"
        fields = _fields(record)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_initialized = False


def setup_logging() -> None:
    """Install the stderr handler once, formatted per ``settings.log_format``."""
    global _initialized  # noqa: PLW0603
    if _initialized:
        return
    _initialized = True

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.DEBUG))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter() if settings.log_format == "json" else ConsoleFormatter())
    root.addHandler(handler)

    # The middleware logs every request itself.
    for lib in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(lib).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)


# ---------------------------------------------------------------------------
# Tracing
# ---------------------------------------------------------------------------

_tracer_initialized = False


class RequestSpanProcessor(SpanProcessor):
    """Stamp the bound request's id, method and path on every span it starts."""

    def on_start(self, span: trace.Span, parent_context: object = None) -> None:  # type: ignore[override]
        ctx = _request_var.get()
        if ctx is None:
            return
        span.set_attribute("request.id", ctx.request_id)
        span.set_attribute("http.request.method", ctx.method)
        span.set_attribute("url.path", ctx.path)


def _init_tracer_provider() -> None:
    global _tracer_initialized  # noqa: PLW0603
    if _tracer_initialized:
        return
    _tracer_initialized = True

    from opentelemetry.sdk.resources import Resource

    provider = TracerProvider(resource=Resource.create({"service.name": "product-catalog-api"}))
    provider.add_span_processor(RequestSpanProcessor())

    endpoint = os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT") or settings.otel_exporter_endpoint
    if endpoint:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    elif settings.trace_console:
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)


def shutdown_tracing() -> None:
    """Flush pending spans and shut down the tracer provider."""
    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()


def get_tracer(name: str) -> trace.Tracer:
    _init_tracer_provider()
    return trace.get_tracer(name)
