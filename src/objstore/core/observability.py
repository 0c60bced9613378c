"""Structured logging and tracing for objstore.

Logs are JSON lines on stderr so command output on stdout (``ls --json``,
``cat``) can be piped. Spans wrap each listing page and each rename; they are
recorded only when ``OBJSTORE_OTEL_ENABLED`` is set, and are printed to
stderr as well.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from .config import settings

_REDACTED_FIELDS = ("secret_access_key", "session_token")


def _redact_credentials(logger: Any, method_name: str, event_dict: dict) -> dict:
    for field in _REDACTED_FIELDS:
        if event_dict.get(field):
            event_dict[field] = "***"
    return event_dict


def setup_tracing() -> None:
    """Install a tracer provider when tracing is enabled."""
    if not settings.otel_enabled:
        return

    resource = Resource.create(
        {
            "service.name": settings.otel_service_name,
            "objstore.bucket": settings.bucket_name or "",
        }
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr))
    )
    trace.set_tracer_provider(provider)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure structlog over stdlib logging.

    Args:
        level: Log level name; defaults to ``OBJSTORE_LOG_LEVEL``. Calling
            again replaces the previous level.
    """
    level = (level or settings.log_level).upper()
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _redact_credentials,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer; spans are dropped unless tracing is enabled."""
    return trace.get_tracer(name)


setup_logging()
setup_tracing()
