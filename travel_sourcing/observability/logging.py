"""
Structured logging for searches.

Every search runs inside ``correlation_id_context()``; the filter below stamps
that id on each record so the fan-out, per-provider and metrics lines of one
search can be joined back together. Provider credentials are masked before
any handler sees them.

Usage:
    from travel_sourcing.observability import correlation_id_context, setup_logging

    setup_logging()
    with correlation_id_context() as cid:
        logger.info("Provider finished", extra={"provider_id": "agoda", "result_count": 4})
"""

import logging
import os
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

from pythonjsonlogger import jsonlogger

from travel_sourcing.utils.security import SENSITIVE_KEYS, redact_secrets_from_text, redact_sensitive

SERVICE_NAME = "travel-sourcing"

_JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(correlation_id)s %(message)s"
_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"

_correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    return _correlation_id_ctx.get()


@contextmanager
def correlation_id_context(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation id (``search-<hex>`` unless given) for the enclosed block."""
    cid = correlation_id or f"search-{uuid.uuid4().hex[:16]}"
    token = _correlation_id_ctx.set(cid)
    try:
        yield cid
    finally:
        _correlation_id_ctx.reset(token)


class CorrelationIDFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "none"
        return True


class SensitiveDataFilter(logging.Filter):
    """Masks credential-named extras, dict args and key/token query strings."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name in list(vars(record)):
            if name.lower() in SENSITIVE_KEYS:
                setattr(record, name, "[REDACTED]")
        if isinstance(record.args, dict):
            record.args = redact_sensitive(record.args)
        elif isinstance(record.msg, str) and not record.args:
            # Upstream error text can embed the request URL
            record.msg = redact_secrets_from_text(record.msg)
        return True


class SearchJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per line, tagged with level, logger, correlation id and service."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=self.formatTime(record, self.datefmt),
            level=record.levelname,
            logger=record.name,
            correlation_id=getattr(record, "correlation_id", "none"),
            service=SERVICE_NAME,
        )
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def setup_logging(level: Optional[str] = None) -> None:
    """
    Replace the root handlers with a single stderr handler.

    ``level`` overrides LOG_LEVEL (default INFO). LOG_FORMAT picks ``json`` or
    ``text``; without it, json is used when ENVIRONMENT=production.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    default_format = "json" if os.getenv("ENVIRONMENT") == "production" else "text"
    log_format = os.getenv("LOG_FORMAT", default_format).lower()

    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(SearchJsonFormatter(_JSON_FORMAT, rename_fields={"timestamp": "@timestamp"}))
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(CorrelationIDFilter())
    handler.addFilter(SensitiveDataFilter())

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every request URL at INFO
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
