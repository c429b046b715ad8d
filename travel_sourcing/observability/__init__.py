"""
Observability helpers for the sourcing pipeline.

Provides:
- Structured logging with correlation IDs (python-json-logger)
- Credential redaction on log records
"""

from .logging import correlation_id_context, get_correlation_id, setup_logging

__all__ = [
    "correlation_id_context",
    "get_correlation_id",
    "setup_logging",
]
