"""Helpers for currency, duration and secret redaction shared by the pipeline."""

from .currency import (
    DEFAULT_CURRENCY_RATES,
    convert_currency,
    normalize_currency_code,
    to_decimal,
)
from .duration import parse_duration_minutes
from .security import redact_secrets_from_text, redact_sensitive

__all__ = [
    "DEFAULT_CURRENCY_RATES",
    "convert_currency",
    "normalize_currency_code",
    "to_decimal",
    "parse_duration_minutes",
    "redact_secrets_from_text",
    "redact_sensitive",
]
