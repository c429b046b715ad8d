"""
Redaction helpers for provider error messages and structured log payloads.

Provider adapters put API keys into query strings and headers; anything that
ends up in a status snapshot or a log line goes through these first.
"""

import re
from typing import Any, Dict

SENSITIVE_KEYS = {"password", "token", "secret", "api_key", "apikey", "key", "authorization"}


def redact_sensitive(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact sensitive fields from dictionaries.

    Args:
        data: Dictionary potentially containing sensitive data

    Returns:
        New dictionary with sensitive values redacted
    """

    def _redact(obj):
        if isinstance(obj, dict):
            return {
                k: "[REDACTED]" if str(k).lower() in SENSITIVE_KEYS else _redact(v)
                for k, v in obj.items()
            }
        if isinstance(obj, list):
            return [_redact(item) for item in obj]
        return obj

    return _redact(data)


def redact_secrets_from_text(text: str) -> str:
    """
    Redact secrets from plain text using regex patterns.

    Args:
        text: String potentially containing secrets in URLs or headers

    Returns:
        String with secrets replaced with '[REDACTED]'
    """
    if not text:
        return text

    redactions = [
        (r"(api_?key=)[^&\s]+", r"\1[REDACTED]"),
        (r"(key=)[^&\s]+", r"\1[REDACTED]"),
        (r"(token=)[^&\s]+", r"\1[REDACTED]"),
        (r"(Authorization: Bearer)\s+[^\s]+", r"\1 [REDACTED]"),
    ]

    out = text
    for pattern, repl in redactions:
        out = re.sub(pattern, repl, out, flags=re.IGNORECASE)
    return out
