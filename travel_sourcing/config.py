"""Environment-driven settings for the sourcing pipeline."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_TIMEOUT_SECONDS = 5.0
DEFAULT_SEARCH_DEADLINE_SECONDS = 12.0
DEFAULT_CACHE_TTL_SECONDS = 60 * 60  # 1 hour
DEFAULT_CURRENCY = "USD"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"[config] Ignoring non-numeric {name}={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"[config] Ignoring non-positive {name}={raw!r}, using {default}")
        return default
    return value


def _env_http_providers(name: str) -> List[Dict[str, Any]]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return []
    try:
        specs = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"[config] {name} is not valid JSON: {e}")
        return []
    if not isinstance(specs, list):
        logger.warning(f"[config] {name} must be a JSON list of provider specs")
        return []
    return [spec for spec in specs if isinstance(spec, dict)]


@dataclass(frozen=True)
class SourcingSettings:
    provider_timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS
    search_deadline_seconds: float = DEFAULT_SEARCH_DEADLINE_SECONDS
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    default_currency: str = DEFAULT_CURRENCY
    use_mock_search: str = "auto"
    http_providers: List[Dict[str, Any]] = field(default_factory=list)
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL

    @classmethod
    def from_env(cls) -> "SourcingSettings":
        """
        Build settings from environment variables.

        Environment variables:
        - SOURCING_PROVIDER_TIMEOUT_SECONDS: per-adapter call timeout (default 5.0)
        - SOURCING_SEARCH_DEADLINE_SECONDS: overall fan-out deadline (default 12.0)
        - SOURCING_CACHE_TTL_SECONDS: result cache TTL (default 3600)
        - SOURCING_DEFAULT_CURRENCY: currency used when the query has no budget
        - USE_MOCK_SEARCH: auto | true | false
        - SOURCING_HTTP_PROVIDERS: JSON list of HTTP adapter specs
        - GEMINI_API_KEY / GOOGLE_GENERATIVE_AI_API_KEY, GEMINI_MODEL
        """
        currency = (os.getenv("SOURCING_DEFAULT_CURRENCY") or DEFAULT_CURRENCY).strip().upper()
        return cls(
            provider_timeout_seconds=_env_float(
                "SOURCING_PROVIDER_TIMEOUT_SECONDS", DEFAULT_PROVIDER_TIMEOUT_SECONDS
            ),
            search_deadline_seconds=_env_float(
                "SOURCING_SEARCH_DEADLINE_SECONDS", DEFAULT_SEARCH_DEADLINE_SECONDS
            ),
            cache_ttl_seconds=_env_float("SOURCING_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS),
            default_currency=currency or DEFAULT_CURRENCY,
            use_mock_search=(os.getenv("USE_MOCK_SEARCH", "auto") or "").strip().lower(),
            http_providers=_env_http_providers("SOURCING_HTTP_PROVIDERS"),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_GENERATIVE_AI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        )
