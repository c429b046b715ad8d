"""Provider adapters and the registry the aggregator fans out to."""

from __future__ import annotations

import logging
import os
from typing import Optional

from travel_sourcing.adapters.base import ProviderAdapter, build_provider_query
from travel_sourcing.adapters.http import HttpJsonAdapter
from travel_sourcing.adapters.registry import ProviderRegistry
from travel_sourcing.adapters.simulated import SimulatedOfferAdapter
from travel_sourcing.adapters.static import MockTravelAdapter, StaticAdapter
from travel_sourcing.config import SourcingSettings
from travel_sourcing.utils.security import redact_sensitive

logger = logging.getLogger(__name__)


def build_registry_from_settings(settings: Optional[SourcingSettings] = None) -> ProviderRegistry:
    """
    Register HTTP adapters declared in settings, then apply the mock policy.

    USE_MOCK_SEARCH=true always adds the mock adapter; "auto" adds it only
    when nothing else is configured.
    """
    settings = settings or SourcingSettings.from_env()
    registry = ProviderRegistry()

    for spec in settings.http_providers:
        try:
            api_key_env = spec.get("api_key_env")
            api_key = os.getenv(api_key_env) if api_key_env else None
            adapter = HttpJsonAdapter.from_spec(spec, api_key=api_key)
            registry.register(adapter)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(
                f"[adapters] Skipping invalid HTTP provider spec {redact_sensitive(dict(spec))}: {e!r}"
            )

    mock_setting = settings.use_mock_search
    if mock_setting in ("1", "true", "yes", "always"):
        registry.register(MockTravelAdapter())
    elif mock_setting == "auto" and not registry:
        registry.register(MockTravelAdapter())

    return registry


def build_fallback_registry(settings: Optional[SourcingSettings] = None) -> Optional[ProviderRegistry]:
    """Registry holding the AI simulated provider, or None without an API key."""
    settings = settings or SourcingSettings.from_env()
    if not settings.gemini_api_key:
        return None
    return ProviderRegistry(
        [SimulatedOfferAdapter(settings.gemini_api_key, model=settings.gemini_model)]
    )


__all__ = [
    "ProviderAdapter",
    "ProviderRegistry",
    "HttpJsonAdapter",
    "MockTravelAdapter",
    "SimulatedOfferAdapter",
    "StaticAdapter",
    "build_fallback_registry",
    "build_provider_query",
    "build_registry_from_settings",
]
