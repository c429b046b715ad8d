"""Search pipeline observability metrics.

This module provides structured logging and metrics tracking for aggregation runs.
Metrics tracked:
- provider success rate per search
- provider status reporting (ok, empty, error, timeout, rate_limited, ...)
- record counts through normalize -> merge -> deals
- end-to-end and per-provider latencies
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger("travel_sourcing.metrics")

FAILED_STATUSES = {"error", "timeout", "rate_limited", "exhausted", "unauthorized"}


@dataclass
class ProviderMetrics:
    """Metrics for a single adapter execution."""
    provider_id: str
    kind: Optional[str]
    status: str
    result_count: int
    latency_ms: float
    error_message: Optional[str] = None


@dataclass
class SearchMetrics:
    """Aggregated metrics for a single search operation."""
    cache_key: str = ""
    query_kind: str = ""
    cache_hit: bool = False
    raw_records: int = 0
    normalized_offers: int = 0
    skipped_records: int = 0
    merged_offers: int = 0
    deals: int = 0
    providers_called: int = 0
    providers_succeeded: int = 0
    providers_failed: int = 0
    used_fallback: bool = False
    total_latency_ms: float = 0.0
    provider_metrics: List[ProviderMetrics] = field(default_factory=list)

    def record_provider(
        self,
        provider_id: str,
        status: str,
        result_count: int,
        latency_ms: float,
        kind: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> None:
        self.provider_metrics.append(
            ProviderMetrics(
                provider_id=provider_id,
                kind=kind,
                status=status,
                result_count=result_count,
                latency_ms=latency_ms,
                error_message=error_message,
            )
        )
        self.providers_called += 1
        if status in FAILED_STATUSES:
            self.providers_failed += 1
        else:
            self.providers_succeeded += 1

    def record_pipeline(self, raw: int, normalized: int, skipped: int, merged: int, deals: int) -> None:
        self.raw_records = raw
        self.normalized_offers = normalized
        self.skipped_records = skipped
        self.merged_offers = merged
        self.deals = deals

    def success_rate(self) -> float:
        """Calculate provider success rate."""
        if self.providers_called == 0:
            return 0.0
        return self.providers_succeeded / self.providers_called

    def has_results(self) -> bool:
        return self.merged_offers > 0


class SearchMetricsCollector:
    """Collector for search operation metrics.

    Each tracked search gets its own SearchMetrics object, so concurrent
    searches never share state.
    """

    def __init__(self):
        self.searches_tracked = 0

    @contextmanager
    def track_search(self, cache_key: str = "", query_kind: str = ""):
        """Context manager to track a search operation."""
        metrics = SearchMetrics(cache_key=cache_key, query_kind=query_kind)
        started = time.monotonic()
        try:
            yield metrics
        finally:
            metrics.total_latency_ms = (time.monotonic() - started) * 1000
            self.searches_tracked += 1
            self._log_metrics(metrics)

    def _log_metrics(self, m: SearchMetrics) -> None:
        """Log the collected metrics in structured format."""
        provider_summary = []
        for pm in m.provider_metrics:
            provider_summary.append({
                "id": pm.provider_id,
                "kind": pm.kind,
                "status": pm.status,
                "results": pm.result_count,
                "latency_ms": round(pm.latency_ms, 1),
            })

        log_data = {
            "event": "search_complete",
            "query_kind": m.query_kind,
            "cache_hit": m.cache_hit,
            "records": {
                "raw": m.raw_records,
                "normalized": m.normalized_offers,
                "skipped": m.skipped_records,
                "merged": m.merged_offers,
                "deals": m.deals,
            },
            "providers": {
                "called": m.providers_called,
                "succeeded": m.providers_succeeded,
                "failed": m.providers_failed,
                "success_rate": round(m.success_rate(), 2),
                "details": provider_summary,
            },
            "used_fallback": m.used_fallback,
            "latency_ms": round(m.total_latency_ms, 1),
            "success": m.has_results(),
        }

        if m.cache_hit:
            logger.info("Search served from cache", extra=log_data)
        elif m.providers_failed == m.providers_called and m.providers_called > 0:
            logger.error("Search failed - all providers failed", extra=log_data)
        elif m.providers_failed > 0:
            logger.warning("Search completed with provider failures", extra=log_data)
        elif not m.has_results():
            logger.warning("Search completed but no results", extra=log_data)
        else:
            logger.info("Search completed successfully", extra=log_data)


def log_search_start(cache_key: str, query_kind: str, providers: List[str]) -> None:
    """Log search operation start."""
    logger.info(
        "Search started",
        extra={
            "event": "search_start",
            "query_kind": query_kind,
            "cache_key_length": len(cache_key),
            "providers_requested": providers,
        },
    )


def log_provider_result(provider_id: str, status: str, result_count: int, latency_ms: float) -> None:
    """Log individual provider result."""
    logger.info(
        f"Provider {provider_id} completed",
        extra={
            "event": "provider_complete",
            "provider_id": provider_id,
            "status": status,
            "result_count": result_count,
            "latency_ms": round(latency_ms, 1),
        },
    )
