"""Tests for search pipeline metrics."""

import logging

from travel_sourcing.metrics import (
    ProviderMetrics,
    SearchMetrics,
    SearchMetricsCollector,
    log_provider_result,
    log_search_start,
)


class TestSearchMetrics:
    def test_success_rate_with_partial_failure(self):
        metrics = SearchMetrics()
        metrics.record_provider("a", "ok", 3, 120.0, kind="lodging")
        metrics.record_provider("b", "timeout", 0, 5000.0, kind="lodging")
        metrics.record_provider("c", "empty", 0, 80.0, kind="lodging")
        metrics.record_provider("d", "rate_limited", 0, 40.0, kind="lodging")

        assert metrics.providers_called == 4
        assert metrics.providers_succeeded == 2
        assert metrics.providers_failed == 2
        assert metrics.success_rate() == 0.5

    def test_success_rate_with_no_providers(self):
        assert SearchMetrics().success_rate() == 0.0

    def test_has_results(self):
        metrics = SearchMetrics()
        assert metrics.has_results() is False
        metrics.record_pipeline(raw=5, normalized=4, skipped=1, merged=3, deals=2)
        assert metrics.has_results() is True
        assert metrics.skipped_records == 1


def test_provider_metrics_defaults():
    pm = ProviderMetrics(provider_id="booking", kind="lodging", status="ok", result_count=10, latency_ms=250.5)
    assert pm.error_message is None


class TestSearchMetricsCollector:
    def test_each_search_gets_fresh_metrics(self):
        collector = SearchMetricsCollector()
        with collector.track_search("k1", "lodging") as first:
            first.record_provider("a", "ok", 1, 10.0)
        with collector.track_search("k2", "flight") as second:
            pass

        assert first is not second
        assert second.providers_called == 0
        assert first.total_latency_ms >= 0
        assert collector.searches_tracked == 2

    def test_all_failed_logs_error(self, caplog):
        collector = SearchMetricsCollector()
        with caplog.at_level(logging.INFO, logger="travel_sourcing.metrics"):
            with collector.track_search("k", "lodging") as metrics:
                metrics.record_provider("a", "error", 0, 10.0)

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.event == "search_complete"
        assert record.providers["failed"] == 1

    def test_cache_hit_logs_info(self, caplog):
        collector = SearchMetricsCollector()
        with caplog.at_level(logging.INFO, logger="travel_sourcing.metrics"):
            with collector.track_search("k", "lodging") as metrics:
                metrics.cache_hit = True

        assert caplog.records[-1].levelno == logging.INFO
        assert caplog.records[-1].cache_hit is True

    def test_no_results_logs_warning(self, caplog):
        collector = SearchMetricsCollector()
        with caplog.at_level(logging.INFO, logger="travel_sourcing.metrics"):
            with collector.track_search("k", "lodging") as metrics:
                metrics.record_provider("a", "empty", 0, 10.0)

        assert caplog.records[-1].levelno == logging.WARNING
        assert caplog.records[-1].getMessage() == "Search completed but no results"


def test_log_helpers(caplog):
    with caplog.at_level(logging.INFO, logger="travel_sourcing.metrics"):
        log_search_start("key", "all", ["a", "b"])
        log_provider_result("a", "ok", 3, 12.34)

    start, result = caplog.records[-2:]
    assert start.event == "search_start"
    assert start.providers_requested == ["a", "b"]
    assert result.event == "provider_complete"
    assert result.latency_ms == 12.3
