"""
Travel offer aggregation service.

TravelAggregator is the public entry point: it validates a query, fans it out
to every matching provider adapter, normalizes, merges and ranks what comes
back, and caches the assembled AggregatedResults.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from travel_sourcing.adapters.base import build_provider_query
from travel_sourcing.adapters.registry import ProviderRegistry
from travel_sourcing.cache import ResultCache
from travel_sourcing.config import SourcingSettings
from travel_sourcing.deals import rank_deals
from travel_sourcing.exceptions import ValidationError
from travel_sourcing.executors import run_adapter_with_status
from travel_sourcing.links import generate_search_links
from travel_sourcing.merger import merge_offers
from travel_sourcing.metrics import SearchMetrics, SearchMetricsCollector, log_search_start
from travel_sourcing.models import (
    OFFER_KINDS,
    AggregatedResults,
    ProviderStatusSnapshot,
    RawProviderRecord,
    TravelQuery,
)
from travel_sourcing.normalizers import NormalizationContext, normalize_records
from travel_sourcing.observability import correlation_id_context
from travel_sourcing.utils.currency import normalize_currency_code

logger = logging.getLogger(__name__)

QueryInput = Union[TravelQuery, Mapping[str, Any]]


class TravelAggregator:
    def __init__(
        self,
        registry: ProviderRegistry,
        cache: Optional[ResultCache] = None,
        settings: Optional[SourcingSettings] = None,
        fallback_registry: Optional[ProviderRegistry] = None,
        metrics: Optional[SearchMetricsCollector] = None,
    ):
        self.registry = registry
        self.settings = settings or SourcingSettings.from_env()
        self.cache = cache if cache is not None else ResultCache(ttl_seconds=self.settings.cache_ttl_seconds)
        self.fallback_registry = fallback_registry
        self.metrics = metrics or SearchMetricsCollector()

    @staticmethod
    def validate_query(query: QueryInput) -> TravelQuery:
        """
        Coerce and check a search query.

        Raises:
            ValidationError: the query cannot be searched.
        """
        if not isinstance(query, TravelQuery):
            try:
                query = TravelQuery.model_validate(dict(query))
            except PydanticValidationError as e:
                fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
                raise ValidationError("Malformed search query", detail={"fields": fields}) from e
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Malformed search query: {e}") from e

        if not query.destination:
            raise ValidationError("destination is required", detail={"field": "destination"})
        if query.kind == "flight" and not query.origin:
            raise ValidationError("origin is required for flight searches", detail={"field": "origin"})
        if query.date_out and query.date_return and query.date_return < query.date_out:
            raise ValidationError(
                "date_return must not be before date_out", detail={"field": "date_return"}
            )
        budget = query.budget
        if budget is not None:
            if budget.min is not None and budget.max is not None and budget.min > budget.max:
                raise ValidationError("budget.min must not exceed budget.max", detail={"field": "budget"})
            if normalize_currency_code(budget.currency) is None:
                raise ValidationError(
                    f"Unknown currency code {budget.currency!r}", detail={"field": "budget.currency"}
                )
        return query

    async def search(self, query: QueryInput) -> AggregatedResults:
        """
        Run one aggregated search.

        Only ValidationError escapes; provider failures and empty data come
        back as an AggregatedResults with no offers and per-provider
        status snapshots.
        """
        travel_query = self.validate_query(query)
        key = self.cache.cache_key(travel_query)

        with correlation_id_context():
            with self.metrics.track_search(cache_key=key, query_kind=travel_query.kind) as metrics:
                key_lock = self.cache.lock(key)
                # Identical concurrent searches queue here and reuse the first result
                async with key_lock:
                    cached = self.cache.get(key)
                    if cached is not None:
                        metrics.cache_hit = True
                        return cached
                    results = await self._aggregate(travel_query, metrics)
                    self.cache.put(key, results)
                    return results

    async def search_many(self, queries: Sequence[QueryInput]) -> List[AggregatedResults]:
        """Run several searches concurrently, returning results in input order."""
        return list(await asyncio.gather(*(self.search(q) for q in queries)))

    def _kinds_for(self, query: TravelQuery) -> List[str]:
        if query.kind != "all":
            return [query.kind]
        # Flight adapters need an origin; an open-ended "all" search skips them
        return [kind for kind in OFFER_KINDS if kind != "flight" or query.origin]

    async def _aggregate(self, query: TravelQuery, metrics: SearchMetrics) -> AggregatedResults:
        records, statuses = await self._fan_out(self.registry, query, metrics)

        if not records and self.fallback_registry:
            logger.info("[TravelAggregator] No provider returned data, trying fallback providers")
            metrics.used_fallback = True
            fallback_records, fallback_statuses = await self._fan_out(self.fallback_registry, query, metrics)
            records = fallback_records
            statuses = statuses + fallback_statuses

        offers, skipped = normalize_records(records, query, default_currency=self.settings.default_currency)
        currency = NormalizationContext.from_query(query, self.settings.default_currency).currency
        flights = merge_offers(offers["flight"])
        lodgings = merge_offers(offers["lodging"])
        transport = merge_offers(offers["transport"])
        experiences = merge_offers(offers["experience"])
        deals = rank_deals(flights, lodgings, transport, experiences, currency=currency)

        normalized_count = sum(len(items) for items in offers.values())
        merged_count = len(flights) + len(lodgings) + len(transport) + len(experiences)
        metrics.record_pipeline(
            raw=len(records),
            normalized=normalized_count,
            skipped=skipped,
            merged=merged_count,
            deals=len(deals),
        )

        results = AggregatedResults(
            flights=flights,
            lodgings=lodgings,
            transport=transport,
            experiences=experiences,
            deals=deals,
            sources_queried=frozenset(s.provider_id for s in statuses if s.result_count > 0),
            provider_statuses=statuses,
        )
        if results.is_empty():
            results = results.model_copy(
                update={"fallback_links": tuple(generate_search_links(query))}
            )

        logger.info(
            f"[TravelAggregator] {merged_count} offers from {len(results.sources_queried)} sources, "
            f"{len(deals)} deals"
        )
        return results

    async def _fan_out(
        self,
        registry: ProviderRegistry,
        query: TravelQuery,
        metrics: SearchMetrics,
    ) -> Tuple[List[RawProviderRecord], List[ProviderStatusSnapshot]]:
        jobs = []
        for kind in self._kinds_for(query):
            provider_query = build_provider_query(query, kind, self.settings.default_currency)
            for adapter in registry.adapters_for(kind):
                jobs.append((adapter, provider_query))
        if not jobs:
            logger.warning(f"[TravelAggregator] No adapters registered for {query.kind} searches")
            return [], []

        log_search_start(
            metrics.cache_key, query.kind, [adapter.provider_id for adapter, _ in jobs]
        )

        tasks: Dict[asyncio.Task, Tuple[Any, Any]] = {}
        for adapter, provider_query in jobs:
            task = asyncio.create_task(
                run_adapter_with_status(
                    adapter,
                    provider_query,
                    timeout_seconds=self.settings.provider_timeout_seconds,
                )
            )
            tasks[task] = (adapter, provider_query)

        done, pending = await asyncio.wait(tasks, timeout=self.settings.search_deadline_seconds)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning(
                f"[TravelAggregator] Search deadline of {self.settings.search_deadline_seconds}s "
                f"reached with {len(pending)} provider call(s) outstanding"
            )
            await asyncio.gather(*pending, return_exceptions=True)

        records: List[RawProviderRecord] = []
        statuses: List[ProviderStatusSnapshot] = []
        for task, (adapter, provider_query) in tasks.items():
            if task in done and not task.cancelled():
                task_records, status = task.result()
            else:
                task_records = []
                status = ProviderStatusSnapshot(
                    provider_id=adapter.provider_id,
                    kind=provider_query.kind,
                    status="timeout",
                    message="Search deadline exceeded",
                )
            records.extend(task_records)
            statuses.append(status)
            metrics.record_provider(
                provider_id=status.provider_id,
                status=status.status,
                result_count=status.result_count,
                latency_ms=float(status.latency_ms or 0),
                kind=status.kind,
                error_message=status.message if status.status != "ok" else None,
            )
        return records, statuses
