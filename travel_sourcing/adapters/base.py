"""Provider adapter contract and per-kind query building."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

from travel_sourcing.models import OfferKind, ProviderQuery, RawProviderRecord, TravelQuery

DEFAULT_CURRENCY = "USD"


def build_provider_query(
    query: TravelQuery, kind: OfferKind, default_currency: str = DEFAULT_CURRENCY
) -> ProviderQuery:
    """Slice a TravelQuery down to what an adapter for ``kind`` needs."""
    budget = query.budget
    return ProviderQuery(
        kind=kind,
        origin=query.origin if kind in ("flight", "transport") else None,
        destination=query.destination,
        date_out=query.date_out,
        date_return=query.date_return,
        party_size=query.party_size,
        flexible_dates=query.flexible_dates,
        currency=budget.currency if budget else default_currency,
        min_price=budget.min if budget else None,
        max_price=budget.max if budget else None,
    )


class ProviderAdapter(ABC):
    """
    One external data source behind the uniform search capability.

    ``search`` returns provider-shaped records tagged with this adapter's
    ``provider_id``; it returns an empty list when the provider has nothing
    and raises ProviderError only for transport, auth or rate-limit failures.
    """

    provider_id: str
    kinds: Tuple[OfferKind, ...] = ()

    @abstractmethod
    async def search(self, query: ProviderQuery) -> List[RawProviderRecord]:
        pass

    def wrap(self, payloads: Iterable[Dict[str, Any]], kind: Optional[str] = None) -> List[RawProviderRecord]:
        """Tag raw payload dicts with this adapter's source id."""
        records: List[RawProviderRecord] = []
        for payload in payloads:
            if not isinstance(payload, dict):
                continue
            records.append(
                RawProviderRecord(source=self.provider_id, kind=kind or payload.get("kind", ""), payload=payload)
            )
        return records

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.provider_id} kinds={list(self.kinds)}>"
