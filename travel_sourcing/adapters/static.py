"""In-memory adapters: fixed payloads and deterministic demo data."""

from __future__ import annotations

import asyncio
import copy
import hashlib
import random
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Mapping, Sequence

from travel_sourcing.adapters.base import ProviderAdapter
from travel_sourcing.models import OfferKind, ProviderQuery, RawProviderRecord


class StaticAdapter(ProviderAdapter):
    """Serves a fixed list of payloads per offer kind."""

    def __init__(
        self,
        provider_id: str,
        payloads: Mapping[OfferKind, Sequence[Dict[str, Any]]],
        *,
        delay: float = 0.0,
    ):
        self.provider_id = provider_id
        self.payloads = {kind: list(items) for kind, items in payloads.items()}
        self.kinds = tuple(self.payloads.keys())
        self.delay = delay
        self.calls: List[ProviderQuery] = []

    async def search(self, query: ProviderQuery) -> List[RawProviderRecord]:
        self.calls.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.wrap(copy.deepcopy(self.payloads.get(query.kind, [])), query.kind)


class MockTravelAdapter(ProviderAdapter):
    """Mock provider for demos and local runs - sample data seeded by the query."""

    kinds = ("flight", "lodging", "transport", "experience")

    _CARRIERS = ["TG", "QR", "EK", "SQ", "TK", "LH", "A3"]
    _HOTEL_PREFIXES = ["Grand", "Royal", "Riverside", "Old Town", "Harbour", "Garden"]
    _HOTEL_SUFFIXES = ["Palace Hotel", "Suites", "Boutique Inn", "Residence", "Hostel"]
    _OPERATORS = ["FlixBus", "12Go", "Rail Europe", "Trainline", "Seajets"]
    _ACTIVITIES = ["Walking Tour", "Cooking Class", "Temple Visit", "Boat Trip", "Night Market Tour"]

    def __init__(self, provider_id: str = "mock_travel", *, max_results: int = 6):
        self.provider_id = provider_id
        self.max_results = max_results

    def _rng(self, query: ProviderQuery) -> random.Random:
        seed_text = f"{self.provider_id}|{query.kind}|{query.origin}|{query.destination}|{query.date_out}"
        seed = int(hashlib.md5(seed_text.encode()).hexdigest()[:8], 16)
        return random.Random(seed)

    async def search(self, query: ProviderQuery) -> List[RawProviderRecord]:
        rng = self._rng(query)
        day = query.date_out or date.today()
        builder = {
            "flight": self._flight,
            "lodging": self._lodging,
            "transport": self._transport,
            "experience": self._experience,
        }[query.kind]
        payloads = [builder(rng, query, day, i) for i in range(rng.randint(2, self.max_results))]
        return self.wrap(payloads, query.kind)

    def _flight(self, rng: random.Random, query: ProviderQuery, day: date, i: int) -> Dict[str, Any]:
        carrier = rng.choice(self._CARRIERS)
        departure = datetime.combine(day, time(hour=rng.randint(0, 23), minute=rng.choice([0, 15, 30, 45])))
        minutes = rng.randint(90, 900)
        return {
            "id": f"{carrier}{100 + i}",
            "price": round(rng.uniform(90, 1400), 2),
            "currency": query.currency,
            "segments": [
                {
                    "fromCode": (query.origin or "").upper(),
                    "toCode": query.destination.upper(),
                    "carrier": carrier,
                    "flightNumber": f"{carrier}{rng.randint(100, 999)}",
                    "departure": departure.isoformat(),
                    "arrival": (departure + timedelta(minutes=minutes)).isoformat(),
                    "duration": f"{minutes // 60}h {minutes % 60}m",
                }
            ],
            "url": f"https://example.com/flights/{carrier}{100 + i}",
        }

    def _lodging(self, rng: random.Random, query: ProviderQuery, day: date, i: int) -> Dict[str, Any]:
        name = f"{rng.choice(self._HOTEL_PREFIXES)} {rng.choice(self._HOTEL_SUFFIXES)}"
        deals = ["First booking 10% off"] if rng.random() > 0.7 else []
        return {
            "hotelName": name,
            "city": query.destination,
            "price": round(rng.uniform(25, 400), 2),
            "currency": query.currency,
            "rating": round(rng.uniform(3.0, 5.0), 1),
            "reviewCount": rng.randint(5, 4000),
            "amenities": rng.sample(["wifi", "pool", "breakfast", "gym", "parking", "spa"], 3),
            "specialDeals": deals,
            "url": f"https://example.com/hotels/{i}",
        }

    def _transport(self, rng: random.Random, query: ProviderQuery, day: date, i: int) -> Dict[str, Any]:
        departure = datetime.combine(day, time(hour=rng.randint(5, 22)))
        return {
            "type": rng.choice(["bus", "train", "ferry"]),
            "from": query.origin or "",
            "to": query.destination,
            "operator": rng.choice(self._OPERATORS),
            "departureTime": departure.isoformat(),
            "duration": rng.randint(45, 720),
            "price": round(rng.uniform(5, 120), 2),
            "currency": query.currency,
            "url": f"https://example.com/transport/{i}",
        }

    def _experience(self, rng: random.Random, query: ProviderQuery, day: date, i: int) -> Dict[str, Any]:
        return {
            "name": f"{query.destination} {rng.choice(self._ACTIVITIES)}",
            "location": query.destination,
            "date": day.isoformat(),
            "price": round(rng.uniform(10, 150), 2),
            "currency": query.currency,
            "duration": f"{rng.randint(1, 8)}h",
            "category": "tour",
            "url": f"https://example.com/experiences/{i}",
        }
