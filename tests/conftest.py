import os
import sys
from datetime import datetime, timezone
from decimal import Decimal

import pytest

# Allow running the suite from a checkout without installing the package
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from travel_sourcing.adapters import ProviderRegistry, StaticAdapter
from travel_sourcing.cache import ResultCache
from travel_sourcing.config import SourcingSettings
from travel_sourcing.models import (
    FlightOffer,
    FlightSegment,
    LodgingOffer,
    Price,
    Rating,
    TransportOffer,
    TravelQuery,
)


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_flight(
    source="skyscanner",
    price="500",
    origin="ATH",
    destination="BKK",
    departure=datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc),
    offer_id=None,
    updated=datetime(2026, 1, 1, tzinfo=timezone.utc),
):
    return FlightOffer(
        id=offer_id or f"{source}-{origin}-{destination}-{price}",
        price=Price(amount=Decimal(price), currency="USD"),
        source=source,
        last_updated=updated,
        segments=[FlightSegment(origin=origin, destination=destination, departure=departure)],
    )


def make_lodging(
    source="booking",
    name="Hotel Sukhumvit",
    price="100",
    rating=4.0,
    reviews=100,
    special_offers=(),
    updated=datetime(2026, 1, 1, tzinfo=timezone.utc),
    currency="USD",
):
    return LodgingOffer(
        id=f"{source}-{name}-{price}",
        price=Price(amount=Decimal(price), currency=currency),
        source=source,
        last_updated=updated,
        name=name,
        rating=Rating(value=rating, review_count=reviews),
        special_offers=tuple(special_offers),
    )


def make_transport(
    source="12go",
    origin="Bangkok",
    destination="Chiang Mai",
    price="30",
    kind="transport",
    name="",
    departure=datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc),
):
    return TransportOffer(
        kind=kind,
        id=f"{source}-{origin}-{destination}-{price}",
        price=Price(amount=Decimal(price), currency="USD"),
        source=source,
        name=name,
        origin=origin,
        destination=destination,
        departure=departure,
    )


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def cache(fake_clock):
    return ResultCache(ttl_seconds=3600, clock=fake_clock)


@pytest.fixture
def settings():
    return SourcingSettings(
        provider_timeout_seconds=1.0,
        search_deadline_seconds=2.0,
        use_mock_search="false",
    )


@pytest.fixture
def lodging_query():
    return TravelQuery(
        kind="lodging",
        destination="Bangkok",
        date_out="2026-03-01",
        date_return="2026-03-04",
    )


@pytest.fixture
def flight_query():
    return TravelQuery(kind="flight", origin="ATH", destination="BKK", date_out="2026-03-01")


@pytest.fixture
def hotel_registry():
    """Three lodging providers quoting the same hotel at different prices."""
    return ProviderRegistry(
        [
            StaticAdapter("booking", {"lodging": [{"id": "b1", "name": "Hotel Sukhumvit", "price": 150}]}),
            StaticAdapter("agoda", {"lodging": [{"id": "a1", "hotelName": "hotel sukhumvit", "price": 120}]}),
            StaticAdapter("expedia", {"lodging": [{"id": "e1", "name": "HOTEL SUKHUMVIT", "price": "100.00"}]}),
        ]
    )
