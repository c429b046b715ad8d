"""Tests for provider record normalization."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from travel_sourcing.exceptions import NormalizationError
from travel_sourcing.models import (
    FlightOffer,
    LodgingOffer,
    RawProviderRecord,
    TransportOffer,
    TravelQuery,
)
from travel_sourcing.normalizers import (
    NORMALIZER_REGISTRY,
    classify_special_offer,
    normalize_record,
    normalize_records,
)


def _record(kind, payload, source="provider_a"):
    return RawProviderRecord(source=source, kind=kind, payload=payload)


class TestFlightNormalizer:
    def test_segments_and_durations(self):
        offer = normalize_record(
            _record(
                "flight",
                {
                    "id": "TG921",
                    "price": 480,
                    "currency": "USD",
                    "segments": [
                        {
                            "from": {"code": "ATH"},
                            "toCode": "DOH",
                            "airline": "QR",
                            "flightNumber": "QR204",
                            "departure": "2026-03-01T09:00:00Z",
                            "arrival": "2026-03-01T14:00:00Z",
                        },
                        {
                            "fromCode": "DOH",
                            "toCode": "BKK",
                            "carrier": "QR",
                            "departure": "2026-03-01T16:00:00Z",
                            "arrival": "2026-03-02T02:30:00Z",
                            "duration": "6h 30m",
                        },
                    ],
                },
            )
        )

        assert isinstance(offer, FlightOffer)
        assert offer.id == "provider_a-TG921"
        assert offer.price.amount == Decimal("480.00")
        assert [s.origin for s in offer.segments] == ["ATH", "DOH"]
        assert offer.segments[-1].destination == "BKK"
        assert offer.segments[0].duration_minutes == 300
        assert offer.segments[1].duration_minutes == 390
        assert offer.layovers == 1
        # First departure to last arrival, including the layover
        assert offer.total_duration_minutes == 17 * 60 + 30

    def test_flat_flight_gets_a_synthesized_segment(self):
        offer = normalize_record(
            _record(
                "flight",
                {
                    "from": "ATH",
                    "to": "BKK",
                    "departureTime": "2026-03-01T09:30:00",
                    "duration": "PT11H",
                    "price": "500",
                },
            )
        )

        assert len(offer.segments) == 1
        segment = offer.segments[0]
        assert (segment.origin, segment.destination) == ("ATH", "BKK")
        assert segment.departure == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        assert offer.total_duration_minutes == 660
        assert offer.layovers == 0

    def test_missing_fields_default(self):
        offer = normalize_record(_record("flight", {}))

        assert offer.price.amount == Decimal("0.00")
        assert offer.price.currency == "USD"
        assert offer.booking_url == "#"
        assert offer.id.startswith("provider_a-")
        assert len(offer.id) > len("provider_a-")

    def test_generated_ids_are_unique(self):
        first = normalize_record(_record("flight", {}))
        second = normalize_record(_record("flight", {}))
        assert first.id != second.id


class TestLodgingNormalizer:
    def test_basic_fields(self):
        offer = normalize_record(
            _record(
                "hotel",
                {
                    "hotelName": "Riverside Suites",
                    "location": {"address": "12 Charoen Krung", "city": "Bangkok", "country": "TH"},
                    "price": 85,
                    "rating": 8.6,
                    "reviews": 320,
                    "amenities": ["wifi", "pool", " wifi "],
                    "specialDeals": ["New user: 15% off first booking", "Free breakfast"],
                    "url": "https://example.com/riverside",
                },
            )
        )

        assert isinstance(offer, LodgingOffer)
        assert offer.name == "Riverside Suites"
        assert offer.location.city == "Bangkok"
        assert offer.rating.value == pytest.approx(4.3)
        assert offer.rating.review_count == 320
        assert offer.amenities == frozenset({"wifi", "pool"})
        assert offer.has_first_time_offer()
        assert [o.type for o in offer.special_offers] == ["first-time"]
        assert offer.booking_url == "https://example.com/riverside"

    def test_total_price_divided_by_reported_nights(self):
        offer = normalize_record(_record("lodging", {"name": "Inn", "totalPrice": 300, "nights": 3}))
        assert offer.price.amount == Decimal("100.00")

    def test_total_price_divided_by_query_nights(self, lodging_query):
        offer = normalize_record(_record("lodging", {"name": "Inn", "total_price": 250}), lodging_query)
        assert offer.price.amount == Decimal("83.33")

    def test_first_time_flag_and_discount(self):
        offer = normalize_record(
            _record("lodging", {"name": "Inn", "price": 50, "firstTimeDeal": True, "discount": 20})
        )
        types = {o.type for o in offer.special_offers}
        assert types == {"first-time", "discount"}
        discount = next(o for o in offer.special_offers if o.type == "discount")
        assert discount.discount == 20.0
        assert discount.description == "20% off"

    def test_rating_clamped(self):
        offer = normalize_record(_record("lodging", {"name": "Inn", "rating": 42}))
        assert offer.rating.value == 5.0


class TestTransportNormalizer:
    def test_transport(self):
        offer = normalize_record(
            _record(
                "transport",
                {
                    "type": "Train",
                    "from": "Bangkok",
                    "to": "Chiang Mai",
                    "operator": "SRT",
                    "departureTime": "2026-03-02T18:10:00+07:00",
                    "arrivalTime": "2026-03-03T07:15:00+07:00",
                    "price": 45,
                },
            )
        )

        assert isinstance(offer, TransportOffer)
        assert offer.kind == "transport"
        assert offer.category == "train"
        assert offer.name == "Bangkok to Chiang Mai"
        assert offer.duration_minutes == 13 * 60 + 5

    def test_experience(self):
        offer = normalize_record(
            _record(
                "activity",
                {"name": "Night Market Tour", "location": "Bangkok", "date": "2026-03-02", "duration": "3h"},
            )
        )
        assert offer.kind == "experience"
        assert offer.origin == "Bangkok"
        assert offer.duration_minutes == 180
        assert offer.category == "activity"


class TestCurrencyConversion:
    def test_converted_into_budget_currency(self):
        query = TravelQuery(destination="Paris", budget={"currency": "EUR"})
        offer = normalize_record(_record("lodging", {"name": "Inn", "price": 108, "currency": "USD"}), query)

        assert offer.price.currency == "EUR"
        assert offer.price.amount == Decimal("100.00")
        assert offer.original_price.amount == Decimal("108.00")
        assert offer.original_price.currency == "USD"

    def test_unknown_currency_kept(self):
        offer = normalize_record(_record("lodging", {"name": "Inn", "price": 100, "currency": "XYZ"}))
        assert offer.price.currency == "XYZ"
        assert offer.original_price is None

    def test_missing_currency_uses_query_currency(self):
        query = TravelQuery(destination="Paris", budget={"currency": "EUR"})
        offer = normalize_record(_record("lodging", {"name": "Inn", "price": 90}), query)
        assert offer.price.currency == "EUR"
        assert offer.price.amount == Decimal("90.00")
        assert offer.original_price is None


def test_unknown_kind_raises():
    with pytest.raises(NormalizationError) as exc_info:
        normalize_record(_record("spaceship", {"price": 1}))
    assert exc_info.value.detail == {"kind": "spaceship", "source": "provider_a"}


def test_normalize_records_skips_bad_records():
    records = [
        _record("lodging", {"name": "Inn", "price": 50}),
        _record("spaceship", {"price": 1}),
        _record("transport", {"from": "A", "to": "B", "price": 10}),
    ]

    offers, skipped = normalize_records(records)

    assert skipped == 1
    assert len(offers["lodging"]) == 1
    assert len(offers["transport"]) == 1
    assert offers["flight"] == []
    assert offers["experience"] == []


@pytest.mark.parametrize(
    "text, expected",
    [
        ("First booking 10% off", "first-time"),
        ("New customer special", "first-time"),
        ("Summer discount", "discount"),
        ("Save 25%", "discount"),
        ("Flight + hotel package", "package"),
        ("Members get late checkout", "loyalty"),
        ("Free breakfast", None),
    ],
)
def test_classify_special_offer(text, expected):
    assert classify_special_offer(text) == expected


class TestOutOfRangeNumbers:
    def test_price_beyond_cent_precision_becomes_unpriced(self):
        offer = normalize_record(_record("lodging", {"name": "B", "price": "1e30"}))
        assert offer.price.amount == Decimal("0.00")
        assert offer.original_price is None

    def test_huge_foreign_price_is_kept_unconverted(self):
        offer = normalize_record(
            _record("lodging", {"name": "B", "price": "9e25", "currency": "GBP"})
        )
        assert offer.price.currency == "GBP"
        assert offer.price.amount == Decimal("9e25")
        assert offer.original_price is None

    def test_garbage_numbers_do_not_drop_records(self):
        records = [
            _record("lodging", {"name": "B", "price": "1e30"}),
            _record("lodging", {"name": "C", "totalPrice": 1e300, "nights": "1e40", "rating": 1e308}),
            _record(
                "flight",
                {
                    "origin": "ATH",
                    "destination": "BKK",
                    "price": 10**40,
                    "duration": "9" * 400,
                    "departure": 1e20,
                },
            ),
            _record("lodging", {"name": "Inn", "price": 50}),
        ]

        offers, skipped = normalize_records(records)

        assert skipped == 0
        assert [o.name for o in offers["lodging"]] == ["B", "C", "Inn"]
        assert offers["lodging"][1].rating.value == 5.0
        flight = offers["flight"][0]
        assert flight.price.amount == Decimal("0.00")
        assert flight.total_duration_minutes == 0
        assert offers["lodging"][2].price.amount == Decimal("50.00")


def test_normalize_records_skips_records_a_normalizer_cannot_handle(monkeypatch):
    def broken(record, ctx):
        raise ArithmeticError("overflow")

    monkeypatch.setitem(NORMALIZER_REGISTRY, "transport", broken)
    records = [
        _record("transport", {"from": "A", "to": "B", "price": 10}),
        _record("lodging", {"name": "Inn", "price": 50}),
    ]

    offers, skipped = normalize_records(records)

    assert skipped == 1
    assert offers["transport"] == []
    assert len(offers["lodging"]) == 1
