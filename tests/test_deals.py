"""Tests for deal selection."""

from decimal import Decimal

from conftest import make_flight, make_lodging, make_transport
from travel_sourcing.deals import rank_deals, value_score
from travel_sourcing.models import SpecialOffer


def test_empty_sets_produce_no_deals():
    assert rank_deals() == []
    assert rank_deals([], [], [], []) == []


def test_lowest_price_per_kind():
    flights = [make_flight(price="500"), make_flight(price="0"), make_flight(price="430", source="kayak")]
    transport = [make_transport(price="30"), make_transport(price="25", destination="Pattaya")]

    deals = rank_deals(flights=flights, transport=transport)

    lowest = {d.category: d for d in deals if d.reason == "lowest_price"}
    assert set(lowest) == {"flight", "transport"}
    assert lowest["flight"].offer.price.amount == Decimal("430")
    assert lowest["transport"].offer.destination == "Pattaya"


def test_best_value_prefers_rating_reviews_per_price():
    lodgings = [
        make_lodging(name="Budget", price="40", rating=3.5, reviews=50),  # 4.375
        make_lodging(name="Loved", price="80", rating=4.8, reviews=900),  # 54
        make_lodging(name="Fancy", price="300", rating=5.0, reviews=1000),  # 16.7
        make_lodging(name="Unrated", price="20", rating=0.0, reviews=0),
    ]

    deals = rank_deals(lodgings=lodgings)

    best = [d for d in deals if d.reason == "best_value"]
    assert len(best) == 1
    assert best[0].offer.name == "Loved"
    assert [d.offer.name for d in deals if d.reason == "lowest_price"] == ["Unrated"]


def test_best_value_tie_goes_to_lower_price():
    lodgings = [
        make_lodging(name="Twice", price="100", rating=4.0, reviews=200),
        make_lodging(name="Once", price="50", rating=4.0, reviews=100),
    ]
    assert value_score(lodgings[0]) == value_score(lodgings[1])

    best = [d for d in rank_deals(lodgings=lodgings) if d.reason == "best_value"]
    assert best[0].offer.name == "Once"


def test_promotional_offers():
    promo = SpecialOffer(type="first-time", description="New user: 15% off")
    lodgings = [
        make_lodging(name="Promo One", special_offers=[promo]),
        make_lodging(name="Plain"),
        make_lodging(name="Promo Two", special_offers=[promo]),
    ]

    deals = [d for d in rank_deals(lodgings=lodgings) if d.reason == "promotional_offer"]

    assert [d.offer.name for d in deals] == ["Promo One", "Promo Two"]
    assert deals[0].reason_text == "New user: 15% off"
    assert all(d.category == "lodging" for d in deals)


def test_prices_are_only_compared_within_one_currency():
    lodgings = [
        make_lodging(name="Grand Palace Hotel", price="100", rating=4.5, reviews=200),
        make_lodging(name="Kuta Homestay", price="450000", rating=4.9, reviews=5000, currency="IDR"),
        make_lodging(name="Ubud Villa", price="80", rating=3.0, reviews=10),
    ]

    deals = rank_deals(lodgings=lodgings, currency="USD")

    by_reason = {d.reason: d.offer.name for d in deals}
    assert by_reason["lowest_price"] == "Ubud Villa"
    assert by_reason["best_value"] == "Grand Palace Hotel"


def test_unmatched_search_currency_falls_back_to_first_priced_offer():
    lodgings = [
        make_lodging(name="Kuta Homestay", price="450000", currency="IDR"),
        make_lodging(name="Seminyak Suites", price="900000", currency="IDR"),
        make_lodging(name="Grand Palace Hotel", price="100"),
    ]

    lowest = [d for d in rank_deals(lodgings=lodgings, currency="EUR") if d.reason == "lowest_price"]

    assert lowest[0].offer.name == "Kuta Homestay"
    assert lowest[0].offer.price.currency == "IDR"
