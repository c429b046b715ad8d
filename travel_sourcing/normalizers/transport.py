"""Ground transport and experience record normalizer."""

from __future__ import annotations

from travel_sourcing.models import RawProviderRecord, TransportOffer
from travel_sourcing.normalizers.common import (
    NormalizationContext,
    booking_url,
    build_price,
    first,
    last_updated,
    make_offer_id,
    minutes_between,
    parse_timestamp,
    text,
)
from travel_sourcing.utils.duration import parse_duration_minutes


def _normalize(record: RawProviderRecord, ctx: NormalizationContext, kind: str) -> TransportOffer:
    data = record.payload
    origin = text(first(data, ("fromCode", "from", "origin", "location", "city")))
    destination = text(first(data, ("toCode", "to", "destination")))
    departure = parse_timestamp(
        first(data, ("departure", "departureTime", "departure_time", "startTime", "date"))
    )
    arrival = parse_timestamp(first(data, ("arrival", "arrivalTime", "arrival_time", "endTime")))
    duration = parse_duration_minutes(first(data, ("duration", "durationMinutes", "duration_minutes")))
    if not duration:
        duration = minutes_between(departure, arrival)

    name = text(first(data, ("name", "title", "activity")))
    if not name and origin and destination:
        name = f"{origin} to {destination}"
    default_category = "bus" if kind == "transport" else "activity"

    price, original_price = build_price(
        first(data, ("price", "totalPrice", "total_price", "amount")), data.get("currency"), ctx
    )
    return TransportOffer(
        kind=kind,
        id=make_offer_id(record.source, data),
        price=price,
        original_price=original_price,
        source=record.source,
        booking_url=booking_url(data),
        last_updated=last_updated(data),
        name=name,
        operator=text(first(data, ("operator", "company", "provider", "carrier"))),
        category=text(first(data, ("type", "category", "mode")), default_category).lower(),
        origin=origin,
        destination=destination,
        departure=departure,
        arrival=arrival,
        duration_minutes=duration,
    )


def normalize_transport(record: RawProviderRecord, ctx: NormalizationContext) -> TransportOffer:
    return _normalize(record, ctx, "transport")


def normalize_experience(record: RawProviderRecord, ctx: NormalizationContext) -> TransportOffer:
    return _normalize(record, ctx, "experience")
