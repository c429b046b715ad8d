"""Flight record normalizer."""

from __future__ import annotations

from typing import Any, Dict, List

from travel_sourcing.models import FlightOffer, FlightSegment, RawProviderRecord
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
    to_bool,
    to_int,
)
from travel_sourcing.utils.duration import parse_duration_minutes

_ORIGIN_KEYS = ("fromCode", "from", "origin", "departureAirport", "origin_code")
_DESTINATION_KEYS = ("toCode", "to", "destination", "arrivalAirport", "destination_code")
_DEPARTURE_KEYS = ("departure", "departureTime", "departure_time", "departs_at")
_ARRIVAL_KEYS = ("arrival", "arrivalTime", "arrival_time", "arrives_at")


def _normalize_segment(raw: Dict[str, Any], fallback_carrier: str = "") -> FlightSegment:
    departure = parse_timestamp(first(raw, _DEPARTURE_KEYS))
    arrival = parse_timestamp(first(raw, _ARRIVAL_KEYS))
    duration = parse_duration_minutes(first(raw, ("duration", "durationMinutes", "duration_minutes")))
    if not duration:
        duration = minutes_between(departure, arrival)
    return FlightSegment(
        origin=text(first(raw, _ORIGIN_KEYS)),
        destination=text(first(raw, _DESTINATION_KEYS)),
        carrier=text(first(raw, ("airline", "carrier", "marketingCarrier", "operator")), fallback_carrier),
        flight_number=text(first(raw, ("flightNumber", "flight_number", "number"))),
        departure=departure,
        arrival=arrival,
        duration_minutes=duration,
    )


def _segments(data: Dict[str, Any]) -> List[FlightSegment]:
    carrier = text(first(data, ("airline", "carrier")))
    raw_segments = first(data, ("segments", "legs", "flights"))
    segments = []
    if isinstance(raw_segments, list):
        segments = [
            _normalize_segment(seg, carrier) for seg in raw_segments if isinstance(seg, dict)
        ]
    if not segments:
        # Flat itinerary: synthesize the single segment from top-level fields
        segments = [_normalize_segment(data, carrier)]
    return segments


def _layovers(data: Dict[str, Any], segments: List[FlightSegment]) -> int:
    raw = first(data, ("layovers", "stops"))
    if isinstance(raw, list):
        return len(raw)
    if raw is not None:
        return to_int(raw, len(segments) - 1)
    return len(segments) - 1


def _total_duration(data: Dict[str, Any], segments: List[FlightSegment]) -> int:
    total = parse_duration_minutes(first(data, ("totalDuration", "total_duration", "duration")))
    if total:
        return total
    # Spanning first departure to last arrival includes layover gaps
    spanned = minutes_between(segments[0].departure, segments[-1].arrival)
    if spanned:
        return spanned
    return sum(seg.duration_minutes for seg in segments)


def normalize_flight(record: RawProviderRecord, ctx: NormalizationContext) -> FlightOffer:
    """Normalize one provider flight payload into a FlightOffer."""
    data = record.payload
    segments = _segments(data)
    price, original_price = build_price(
        first(data, ("price", "totalPrice", "total_price", "amount")), data.get("currency"), ctx
    )
    return FlightOffer(
        id=make_offer_id(record.source, data),
        price=price,
        original_price=original_price,
        source=record.source,
        booking_url=booking_url(data),
        last_updated=last_updated(data),
        segments=segments,
        total_duration_minutes=_total_duration(data, segments),
        layovers=_layovers(data, segments),
        refundable=to_bool(data.get("refundable", False)),
        baggage_included=to_bool(first(data, ("baggageIncluded", "baggage_included", "baggage"), False)),
    )
