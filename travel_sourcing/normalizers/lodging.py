"""Lodging record normalizer.

Prices are reported per night. A provider that quotes the whole stay has its
total divided by the night count it reports, or by the query's date span.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from travel_sourcing.models import (
    LodgingOffer,
    Location,
    Rating,
    RawProviderRecord,
    SpecialOffer,
)
from travel_sourcing.normalizers.common import (
    NormalizationContext,
    booking_url,
    build_price,
    first,
    last_updated,
    make_offer_id,
    text,
    to_int,
)
from travel_sourcing.utils.currency import to_decimal

FIRST_TIME_MARKERS = ("first", "new user", "new customer")
DISCOUNT_MARKERS = ("discount", "%")
PACKAGE_MARKERS = ("package", "bundle")
LOYALTY_MARKERS = ("loyalty", "member", "rewards")


def classify_special_offer(description: str) -> Optional[str]:
    """Map free-text promotion copy to a special offer type, or None."""
    lowered = description.lower()
    if any(marker in lowered for marker in FIRST_TIME_MARKERS):
        return "first-time"
    if any(marker in lowered for marker in DISCOUNT_MARKERS):
        return "discount"
    if any(marker in lowered for marker in PACKAGE_MARKERS):
        return "package"
    if any(marker in lowered for marker in LOYALTY_MARKERS):
        return "loyalty"
    return None


def extract_special_offers(data: Dict[str, Any]) -> List[SpecialOffer]:
    offers: List[SpecialOffer] = []
    seen = set()

    def add(offer_type: str, description: str, discount: Optional[float] = None) -> None:
        key = (offer_type, description.lower())
        if key in seen:
            return
        seen.add(key)
        offers.append(SpecialOffer(type=offer_type, description=description, discount=discount))

    if data.get("firstTimeDeal") or data.get("first_time_deal"):
        add("first-time", "First-time booking discount available")

    discount = to_decimal(first(data, ("discount", "discountPercent", "discount_percent")))
    if discount is not None and discount > 0:
        add("discount", f"{discount.normalize():f}% off", float(discount))

    deals = first(data, ("specialDeals", "special_deals", "specialOffers", "special_offers", "deals"))
    if isinstance(deals, (str, dict)):
        deals = [deals]
    for deal in deals or []:
        if isinstance(deal, dict):
            description = text(first(deal, ("description", "text", "title", "name")))
            declared = deal.get("type")
            amount = to_decimal(deal.get("discount"))
            offer_type = declared if declared in ("first-time", "discount", "package", "loyalty") else None
            offer_type = offer_type or classify_special_offer(description)
            if offer_type and description:
                add(offer_type, description, float(amount) if amount is not None else None)
        else:
            description = text(deal)
            offer_type = classify_special_offer(description)
            if offer_type:
                add(offer_type, description)
    return offers


def _rating(data: Dict[str, Any]) -> Rating:
    raw = first(data, ("rating", "stars", "score", "reviewScore"))
    reviews: Any = first(data, ("reviews", "reviewCount", "review_count", "numberOfReviews"))
    if isinstance(raw, dict):
        reviews = first(raw, ("count", "reviews", "reviewCount"), reviews)
        raw = first(raw, ("value", "score", "average"))
    value = to_decimal(raw)
    score = float(value) if value is not None else 0.0
    if 5 < score <= 10:
        score = score / 2
    score = round(min(max(score, 0.0), 5.0), 2)
    review_count = len(reviews) if isinstance(reviews, list) else to_int(reviews)
    return Rating(value=score, review_count=review_count)


def _location(data: Dict[str, Any]) -> Location:
    raw = data.get("location")
    if isinstance(raw, dict):
        return Location(
            address=text(first(raw, ("address", "street", "line1"))),
            city=text(first(raw, ("city", "area", "district"))),
            country=text(first(raw, ("country", "countryCode"))),
        )
    return Location(
        address=text(data.get("address")),
        city=text(first(data, ("city",)), text(raw)),
        country=text(first(data, ("country", "countryCode"))),
    )


def _amenities(data: Dict[str, Any]) -> frozenset:
    raw = first(data, ("amenities", "facilities", "features"))
    if isinstance(raw, str):
        raw = raw.split(",")
    if not isinstance(raw, list):
        return frozenset()
    return frozenset(text(item) for item in raw if text(item))


def _images(data: Dict[str, Any]) -> List[str]:
    raw = first(data, ("images", "photos"))
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, list):
        return [text(item.get("url") if isinstance(item, dict) else item) for item in raw if item]
    image = first(data, ("image", "imageUrl", "thumbnail"))
    return [text(image)] if image else []


def _nightly_price_source(data: Dict[str, Any], ctx: NormalizationContext):
    """Return ``(raw_price, nights_divisor)`` for the lodging payload."""
    nightly = first(data, ("pricePerNight", "price_per_night", "nightlyPrice", "price"))
    if nightly is not None:
        return nightly, 1
    total = first(data, ("totalPrice", "total_price"))
    if total is None:
        return None, 1
    nights = to_int(data.get("nights")) or (ctx.nights or 0)
    return total, max(nights, 1)


def normalize_lodging(record: RawProviderRecord, ctx: NormalizationContext) -> LodgingOffer:
    """Normalize one provider hotel/rental payload into a LodgingOffer."""
    data = record.payload
    raw_price, nights = _nightly_price_source(data, ctx)
    price, original_price = build_price(raw_price, data.get("currency"), ctx, divisor=nights)
    return LodgingOffer(
        id=make_offer_id(record.source, data),
        price=price,
        original_price=original_price,
        source=record.source,
        booking_url=booking_url(data),
        last_updated=last_updated(data),
        name=text(first(data, ("name", "hotelName", "hotel_name", "title"))),
        location=_location(data),
        rating=_rating(data),
        amenities=_amenities(data),
        special_offers=extract_special_offers(data),
        cancellation_policy=text(
            first(data, ("cancellationPolicy", "cancellation_policy", "cancellation")),
            "Check booking site",
        ),
        images=_images(data),
    )
