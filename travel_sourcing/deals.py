"""
Deal selection over merged offers.

Reasons:
  - lowest_price: cheapest priced representative of each offer kind
  - best_value: lodging with the highest rating x reviews per unit of price
  - promotional_offer: every lodging carrying a first-time booking offer
"""

import logging
from decimal import Decimal
from typing import List, Optional, Sequence

from travel_sourcing.models import Deal, LodgingOffer

logger = logging.getLogger(__name__)

_KIND_LABELS = {
    "flight": "flight",
    "lodging": "stay",
    "transport": "transport option",
    "experience": "experience",
}


def _comparable(offers: Sequence, currency: Optional[str]) -> List:
    """Priced offers in ``currency``, or in the first priced offer's currency when none use it."""
    priced = [o for o in offers if o.price.amount > 0]
    if not priced:
        return []
    currencies = {o.price.currency for o in priced}
    target = currency if currency in currencies else priced[0].price.currency
    return [o for o in priced if o.price.currency == target]


def _lowest_price(offers: Sequence, currency: Optional[str]) -> Optional[Deal]:
    priced = _comparable(offers, currency)
    if not priced:
        return None
    # min() keeps the first of equal prices, i.e. discovery order
    cheapest = min(priced, key=lambda o: o.price.amount)
    label = _KIND_LABELS.get(cheapest.kind, cheapest.kind)
    return Deal(
        category=cheapest.kind,
        offer=cheapest,
        reason="lowest_price",
        reason_text=f"Lowest price {label}: {cheapest.price.currency} {cheapest.price.amount}",
        discount_percent=cheapest.discount_percent,
    )


def value_score(offer: LodgingOffer) -> Decimal:
    """rating x review_count / price; 0 for unpriced offers."""
    if offer.price.amount <= 0:
        return Decimal("0")
    quality = Decimal(str(offer.rating.value)) * offer.rating.review_count
    return quality / offer.price.amount


def _best_value(lodgings: Sequence[LodgingOffer], currency: Optional[str]) -> Optional[Deal]:
    candidates = [(value_score(o), o) for o in _comparable(lodgings, currency)]
    candidates = [(score, o) for score, o in candidates if score > 0]
    if not candidates:
        return None
    _, best = min(candidates, key=lambda pair: (-pair[0], pair[1].price.amount))
    return Deal(
        category="lodging",
        offer=best,
        reason="best_value",
        reason_text=(
            f"Best value: {best.rating.value:.1f} stars from "
            f"{best.rating.review_count} reviews"
        ),
        discount_percent=best.discount_percent,
    )


def _promotional(lodgings: Sequence[LodgingOffer]) -> List[Deal]:
    deals = []
    for lodging in lodgings:
        if not lodging.has_first_time_offer():
            continue
        promo = next(o for o in lodging.special_offers if o.type == "first-time")
        deals.append(
            Deal(
                category="lodging",
                offer=lodging,
                reason="promotional_offer",
                reason_text=promo.description,
                discount_percent=lodging.discount_percent,
            )
        )
    return deals


def rank_deals(
    flights: Sequence = (),
    lodgings: Sequence[LodgingOffer] = (),
    transport: Sequence = (),
    experiences: Sequence = (),
    currency: Optional[str] = None,
) -> List[Deal]:
    """
    Pick highlighted deals from merged offer sets.

    Empty inputs contribute nothing. Output order: lowest-price deals by kind
    (flight, lodging, transport, experience), then best value, then
    promotional offers. Price comparisons only span offers in one currency,
    preferring ``currency`` (the search currency) where offers carry it.
    """
    deals: List[Deal] = []
    for offers in (flights, lodgings, transport, experiences):
        deal = _lowest_price(offers, currency)
        if deal is not None:
            deals.append(deal)

    best = _best_value(lodgings, currency)
    if best is not None:
        deals.append(best)
    deals.extend(_promotional(lodgings))

    if deals:
        logger.info(f"[Deals] Selected {len(deals)} deals")
    return deals
