"""
Cross-provider deduplication.

Offers that describe the same itinerary or property share a fingerprint. Each
fingerprint group, per price currency, collapses to its cheapest member (the
representative), and multi-member groups record how much cheaper the
representative is than the most expensive duplicate.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Sequence, Tuple

from travel_sourcing.models import FlightOffer, LodgingOffer, TransportOffer

logger = logging.getLogger(__name__)


def _day(value) -> str:
    return value.date().isoformat() if value is not None else ""


def fingerprint(offer) -> str:
    """Identity of the underlying itinerary or property, independent of source."""
    if isinstance(offer, FlightOffer):
        first_leg, last_leg = offer.segments[0], offer.segments[-1]
        return "|".join(
            (first_leg.origin.lower(), last_leg.destination.lower(), _day(first_leg.departure))
        )
    if isinstance(offer, LodgingOffer):
        return offer.name.strip().lower()
    if isinstance(offer, TransportOffer) and offer.kind == "experience":
        return "|".join((offer.name.strip().lower(), offer.origin.lower(), _day(offer.departure)))
    if isinstance(offer, TransportOffer):
        return "|".join((offer.origin.lower(), offer.destination.lower(), _day(offer.departure)))
    raise TypeError(f"Cannot fingerprint {type(offer).__name__}")


def _representative_key(offer):
    return (offer.price.amount, offer.last_updated, offer.source)


def discount_percent(high: Decimal, low: Decimal) -> int:
    """round((high - low) / high * 100), half-up; 0 when high is 0."""
    if high <= 0:
        return 0
    ratio = (high - low) / high * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass
class MergeGroup:
    """Duplicates of one itinerary or property quoted in a single currency."""

    fingerprint: str
    currency: str = ""
    members: List = field(default_factory=list)

    @property
    def representative(self):
        chosen = min(self.members, key=_representative_key)
        if len(self.members) < 2:
            return chosen
        prices = [m.price.amount for m in self.members]
        return chosen.model_copy(
            update={"discount_percent": discount_percent(max(prices), min(prices))}
        )

    @property
    def alternates(self) -> List:
        """Every member except the representative, in discovery order."""
        chosen = min(self.members, key=_representative_key)
        return [m for m in self.members if m is not chosen]


def group_offers(offers: Sequence) -> List[MergeGroup]:
    """
    Group offers by fingerprint in order of first appearance.

    Quotes left in different currencies (no FX rate to reconcile them) land
    in separate groups, so their amounts are never ranked against each other.
    """
    groups: Dict[Tuple[str, str], MergeGroup] = {}
    for offer in offers:
        key = (fingerprint(offer), offer.price.currency)
        group = groups.get(key)
        if group is None:
            group = groups[key] = MergeGroup(fingerprint=key[0], currency=key[1])
        group.members.append(offer)
    return list(groups.values())


def merge_offers(offers: Sequence) -> List:
    """Collapse duplicates to one representative per fingerprint and currency."""
    groups = group_offers(offers)
    merged = [group.representative for group in groups]
    if len(merged) < len(offers):
        logger.debug(f"[Merger] Collapsed {len(offers)} offers into {len(merged)} groups")
    return merged
