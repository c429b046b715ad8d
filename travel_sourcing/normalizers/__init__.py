"""Record normalizers: provider-shaped payloads into typed offers."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from travel_sourcing.exceptions import NormalizationError
from travel_sourcing.models import OFFER_KINDS, RawProviderRecord, TravelQuery
from travel_sourcing.normalizers.common import NormalizationContext
from travel_sourcing.normalizers.flight import normalize_flight
from travel_sourcing.normalizers.lodging import (
    classify_special_offer,
    extract_special_offers,
    normalize_lodging,
)
from travel_sourcing.normalizers.transport import normalize_experience, normalize_transport

logger = logging.getLogger(__name__)

NORMALIZER_REGISTRY: Dict[str, Callable] = {
    "flight": normalize_flight,
    "lodging": normalize_lodging,
    "transport": normalize_transport,
    "experience": normalize_experience,
}

# Common provider spellings of the offer kinds
_KIND_ALIASES = {
    "flights": "flight",
    "hotel": "lodging",
    "hotels": "lodging",
    "accommodation": "lodging",
    "rental": "lodging",
    "bus": "transport",
    "train": "transport",
    "ferry": "transport",
    "activity": "experience",
    "activities": "experience",
    "experiences": "experience",
    "tour": "experience",
}


def resolve_kind(kind: str) -> Optional[str]:
    lowered = (kind or "").strip().lower()
    if lowered in OFFER_KINDS:
        return lowered
    return _KIND_ALIASES.get(lowered)


def normalize_record(
    record: RawProviderRecord,
    query: Optional[TravelQuery] = None,
    *,
    context: Optional[NormalizationContext] = None,
):
    """
    Normalize a single raw record into its offer variant.

    Raises:
        NormalizationError: the record's kind is not a known offer kind.
    """
    ctx = context or NormalizationContext.from_query(query)
    kind = resolve_kind(record.kind)
    if kind is None:
        raise NormalizationError(
            f"Unknown offer kind: {record.kind!r}",
            detail={"kind": record.kind},
            source=record.source,
        )
    return NORMALIZER_REGISTRY[kind](record, ctx)


def normalize_records(
    records: Iterable[RawProviderRecord],
    query: Optional[TravelQuery] = None,
    *,
    default_currency: str = "USD",
) -> Tuple[Dict[str, List], int]:
    """
    Normalize a batch, skipping records that cannot be mapped.

    Returns ``(offers_by_kind, skipped_count)``; the dict holds every offer
    kind, possibly with empty lists.
    """
    ctx = NormalizationContext.from_query(query, default_currency=default_currency)
    offers: Dict[str, List] = {kind: [] for kind in OFFER_KINDS}
    skipped = 0
    for record in records:
        try:
            offer = normalize_record(record, context=ctx)
        except NormalizationError as e:
            skipped += 1
            logger.warning(f"[Normalizer] Skipping record from {record.source}: {e.message}")
            continue
        except PydanticValidationError as e:
            skipped += 1
            logger.warning(
                f"[Normalizer] Skipping malformed {record.kind} record from {record.source}: "
                f"{e.error_count()} validation error(s)"
            )
            continue
        except Exception as e:
            skipped += 1
            logger.warning(
                f"[Normalizer] Skipping unreadable {record.kind} record from {record.source}: "
                f"{type(e).__name__}: {e}",
                exc_info=True,
            )
            continue
        offers[offer.kind].append(offer)
    return offers, skipped


__all__ = [
    "NORMALIZER_REGISTRY",
    "NormalizationContext",
    "classify_special_offer",
    "extract_special_offers",
    "normalize_experience",
    "normalize_flight",
    "normalize_lodging",
    "normalize_record",
    "normalize_records",
    "normalize_transport",
    "resolve_kind",
]
