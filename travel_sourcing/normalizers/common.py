"""Field extraction helpers shared by the per-kind normalizers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional, Tuple

from travel_sourcing.models import Price, TravelQuery
from travel_sourcing.utils.currency import convert_currency, normalize_currency_code, to_decimal

FALLBACK_CURRENCY = "USD"


@dataclass(frozen=True)
class NormalizationContext:
    """What the normalizers need to know about the originating query."""

    currency: str = FALLBACK_CURRENCY
    nights: Optional[int] = None

    @classmethod
    def from_query(cls, query: Optional[TravelQuery], default_currency: str = FALLBACK_CURRENCY) -> "NormalizationContext":
        if query is None:
            return cls(currency=default_currency)
        currency = normalize_currency_code(query.currency) or default_currency
        nights = None
        if query.date_out and query.date_return:
            span = (query.date_return - query.date_out).days
            nights = span if span > 0 else None
        return cls(currency=currency, nights=nights)


def first(data: Dict[str, Any], keys: Iterable[str], default: Any = None) -> Any:
    """First present, non-empty value among ``keys``."""
    for key in keys:
        value = data.get(key)
        if value is None or value == "" or value == [] or value == {}:
            continue
        return value
    return default


def text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, dict):
        value = first(value, ("code", "name", "city", "value"), default)
    cleaned = str(value).strip()
    return cleaned or default


def to_int(value: Any, default: int = 0) -> int:
    number = to_decimal(value)
    if number is None or number < 0:
        return default
    return int(number)


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse ISO strings, dates, datetimes and epoch seconds; naive values are UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        value = first(value, ("datetime", "at", "time", "local"))
        if value is None:
            return None
    parsed: Optional[datetime] = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        raw = str(value).strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def minutes_between(start: Optional[datetime], end: Optional[datetime]) -> int:
    if start is None or end is None or end <= start:
        return 0
    return int((end - start).total_seconds() // 60)


def make_offer_id(source: str, data: Dict[str, Any]) -> str:
    raw_id = first(data, ("id", "offerId", "offer_id", "hotelId", "code"))
    if raw_id is not None and str(raw_id).strip():
        return f"{source}-{str(raw_id).strip()}"
    return f"{source}-{uuid.uuid4().hex[:12]}"


def booking_url(data: Dict[str, Any]) -> str:
    return text(first(data, ("url", "bookingUrl", "booking_url", "deeplink", "link")), "#")


def last_updated(data: Dict[str, Any]) -> datetime:
    stamp = parse_timestamp(first(data, ("lastUpdated", "last_updated", "updatedAt", "fetchedAt")))
    return stamp or datetime.now(timezone.utc)


def _split_price(raw: Any, currency_hint: Any) -> Tuple[Decimal, Optional[str]]:
    if isinstance(raw, dict):
        amount = to_decimal(first(raw, ("amount", "value", "total", "price")))
        currency = currency_hint or raw.get("currency") or raw.get("currencyCode")
    else:
        amount = to_decimal(raw)
        currency = currency_hint
    if amount is None or amount < 0:
        amount = Decimal("0")
    return amount, normalize_currency_code(currency)


def build_price(
    raw: Any, currency_hint: Any, ctx: NormalizationContext, divisor: int = 1
) -> Tuple[Price, Optional[Price]]:
    """
    Build the offer price in the context currency.

    Returns ``(price, original_price)``; ``original_price`` is set only when a
    conversion happened. Amounts in currencies without a known rate are kept
    in the provider currency.
    """
    amount, currency = _split_price(raw, currency_hint)
    currency = currency or ctx.currency or FALLBACK_CURRENCY
    try:
        if divisor > 1:
            amount = amount / divisor
        amount = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Out of range for two-decimal precision
        amount = Decimal("0.00")

    if currency == ctx.currency:
        return Price(amount=amount, currency=currency), None
    converted = convert_currency(amount, currency, ctx.currency)
    if converted is None:
        return Price(amount=amount, currency=currency), None
    return Price(amount=converted, currency=ctx.currency), Price(amount=amount, currency=currency)
