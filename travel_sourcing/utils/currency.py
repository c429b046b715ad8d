"""Currency normalization and conversion utilities."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Mapping, Optional

# Static reference rates, expressed as USD per one unit of the currency.
DEFAULT_CURRENCY_RATES: "Mapping[str, Decimal]" = {
    "USD": Decimal("1"),
    "EUR": Decimal("1.08"),
    "GBP": Decimal("1.27"),
    "CAD": Decimal("0.74"),
    "AUD": Decimal("0.66"),
    "JPY": Decimal("0.0067"),
    "CNY": Decimal("0.14"),
    "INR": Decimal("0.012"),
    "MXN": Decimal("0.058"),
    "THB": Decimal("0.028"),
    "SGD": Decimal("0.74"),
    "AED": Decimal("0.27"),
    "TRY": Decimal("0.031"),
    "LAK": Decimal("0.000046"),
    "VND": Decimal("0.000039"),
}


def normalize_currency_code(code: Optional[str]) -> Optional[str]:
    """Return an upper-cased ISO-4217 code, or None when the input is not one."""
    if not code:
        return None
    trimmed = str(code).strip().upper()
    if len(trimmed) != 3 or not trimmed.isalpha():
        return None
    return trimmed


def to_decimal(amount: Any) -> Optional[Decimal]:
    """Coerce provider numbers ("1,299.00", "$85", 85, 85.5) to Decimal."""
    if amount is None or isinstance(amount, bool):
        return None
    if isinstance(amount, Decimal):
        return amount if amount.is_finite() else None
    if isinstance(amount, int):
        return Decimal(amount)
    if isinstance(amount, float):
        value = Decimal(str(amount))
        return value if value.is_finite() else None
    cleaned = str(amount).strip().replace(",", "")
    cleaned = cleaned.lstrip("$€£¥฿ ")
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not value.is_finite():
        return None
    return value


def convert_currency(
    amount: Any,
    from_currency: Optional[str],
    to_currency: Optional[str] = "USD",
    *,
    rates: Mapping[str, Decimal] = DEFAULT_CURRENCY_RATES,
    precision: int = 2,
) -> Optional[Decimal]:
    """Convert an amount between currencies using static FX references.

    Args:
        amount: Numeric value to convert.
        from_currency: ISO currency code of the amount provided.
        to_currency: Target ISO currency code (default USD).
        rates: Mapping of currency -> USD-conversion multiplier.
        precision: Decimal places to round to (half-up).

    Returns None when the amount is not numeric, is too large to round at
    ``precision``, or either rate is unknown.
    """

    value = to_decimal(amount)
    if value is None:
        return None

    src = normalize_currency_code(from_currency) or "USD"
    dst = normalize_currency_code(to_currency) or "USD"

    if src != dst:
        src_rate = rates.get(src)
        dst_rate = rates.get(dst)
        if src_rate is None or dst_rate is None or src_rate <= 0 or dst_rate <= 0:
            return None
        value = value * src_rate / dst_rate

    try:
        return value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


__all__ = [
    "DEFAULT_CURRENCY_RATES",
    "convert_currency",
    "normalize_currency_code",
    "to_decimal",
]
