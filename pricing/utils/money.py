# pricing/utils/money.py


from __future__ import annotations
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")

_PER_UNIT_SUFFIX = re.compile(
    r"\s*(/|per)\s*(person|hour|day|item|guest|event)s?\b",
    re.IGNORECASE,
)
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def to_decimal(value, default: Decimal | None = Decimal("0")) -> Decimal | None:
    """
    Coerce numbers and numeric strings to Decimal.
    Floats go through str() so 0.1 stays 0.1.
    Returns `default` for None, blanks, booleans and garbage.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return d if d.is_finite() else default


def quantize_money(amount) -> Decimal:
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount) -> int:
    """
    Stripe expects integer minor units.
    Dollars are rounded half-up to the nearest cent.
    """
    return int((to_decimal(amount) * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(amount_minor: int) -> Decimal:
    return (Decimal(str(int(amount_minor))) / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_price(value) -> Decimal:
    """
    Read a price that may be stored as text: "$25.00/Person", "30 per hour",
    "1,200", or a range like "$20-30" (the lower end is used).
    """
    if value is None or isinstance(value, (int, float, Decimal)):
        return to_decimal(value)

    text = _PER_UNIT_SUFFIX.sub("", str(value)).replace(",", "").replace("$", "")
    match = _NUMBER.search(text)
    if not match:
        return Decimal("0")
    return to_decimal(match.group(0))
