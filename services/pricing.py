"""Price handling for the catalog. All amounts are integer USD cents."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

MAX_CENTS = 2**53 - 1


def normalize_price(value) -> int:
    """
    Convert admin input to cents.

    Strings and floats are dollar amounts (``"19.99"`` and ``19.99`` both give
    1999); integers are already cents and pass through unchanged.
    Raises ``ValueError`` for anything else.
    """
    if isinstance(value, bool):
        raise ValueError("Invalid price value")
    if isinstance(value, int):
        return value
    if isinstance(value, (float, str, Decimal)):
        try:
            d = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError("Invalid price value")
        if not d.is_finite():
            raise ValueError("Invalid price value")
        return int((d * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    raise ValueError("Invalid price value")


def validate_price(cents) -> bool:
    return isinstance(cents, int) and not isinstance(cents, bool) and 0 <= cents <= MAX_CENTS


def format_cents(cents: int) -> str:
    return f"${cents / 100:,.2f}"


def percent_of(cents: int, rate) -> int:
    """Round-half-up share of ``cents`` at ``rate`` percent (tax)."""
    d = Decimal(cents) * Decimal(str(rate)) / Decimal(100)
    return int(d.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def floor_percent_of(cents: int, rate) -> int:
    """Floored share of ``cents`` at ``rate`` percent (affiliate commission)."""
    return int(Decimal(cents) * Decimal(str(rate)) // Decimal(100))
