"""Money helpers: all amounts are ``Decimal`` rounded to cents."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Coerce ``value`` to a two-place Decimal (half-up)."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value, symbol: str = "€") -> str:
    return f"{symbol}{to_money(value):,.2f}"
