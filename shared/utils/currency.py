"""
Fixed-rate conversion from the base currency (INR) to the settlement currency.

Conversions return unrounded Decimals. Callers round once with to_money()
when the amount is persisted, never re-deriving totals from rounded values;
line amounts are then carved out of the rounded total with allocate().
"""
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

from shared.errors import ValidationError

BASE_CURRENCY = "INR"
SUPPORTED_CURRENCIES = ("INR", "USD")

# 1 USD = ~83 INR
USD_TO_INR_RATE = Decimal("83")
INR_TO_USD_RATE = Decimal(1) / USD_TO_INR_RATE

_CENT = Decimal("0.01")


def rate_for(currency: str) -> Decimal:
    """INR per one unit of ``currency``."""
    if currency == BASE_CURRENCY:
        return Decimal(1)
    if currency == "USD":
        return USD_TO_INR_RATE
    raise ValidationError(f"Unsupported currency: {currency}")


def convert(amount_base, currency: str) -> Decimal:
    amount = Decimal(str(amount_base))
    if currency == BASE_CURRENCY:
        return amount
    return amount / rate_for(currency)


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    return str(to_money(value))


def allocate(total: Decimal, parts: list[Decimal]) -> list[Decimal]:
    """
    Split an already rounded ``total`` into cent amounts, one per unrounded
    part, that sum to it exactly. Every part is rounded down first and the
    leftover cents go to the parts that lost the most (largest remainder);
    ties go to the earlier part.
    """
    floors = [part.quantize(_CENT, rounding=ROUND_DOWN) for part in parts]
    leftover = int((total - sum(floors, Decimal(0))) / _CENT)
    by_loss = sorted(range(len(parts)), key=lambda i: parts[i] - floors[i], reverse=True)
    for i in by_loss[:leftover]:
        floors[i] += _CENT
    return floors
