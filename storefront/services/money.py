"""
Money Utilities - Safe Decimal operations for monetary values.

All prices are South African Rand (ZAR). Payment providers take amounts
in cents, so conversion to minor units lives here too.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[str, int, float, Decimal]

MONEY_PRECISION = Decimal("0.01")

CURRENCY = "ZAR"
CURRENCY_SYMBOL = "R"


def to_decimal(value: Union[Number, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Returns Decimal("0") for None or unparseable input.
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        # Go through str so 0.1 stays 0.1
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def to_cents(value: Number) -> int:
    """
    Convert a rand amount to integer cents for provider APIs.

    Args:
        value: Amount in rand (e.g., 149.99)

    Returns:
        Amount in cents (e.g., 14999)
    """
    decimal_value = to_decimal(value)
    return int((decimal_value * 100).to_integral_value(rounding=ROUND_HALF_UP))


def round_money(value: Number) -> Decimal:
    """Round a monetary value to cents."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def format_money(value: Number) -> str:
    """Format an amount the way the store prints it: R 1,234.50"""
    return f"{CURRENCY_SYMBOL} {round_money(value):,.2f}"


def to_float(value: Number) -> float:
    """
    Convert Decimal to float for JSON serialization or external APIs.

    Use only at API boundaries, not for internal calculations.
    """
    return float(to_decimal(value))
