"""
Money helpers for variant pricing.

All monetary values are Decimal. Floats coming from form input are
converted through str() so that 19.995 stays 19.995 instead of
19.994999999999997 before rounding.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

Money = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
CENTS_PER_UNIT = 100

# Largest order of magnitude to_decimal accepts (values below 1e25)
MAX_EXPONENT = 24

# Upper bound for prices and base prices accepted from the API
MAX_AMOUNT = Decimal("1000000000000")


def to_decimal(value: Money) -> Decimal:
    """
    Convert a form value to Decimal.

    Raises:
        decimal.InvalidOperation: If the value is not a finite number or
            is 1e25 or larger in magnitude
        TypeError: If the value is not a supported type
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a monetary value")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        result = Decimal(value.strip())
    else:
        raise TypeError(f"Unsupported monetary value: {type(value).__name__}")

    if not result.is_finite():
        raise InvalidOperation(f"Non-finite monetary value: {value}")
    if result and result.adjusted() > MAX_EXPONENT:
        raise InvalidOperation(f"Monetary value out of range: {value}")
    return result


def round_to_cents(value: Money) -> Decimal:
    """
    Round a monetary value to cents.

    Scales to integer cents, rounds half away from zero, then scales back:
    - 19.995 → 20.00
    - 10.1 + 0.2 → 10.30
    - -0.005 → -0.01

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Decimal quantized to two places
    """
    cents = (to_decimal(value) * CENTS_PER_UNIT).to_integral_value(rounding=ROUND_HALF_UP)
    return (cents / CENTS_PER_UNIT).quantize(CENT)


def format_adjustment(adjustment: Money) -> str:
    """Render a price delta for display, e.g. "+$5.00" or "-$20.00". Empty for zero."""
    amount = round_to_cents(adjustment)
    if amount == 0:
        return ""
    sign = "+" if amount > 0 else "-"
    return f"{sign}${abs(amount):.2f}"
