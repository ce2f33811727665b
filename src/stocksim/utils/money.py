"""
Decimal helpers for monetary arithmetic.
All money in the simulator is a Decimal rounded half-up to the cent.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

# Floats are accepted for convenience (YAML, random draws) and go through str()
NumericInput = Union[float, int, str, Decimal]

CENT = Decimal('0.01')
MIN_PRICE = CENT
ZERO = Decimal('0.00')

# Upper bounds that keep every product and sum within Decimal's 28-digit context
MAX_AMOUNT = Decimal('1E+15')
MAX_QUANTITY = 10 ** 9


def to_decimal(value: NumericInput) -> Decimal:
    """
    Convert a numeric input to an unrounded Decimal.

    Args:
        value: float, int, str or Decimal

    Returns:
        Decimal equal to the textual form of the value

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a numeric value: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a finite value: {value!r}")
    return result


def to_money(value: NumericInput) -> Decimal:
    """
    Round a value to the cent using financial half-up rounding.

    Examples:
        >>> to_money("15.555")
        Decimal('15.56')
        >>> to_money(10)
        Decimal('10.00')

    Raises:
        ValueError: If the value is not numeric or too large to hold to the cent
    """
    try:
        return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Value too large to round to the cent: {value!r}") from None


def calculate_amount(price: NumericInput, quantity: int) -> Decimal:
    """Total cost or proceeds of a fill: price * quantity, rounded to the cent."""
    return to_money(to_decimal(price) * quantity)


def weighted_average(old_price: Decimal, old_quantity: int,
                     new_price: Decimal, new_quantity: int) -> Decimal:
    """Average cost of two lots, rounded to the cent."""
    total_quantity = old_quantity + new_quantity
    if total_quantity <= 0:
        raise ValueError("Total quantity must be positive")
    total_cost = old_price * old_quantity + new_price * new_quantity
    return to_money(total_cost / total_quantity)
