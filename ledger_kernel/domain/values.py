"""
Values -- Decimal money helpers shared by every ledger computation.

Responsibility:
    Coerces inbound amounts to Decimal and rounds them with the one
    sanctioned rounding function. Floats never reach ledger arithmetic;
    they are converted via their string form so 0.1 stays 0.1.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Failure modes:
    - ValueError when an amount cannot be interpreted as a decimal number.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

DEFAULT_PRECISION = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Coerce an int, float, str or Decimal to Decimal. None becomes zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Boolean is not a monetary amount: {value!r}")
    try:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid monetary amount: {value!r}") from e


def round_money(
    value: Decimal,
    decimal_places: int = DEFAULT_PRECISION,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    This is the only rounding function used for ledger amounts.
    """
    return to_decimal(value).quantize(Decimal(1).scaleb(-decimal_places), rounding=rounding)


def min_unit(precision: int = DEFAULT_PRECISION) -> Decimal:
    """Smallest representable amount at ``precision`` (0.01 for 2)."""
    return Decimal(1).scaleb(-precision)


def is_zero(value: Decimal, precision: int = DEFAULT_PRECISION) -> bool:
    return round_money(value, precision) == ZERO
