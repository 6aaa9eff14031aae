"""Numeric coercion for aggregate result fields."""

import math
from decimal import Decimal, InvalidOperation


def normalize_number(value) -> int | float:
    """Coerce a nullable or driver-typed number to a finite int or float.

    ``None``, unparseable strings, NaN and infinities all become ``0``.
    Integral values (including ``Decimal("12.00")``) come back as ``int``.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float, Decimal)):
        number = value
    else:
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return 0

    if isinstance(number, Decimal):
        if not number.is_finite():
            return 0
        if number == number.to_integral_value():
            return int(number)
        return float(number)

    if isinstance(number, float):
        if not math.isfinite(number):
            return 0
        if number.is_integer():
            return int(number)
    return number
