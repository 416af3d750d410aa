"""Three-decimal rounding for every measurement written to output.

Values are rounded in decimal arithmetic from their shortest decimal form,
so ``0.0005`` becomes ``0.001`` rather than falling victim to binary float
representation.
"""

import math
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

_QUANTUM = Decimal("0.001")
_ZERO = Decimal("0.000")


def round3(value: float | int | Decimal) -> Decimal:
    """Round a number to exactly three fractional digits.

    Ties round away from zero. The result never carries a negative zero.

    Args:
        value: Number to round. Floats (including numpy scalars) are taken
            at their shortest ``repr`` so no binary artifacts leak in.

    Returns:
        Decimal with an exponent of -3.

    Raises:
        ValueError: If the value is NaN or infinite.
    """
    if isinstance(value, Decimal):
        decimal_value = value
    elif isinstance(value, int):
        decimal_value = Decimal(value)
    else:
        as_float = float(value)
        if not math.isfinite(as_float):
            raise ValueError(f"Cannot round non-finite value: {value!r}")
        decimal_value = Decimal(repr(as_float))

    if not decimal_value.is_finite():
        raise ValueError(f"Cannot round non-finite value: {value!r}")

    rounded = decimal_value.quantize(_QUANTUM, rounding=ROUND_HALF_UP)
    if rounded.is_zero():
        return _ZERO
    return rounded


def format_decimal(value: Decimal) -> str:
    """Render a decimal with exactly three fractional digits.

    Shorter values are zero-padded; longer ones are truncated, never
    rounded a second time.
    """
    exponent = value.as_tuple().exponent
    if exponent != -3:
        value = value.quantize(_QUANTUM, rounding=ROUND_DOWN)
    if value.is_zero():
        value = _ZERO
    return format(value, "f")
