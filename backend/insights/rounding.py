"""Half-up rounding used when formatting the report.

Python's round() rounds halves to even; report figures round halves away
from zero so that 12.5 becomes 13 and 0.125 becomes 0.13.
"""

import math
from decimal import Decimal, ROUND_HALF_UP, localcontext


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to `digits` decimal places, halves away from zero."""
    if value is None:
        return 0.0
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return 0.0
    exact = Decimal(str(value))
    quantum = Decimal(1).scaleb(-digits)
    with localcontext() as ctx:
        # Enough digits for every float magnitude; the default 28 overflows near 1e26
        ctx.prec = max(ctx.prec, exact.adjusted() + digits + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def whole(value: float) -> int:
    """Round to a whole number."""
    return int(round_half_up(value, 0))


def money(value: float) -> float:
    """Currency amounts: two decimal places."""
    return round_half_up(value, 2)


def percent(value: float) -> int:
    """Percentages: whole numbers."""
    return whole(value)
