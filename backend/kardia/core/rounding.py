"""Decimal rounding helpers."""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round half away from zero on the shortest repr of ``value``.

    ``round()`` rounds half to even and works on the binary value, so
    ``round(114.5)`` gives 114 and ``round(2.675, 2)`` gives 2.67. This
    gives 115 and 2.68.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
