"""
Small numeric helpers shared by the scoring adapter and the clustering engine.
"""

import math
from typing import Iterable


def js_round(value: float) -> int:
    """Round half up (2.5 → 3, -2.5 → -2), not Python's round-half-to-even."""
    return int(math.floor(value + 0.5))


def rounded_mean(values: Iterable[float]) -> int:
    """Half-up rounded mean; 0 for an empty iterable."""
    values = list(values)
    if not values:
        return 0
    return js_round(sum(values) / len(values))


_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    """Lower-case base-36 encoding of a non-negative integer."""
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))
