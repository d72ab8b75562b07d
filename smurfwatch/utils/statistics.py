"""Numeric helpers shared by the analyzers.

Every helper returns a caller-supplied default instead of raising on empty
input or a zero denominator, so per-game ratios and per-player aggregates
can be computed over sparse match histories.
"""

import math
import statistics
from typing import List, Sequence, Tuple


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Divide, falling back to ``default`` when the denominator is not positive.

    Args:
        numerator: Dividend (e.g. player kills + assists)
        denominator: Divisor (e.g. team kills)
        default: Result for a zero or negative divisor

    Returns:
        The quotient, or ``default``
    """
    if denominator <= 0:
        return default
    return numerator / denominator


def safe_mean(values: Sequence[float], default: float = 0.0) -> float:
    """Arithmetic mean of ``values``, or ``default`` when there are none."""
    if not values:
        return default
    return statistics.mean(values)


def safe_stdev(values: Sequence[float], default: float = 0.0) -> float:
    """
    Sample standard deviation of ``values``.

    Needs at least two samples; ``default`` is returned otherwise.
    """
    if len(values) < 2:
        return default
    return statistics.stdev(values)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value into ``[low, high]``."""
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    """Clamp a value into ``[0, 1]``."""
    return clamp(value, 0.0, 1.0)


def thirds(values: List[float]) -> Tuple[List[float], List[float]]:
    """
    Earliest and most recent thirds of a chronologically ordered list.

    Each third holds ``ceil(len(values) / 3)`` items (at least one).
    """
    size = max(1, math.ceil(len(values) / 3))
    return values[:size], values[-size:]
