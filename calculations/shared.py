"""
Numeric helpers shared by every calculation engine.
"""

import math
from typing import Any, Sequence
from urllib.parse import urlparse


# Math

def round_half_up(value: float, decimals: int = 2) -> float:
    """Round with halves toward +infinity, matching JavaScript's Math.round."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, minimum: float, maximum: float) -> float:
    return min(max(value, minimum), maximum)


def normalize(value: float, minimum: float, maximum: float) -> float:
    return (value - minimum) / (maximum - minimum)


def interpolate(start: float, end: float, factor: float) -> float:
    return start + (end - start) * factor


# Statistics (empty input yields 0)

def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def median(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation."""
    if not values:
        return 0.0
    avg = mean(values)
    return math.sqrt(mean([(v - avg) ** 2 for v in values]))


def percentile(values: Sequence[float], p: float) -> float:
    """Linear-interpolated percentile, p in [0, 100]."""
    if not values:
        return 0.0
    ordered = sorted(values)
    index = (p / 100) * (len(ordered) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    weight = index - lower
    return ordered[lower] * (1 - weight) + ordered[upper] * weight


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation; 0 for mismatched, empty or constant input."""
    if len(x) != len(y) or not x:
        return 0.0

    mean_x = mean(x)
    mean_y = mean(y)
    numerator = sum_x_sq = sum_y_sq = 0.0
    for xi, yi in zip(x, y):
        dx = xi - mean_x
        dy = yi - mean_y
        numerator += dx * dy
        sum_x_sq += dx * dx
        sum_y_sq += dy * dy

    denominator = math.sqrt(sum_x_sq * sum_y_sq)
    return 0.0 if denominator == 0 else numerator / denominator


# Validation

def is_valid_number(value: Any) -> bool:
    """Finite int/float. Booleans are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def is_valid_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except (TypeError, ValueError):
        return False
    return bool(parsed.scheme and parsed.netloc)
