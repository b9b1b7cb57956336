"""Series statistics for fee trend prediction."""

import math
from typing import Sequence

from .constants import (
    BASE_CONFIDENCE,
    MAX_CONFIDENCE,
    MAX_DATA_CONFIDENCE_BONUS,
    MAX_VOLATILITY_CONFIDENCE_BONUS,
    MIN_CONFIDENCE,
    MIN_FEE_SATVB,
    STABLE_CONFIDENCE_BONUS,
    TREND_CHANGE_THRESHOLD,
    TREND_WINDOW,
)

TREND_INCREASING = "increasing"
TREND_DECREASING = "decreasing"
TREND_STABLE = "stable"


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def classify_trend(values: Sequence[float]) -> str:
    """
    Classify the recent direction of a fee series.

    The last ``TREND_WINDOW`` points are split into an older and a newer half
    (odd lengths put the extra point in the newer half) and their means are
    compared.

    Args:
        values: Fee series in stored order

    Returns:
        "increasing", "decreasing" or "stable"
    """
    if len(values) < 3:
        return TREND_STABLE

    recent = list(values[-TREND_WINDOW:])
    split = len(recent) // 2
    older_avg = mean(recent[:split])
    newer_avg = mean(recent[split:])

    if older_avg == 0:
        return TREND_STABLE

    change = (newer_avg - older_avg) / older_avg
    if change > TREND_CHANGE_THRESHOLD:
        return TREND_INCREASING
    if change < -TREND_CHANGE_THRESHOLD:
        return TREND_DECREASING
    return TREND_STABLE


def volatility(values: Sequence[float]) -> float:
    """Population standard deviation of the series."""
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    variance = sum((v - avg) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def project_linear(values: Sequence[float], steps: int) -> float:
    """
    Least-squares line over x = 0..n-1, evaluated ``steps`` points past the end.

    Series shorter than 3 points return the last value unchanged (0 when
    empty). The prediction service never reaches that branch since it needs
    3 points before predicting.

    Args:
        values: Fee series in stored order
        steps: Number of observation intervals ahead

    Returns:
        Projected fee rate, never below MIN_FEE_SATVB when regressed
    """
    if len(values) < 3:
        return float(values[-1]) if values else 0.0

    n = len(values)
    sum_x = n * (n - 1) / 2
    sum_y = sum(values)
    sum_xy = sum(i * y for i, y in enumerate(values))
    sum_xx = sum(i * i for i in range(n))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return float(values[-1])

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    prediction = slope * (n + steps - 1) + intercept
    return max(MIN_FEE_SATVB, prediction)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def confidence_score(data_points: int, vol: float, trend: str) -> float:
    """
    Score how much to trust the next-hour forecast.

    Args:
        data_points: Number of stored observations
        vol: Volatility of the fastest-fee series
        trend: Trend classification

    Returns:
        Confidence in [MIN_CONFIDENCE, MAX_CONFIDENCE]
    """
    confidence = BASE_CONFIDENCE
    confidence += min(data_points / 100, MAX_DATA_CONFIDENCE_BONUS)
    confidence += max(0.0, MAX_VOLATILITY_CONFIDENCE_BONUS - vol / 100)
    if trend == TREND_STABLE:
        confidence += STABLE_CONFIDENCE_BONUS
    return min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, confidence))
