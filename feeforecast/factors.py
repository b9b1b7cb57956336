"""Human-readable factors explaining current fee conditions."""

from datetime import datetime
from typing import List, Sequence

from .constants import FACTOR_WINDOW, MIN_POINTS_FOR_FACTORS
from .models import FeeObservation
from .stats import mean

# ---------- Factor labels ----------

LIMITED_DATA = "Limited historical data"
HIGH_CONGESTION = "High mempool congestion"
LOW_CONGESTION = "Low mempool congestion"
HIGH_VOLUME = "High transaction volume"
LOW_VOLUME = "Low transaction volume"
BUSINESS_HOURS = "Business hours activity"
LOW_ACTIVITY = "Low activity period"
WEEKEND = "Weekend trading patterns"
HIGH_FEES = "High fee environment"
LOW_FEES = "Low fee environment"

# ---------- Thresholds ----------

HIGH_CONGESTION_RATIO = 1.5
LOW_CONGESTION_RATIO = 0.7
HIGH_VOLUME_RATIO = 1.3
LOW_VOLUME_RATIO = 0.8
BUSINESS_HOURS_START = 9
BUSINESS_HOURS_END = 17
LOW_ACTIVITY_START = 22
LOW_ACTIVITY_END = 6
HIGH_FEE_SATVB = 50
LOW_FEE_SATVB = 10


def identify_factors(
    current: FeeObservation,
    history: Sequence[FeeObservation],
    now: datetime,
) -> List[str]:
    """
    Compare the latest observation against the recent window and the clock.

    Args:
        current: Most recent observation
        history: Full observation log (``current`` included)
        now: Local wall-clock time used for hour/day factors

    Returns:
        Factor labels in check order
    """
    if len(history) < MIN_POINTS_FOR_FACTORS:
        return [LIMITED_DATA]

    factors: List[str] = []
    recent = history[-FACTOR_WINDOW:]
    avg_mempool = mean([o.mempool_size_bytes for o in recent])
    avg_pending = mean([o.pending_tx_count for o in recent])

    if current.mempool_size_bytes > avg_mempool * HIGH_CONGESTION_RATIO:
        factors.append(HIGH_CONGESTION)
    elif current.mempool_size_bytes < avg_mempool * LOW_CONGESTION_RATIO:
        factors.append(LOW_CONGESTION)

    if current.pending_tx_count > avg_pending * HIGH_VOLUME_RATIO:
        factors.append(HIGH_VOLUME)
    elif current.pending_tx_count < avg_pending * LOW_VOLUME_RATIO:
        factors.append(LOW_VOLUME)

    if BUSINESS_HOURS_START <= now.hour <= BUSINESS_HOURS_END:
        factors.append(BUSINESS_HOURS)
    elif now.hour >= LOW_ACTIVITY_START or now.hour <= LOW_ACTIVITY_END:
        factors.append(LOW_ACTIVITY)

    # Saturday=5, Sunday=6
    if now.weekday() >= 5:
        factors.append(WEEKEND)

    if current.fastest_fee > HIGH_FEE_SATVB:
        factors.append(HIGH_FEES)
    elif current.fastest_fee < LOW_FEE_SATVB:
        factors.append(LOW_FEES)

    return factors
