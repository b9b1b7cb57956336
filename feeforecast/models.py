"""Observation and prediction records for fee forecasting."""

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class FeeObservation:
    """One timestamped snapshot of fee and mempool conditions."""
    observed_at_millis: int   # epoch milliseconds
    fastest_fee: float        # sat/vB
    half_hour_fee: float      # sat/vB
    hour_fee: float           # sat/vB
    economy_fee: float        # sat/vB
    mempool_size_bytes: int   # virtual size of the mempool
    pending_tx_count: int
    block_height: int         # informational only

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the persisted camelCase layout."""
        return {
            "observedAtMillis": self.observed_at_millis,
            "fastestFee": self.fastest_fee,
            "halfHourFee": self.half_hour_fee,
            "hourFee": self.hour_fee,
            "economyFee": self.economy_fee,
            "mempoolSizeBytes": self.mempool_size_bytes,
            "pendingTxCount": self.pending_tx_count,
            "blockHeight": self.block_height,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeeObservation":
        """
        Build an observation from its persisted form.

        Browser exports used ``timestamp``, ``mempoolSize`` and ``pendingTxs``;
        those keys are accepted as aliases.

        Raises:
            KeyError, TypeError, ValueError: If the record is malformed
        """
        if not isinstance(data, dict):
            raise TypeError(f"Observation must be an object, got {type(data).__name__}")

        def pick(*keys: str) -> float:
            for key in keys:
                if key in data:
                    value = data[key]
                    if isinstance(value, bool) or not isinstance(value, numbers.Real):
                        raise TypeError(f"{key} must be a number, got {value!r}")
                    if not math.isfinite(value) or value < 0:
                        raise ValueError(f"{key} must be finite and non-negative, got {value!r}")
                    return value
            raise KeyError(keys[0])

        return cls(
            observed_at_millis=int(pick("observedAtMillis", "timestamp")),
            fastest_fee=float(pick("fastestFee")),
            half_hour_fee=float(pick("halfHourFee")),
            hour_fee=float(pick("hourFee")),
            economy_fee=float(pick("economyFee")),
            mempool_size_bytes=int(pick("mempoolSizeBytes", "mempoolSize")),
            pending_tx_count=int(pick("pendingTxCount", "pendingTxs")),
            block_height=int(pick("blockHeight")),
        )


@dataclass(frozen=True)
class HorizonForecast:
    """Forecast fee rates for one horizon."""
    high: int          # from the fastest-fee series
    medium: int        # from the half-hour series
    low: int           # from the hour series
    confidence: float  # 0.1 .. 0.95

    def to_dict(self) -> Dict[str, Any]:
        return {
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class FeePrediction:
    """Forecasts for the 1h / 6h / 24h horizons plus trend and factors."""
    next_hour: HorizonForecast
    next_6_hours: HorizonForecast
    next_24_hours: HorizonForecast
    trend: str
    factors: List[str] = field(default_factory=list)
    generated_at_millis: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nextHour": self.next_hour.to_dict(),
            "next6Hours": self.next_6_hours.to_dict(),
            "next24Hours": self.next_24_hours.to_dict(),
            "trend": self.trend,
            "factors": list(self.factors),
            "generatedAtMillis": self.generated_at_millis,
        }
