"""Fee trend prediction over a persisted log of fee observations."""

import json
import logging
import math
import numbers
import threading
import time
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from .constants import (
    DEFAULT_DEDUP_WINDOW_MS,
    DEFAULT_MAX_HISTORY,
    DEFAULT_STORAGE_KEY,
    MIN_POINTS_FOR_PREDICTION,
    NEXT_24_HOURS_CONFIDENCE_DECAY,
    NEXT_24_HOURS_STEPS,
    NEXT_6_HOURS_CONFIDENCE_DECAY,
    NEXT_6_HOURS_STEPS,
    NEXT_HOUR_STEPS,
    TREND_MULTIPLIERS,
)
from .factors import identify_factors
from .logging import get_logger
from .models import FeeObservation, FeePrediction, HorizonForecast
from .stats import classify_trend, confidence_score, project_linear, round_half_up, volatility
from .store import KeyValueStore

module_logger = get_logger(__name__)


def wall_clock_millis() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


class FeePredictionService:
    """Maintains the observation log and turns it into fee forecasts.

    Horizon step counts assume the caller adds one observation about every
    30 minutes. The service does not enforce that cadence, so a caller polling
    at another interval changes what "next hour" actually covers.
    """

    def __init__(
        self,
        store: KeyValueStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
        max_history: int = DEFAULT_MAX_HISTORY,
        dedup_window_ms: int = DEFAULT_DEDUP_WINDOW_MS,
        clock: Optional[Callable[[], int]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the service and restore any persisted history.

        Args:
            store: Key-value store holding the serialized log
            storage_key: Key under which the log is stored
            max_history: Maximum number of observations retained
            dedup_window_ms: Minimum spacing between stored observations
            clock: Callable returning epoch milliseconds (defaults to wall clock)
            logger: Logger used to report persistence problems
        """
        self.store = store
        self.storage_key = storage_key
        self.max_history = max_history
        self.dedup_window_ms = dedup_window_ms
        self.clock = clock or wall_clock_millis
        self.logger = logger or module_logger
        self._lock = threading.Lock()
        self._history: List[FeeObservation] = []
        self._load_history()

    def _load_history(self) -> None:
        """Adopt the persisted log, or start empty if it is missing or unusable."""
        try:
            stored = self.store.get(self.storage_key)
        except Exception as e:
            self.logger.error(f"Error loading historical fee data: {e}", exc_info=True)
            return

        if not stored:
            return

        try:
            records = json.loads(stored)
            if not isinstance(records, list):
                raise ValueError(f"expected a list, got {type(records).__name__}")
            history = [FeeObservation.from_dict(r) for r in records]
        except (ValueError, KeyError, TypeError, OverflowError) as e:
            self.logger.warning(f"Ignoring malformed historical fee data: {e}")
            return

        self._history = history[-self.max_history:]
        self.logger.info(f"Loaded {len(self._history)} historical fee observations")

    def _save_history(self) -> None:
        """Overwrite the persisted log. Failures are logged, not raised."""
        try:
            payload = json.dumps([o.to_dict() for o in self._history])
            self.store.set(self.storage_key, payload)
        except Exception as e:
            self.logger.error(f"Error saving historical fee data: {e}", exc_info=True)

    def add_observation(
        self,
        fastest_fee: float,
        half_hour_fee: float,
        hour_fee: float,
        economy_fee: float,
        mempool_size_bytes: int,
        pending_tx_count: int,
        block_height: int,
    ) -> bool:
        """
        Record a fee sample stamped with the current time.

        Samples arriving within the dedup window of the last stored one are
        dropped.

        Returns:
            True if the observation was stored

        Raises:
            ValueError: If any value is negative or not finite
        """
        values = {
            "fastest_fee": fastest_fee,
            "half_hour_fee": half_hour_fee,
            "hour_fee": hour_fee,
            "economy_fee": economy_fee,
            "mempool_size_bytes": mempool_size_bytes,
            "pending_tx_count": pending_tx_count,
            "block_height": block_height,
        }
        for name, value in values.items():
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be finite and non-negative, got {value!r}")

        with self._lock:
            now = self.clock()
            if self._history and now - self._history[-1].observed_at_millis < self.dedup_window_ms:
                self.logger.debug(
                    f"Dropping observation {now - self._history[-1].observed_at_millis}ms "
                    f"after the previous one"
                )
                return False

            self._history.append(FeeObservation(
                observed_at_millis=now,
                fastest_fee=float(fastest_fee),
                half_hour_fee=float(half_hour_fee),
                hour_fee=float(hour_fee),
                economy_fee=float(economy_fee),
                mempool_size_bytes=int(mempool_size_bytes),
                pending_tx_count=int(pending_tx_count),
                block_height=int(block_height),
            ))
            if len(self._history) > self.max_history:
                del self._history[:len(self._history) - self.max_history]

            self._save_history()
            return True

    def generate_prediction(self) -> Optional[FeePrediction]:
        """
        Forecast fee rates for the next hour, 6 hours and 24 hours.

        Returns:
            FeePrediction, or None with fewer than 3 observations
        """
        with self._lock:
            history = list(self._history)

        if len(history) < MIN_POINTS_FOR_PREDICTION:
            return None

        try:
            return self._predict(history)
        except Exception as e:
            self.logger.error(f"Error generating fee prediction: {e}", exc_info=True)
            return None

    def _predict(self, history: List[FeeObservation]) -> FeePrediction:
        current = history[-1]
        fastest = [o.fastest_fee for o in history]
        half_hour = [o.half_hour_fee for o in history]
        hour = [o.hour_fee for o in history]

        trend = classify_trend(fastest)
        vol = volatility(fastest)
        confidence = confidence_score(len(history), vol, trend)
        multiplier = TREND_MULTIPLIERS[trend]

        def horizon(steps: int, horizon_confidence: float) -> HorizonForecast:
            return HorizonForecast(
                high=round_half_up(project_linear(fastest, steps) * multiplier),
                medium=round_half_up(project_linear(half_hour, steps) * multiplier),
                low=round_half_up(project_linear(hour, steps) * multiplier),
                confidence=horizon_confidence,
            )

        now = self.clock()
        factors = identify_factors(current, history, datetime.fromtimestamp(now / 1000))

        return FeePrediction(
            next_hour=horizon(NEXT_HOUR_STEPS, confidence),
            next_6_hours=horizon(NEXT_6_HOURS_STEPS, confidence * NEXT_6_HOURS_CONFIDENCE_DECAY),
            next_24_hours=horizon(NEXT_24_HOURS_STEPS, confidence * NEXT_24_HOURS_CONFIDENCE_DECAY),
            trend=trend,
            factors=factors,
            generated_at_millis=now,
        )

    def get_historical_data_count(self) -> int:
        """Number of stored observations."""
        return len(self._history)

    def observations(self) -> Tuple[FeeObservation, ...]:
        """Snapshot of the stored log, oldest first."""
        with self._lock:
            return tuple(self._history)

    def clear_history(self) -> None:
        """Empty the log and remove it from the store."""
        with self._lock:
            self._history = []
            try:
                self.store.remove(self.storage_key)
            except Exception as e:
                self.logger.error(f"Error clearing historical fee data: {e}", exc_info=True)
