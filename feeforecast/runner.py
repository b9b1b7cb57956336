"""One-shot ingest and prediction run."""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from .config import Config
from .logging import get_logger
from .predictor import FeePredictionService
from .source import MempoolSpaceClient, SourceError
from .store import KeyValueStore, create_store
from .structured_output import StructuredOutputWriter

logger = get_logger(__name__)


class ForecastRunner:
    """Wires config, store, explorer client and prediction service together."""

    def __init__(
        self,
        config: Config,
        source: Optional[Any] = None,
        store: Optional[KeyValueStore] = None,
        structured_writer: Optional[StructuredOutputWriter] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize runner with configuration.

        Args:
            config: Configuration instance
            source: Object with ``fetch_sample()``; defaults to MempoolSpaceClient
            store: Key-value store; defaults to the configured backend
            structured_writer: Optional JSONL writer for samples and predictions
            clock: Optional epoch-milliseconds clock passed to the service
        """
        self.config = config
        self._structured_writer = structured_writer
        self.source = source or MempoolSpaceClient(config.api_base_url, config.api_timeout_secs)
        self.store = store or create_store(
            config.storage_backend,
            json_path=config.storage_json_path,
            db_path=config.storage_db_path,
        )
        self.service = FeePredictionService(
            self.store,
            storage_key=config.storage_key,
            max_history=config.max_history,
            dedup_window_ms=config.dedup_window_ms,
            clock=clock,
        )

    def ingest(self) -> Optional[bool]:
        """
        Fetch one sample and add it to the history.

        Returns:
            True if stored, False if deduplicated, None if the fetch failed
        """
        try:
            sample = self.source.fetch_sample()
        except SourceError as e:
            logger.error(f"Failed to fetch fee sample: {e}")
            return None

        stored = self.service.add_observation(**sample)
        logger.info(
            f"fastest={sample['fastest_fee']} halfhour={sample['half_hour_fee']} "
            f"hour={sample['hour_fee']} sat/vB | tx={sample['pending_tx_count']} | "
            f"height={sample['block_height']} | stored={stored}"
        )

        if self._structured_writer is not None:
            self._structured_writer.record_observation({
                "type": "fee_observation",
                "sample": sample,
                "stored": stored,
            })
        return stored

    def run_once(self, fetch: bool = True) -> Dict[str, Any]:
        """
        Run one iteration: optional ingest, then predict from stored history.

        Args:
            fetch: Whether to fetch and ingest a new sample first

        Returns:
            Dictionary with stored flag, history count, prediction and timestamp
        """
        stored = self.ingest() if fetch else None
        prediction = self.service.generate_prediction()
        count = self.service.get_historical_data_count()

        if prediction is None:
            logger.info(f"No prediction yet, {count} data points stored")
        else:
            logger.info(
                f"trend={prediction.trend} next_hour={prediction.next_hour.high}/"
                f"{prediction.next_hour.medium}/{prediction.next_hour.low} sat/vB "
                f"conf={prediction.next_hour.confidence:.2f} ({count}pts)"
            )

        result = {
            "stored": stored,
            "history_count": count,
            "prediction": prediction.to_dict() if prediction else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if prediction is not None and self._structured_writer is not None:
            self._structured_writer.record_prediction({
                "type": "fee_prediction",
                "history_count": count,
                "prediction": result["prediction"],
                "timestamp": result["timestamp"],
            })
        return result

    def clear(self) -> None:
        """Drop all stored history."""
        self.service.clear_history()
        logger.info("Cleared fee history")

    def close(self) -> None:
        self.store.close()
