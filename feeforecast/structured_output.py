"""Structured output writer for fee observations and predictions.

Records are written as JSONL so they can later be loaded into analytical
databases alongside the prediction history.
"""

from pathlib import Path
from typing import Dict
import json
from datetime import datetime, timezone

from .logging import get_logger

logger = get_logger(__name__)


DEFAULT_OBSERVATIONS_FILENAME = "observations.jsonl"
DEFAULT_PREDICTIONS_FILENAME = "predictions.jsonl"


class StructuredOutputWriter:
    """Write structured JSONL records for fee samples and forecasts."""

    def __init__(
        self,
        base_dir: str,
        observations_filename: str = DEFAULT_OBSERVATIONS_FILENAME,
        predictions_filename: str = DEFAULT_PREDICTIONS_FILENAME,
    ) -> None:
        self.base_path = Path(base_dir)
        self.base_path.mkdir(parents=True, exist_ok=True)

        self.observations_path = self.base_path / observations_filename
        self.predictions_path = self.base_path / predictions_filename

    def _append_line(self, path: Path, record: Dict) -> None:
        """Append a single JSON record to the given file as one line."""
        try:
            if "timestamp" not in record:
                record["timestamp"] = datetime.now(timezone.utc).isoformat()

            with path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
        except Exception as exc:
            # Structured output must never break an ingest run.
            logger.error("Failed to append structured record to %s: %s", path, exc, exc_info=True)

    def record_observation(self, payload: Dict) -> None:
        """Record an ingested fee sample and whether it was stored."""
        self._append_line(self.observations_path, payload)

    def record_prediction(self, payload: Dict) -> None:
        """Record a generated fee prediction."""
        self._append_line(self.predictions_path, payload)
