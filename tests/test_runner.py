"""Tests for the one-shot forecast runner."""

import json
from unittest.mock import Mock

import yaml

from feeforecast.config import Config
from feeforecast.runner import ForecastRunner
from feeforecast.source import SourceError
from feeforecast.store import MemoryStore
from feeforecast.structured_output import StructuredOutputWriter

HALF_HOUR_MS = 30 * 60_000


def sample(fastest):
    return {
        "fastest_fee": fastest,
        "half_hour_fee": fastest - 2,
        "hour_fee": fastest - 4,
        "economy_fee": 2,
        "mempool_size_bytes": 2_000_000,
        "pending_tx_count": 3000,
        "block_height": 870_000,
    }


def make_config(tmp_path, **storage):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "storage": dict({"backend": "memory"}, **storage),
        "logging": {"log_dir": str(tmp_path / "logs")},
    }))
    return Config(str(path))


def test_run_once_accumulates_and_predicts(tmp_path, clock):
    source = Mock()
    source.fetch_sample.side_effect = [sample(10), sample(12), sample(14)]
    runner = ForecastRunner(make_config(tmp_path), source=source, store=MemoryStore(), clock=clock)

    first = runner.run_once()
    assert first["stored"] is True
    assert first["history_count"] == 1
    assert first["prediction"] is None

    clock.advance(HALF_HOUR_MS)
    runner.run_once()
    clock.advance(HALF_HOUR_MS)
    third = runner.run_once()

    assert third["history_count"] == 3
    assert third["prediction"]["trend"] == "increasing"
    assert third["prediction"]["nextHour"]["high"] > 14


def test_run_once_deduplicates(tmp_path, clock):
    source = Mock()
    source.fetch_sample.return_value = sample(10)
    runner = ForecastRunner(make_config(tmp_path), source=source, store=MemoryStore(), clock=clock)

    runner.run_once()
    result = runner.run_once()
    assert result["stored"] is False
    assert result["history_count"] == 1


def test_fetch_failure_still_predicts(tmp_path, clock):
    source = Mock()
    source.fetch_sample.side_effect = [sample(10), sample(11), sample(12), SourceError("/mempool")]
    runner = ForecastRunner(make_config(tmp_path), source=source, store=MemoryStore(), clock=clock)
    for _ in range(3):
        runner.run_once()
        clock.advance(HALF_HOUR_MS)

    result = runner.run_once()
    assert result["stored"] is None
    assert result["history_count"] == 3
    assert result["prediction"] is not None


def test_no_fetch_uses_stored_history(tmp_path, clock):
    source = Mock()
    runner = ForecastRunner(make_config(tmp_path), source=source, store=MemoryStore(), clock=clock)

    result = runner.run_once(fetch=False)
    source.fetch_sample.assert_not_called()
    assert result["stored"] is None
    assert result["prediction"] is None


def test_history_survives_new_runner(tmp_path, clock):
    config = make_config(tmp_path, backend="json", json_path=str(tmp_path / "state" / "history.json"))
    source = Mock()
    source.fetch_sample.side_effect = [sample(10), sample(12)]

    runner = ForecastRunner(config, source=source, clock=clock)
    runner.run_once()
    clock.advance(HALF_HOUR_MS)
    runner.run_once()

    again = ForecastRunner(config, source=Mock(), clock=clock)
    assert again.service.get_historical_data_count() == 2

    again.clear()
    assert ForecastRunner(config, source=Mock(), clock=clock).service.get_historical_data_count() == 0


def test_structured_output(tmp_path, clock):
    writer = StructuredOutputWriter(str(tmp_path / "structured"))
    source = Mock()
    source.fetch_sample.side_effect = [sample(10), sample(12), sample(14)]
    runner = ForecastRunner(
        make_config(tmp_path), source=source, store=MemoryStore(), structured_writer=writer, clock=clock
    )
    for _ in range(3):
        runner.run_once()
        clock.advance(HALF_HOUR_MS)

    observations = [json.loads(line) for line in writer.observations_path.read_text().splitlines()]
    predictions = [json.loads(line) for line in writer.predictions_path.read_text().splitlines()]

    assert len(observations) == 3
    assert observations[0]["type"] == "fee_observation"
    assert observations[0]["stored"] is True
    assert "timestamp" in observations[0]
    assert len(predictions) == 1
    assert predictions[0]["history_count"] == 3
