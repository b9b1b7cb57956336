"""Tests for the command-line entry point."""

import json

import pytest
import yaml

from feeforecast import cli
from feeforecast.constants import DEFAULT_STORAGE_KEY
from feeforecast.store import JsonFileStore


@pytest.fixture
def config_path(tmp_path, restore_root_logging):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "storage": {"backend": "json", "json_path": str(tmp_path / "state" / "history.json")},
        "logging": {"log_dir": str(tmp_path / "logs"), "console_level": "ERROR"},
    }))
    return str(path)


def seed_history(tmp_path, count):
    records = [{
        "observedAtMillis": 1_700_000_000_000 + i * 1_800_000,
        "fastestFee": 10 + i,
        "halfHourFee": 8 + i,
        "hourFee": 6 + i,
        "economyFee": 2,
        "mempoolSizeBytes": 1_000_000,
        "pendingTxCount": 2000,
        "blockHeight": 870_000 + i,
    } for i in range(count)]
    JsonFileStore(str(tmp_path / "state" / "history.json")).set(DEFAULT_STORAGE_KEY, json.dumps(records))


def test_count(tmp_path, config_path, capsys):
    seed_history(tmp_path, 4)
    cli.main(["--config", config_path, "--count"])
    assert json.loads(capsys.readouterr().out) == {"history_count": 4}


def test_predict_without_fetch(tmp_path, config_path, capsys):
    seed_history(tmp_path, 6)
    cli.main(["--config", config_path, "--no-fetch"])

    result = json.loads(capsys.readouterr().out)
    assert result["stored"] is None
    assert result["history_count"] == 6
    assert result["prediction"]["trend"] == "increasing"


def test_clear(tmp_path, config_path, capsys):
    seed_history(tmp_path, 3)
    cli.main(["--config", config_path, "--clear"])

    assert json.loads(capsys.readouterr().out) == {"cleared": True}
    assert JsonFileStore(str(tmp_path / "state" / "history.json")).get(DEFAULT_STORAGE_KEY) is None


def test_missing_config_exits(tmp_path, restore_root_logging):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", str(tmp_path / "missing.yaml"), "--count"])
    assert excinfo.value.code == 1
