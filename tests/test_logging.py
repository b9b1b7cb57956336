"""Tests for logging setup."""

import logging
import logging.handlers

import yaml

from feeforecast.config import Config
from feeforecast.logging import setup_logging


def make_config(tmp_path, rotation):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "logging": {"log_dir": str(tmp_path / "logs"), "level": "DEBUG", "rotation": rotation},
    }))
    return Config(str(path))


def test_nightly_rotation_handlers(tmp_path, restore_root_logging):
    setup_logging(make_config(tmp_path, {"when": "midnight"}))

    handlers = logging.getLogger().handlers
    assert isinstance(handlers[0], logging.handlers.TimedRotatingFileHandler)
    assert handlers[0].namer("feeforecast.log.2024-01-03").startswith(str(tmp_path / "logs" / "archive"))
    assert handlers[1].level == logging.ERROR
    assert (tmp_path / "logs" / "archive").is_dir()


def test_size_rotation_and_error_file(tmp_path, restore_root_logging):
    setup_logging(make_config(tmp_path, {"when": "size", "max_bytes": 1024}))

    handlers = logging.getLogger().handlers
    assert type(handlers[0]) is logging.handlers.RotatingFileHandler
    assert handlers[0].maxBytes == 1024

    logging.getLogger("feeforecast.test").error("store unavailable")
    for handler in handlers:
        handler.flush()
    assert "store unavailable" in (tmp_path / "logs" / "feeforecast-error.log").read_text()
