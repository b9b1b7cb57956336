"""Centralized logging configuration for the fee forecaster."""

import logging
import logging.handlers
from pathlib import Path
from typing import Any, Dict
from .config import Config
from .constants import DEFAULT_LOG_BACKUP_COUNT, DEFAULT_LOG_MAX_BYTES

MAIN_LOG_NAME = "feeforecast.log"
ERROR_LOG_NAME = "feeforecast-error.log"
FILE_FORMAT = '%(asctime)s [%(levelname)-8s] [%(name)s] %(message)s'
CONSOLE_FORMAT = '[%(levelname)-8s] [%(name)s] %(message)s'


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def _history_log_handler(path: Path, archive_dir: Path, rotation: Dict[str, Any]) -> logging.Handler:
    """Main log handler, rotated nightly into ``archive_dir`` or by size."""
    backup_count = rotation.get("backup_count", DEFAULT_LOG_BACKUP_COUNT)
    if rotation.get("when") != "midnight":
        return logging.handlers.RotatingFileHandler(
            path,
            maxBytes=rotation.get("max_bytes", DEFAULT_LOG_MAX_BYTES),
            backupCount=backup_count,
            encoding="utf-8"
        )

    handler = logging.handlers.TimedRotatingFileHandler(
        path,
        when="midnight",
        interval=1,
        backupCount=backup_count,
        encoding="utf-8"
    )
    handler.namer = lambda name: str(archive_dir / Path(name).name)
    return handler


def setup_logging(config: Config) -> None:
    """
    Route ingest and prediction logs to rotating files and the console.

    Persistence failures swallowed by the prediction service are only
    visible here, so errors also get their own file.

    Args:
        config: Config instance with logging settings
    """
    log_dir = Path(config.log_dir)
    archive_dir = log_dir / "archive"
    archive_dir.mkdir(parents=True, exist_ok=True)

    file_level = _level(config.log_level)
    console_level = _level(config.console_level)
    rotation = config.log_rotation
    file_formatter = logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(min(file_level, console_level))
    root_logger.handlers.clear()

    main_path = Path(config.logfile) if config.logfile else log_dir / MAIN_LOG_NAME
    main_handler = _history_log_handler(main_path, archive_dir, rotation)
    main_handler.setLevel(file_level)
    main_handler.setFormatter(file_formatter)
    root_logger.addHandler(main_handler)

    error_handler = logging.handlers.RotatingFileHandler(
        log_dir / ERROR_LOG_NAME,
        maxBytes=rotation.get("max_bytes", DEFAULT_LOG_MAX_BYTES),
        backupCount=rotation.get("backup_count", DEFAULT_LOG_BACKUP_COUNT),
        encoding="utf-8"
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(file_formatter)
    root_logger.addHandler(error_handler)

    # stderr, so the CLI's JSON result on stdout stays parseable
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific component.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
