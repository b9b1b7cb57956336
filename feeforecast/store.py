"""Key-value persistence backends for the observation log."""

import json
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from .logging import get_logger

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """Minimal string key-value store interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""
        raise NotImplementedError

    def close(self) -> None:
        pass


class MemoryStore(KeyValueStore):
    """Dict-backed store, mostly for tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Store all keys in a single JSON object file."""

    def __init__(self, path: str):
        """
        Initialize JSON file store.

        Args:
            path: Path to the JSON file (created on first write)
        """
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as e:
            # Unreadable contents are dropped so the next write replaces the file
            logger.warning(f"Ignoring corrupt store file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring store file {self.path}: not a JSON object")
            return {}
        return data

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a temp file in the same directory so the replace is atomic
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class SqliteStore(KeyValueStore):
    """SQLite-backed store with a single ``kv`` table."""

    def __init__(self, db_path: str):
        """
        Initialize SQLite store.

        Args:
            db_path: Path to SQLite database
        """
        self.db_path = db_path
        path = Path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        self.conn = sqlite3.connect(str(path), check_same_thread=False)
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self.conn.commit()
        logger.debug(f"Initialized SQLite store: {self.db_path}")

    def get(self, key: str) -> Optional[str]:
        row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        self.conn.execute(
            "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
            (key, value)
        )
        self.conn.commit()

    def remove(self, key: str) -> None:
        self.conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()
        logger.debug("Closed SQLite connection")


def create_store(backend: str = "json", json_path: str = None, db_path: str = None) -> KeyValueStore:
    """
    Build a store for the configured backend.

    Args:
        backend: "json", "sqlite" or "memory"
        json_path: Path for the json backend
        db_path: Path for the sqlite backend

    Returns:
        KeyValueStore instance

    Raises:
        ValueError: If the backend is unknown
    """
    if backend == "json":
        return JsonFileStore(json_path or "state/fee_history.json")
    if backend == "sqlite":
        return SqliteStore(db_path or "state/fee_history.db")
    if backend == "memory":
        return MemoryStore()
    raise ValueError(f"Unknown backend: {backend}")
