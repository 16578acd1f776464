"""Key-value backends for persisted preferences.

Each backend stores one opaque string record per namespaced key.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class StorageUnavailableError(Exception):
    """Durable storage cannot be read or written."""


class PreferenceBackend(ABC):
    """Base class for namespaced key-value storage."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the stored record for ``key``, or None if absent."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Overwrite the record for ``key``."""


class InMemoryBackend(PreferenceBackend):
    """Dict-backed storage.

    Constructed with ``available=False`` it behaves like disabled browser
    storage: every read and write raises StorageUnavailableError.
    """

    def __init__(self, available: bool = True):
        self.available = available
        self._records: dict[str, str] = {}

    def _check(self) -> None:
        if not self.available:
            raise StorageUnavailableError("in-memory backend is disabled")

    def read(self, key: str) -> str | None:
        self._check()
        return self._records.get(key)

    def write(self, key: str, value: str) -> None:
        self._check()
        self._records[key] = value


class JsonFileBackend(PreferenceBackend):
    """File-based storage, one JSON file per key.

    WARNING: no file locking. Concurrent writers race and the last
    write wins.
    """

    def __init__(self, storage_path: str | Path):
        """Initialize file storage.

        Args:
            storage_path: Directory to store preference records
        """
        self.storage_path = Path(storage_path)
        logger.info("JsonFileBackend initialized at %s", self.storage_path)

    def _key_file(self, key: str) -> Path:
        """Get the file path for a key."""
        # Sanitize key to prevent path traversal
        safe_key = "".join(c for c in key if c.isalnum() or c in "-_.").strip(".")
        if not safe_key:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.storage_path / f"{safe_key}.json"

    def read(self, key: str) -> str | None:
        file_path = self._key_file(key)
        if not file_path.exists():
            return None
        try:
            return file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageUnavailableError(f"Cannot read {file_path}: {e}") from e

    def write(self, key: str, value: str) -> None:
        file_path = self._key_file(key)
        try:
            self.storage_path.mkdir(parents=True, exist_ok=True)
            file_path.write_text(value, encoding="utf-8")
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write {file_path}: {e}") from e
        logger.debug("Wrote preference record %s", file_path)


# Factory function
def get_preference_backend(config: dict[str, Any] | None = None) -> PreferenceBackend:
    """Get a backend instance based on configuration."""
    if config and config.get("type") == "memory":
        return InMemoryBackend()

    # Default to file storage
    storage_path = config.get("path", "data/preferences") if config else "data/preferences"
    return JsonFileBackend(storage_path)
