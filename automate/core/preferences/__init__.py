"""Mode preference storage.

Holds the global autonomy mode and sparse per-scope overrides. Reads
never fail: malformed or unreachable durable storage falls back to the
last known in-memory value, which starts as the defaults.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from automate.config import Settings
from automate.core.preferences.storage import (
    InMemoryBackend,
    JsonFileBackend,
    PreferenceBackend,
    StorageUnavailableError,
    get_preference_backend,
)
from automate.core.schemas.models import AutomationMode, ModePreferences

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "automate.mode-preferences"

_VALID_MODES = {m.value for m in AutomationMode}


def _is_mode(value: Any) -> bool:
    return isinstance(value, str) and value in _VALID_MODES


class SaveResult(BaseModel):
    """Outcome of a save: the cache is always updated, disk may not be."""

    preferences: ModePreferences
    persisted: bool
    error: str | None = None


def parse_preferences(raw: str | None) -> ModePreferences | None:
    """Parse a persisted record, or return None if it is unusable.

    An unknown or missing ``globalMode`` invalidates the whole record.
    Overrides with unknown modes are dropped one by one.
    """
    if not raw:
        return None
    try:
        data: Any = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed preference record (not JSON)")
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring malformed preference record (not an object)")
        return None

    global_mode = data.get("globalMode")
    if not _is_mode(global_mode):
        logger.warning("Ignoring preference record with globalMode=%r", global_mode)
        return None

    overrides = data.get("scopeOverrides") or {}
    if not isinstance(overrides, dict):
        logger.warning("Discarding non-object scopeOverrides in preference record")
        overrides = {}
    clean_overrides = {}
    for scope, mode in overrides.items():
        if _is_mode(mode):
            clean_overrides[str(scope)] = mode
        else:
            logger.warning("Dropping override for scope %s with unknown mode %r", scope, mode)

    record: dict[str, Any] = {"globalMode": global_mode, "scopeOverrides": clean_overrides}
    if data.get("updatedAt"):
        record["updatedAt"] = data["updatedAt"]
    try:
        return ModePreferences.model_validate(record)
    except ValidationError:
        # Only updatedAt can still be wrong here
        record.pop("updatedAt", None)
        logger.warning("Ignoring unparseable updatedAt in preference record")
        return ModePreferences.model_validate(record)


class ModePreferenceStore:
    """Durable, namespaced storage of ModePreferences.

    The in-memory copy is authoritative for the life of the process;
    the backend is best effort. Once a durable write fails, reads are
    served from memory until a later write succeeds. Writes are
    last-writer-wins.
    """

    def __init__(
        self,
        backend: PreferenceBackend | None = None,
        namespace: str = DEFAULT_NAMESPACE,
        clock: Callable[[], datetime] | None = None,
        on_write_error: Callable[[Exception], None] | None = None,
    ):
        self.backend = backend if backend is not None else InMemoryBackend()
        self.namespace = namespace
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._on_write_error = on_write_error
        self._cache = ModePreferences()
        self._durable_stale = False
        self.last_save: SaveResult | None = None

    def load(self) -> ModePreferences:
        """Return persisted preferences, else the last known in-memory value."""
        if self._durable_stale:
            return self._cache.model_copy(deep=True)

        try:
            raw = self.backend.read(self.namespace)
        except Exception as e:
            logger.warning("Preference storage unavailable, using in-memory value: %s", e)
            return self._cache.model_copy(deep=True)

        prefs = parse_preferences(raw)
        if prefs is None:
            return self._cache.model_copy(deep=True)

        self._cache = prefs
        return prefs.model_copy(deep=True)

    def save(self, prefs: ModePreferences) -> SaveResult:
        """Stamp and store preferences. Never raises on storage failure."""
        stamped = prefs.model_copy(update={"updated_at": self._clock()}, deep=True)
        self._cache = stamped

        try:
            self.backend.write(self.namespace, json.dumps(stamped.to_record()))
        except Exception as e:
            logger.warning(
                "Failed to persist mode preferences (namespace=%s): %s",
                self.namespace,
                e,
            )
            self._durable_stale = True
            if self._on_write_error is not None:
                self._on_write_error(e)
            result = SaveResult(preferences=stamped, persisted=False, error=str(e))
        else:
            self._durable_stale = False
            result = SaveResult(preferences=stamped, persisted=True)

        self.last_save = result
        return result

    # =========================================================================
    # Convenience mutations (full load-modify-save round trips)
    # =========================================================================

    def set_global_mode(self, mode: AutomationMode) -> ModePreferences:
        mode = AutomationMode(mode)
        prefs = self.load()
        prefs.global_mode = mode
        logger.info("Global automation mode set to %s", mode.value)
        return self.save(prefs).preferences

    def set_scope_override(self, scope: str, mode: AutomationMode) -> ModePreferences:
        mode = AutomationMode(mode)
        prefs = self.load()
        prefs.scope_overrides[scope] = mode
        logger.info("Automation mode override for %s set to %s", scope, mode.value)
        return self.save(prefs).preferences

    def clear_scope_override(self, scope: str) -> ModePreferences:
        prefs = self.load()
        if prefs.scope_overrides.pop(scope, None) is not None:
            logger.info("Cleared automation mode override for %s", scope)
        return self.save(prefs).preferences

    def has_override(self, scope: str) -> bool:
        return scope in self.load().scope_overrides


def create_preference_store(
    settings: Settings | None = None,
    on_write_error: Callable[[Exception], None] | None = None,
) -> ModePreferenceStore:
    """Build a store from settings."""
    settings = settings or Settings()
    backend = get_preference_backend(
        {"type": settings.storage_type, "path": settings.storage_path}
    )
    return ModePreferenceStore(
        backend=backend,
        namespace=settings.preferences_namespace,
        on_write_error=on_write_error,
    )


__all__ = [
    "DEFAULT_NAMESPACE",
    "InMemoryBackend",
    "JsonFileBackend",
    "ModePreferenceStore",
    "PreferenceBackend",
    "SaveResult",
    "StorageUnavailableError",
    "create_preference_store",
    "parse_preferences",
]
