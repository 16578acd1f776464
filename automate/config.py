"""AUTOMATE configuration via pydantic-settings."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="AUTOMATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === PREFERENCE STORAGE ===
    storage_type: Literal["file", "memory"] = "file"
    storage_path: str = "data/preferences"
    preferences_namespace: str = "automate.mode-preferences"

    # === CONFIDENCE GATE ===
    low_confidence_threshold: float = 70.0
    moderate_confidence_threshold: float = 80.0

    # === QUEUE DISPLAY ===
    manual_secondary_limit: int = 8
    assisted_secondary_limit: int = 3  # Copilot and Autopilot

    # === CEILINGS ===
    ceiling_policy_path: str | None = None

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @model_validator(mode="after")
    def _check_thresholds(self) -> "Settings":
        if not 0 <= self.low_confidence_threshold <= 100:
            raise ValueError("low_confidence_threshold must be within 0..100")
        if not 0 <= self.moderate_confidence_threshold <= 100:
            raise ValueError("moderate_confidence_threshold must be within 0..100")
        if self.low_confidence_threshold > self.moderate_confidence_threshold:
            raise ValueError(
                "low_confidence_threshold cannot exceed moderate_confidence_threshold"
            )
        if self.manual_secondary_limit < 0 or self.assisted_secondary_limit < 0:
            raise ValueError("secondary limits must be non-negative")
        return self


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging at the configured level."""
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level))
