"""Configuration models for dayorg."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

ENV_PREFIX = "DAYORG"


class StoreConfig(BaseModel):
    """Configuration for the remote task store."""

    base_url: str = "http://localhost:8080"
    tasks_path: str = "/tasks"
    # Transport policy only; the core itself enforces no timeouts.
    timeout_seconds: float = 10.0


class ViewConfig(BaseModel):
    """Configuration for the task projections."""

    default_mode: Literal["list", "calendar"] = "list"


class EditingConfig(BaseModel):
    """Configuration for the edit session."""

    guard_double_submit: bool = True


class LoggingConfig(BaseModel):
    """Configuration for logging output."""

    level: str = "INFO"
    file: str | None = None


class DayorgConfig(BaseModel):
    """Main configuration for dayorg."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    editing: EditingConfig = Field(default_factory=EditingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | None = None) -> DayorgConfig:
        """Load configuration from file or return defaults.

        Environment variables override the file:
        DAYORG_BASE_URL and DAYORG_LOG_LEVEL.
        """
        if path is None:
            path = CONFIG_FILE

        if path.exists():
            with open(path) as f:
                data = json.load(f)
            config = cls.model_validate(data)
        else:
            config = cls()

        return config.with_env_overrides()

    def with_env_overrides(self) -> DayorgConfig:
        """Return a copy with environment overrides applied."""
        config = self.model_copy(deep=True)

        base_url = os.getenv(f"{ENV_PREFIX}_BASE_URL")
        if base_url and base_url.strip():
            config.store.base_url = base_url.strip()

        log_level = os.getenv(f"{ENV_PREFIX}_LOG_LEVEL")
        if log_level and log_level.strip():
            config.logging.level = log_level.strip().upper()

        return config

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        if path is None:
            path = CONFIG_FILE

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(exclude_none=True), f, indent=2)


# Default config directory
DAYORG_DIR = Path(".dayorg")
CONFIG_FILE = DAYORG_DIR / "config.json"
