"""Configuration model for taskcore."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel


class TaskCoreConfig(BaseModel):
    """Settings for the store and its console output."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = None
    default_priority: Literal["low", "medium", "high"] = "medium"
    console_observer: bool = True
    time_format: str = "%H:%M:%S"

    @classmethod
    def load(cls, path: Path | None = None) -> TaskCoreConfig:
        """Load configuration from file or return defaults."""
        if path is None:
            path = CONFIG_FILE

        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        return cls.model_validate(data)

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        if path is None:
            path = CONFIG_FILE

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(exclude_none=True), f, indent=2)


TASKCORE_DIR = Path(".taskcore")
CONFIG_FILE = TASKCORE_DIR / "config.json"
