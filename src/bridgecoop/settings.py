"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = "INFO"
    # Re-check the target row before relaying a client's win claim
    verify_win: bool = False

    @field_validator("log_level")
    @classmethod
    def ensure_known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Unknown log level {value!r}. Choose one of {', '.join(LOG_LEVELS)}."
            )
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        values = {
            "host": env.get("BRIDGE_HOST"),
            "port": env.get("BRIDGE_PORT"),
            "log_level": env.get("BRIDGE_LOG_LEVEL"),
            "verify_win": env.get("BRIDGE_VERIFY_WIN"),
        }
        return cls(**{key: value for key, value in values.items() if value is not None})
