"""Global configuration values, overridable via environment (or a .env file loaded by the CLI)."""
from __future__ import annotations

import os
from dataclasses import dataclass


DEFAULT_MODEL = "gpt-5-mini"


@dataclass(frozen=True)
class Settings:
    openai_model: str = DEFAULT_MODEL
    match_threshold: float = 5.0
    top_n: int = 10
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openai_model=os.environ.get("OPENAI_MODEL", DEFAULT_MODEL),
            match_threshold=float(os.environ.get("BRIDGE_MATCH_THRESHOLD", "5.0")),
            top_n=int(os.environ.get("BRIDGE_TOP_N", "10")),
            log_level=os.environ.get("BRIDGE_LOG_LEVEL", "INFO").upper(),
        )
