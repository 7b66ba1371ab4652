"""
Runtime configuration, read from the environment.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping
import os


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    # Default target score for new rooms
    target_score: int = 100
    # Optimistic-concurrency attempts per action before giving up
    max_commit_retries: int = 5
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def accepts_seeds(self) -> bool:
        """Whether clients may choose a room's seed. A known seed reveals every deal."""
        return self.env in ("development", "test")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            env=env.get("SEN_ENV", "development"),
            target_score=int(env.get("SEN_TARGET_SCORE", "100")),
            max_commit_retries=int(env.get("SEN_MAX_COMMIT_RETRIES", "5")),
            log_level=env.get("SEN_LOG_LEVEL", "INFO").upper(),
            allowed_origins=env.get("ALLOWED_ORIGINS", "*").split(","),
        )
