"""Configuration model for studydash."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, PrivateAttr


class LearningStyle(str, Enum):
    VISUAL = "visual"
    PRACTICAL = "practical"
    AUDITORY = "auditory"
    READING = "reading"


class ApiConfig(BaseModel):
    base_url: str = "http://localhost:5000"
    timeout_seconds: float = 30.0
    _pinned: bool = PrivateAttr(default=False)

    def get_base_url(self) -> str:
        if self._pinned:
            return self.base_url
        return os.environ.get("STUDYDASH_API_BASE_URL") or self.base_url

    def pin_base_url(self, url: str) -> None:
        """Use an explicitly chosen URL; the environment no longer overrides it."""
        self.base_url = url
        self._pinned = True

    def resolved(self) -> "ApiConfig":
        """Copy with environment overrides applied, for handing to a transport."""
        return self.model_copy(update={"base_url": self.get_base_url().rstrip("/")})


class Settings(BaseModel):
    api: ApiConfig = Field(default_factory=ApiConfig)
    default_learning_style: LearningStyle = LearningStyle.VISUAL
    # Ask the policy service again when the learner moves on, not only after scoring.
    requery_on_advance: bool = True
    log_level: str = "INFO"
    data_dir: Path = Path.home() / ".studydash"

    @classmethod
    def load(cls) -> "Settings":
        config_path = Path.home() / ".studydash" / "config.yaml"
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        return cls()

    def save(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        config_path = self.data_dir / "config.yaml"
        with open(config_path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)

    def get_log_level(self) -> str:
        return os.environ.get("STUDYDASH_LOG_LEVEL") or self.log_level
