"""Pydantic configuration models for rapport."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from advisor.preferences import DashboardPreferences, sanitize_preferences

VALID_LLM_PROVIDERS = {"none", "auto", "claude", "openai", "openai-compatible", "ollama"}


def _expand_env(value: Optional[str]) -> Optional[str]:
    if value and value.startswith("${") and value.endswith("}"):
        return os.getenv(value[2:-1], "")
    return value


class LLMConfig(BaseModel):
    """Optional LLM classifier used by the reminder engines."""

    provider: str = "none"
    model: Optional[str] = None  # None = provider default
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout_seconds: float = 12.0
    temperature: float = 0.2
    max_tokens: int = 512
    extra_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in VALID_LLM_PROVIDERS:
            raise ValueError(f"Invalid LLM provider: {v}. Must be one of {VALID_LLM_PROVIDERS}")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}")
        return v

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"temperature must be 0-2, got {v}")
        return v

    @field_validator("max_tokens")
    @classmethod
    def validate_max_tokens(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_tokens must be >= 1, got {v}")
        return v

    @property
    def enabled(self) -> bool:
        return self.provider != "none"


class RemindersConfig(BaseModel):
    """Auto-reminder thresholds."""

    min_confidence: float = 0.72
    resolution_min_confidence: float = 0.72
    max_resolution_candidates: int = 8

    @field_validator("min_confidence", "resolution_min_confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence must be 0-1, got {v}")
        return v

    @field_validator("max_resolution_candidates")
    @classmethod
    def validate_candidates(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_resolution_candidates must be >= 1, got {v}")
        return v


class DashboardConfig(BaseModel):
    """Today Focus / segment queue preferences. Out-of-range values are clamped."""

    focus_limit: int = 4
    segment_limit: int = 2
    cooldown_days: int = 2
    include_low_priority: bool = False

    @model_validator(mode="before")
    @classmethod
    def clamp(cls, data):
        if isinstance(data, dict):
            return sanitize_preferences(data).to_dict()
        return data

    def to_preferences(self) -> DashboardPreferences:
        return DashboardPreferences(
            focus_limit=self.focus_limit,
            segment_limit=self.segment_limit,
            cooldown_days=self.cooldown_days,
            include_low_priority=self.include_low_priority,
        )


class ReviewConfig(BaseModel):
    """Weekly review window."""

    window_days: int = 7
    at_risk_threshold: int = 60
    standup_time: str = "08:00"

    @field_validator("window_days")
    @classmethod
    def validate_window(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"window_days must be >= 1, got {v}")
        return v


class PathsConfig(BaseModel):
    """File paths configuration."""

    snapshot: Path = Path("~/.rapport/snapshot.json")
    reminders_db: Path = Path("~/.rapport/reminders.db")
    log_file: Optional[Path] = None

    @model_validator(mode="after")
    def expand_paths(self):
        """Expand ~ in all paths."""
        self.snapshot = self.snapshot.expanduser()
        self.reminders_db = self.reminders_db.expanduser()
        if self.log_file is not None:
            self.log_file = self.log_file.expanduser()
        return self


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "WARNING"
    json_mode: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class RapportConfig(BaseModel):
    """Main configuration model."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    reminders: RemindersConfig = Field(default_factory=RemindersConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def expand_env_vars(self):
        """Expand ${VAR} patterns in the API key and headers."""
        self.llm.api_key = _expand_env(self.llm.api_key)
        self.llm.extra_headers = {k: _expand_env(v) or "" for k, v in self.llm.extra_headers.items()}
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "RapportConfig":
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="python")
