"""Configuration loading: YAML file, then environment overrides."""

import json
import os
from pathlib import Path
from typing import Optional

import structlog
import yaml

from .config_models import RapportConfig

logger = structlog.get_logger()

# env var -> (section, key, parser)
_ENV_OVERRIDES = {
    "REMINDER_LLM_PROVIDER": ("llm", "provider", str),
    "REMINDER_LLM_MODEL": ("llm", "model", str),
    "REMINDER_LLM_BASE_URL": ("llm", "base_url", str),
    "REMINDER_LLM_API_KEY": ("llm", "api_key", str),
    "REMINDER_LLM_TIMEOUT_MS": ("llm", "timeout_seconds", lambda v: float(v) / 1000),
    "REMINDER_LLM_TEMPERATURE": ("llm", "temperature", float),
    "REMINDER_LLM_MAX_TOKENS": ("llm", "max_tokens", int),
    "REMINDER_LLM_HEADERS_JSON": ("llm", "extra_headers", json.loads),
    "AUTO_REMINDER_MIN_CONFIDENCE": ("reminders", "min_confidence", float),
    "AUTO_REMINDER_RESOLUTION_MIN_CONFIDENCE": ("reminders", "resolution_min_confidence", float),
}


def find_config() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / "rapport.yaml",
        Path.home() / ".rapport" / "config.yaml",
    ]
    for loc in locations:
        if loc.exists():
            return loc
    return None


def apply_env_overrides(data: dict, environ: Optional[dict] = None) -> dict:
    """Overlay REMINDER_LLM_* / AUTO_REMINDER_* variables onto raw config data.

    Unparseable values are ignored with a warning; the file value (or default) stays.
    """
    environ = os.environ if environ is None else environ
    result = {key: dict(value) if isinstance(value, dict) else value for key, value in data.items()}
    for env_var, (section, key, parse) in _ENV_OVERRIDES.items():
        raw = environ.get(env_var)
        if raw is None or raw.strip() == "":
            continue
        try:
            value = parse(raw.strip())
        except (ValueError, TypeError) as e:
            logger.warning("config.env_override_invalid", variable=env_var, error=str(e))
            continue
        if key == "extra_headers" and not isinstance(value, dict):
            logger.warning("config.env_override_invalid", variable=env_var, error="expected a JSON object")
            continue
        result.setdefault(section, {})
        if not isinstance(result[section], dict):
            result[section] = {}
        result[section][key] = value
    return result


def load_config_model(
    config_path: Optional[Path] = None, environ: Optional[dict] = None
) -> RapportConfig:
    """Load configuration as Pydantic model with validation."""
    base_config = {}

    path = config_path or find_config()
    if path and Path(path).exists():
        try:
            with open(path) as f:
                base_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")
        if not isinstance(base_config, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")

    data = apply_env_overrides(base_config, environ)
    try:
        return RapportConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Config validation failed: {e}")


def create_structured_llm(config: RapportConfig):
    """StructuredLLM for the reminder engines, or None when disabled/unavailable."""
    from llm import LLMError, StructuredLLM, create_llm_provider

    llm_cfg = config.llm
    if not llm_cfg.enabled:
        return None
    try:
        provider = create_llm_provider(
            provider=llm_cfg.provider,
            api_key=llm_cfg.api_key or None,
            model=llm_cfg.model,
            base_url=llm_cfg.base_url,
            timeout=llm_cfg.timeout_seconds,
            temperature=llm_cfg.temperature,
            extra_headers=llm_cfg.extra_headers or None,
        )
    except LLMError as e:
        logger.warning("config.llm_unavailable", provider=llm_cfg.provider, error=str(e))
        return None
    return StructuredLLM(provider, max_tokens=llm_cfg.max_tokens)
