"""Configuration helpers for SheetFlow runtime settings.

Settings live in ``settings.yaml`` next to this module. An optional
``settings.local.yaml`` sibling is deep-merged on top so deployments can
override webhook URLs without editing the packaged defaults. String values may
reference environment variables as ``${NAME}``; ``.env`` is loaded first.
"""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sheetflow.core.errors import ConfigError
from sheetflow.core.logger import debug_log


CONFIG_DIR = Path(__file__).resolve().parent
DEFAULT_SETTINGS_PATH = CONFIG_DIR / "settings.yaml"
LOCAL_OVERRIDE_NAME = "settings.local.yaml"

CONFIG_PATH_ENV = "SHEETFLOW_CONFIG"
DEBUG_ENV = "SHEETFLOW_DEBUG"

DEFAULT_CACHE_TTL_SECONDS = 21600

WEBHOOK_OPERATIONS = (
    "GROOM_EPICS",
    "GROOM_USER_STORIES_AND_TASKS",
    "GROOM_SUBTASKS",
    "ESTIMATE_SUBTASKS",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}


class RetrySettings(BaseModel):
    """Retry parameters for webhook deliveries."""

    model_config = ConfigDict(extra="forbid")

    max_attempts: int = Field(default=1, ge=1)
    backoff_ms: int = Field(default=500, ge=0)
    max_backoff_ms: int = Field(default=5000, ge=0)


class WebhookSettings(BaseModel):
    """HTTP behaviour of the outbound webhook client."""

    model_config = ConfigDict(extra="forbid")

    timeout_sec: float = Field(default=30.0, gt=0)
    retries: RetrySettings = Field(default_factory=RetrySettings)


class CacheSettings(BaseModel):
    """Context cache settings."""

    model_config = ConfigDict(extra="forbid")

    ttl_seconds: int = Field(default=DEFAULT_CACHE_TTL_SECONDS, gt=0)
    path: str | None = None


class Settings(BaseModel):
    """Resolved runtime settings, passed explicitly to services."""

    model_config = ConfigDict(extra="forbid")

    webhooks: Dict[str, str] = Field(default_factory=dict)
    debug: bool = False
    cache: CacheSettings = Field(default_factory=CacheSettings)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)


def load_settings(path: str | Path | None = None, *, env_file: str | Path | None = None) -> Settings:
    """Load settings from YAML, applying local overrides and env expansion.

    Args:
        path: Explicit settings file. Falls back to ``$SHEETFLOW_CONFIG`` and
            then to the packaged ``settings.yaml``.
        env_file: Optional ``.env`` file to load before expansion.

    Raises:
        ConfigError: If the file is missing, malformed, references an unset
            environment variable or fails validation.
    """

    load_dotenv(dotenv_path=env_file, override=False)
    settings_path = _resolve_settings_path(path)
    raw = _load_yaml(settings_path)
    override_path = settings_path.with_name(LOCAL_OVERRIDE_NAME)
    if override_path.exists():
        raw = _deep_merge(raw, _load_yaml(override_path))
    expanded = _expand_env(raw)
    debug_env = os.getenv(DEBUG_ENV)
    if debug_env is not None and debug_env.strip():
        expanded["debug"] = debug_env.strip().lower() in _TRUE_VALUES
    try:
        return Settings.model_validate(expanded)
    except ValidationError as exc:
        raise ConfigError(f"invalid settings in {settings_path}: {exc}") from exc


def get_webhook_url(settings: Settings, operation: str) -> str | None:
    """Return the webhook URL configured for ``operation`` or ``None``."""

    debug_log(settings, f"Retrieving webhook URL for operation: {operation}")
    url = settings.webhooks.get(operation)
    if not url or not url.strip():
        return None
    return url.strip()


def _resolve_settings_path(path: str | Path | None) -> Path:
    if path:
        return Path(path)
    env = os.getenv(CONFIG_PATH_ENV)
    if env:
        return Path(env)
    return DEFAULT_SETTINGS_PATH


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"settings file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid yaml in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"settings must be a mapping: {path}")
    return data


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(value, Mapping):
            merged[key] = _deep_merge(base_value, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def _expand_env(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, str):
        expanded = os.path.expandvars(value)
        if "${" in expanded:
            raise ConfigError(f"Environment variable not set for value: {value}")
        return expanded
    return value


__all__ = [
    "CacheSettings",
    "RetrySettings",
    "Settings",
    "WebhookSettings",
    "WEBHOOK_OPERATIONS",
    "DEFAULT_CACHE_TTL_SECONDS",
    "get_webhook_url",
    "load_settings",
]
