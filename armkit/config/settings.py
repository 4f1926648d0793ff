"""Client configuration settings and loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import pydantic
import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from armkit.errors import ConfigValidationError

DEFAULT_BASE_URL = "https://management.azure.com"
DEFAULT_USER_AGENT = "armkit/0.3.0"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ClientConfig(BaseSettings):
    """Process-wide settings consumed by the request pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="ARMKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = DEFAULT_BASE_URL
    subscription_id: str | None = None
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US"
    timeout: float = 60.0
    connect_timeout: float | None = None
    proxy: str | None = None
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("base_url", mode="before")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Valid: {sorted(_LOG_LEVELS)}")
        return level

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


def load_config(config_path: str | Path | None = None, **overrides: Any) -> ClientConfig:
    """Load configuration from file and environment.

    Priority: explicit overrides > env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}

    config_data.update(_get_env_overrides())
    config_data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ClientConfig(**config_data)
    except pydantic.ValidationError as e:
        raise ConfigValidationError(f"Invalid client configuration: {e}", cause=e) from e


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "ARMKIT_BASE_URL": "base_url",
        "ARMKIT_SUBSCRIPTION_ID": "subscription_id",
        "ARMKIT_TIMEOUT": ("timeout", float),
        "ARMKIT_CONNECT_TIMEOUT": ("connect_timeout", float),
        "ARMKIT_PROXY": "proxy",
        "ARMKIT_JSON_LOGS": ("json_logs", lambda x: x.lower() in ("true", "1", "yes")),
    }

    for env_key, config_key in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            if isinstance(config_key, tuple):
                key, converter = config_key
                overrides[key] = converter(value)
            else:
                overrides[config_key] = value

    return overrides
