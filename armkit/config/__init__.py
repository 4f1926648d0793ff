"""Configuration management for armkit."""

from armkit.config.settings import (
    DEFAULT_BASE_URL,
    DEFAULT_USER_AGENT,
    ClientConfig,
    load_config,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_USER_AGENT",
    "ClientConfig",
    "load_config",
]
