"""Tests for client configuration."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from armkit.config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT, ClientConfig, load_config
from armkit.errors import ConfigValidationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ARMKIT_BASE_URL",
        "ARMKIT_SUBSCRIPTION_ID",
        "ARMKIT_TIMEOUT",
        "ARMKIT_JSON_LOGS",
        "ARMKIT_USER_AGENT",
        "ARMKIT_LOG_LEVEL",
        "ARMKIT_CONNECT_TIMEOUT",
        "ARMKIT_PROXY",
    ):
        monkeypatch.delenv(name, raising=False)


class TestClientConfig:
    """Tests for ClientConfig defaults and validation."""

    def test_defaults(self) -> None:
        config = ClientConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.user_agent == DEFAULT_USER_AGENT
        assert config.accept_language == "en-US"
        assert config.subscription_id is None
        assert config.timeout == 60.0
        assert config.connect_timeout is None
        assert config.proxy is None
        assert config.log_level_value == logging.INFO

    def test_base_url_trailing_slash_stripped(self) -> None:
        config = ClientConfig(base_url="https://management.test/")
        assert config.base_url == "https://management.test"

    def test_rejects_non_http_base_url(self) -> None:
        with pytest.raises(ValueError):
            ClientConfig(base_url="ftp://management.test")

    def test_log_level_normalized(self) -> None:
        assert ClientConfig(log_level="debug").log_level == "DEBUG"

    def test_rejects_unknown_log_level(self) -> None:
        with pytest.raises(ValueError):
            ClientConfig(log_level="chatty")

    def test_reads_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ARMKIT_SUBSCRIPTION_ID", "sub-from-env")
        monkeypatch.setenv("ARMKIT_USER_AGENT", "ci-bot/2.0")
        config = ClientConfig()
        assert config.subscription_id == "sub-from-env"
        assert config.user_agent == "ci-bot/2.0"


class TestLoadConfig:
    """Tests for load_config."""

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "armkit.yaml"
        path.write_text(
            "base_url: https://management.usgovcloudapi.net\n"
            "subscription_id: sub-from-file\n"
            "timeout: 15\n"
        )
        config = load_config(path)
        assert config.base_url == "https://management.usgovcloudapi.net"
        assert config.subscription_id == "sub-from-file"
        assert config.timeout == 15.0

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "absent.yaml")
        assert config.base_url == DEFAULT_BASE_URL

    def test_priority(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "armkit.yaml"
        path.write_text("subscription_id: from-file\ntimeout: 10\naccept_language: fr-FR\n")
        monkeypatch.setenv("ARMKIT_SUBSCRIPTION_ID", "from-env")
        monkeypatch.setenv("ARMKIT_TIMEOUT", "20")

        config = load_config(path, timeout=30)

        assert config.accept_language == "fr-FR"
        assert config.subscription_id == "from-env"
        assert config.timeout == 30.0

    def test_connection_settings_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ARMKIT_CONNECT_TIMEOUT", "2.5")
        monkeypatch.setenv("ARMKIT_PROXY", "http://proxy.internal:3128")

        config = load_config(None)

        assert config.connect_timeout == 2.5
        assert config.proxy == "http://proxy.internal:3128"

    def test_none_overrides_ignored(self) -> None:
        config = load_config(None, subscription_id=None)
        assert config.subscription_id is None

    def test_invalid_value_wrapped(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(None, base_url="not a url")
        assert "Invalid client configuration" in exc_info.value.message
