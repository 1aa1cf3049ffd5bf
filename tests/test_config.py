"""
Tests for Grocy MCP configuration.
"""

import dataclasses
import logging

import pytest

from grocy_mcp.config import DEFAULT_BASE_URL, GrocyConfig, get_config, setup_logging
from grocy_mcp.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GROCY_BASE_URL", "GROCY_BASE_API", "GROCY_API_KEY", "MCP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestGetConfig:
    """Tests for reading configuration from the environment."""

    def test_reads_base_url_and_key(self, monkeypatch):
        monkeypatch.setenv("GROCY_BASE_URL", "http://localhost:9283/api")
        monkeypatch.setenv("GROCY_API_KEY", "secret")
        config = get_config()
        assert config.base_url == "http://localhost:9283/api"
        assert config.api_key == "secret"

    def test_legacy_base_api_alias(self, monkeypatch):
        monkeypatch.setenv("GROCY_BASE_API", "http://legacy:80/api")
        monkeypatch.setenv("GROCY_API_KEY", "secret")
        assert get_config().base_url == "http://legacy:80/api"

    def test_base_url_wins_over_legacy_alias(self, monkeypatch):
        monkeypatch.setenv("GROCY_BASE_URL", "http://new/api")
        monkeypatch.setenv("GROCY_BASE_API", "http://old/api")
        monkeypatch.setenv("GROCY_API_KEY", "secret")
        assert get_config().base_url == "http://new/api"

    def test_default_base_url(self, monkeypatch):
        monkeypatch.setenv("GROCY_API_KEY", "secret")
        assert get_config().base_url == DEFAULT_BASE_URL

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.setenv("GROCY_BASE_URL", "http://localhost:9283/api")
        with pytest.raises(ConfigurationError, match="GROCY_API_KEY"):
            get_config()

    def test_empty_api_key(self, monkeypatch):
        monkeypatch.setenv("GROCY_API_KEY", "")
        with pytest.raises(ConfigurationError):
            get_config()


class TestGrocyConfig:
    """Tests for the configuration value."""

    def test_trailing_slash_stripped(self):
        config = GrocyConfig(base_url="http://grocy/api/", api_key="k")
        assert config.base_url == "http://grocy/api"

    def test_immutable(self):
        config = GrocyConfig(base_url="http://grocy/api", api_key="k")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.api_key = "other"


class TestSetupLogging:
    """Tests for logging setup."""

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("MCP_LOG_LEVEL", "debug")
        root = logging.getLogger()
        previous_handlers, previous_level = root.handlers[:], root.level
        root.handlers = []
        try:
            setup_logging()
            assert root.level == logging.DEBUG
        finally:
            root.handlers = previous_handlers
            root.setLevel(previous_level)
