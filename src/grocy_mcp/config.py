"""
Configuration management for the Grocy MCP server.
"""

import logging
import os
from dataclasses import dataclass

from grocy_mcp.exceptions import ConfigurationError

DEFAULT_BASE_URL = "http://grocy:80/api"


def setup_logging() -> None:
    """
    Configure root logging for the server process.

    Logs always go to stderr; stdout carries the MCP protocol stream.
    The level is read from MCP_LOG_LEVEL (default INFO).
    """
    level = os.environ.get("MCP_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@dataclass(frozen=True)
class GrocyConfig:
    """Configuration for the Grocy integration."""

    base_url: str
    api_key: str

    def __post_init__(self):
        # Endpoint paths start with a slash
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))


def get_config() -> GrocyConfig:
    """
    Get Grocy configuration from environment.

    Environment variables:
        GROCY_BASE_URL: Grocy API root (e.g., http://localhost:9283/api)
        GROCY_BASE_API: Legacy alias for GROCY_BASE_URL
        GROCY_API_KEY: Grocy API key

    Returns:
        GrocyConfig instance

    Raises:
        ConfigurationError: If the API key is missing
    """
    base_url = (
        os.environ.get("GROCY_BASE_URL")
        or os.environ.get("GROCY_BASE_API")
        or DEFAULT_BASE_URL
    )
    api_key = os.environ.get("GROCY_API_KEY")

    if not api_key:
        raise ConfigurationError("GROCY_API_KEY environment variable is required")

    return GrocyConfig(base_url=base_url, api_key=api_key)
