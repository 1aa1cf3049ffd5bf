"""
grocy-mcp-server: Grocy inventory management exposed as MCP tools.

Provides stock, shopping list, recipe, chore, task and battery tools
backed by the Grocy REST API.
"""

from grocy_mcp.client import GrocyClient
from grocy_mcp.config import GrocyConfig, get_config
from grocy_mcp.exceptions import (
    ConfigurationError,
    GrocyMCPError,
    UnitConversionError,
)
from grocy_mcp.server import create_server

__version__ = "1.0.0"

__all__ = [
    "GrocyClient",
    "GrocyConfig",
    "get_config",
    "create_server",
    # Exceptions
    "GrocyMCPError",
    "ConfigurationError",
    "UnitConversionError",
]
