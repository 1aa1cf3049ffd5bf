"""
Exception types for the Grocy MCP server.

All exceptions inherit from GrocyMCPError so callers can catch any
server-side error in one place.
"""


class GrocyMCPError(Exception):
    """Base exception for all Grocy MCP errors."""

    pass


class ConfigurationError(GrocyMCPError):
    """Raised when required configuration is missing or invalid."""

    pass


class UnitConversionError(GrocyMCPError):
    """Raised when a unit name is not part of the conversion table."""

    pass
