"""
FastMCP server definition for Grocy.
"""

from contextlib import asynccontextmanager

from fastmcp import FastMCP

from grocy_mcp.client import GrocyClient
from grocy_mcp.config import GrocyConfig
from grocy_mcp.tools import register_tools


def create_server(config: GrocyConfig, client: GrocyClient | None = None) -> FastMCP:
    """
    Create the MCP server with every Grocy tool registered.

    A client built here is closed when the server shuts down; a client
    passed in stays open and belongs to the caller.

    Args:
        config: Grocy configuration, read once at startup
        client: Optional pre-built client (defaults to one built from config)

    Returns:
        Configured FastMCP server
    """
    owns_client = client is None
    grocy = client or GrocyClient(config)

    @asynccontextmanager
    async def lifespan(server: FastMCP):
        try:
            yield
        finally:
            if owns_client:
                await grocy.aclose()

    mcp = FastMCP(
        "grocy-mcp-server",
        instructions=(
            "Grocy household management: stock, shopping lists, recipes, "
            "chores, tasks and batteries"
        ),
        lifespan=lifespan,
    )
    register_tools(mcp, grocy)
    return mcp
