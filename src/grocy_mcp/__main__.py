"""
MCP server entry point for Grocy integration.

Run with: python -m grocy_mcp
"""

import logging
import sys

from grocy_mcp.config import get_config, setup_logging
from grocy_mcp.exceptions import ConfigurationError
from grocy_mcp.server import create_server

log = logging.getLogger("grocy_mcp")


def main() -> None:
    """Read configuration and serve MCP over stdio until the client disconnects."""
    setup_logging()

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        log.info("Using Grocy base URL: %s", config.base_url)
        mcp = create_server(config)
        mcp.run(transport="stdio", show_banner=False)
    except Exception:
        log.exception("Fatal error running Grocy MCP server")
        sys.exit(1)

    log.info("Server exited normally")


if __name__ == "__main__":
    main()
