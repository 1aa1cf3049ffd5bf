"""
Interactive MCP client for manually testing a remote Grocy MCP server.

Spawns the server over ssh and speaks MCP on its stdin/stdout, the same way
a desktop MCP client would.

Run with: python -m grocy_mcp.dev_client

Set MCP_SSH_ARGS to a JSON array of ssh arguments, e.g.
    MCP_SSH_ARGS='["me@nas", "docker", "exec", "-i", "grocy-mcp", "grocy-mcp-server"]'
"""

import asyncio
import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any

from fastmcp import Client
from fastmcp.client.transports import StdioTransport

from grocy_mcp.config import setup_logging
from grocy_mcp.exceptions import ConfigurationError

DEFAULT_SSH_ARGS = [
    "grocy-host",
    "docker",
    "exec",
    "-i",
    "grocy-mcp-server",
    "grocy-mcp-server",
]

HELP_TEXT = "Commands: list | call <toolName> <jsonArgs> | exit"


def get_ssh_args() -> list[str]:
    """
    Read the ssh command line from MCP_SSH_ARGS.

    Raises:
        ConfigurationError: If MCP_SSH_ARGS is not a JSON array of strings
    """
    raw = os.environ.get("MCP_SSH_ARGS")
    if not raw:
        return list(DEFAULT_SSH_ARGS)

    try:
        args = json.loads(raw)
    except ValueError as e:
        raise ConfigurationError(f"MCP_SSH_ARGS is not valid JSON: {e}") from e

    if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
        raise ConfigurationError("MCP_SSH_ARGS must be a JSON array of strings")
    return args


@dataclass(frozen=True)
class Command:
    """A parsed REPL command."""

    name: str
    tool: str | None = None
    arguments: dict[str, Any] = field(default_factory=dict)


def parse_command(line: str) -> Command | None:
    """
    Parse one REPL line.

    Returns None for blank lines.

    Raises:
        ValueError: If a call command has no tool name or bad JSON arguments
    """
    trimmed = line.strip()
    if not trimmed:
        return None

    name, _, rest = trimmed.partition(" ")
    if name != "call":
        return Command(name)

    tool, _, args_json = rest.strip().partition(" ")
    if not tool:
        raise ValueError("Usage: call <toolName> <jsonArgs>")

    arguments = json.loads(args_json.strip() or "{}")
    if not isinstance(arguments, dict):
        raise ValueError("Tool arguments must be a JSON object")
    return Command(name, tool, arguments)


async def run_command(client: Client, command: Command) -> str:
    """Execute a parsed command against a connected client and render the output."""
    if command.name == "list":
        tools = await client.list_tools()
        return json.dumps(
            [t.model_dump(mode="json", exclude_none=True) for t in tools],
            indent=2,
            ensure_ascii=False,
        )

    if command.name == "call":
        result = await client.call_tool(command.tool, command.arguments, raise_on_error=False)
        return json.dumps(
            {
                "content": [c.model_dump(mode="json", exclude_none=True) for c in result.content],
                "isError": result.is_error,
            },
            indent=2,
            ensure_ascii=False,
        )

    if command.name == "help":
        return HELP_TEXT

    return "Unknown command. Type help for usage."


async def repl(client: Client) -> None:
    """Read commands from stdin until exit or end of input."""
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break

        try:
            command = parse_command(line)
        except ValueError as e:
            print(f"Error: {e}")
            continue

        if command is None:
            continue
        if command.name == "exit":
            print("Exiting...")
            break

        try:
            print(await run_command(client, command))
        except Exception as e:
            print(f"Error: {e}")


def main() -> None:
    setup_logging()

    try:
        ssh_args = get_ssh_args()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print("Spawning: ssh " + " ".join(ssh_args))
    client = Client(StdioTransport(command="ssh", args=ssh_args))

    async def _run() -> None:
        async with client:
            print("Connected to MCP server over SSH/stdio.")
            await repl(client)

    try:
        asyncio.run(_run())
    except Exception as e:
        print(f"Failed to connect to MCP server: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
