"""
Shared fixtures for Grocy MCP tests.

Grocy is mocked with respx; tools are exercised end to end through
FastMCP's in-memory client.
"""

import json

import pytest
import respx
from fastmcp import Client

from grocy_mcp.client import GrocyClient
from grocy_mcp.config import GrocyConfig
from grocy_mcp.server import create_server

BASE_URL = "http://grocy.test/api"


def api(path: str) -> str:
    """Absolute URL of a Grocy API endpoint."""
    return f"{BASE_URL}{path}"


def text_of(result) -> str:
    """Text of the first content block of a tool result."""
    return result.content[0].text


def json_of(result):
    """Decode the JSON payload of a tool result."""
    return json.loads(text_of(result))


@pytest.fixture()
def config():
    return GrocyConfig(base_url=BASE_URL, api_key="test-api-key")


@pytest.fixture()
async def grocy(config):
    client = GrocyClient(config)
    yield client
    await client.aclose()


@pytest.fixture()
def server(config, grocy):
    return create_server(config, client=grocy)


@pytest.fixture()
async def mcp_client(server):
    async with Client(server) as client:
        yield client


@pytest.fixture()
def grocy_api():
    with respx.mock(assert_all_called=False) as router:
        yield router
