"""Pytest configuration and shared fixtures.

The Sleeper API is replaced by an in-process fake served through
``httpx.MockTransport`` so no test touches the network.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from sleeper_mcp.app import create_app
from sleeper_mcp.config import ServerConfig
from sleeper_mcp.provider import SleeperClient
from sleeper_mcp.server import MCPServer
from sleeper_mcp.tools.registry import ToolRegistry
from sleeper_mcp.tools.sleeper import default_registry

BASE_URL = "https://api.sleeper.app/v1"
TEST_DEFAULT_LEAGUE = "999000111"

LEAGUE = {"name": "My League", "season": "2024", "total_rosters": 12}

MATCHUPS = [
    {"matchup_id": 1, "roster_id": 10, "points": 99.9},
    {"matchup_id": 1, "roster_id": 11, "points": 87.2},
]

PLAYERS = {
    "a": {"full_name": "Alpha Man", "position": "QB", "team": "AAA"},
    "b": {"full_name": "Beta Guy", "position": "RB", "team": "BBB"},
    "g": {"full_name": "Gamma Dude", "team": "CCC"},
    "d": {"full_name": "Delta Alpha", "position": "WR"},
    "e": {"position": "TE", "team": "EEE"},
    "f": None,
    "h": {"full_name": "", "position": "K"},
}


class FakeSleeperAPI:
    """In-memory stand-in for api.sleeper.app.

    Paths are recorded still percent-encoded and without the ``/v1``
    prefix. Unknown paths answer 404.
    """

    def __init__(self) -> None:
        self.responses: dict[str, tuple[int, Any]] = {}
        self.delays: dict[str, float] = {}
        self.errors: dict[str, Exception] = {}
        self.requests: list[str] = []

    def add(self, path: str, body: Any, status: int = 200) -> None:
        self.responses[path] = (status, body)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode("ascii").split("?")[0].removeprefix("/v1")
        self.requests.append(path)

        delay = self.delays.get(path)
        if delay:
            await asyncio.sleep(delay)
        if path in self.errors:
            raise self.errors[path]
        if path not in self.responses:
            return httpx.Response(404, json={"error": "not found"})

        status, body = self.responses[path]
        return httpx.Response(
            status, content=json.dumps(body), headers={"content-type": "application/json"}
        )

    def client(self) -> SleeperClient:
        return SleeperClient(base_url=BASE_URL, transport=httpx.MockTransport(self._handle))


@pytest.fixture
def sleeper_api() -> FakeSleeperAPI:
    """Fake API preloaded with one league, one week of matchups and a player directory."""
    api = FakeSleeperAPI()
    api.add("/league/L1", LEAGUE)
    api.add(f"/league/{TEST_DEFAULT_LEAGUE}", {"name": "Default League", "season": "2025"})
    api.add("/league/L2/matchups/3", MATCHUPS)
    api.add("/players/nfl", PLAYERS)
    return api


@pytest.fixture
def client(sleeper_api: FakeSleeperAPI) -> SleeperClient:
    return sleeper_api.client()


@pytest.fixture
def registry(client: SleeperClient) -> ToolRegistry:
    return default_registry(client, TEST_DEFAULT_LEAGUE)


@pytest.fixture
def server(registry: ToolRegistry) -> MCPServer:
    return MCPServer(registry)


@pytest.fixture
def config() -> ServerConfig:
    return ServerConfig(default_league_id=TEST_DEFAULT_LEAGUE)


@pytest.fixture
def app(config: ServerConfig, client: SleeperClient):
    return create_app(config, client=client)


def request(method: str, msg_id: Any = 1, **params: Any) -> dict[str, Any]:
    """Build a JSON-RPC request envelope."""
    message: dict[str, Any] = {"jsonrpc": "2.0", "id": msg_id, "method": method}
    if params:
        message["params"] = params
    return message
