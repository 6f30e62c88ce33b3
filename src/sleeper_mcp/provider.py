"""Sleeper REST API client.

Thin async wrapper around the public Sleeper API. Every method performs
exactly one GET request; there is no caching and no retry.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from sleeper_mcp import __version__
from sleeper_mcp.config import DEFAULT_API_BASE_URL

USER_AGENT = f"sleeper-mcp/{__version__}"


class ProviderError(Exception):
    """Raised when the Sleeper API answers with a non-success status."""

    def __init__(self, status_code: int, url: str) -> None:
        """Initialize the error.

        Args:
            status_code: HTTP status returned by the API.
            url: Requested URL.
        """
        super().__init__(f"HTTP {status_code} for {url}")
        self.status_code = status_code
        self.url = url


class SleeperClient:
    """Async client for the Sleeper API.

    Holds a pooled ``httpx.AsyncClient`` for the lifetime of the server.
    Network failures surface as ``httpx.HTTPError``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, e.g. ``https://api.sleeper.app/v1``.
            timeout: Per-request timeout in seconds.
            transport: Optional custom transport (used by tests).
        """
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            follow_redirects=True,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the HTTP client and release pooled connections."""
        await self._client.aclose()

    async def get_league(self, league_id: str) -> Any:
        """Fetch league metadata."""
        return await self._get_json(f"/league/{quote(league_id, safe='')}")

    async def get_matchups(self, league_id: str, week: int | float) -> Any:
        """Fetch all matchups of a league for one week."""
        return await self._get_json(f"/league/{quote(league_id, safe='')}/matchups/{week}")

    async def get_players(self, sport: str = "nfl") -> Any:
        """Fetch the full player directory for a sport.

        The NFL directory is several megabytes; callers should not hold it.
        """
        return await self._get_json(f"/players/{quote(sport, safe='')}")

    async def _get_json(self, path: str) -> Any:
        response = await self._client.get(path)
        if not response.is_success:
            raise ProviderError(response.status_code, str(response.request.url))
        return response.json()
