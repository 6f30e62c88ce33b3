"""Sleeper fantasy football tools.

Provides league_info, matchups and player_search on top of the Sleeper API.
Provider failures are not caught here; they surface to the dispatcher as
internal errors for every tool alike.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from sleeper_mcp.provider import SleeperClient
from sleeper_mcp.tools.base import Tool, ToolArgumentError, ToolDefinition, ToolResult
from sleeper_mcp.tools.registry import ToolRegistry

DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 100

# Matches kept before the requested limit is applied
SEARCH_PRETRIM = 2000


def _coerce_number(raw: Any) -> float | None:
    """Coerce a JSON value to a float, or None if it is not numeric."""
    if isinstance(raw, bool):
        return None
    try:
        if isinstance(raw, int | float):
            return float(raw)
        if isinstance(raw, str):
            return float(raw.strip())
    except (ValueError, OverflowError):
        return None
    return None


def _league_id(raw: Any, default: str) -> str:
    if raw is None:
        return default
    value = str(raw).strip()
    return value or default


@dataclass(frozen=True)
class LeagueInfoArgs:
    league_id: str


@dataclass(frozen=True)
class MatchupsArgs:
    league_id: str
    week: int | float


@dataclass(frozen=True)
class PlayerSearchArgs:
    query: str
    limit: int = DEFAULT_SEARCH_LIMIT


class LeagueInfoTool(Tool[LeagueInfoArgs]):
    """Basic league metadata: name, season and roster count."""

    definition = ToolDefinition(
        name="league_info",
        description="Get basic Sleeper league info (name, season, total rosters).",
        input_schema={
            "type": "object",
            "properties": {
                "leagueId": {"type": "string", "description": "Sleeper league id"},
            },
            "required": [],
        },
    )

    def __init__(self, client: SleeperClient, default_league_id: str) -> None:
        self._client = client
        self._default_league_id = default_league_id

    def parse_arguments(self, arguments: dict[str, Any]) -> LeagueInfoArgs:
        return LeagueInfoArgs(
            league_id=_league_id(arguments.get("leagueId"), self._default_league_id)
        )

    async def run(self, args: LeagueInfoArgs) -> ToolResult:
        data = await self._client.get_league(args.league_id)
        if not isinstance(data, dict):
            data = {}

        return ToolResult.json(
            {
                "leagueId": args.league_id,
                "name": data.get("name"),
                "season": data.get("season"),
                "totalRosters": data.get("total_rosters"),
            }
        )


class MatchupsTool(Tool[MatchupsArgs]):
    """Weekly matchups for a league, returned verbatim from the API."""

    definition = ToolDefinition(
        name="matchups",
        description="Get matchups for a given league and week.",
        input_schema={
            "type": "object",
            "properties": {
                "leagueId": {"type": "string", "description": "Sleeper league id"},
                "week": {"type": "number", "description": "NFL week (1-18)"},
            },
            "required": ["week"],
        },
    )

    def __init__(self, client: SleeperClient, default_league_id: str) -> None:
        self._client = client
        self._default_league_id = default_league_id

    def parse_arguments(self, arguments: dict[str, Any]) -> MatchupsArgs:
        week = _coerce_number(arguments.get("week"))
        if week is None or not math.isfinite(week) or week < 1:
            raise ToolArgumentError("Invalid 'week' value")

        return MatchupsArgs(
            league_id=_league_id(arguments.get("leagueId"), self._default_league_id),
            week=int(week) if week.is_integer() else week,
        )

    async def run(self, args: MatchupsArgs) -> ToolResult:
        data = await self._client.get_matchups(args.league_id, args.week)
        return ToolResult.json(
            {"leagueId": args.league_id, "week": args.week, "matchups": data}
        )


class PlayerSearchTool(Tool[PlayerSearchArgs]):
    """Case-insensitive substring search over the NFL player directory."""

    definition = ToolDefinition(
        name="player_search",
        description=(
            "Search NFL players by substring. Returns basic info "
            "(id, name, position, team) for each match."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Substring of player name"},
                "limit": {"type": "number", "description": "Max results (default 20)"},
            },
            "required": ["query"],
        },
    )

    def __init__(self, client: SleeperClient) -> None:
        self._client = client

    def parse_arguments(self, arguments: dict[str, Any]) -> PlayerSearchArgs:
        raw_query = arguments.get("query")
        query = "" if raw_query is None else str(raw_query).strip()
        if not query:
            raise ToolArgumentError("Missing 'query'")

        limit = _coerce_number(arguments.get("limit"))
        if limit is None or math.isnan(limit):
            limit = DEFAULT_SEARCH_LIMIT

        return PlayerSearchArgs(
            query=query,
            limit=int(max(1, min(MAX_SEARCH_LIMIT, limit))),
        )

    async def run(self, args: PlayerSearchArgs) -> ToolResult:
        directory = await self._client.get_players("nfl")
        matches = search_players(directory, args.query)
        return ToolResult.json({"query": args.query, "results": matches[: args.limit]})


def search_players(directory: Any, query: str) -> list[dict[str, Any]]:
    """Filter a player directory by name substring.

    Args:
        directory: Mapping of player id to player record, as served by the API.
        query: Non-empty search string, matched case-insensitively.

    Returns:
        Up to SEARCH_PRETRIM matches as {id, name, position, team} dicts,
        in directory order.
    """
    if not isinstance(directory, dict):
        return []

    needle = query.lower()
    results: list[dict[str, Any]] = []
    for player_id, player in directory.items():
        if not isinstance(player, dict):
            continue
        name = player.get("full_name")
        position = player.get("position")
        if not name or not position or not isinstance(name, str):
            continue
        if needle not in name.lower():
            continue

        results.append(
            {
                "id": player_id,
                "name": name,
                "position": position,
                "team": player.get("team"),
            }
        )
        if len(results) >= SEARCH_PRETRIM:
            break

    return results


def default_registry(client: SleeperClient, default_league_id: str) -> ToolRegistry:
    """Build the fixed tool catalog.

    Args:
        client: Sleeper API client shared by all tools.
        default_league_id: League used when a call omits ``leagueId``.

    Returns:
        Registry holding league_info, matchups and player_search, in that order.
    """
    registry = ToolRegistry()
    registry.register(LeagueInfoTool(client, default_league_id))
    registry.register(MatchupsTool(client, default_league_id))
    registry.register(PlayerSearchTool(client))
    return registry
