"""Protocol-level payloads: handshake, liveness, and server notifications."""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Any

from sleeper_mcp import __version__
from sleeper_mcp.protocol.jsonrpc import make_notification

# The only protocol version this server speaks
MCP_PROTOCOL_VERSION = "2024-11-05"

SERVER_INFO = {"name": "sleeper-mcp", "version": __version__}


def utc_timestamp() -> str:
    """Get current UTC timestamp in ISO 8601 format."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def initialize_result() -> dict[str, Any]:
    """Result of the initialize handshake.

    Tools are the only populated capability group; resources and prompts
    are advertised but empty.
    """
    return {
        "protocolVersion": MCP_PROTOCOL_VERSION,
        "serverInfo": dict(SERVER_INFO),
        "capabilities": {"tools": {}, "resources": {}, "prompts": {}},
    }


def ping_result() -> dict[str, str]:
    return {"pong": "ok", "at": utc_timestamp()}


def ready_notification() -> dict[str, Any]:
    """Informational notification pushed when a session opens."""
    return make_notification("notifications/ready", {"now": utc_timestamp()})


def session_notification(session_id: str) -> dict[str, Any]:
    """Announces the session id a stream client must quote on submissions."""
    return make_notification("notifications/session", {"session": session_id})


def heartbeat_payload() -> dict[str, int]:
    return {"ts": int(time.time() * 1000)}
