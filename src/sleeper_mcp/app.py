"""ASGI application factory.

Wires the provider client, tool catalog, dispatcher and session registry
together and mounts both transport bindings.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request

from sleeper_mcp import __version__
from sleeper_mcp.audit import AuditLogger
from sleeper_mcp.config import ServerConfig
from sleeper_mcp.provider import SleeperClient
from sleeper_mcp.server import MCPServer
from sleeper_mcp.state import AppState, app_state
from sleeper_mcp.tools.sleeper import default_registry
from sleeper_mcp.transport import sse, websocket
from sleeper_mcp.transport.session import SessionRegistry

logger = logging.getLogger(__name__)


def create_app(
    config: ServerConfig | None = None,
    client: SleeperClient | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Server configuration (defaults apply when omitted).
        client: Sleeper client to use instead of one built from ``config``.

    Returns:
        Application exposing ``/mcp`` (WebSocket) and ``/sse`` (SSE + POST).
    """
    config = config or ServerConfig()
    client = client or SleeperClient(base_url=config.api_base_url, timeout=config.http_timeout)
    audit_logger = AuditLogger(Path(config.audit_log_file)) if config.audit_log_file else None

    server = MCPServer(default_registry(client, config.default_league_id), audit_logger)
    state = AppState(
        config=config,
        server=server,
        sessions=SessionRegistry(),
        client=client,
        audit_logger=audit_logger,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Default league: %s", config.default_league_id)
        yield
        logger.info("Shutting down with %d open session(s)", len(state.sessions))
        await client.aclose()
        server.close()

    app = FastAPI(title="Sleeper MCP Server", version=__version__, lifespan=lifespan)
    app.state.mcp = state
    app.include_router(websocket.router)
    app.include_router(sse.router)

    @app.get("/healthz")
    async def healthz(request: Request) -> dict[str, object]:
        return {"status": "ok", "sessions": len(app_state(request).sessions)}

    return app
