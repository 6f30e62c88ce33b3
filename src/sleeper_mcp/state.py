"""Per-application state shared by the transport routes."""

from __future__ import annotations

from dataclasses import dataclass

from starlette.requests import HTTPConnection

from sleeper_mcp.audit import AuditLogger
from sleeper_mcp.config import ServerConfig
from sleeper_mcp.provider import SleeperClient
from sleeper_mcp.server import MCPServer
from sleeper_mcp.transport.session import Session, SessionRegistry


@dataclass
class AppState:
    config: ServerConfig
    server: MCPServer
    sessions: SessionRegistry
    client: SleeperClient
    audit_logger: AuditLogger | None = None

    def audit_session(self, session: Session, action: str) -> None:
        if self.audit_logger:
            self.audit_logger.log_session(session.id, session.transport, action)


def app_state(conn: HTTPConnection) -> AppState:
    """Return the AppState installed on the application serving ``conn``."""
    return conn.app.state.mcp
