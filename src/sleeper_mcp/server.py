"""MCP Server - JSON-RPC dispatcher.

Routes protocol methods to their handlers independently of the transport
the request arrived on.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from sleeper_mcp.audit import AuditLogger
from sleeper_mcp.protocol.jsonrpc import (
    METHOD_NOT_FOUND,
    SERVER_ERROR,
    JsonRpcError,
    JsonRpcRequest,
    make_error,
    make_response,
)
from sleeper_mcp.protocol.lifecycle import initialize_result, ping_result
from sleeper_mcp.protocol.tools import ToolsHandler
from sleeper_mcp.tools.registry import ToolRegistry
from sleeper_mcp.transport.session import Session

logger = logging.getLogger(__name__)


class MCPServer:
    """MCP Server implementation.

    Handles:
    - initialize and ping
    - Tool listing and execution
    - Conversion of handler failures into JSON-RPC errors

    Holds no per-session state; one instance serves every session.
    """

    def __init__(self, registry: ToolRegistry, audit_logger: AuditLogger | None = None) -> None:
        """Initialize the server.

        Args:
            registry: Catalog of tools exposed through tools/list and tools/call.
            audit_logger: Optional audit trail for tool calls.
        """
        self._tools_handler = ToolsHandler(registry)
        self._audit_logger = audit_logger

    async def handle_session_message(self, session: Session, request: JsonRpcRequest) -> None:
        """Handle a request and push its response through the session.

        Args:
            session: Session the request arrived on.
            request: Parsed request.
        """
        response = await self.handle_request(request)
        if response is not None:
            await session.send(response, event="message")

    async def handle_request(self, request: JsonRpcRequest) -> dict[str, Any] | None:
        """Handle a request and return its response envelope.

        Args:
            request: The request to handle.

        Returns:
            Response envelope, or None if the request is a notification.
        """
        if request.is_notification:
            await self._handle_notification(request)
            return None

        msg_id = request.id
        try:
            result = await self._dispatch(request.method, request.params or {}, msg_id)
        except JsonRpcError as e:
            return make_error(msg_id, e.code, e.message, e.data)
        except Exception as e:
            logger.exception("Error handling %s (id=%r)", request.method, msg_id)
            return make_error(msg_id, SERVER_ERROR, str(e) or "Internal error")

        return make_response(msg_id, result)

    async def _handle_notification(self, notification: JsonRpcRequest) -> None:
        """Handle a notification (no response).

        Client notifications such as notifications/initialized carry no work.
        Anything else is executed for its side effects and the outcome dropped.
        """
        if notification.method.startswith("notifications/"):
            logger.debug("Received notification %s", notification.method)
            return

        try:
            await self._dispatch(notification.method, notification.params or {}, None)
        except Exception as e:
            logger.debug("Notification %s failed: %r", notification.method, e)

    async def _dispatch(self, method: str, params: dict[str, Any], msg_id: Any) -> Any:
        """Route a method to its handler.

        Raises:
            JsonRpcError: If the method is unknown.
        """
        if method == "initialize":
            return initialize_result()

        elif method == "tools/list":
            return self._tools_handler.handle_list().to_dict()

        elif method == "tools/call":
            name, arguments = ToolsHandler.extract_call(params)
            return await self._call_tool(name, arguments, msg_id)

        elif method == "ping":
            return ping_result()

        else:
            raise JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {method}")

    async def _call_tool(self, name: str, arguments: dict[str, Any], msg_id: Any) -> dict[str, Any]:
        if self._audit_logger:
            self._audit_logger.log_tool_call(msg_id, name, arguments)

        started = time.perf_counter()
        status = "error"
        try:
            result = await self._tools_handler.handle_call(name, arguments)
            status = "tool_error" if result.is_error else "success"
            return result.to_dict()
        finally:
            if self._audit_logger:
                duration_ms = (time.perf_counter() - started) * 1000
                self._audit_logger.log_tool_result(msg_id, status, duration_ms)

    def close(self) -> None:
        """Close the server and release the audit log."""
        if self._audit_logger:
            self._audit_logger.close()
