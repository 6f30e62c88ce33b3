"""MCP Protocol layer for JSON-RPC communication."""

from sleeper_mcp.protocol.jsonrpc import (
    METHOD_NOT_FOUND,
    SERVER_ERROR,
    JsonRpcError,
    JsonRpcRequest,
    encode,
    make_error,
    make_notification,
    make_response,
    parse_message,
)
from sleeper_mcp.protocol.lifecycle import (
    MCP_PROTOCOL_VERSION,
    initialize_result,
    ready_notification,
    session_notification,
)
from sleeper_mcp.protocol.tools import ToolsHandler, ToolsListResult

__all__ = [
    "JsonRpcError",
    "JsonRpcRequest",
    "MCP_PROTOCOL_VERSION",
    "METHOD_NOT_FOUND",
    "SERVER_ERROR",
    "ToolsHandler",
    "ToolsListResult",
    "encode",
    "initialize_result",
    "make_error",
    "make_notification",
    "make_response",
    "parse_message",
    "ready_notification",
    "session_notification",
]
