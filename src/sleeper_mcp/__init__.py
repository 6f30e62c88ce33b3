"""MCP server exposing Sleeper fantasy football data over WebSocket and SSE."""

__version__ = "0.1.0"
