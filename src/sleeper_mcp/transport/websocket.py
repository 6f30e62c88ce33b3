"""WebSocket binding: one connection carries requests and pushes.

Each inbound frame is dispatched as its own task, so slow tool calls do
not hold up later requests on the same socket. Responses can therefore
arrive out of request order; the id in each envelope is what correlates
them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse
from starlette.websockets import WebSocketState

from sleeper_mcp.protocol.jsonrpc import JsonRpcError, encode, parse_message
from sleeper_mcp.protocol.lifecycle import ready_notification
from sleeper_mcp.state import AppState, app_state
from sleeper_mcp.transport.session import Session

logger = logging.getLogger(__name__)

ENDPOINT_PATH = "/mcp"
ENDPOINT_DESCRIPTION = "MCP WebSocket endpoint. Connect with subprotocol 'mcp' at /mcp."

router = APIRouter(tags=["mcp"])


class WebSocketSession(Session):
    """Session backed by an accepted WebSocket. Event tags are ignored."""

    transport = "websocket"
    send_errors = (WebSocketDisconnect, RuntimeError, OSError)

    def __init__(self, session_id: str, websocket: WebSocket) -> None:
        super().__init__(session_id)
        self._websocket = websocket

    async def _send(self, message: dict[str, Any], event: str | None) -> None:
        await self._websocket.send_text(encode(message))

    async def _close(self) -> None:
        if self._websocket.application_state != WebSocketState.CONNECTED:
            return
        if self._websocket.client_state != WebSocketState.CONNECTED:
            return
        try:
            await self._websocket.close()
        except (RuntimeError, OSError) as e:
            logger.debug("Closing websocket for session %s failed: %r", self.id, e)


@router.get(ENDPOINT_PATH, response_class=PlainTextResponse)
async def describe_endpoint() -> str:
    """Plain GET without an upgrade gets a short description."""
    return ENDPOINT_DESCRIPTION


@router.websocket(ENDPOINT_PATH)
async def websocket_endpoint(websocket: WebSocket) -> None:
    await serve_websocket(websocket, app_state(websocket))


async def serve_websocket(websocket: WebSocket, state: AppState) -> None:
    """Run one WebSocket session until the peer disconnects.

    Args:
        websocket: Not-yet-accepted WebSocket.
        state: Application state holding the dispatcher and session registry.
    """
    wanted = state.config.websocket_subprotocol
    offered = websocket.scope.get("subprotocols") or []
    await websocket.accept(subprotocol=wanted if wanted in offered else None)

    session = state.sessions.create(lambda session_id: WebSocketSession(session_id, websocket))
    state.audit_session(session, "opened")
    pending: set[asyncio.Task[None]] = set()

    try:
        await session.send(ready_notification())

        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes")
            if raw is None:
                continue

            try:
                request = parse_message(raw)
            except JsonRpcError as e:
                logger.debug("Session %s: dropping malformed frame: %s", session.id, e)
                continue

            task = asyncio.create_task(state.server.handle_session_message(session, request))
            pending.add(task)
            task.add_done_callback(pending.discard)
    except WebSocketDisconnect:
        pass
    finally:
        state.sessions.remove(session.id)
        await session.close()
        state.audit_session(session, "closed")
        # In-flight calls are left to finish; their replies are dropped.
        if pending:
            logger.debug("Session %s closed with %d call(s) in flight", session.id, len(pending))
