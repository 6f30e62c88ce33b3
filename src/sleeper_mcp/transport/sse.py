"""Server-Sent Events binding with an HTTP POST request channel.

GET opens a one-way event stream and announces the session id on it.
POST submits one request for that session; the response is pushed onto
the stream and the POST itself is answered with an empty 204.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Header, Query, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from sleeper_mcp.protocol.jsonrpc import PARSE_ERROR, JsonRpcError, encode, parse_message
from sleeper_mcp.protocol.lifecycle import ready_notification, session_notification
from sleeper_mcp.state import AppState, app_state
from sleeper_mcp.transport.session import Heartbeat, Session

logger = logging.getLogger(__name__)

ENDPOINT_PATH = "/sse"

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
    "Access-Control-Allow-Origin": "*",
}

CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "content-type,x-session-id",
}

router = APIRouter(tags=["mcp"])


def format_event(data: str, event: str | None = None) -> str:
    """Encode one SSE frame.

    Embedded newlines are split across several ``data:`` lines.
    """
    prefix = f"event: {event}\n" if event else ""
    return prefix + "data: " + data.replace("\n", "\ndata: ") + "\n\n"


class SSESession(Session):
    """Session whose pushes are queued for an event stream."""

    transport = "sse"

    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()

    async def _send(self, message: dict[str, Any], event: str | None) -> None:
        await self._queue.put(format_event(encode(message), event))

    async def _close(self) -> None:
        self._queue.put_nowait(None)

    async def frames(self) -> AsyncIterator[str]:
        """Yield encoded frames until the session is closed."""
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame


async def event_stream(state: AppState) -> AsyncIterator[str]:
    """Open a session and stream its pushes until the client goes away.

    The session lives exactly as long as this generator: it is registered
    on the first iteration and removed, with its heartbeat stopped, when
    the generator is closed or cancelled.
    """
    session = state.sessions.create(SSESession)
    state.audit_session(session, "opened")
    heartbeat = Heartbeat(session, state.config.heartbeat_interval)

    try:
        await session.send(session_notification(session.id), event="message")
        await session.send(ready_notification(), event="message")
        heartbeat.start()

        async for frame in session.frames():
            yield frame
    finally:
        state.sessions.remove(session.id)
        heartbeat.stop()
        await session.close()
        state.audit_session(session, "closed")


@router.get(ENDPOINT_PATH)
async def open_stream(request: Request) -> StreamingResponse:
    return StreamingResponse(
        event_stream(app_state(request)),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


@router.post(ENDPOINT_PATH)
async def submit_request(
    request: Request,
    session: str | None = Query(default=None),
    x_session_id: str | None = Header(default=None),
) -> Response:
    """Submit one JSON-RPC request to an open stream session.

    The session id comes from the ``session`` query parameter or the
    ``X-Session-Id`` header. Returns 404 for an unknown session, 400 for an
    unparseable body, and 204 once the response has been pushed.
    """
    state = app_state(request)
    session_id = session or x_session_id or ""
    target: Session | None = state.sessions.lookup(session_id) if session_id else None
    if target is None or target.closed:
        return PlainTextResponse("No such session", status_code=404)

    body = await request.body()
    try:
        message = parse_message(body)
    except JsonRpcError as e:
        logger.debug("Session %s: rejecting body: %s", session_id, e)
        detail = "Invalid JSON" if e.code == PARSE_ERROR else "Invalid request"
        return PlainTextResponse(detail, status_code=400)

    await state.server.handle_session_message(target, message)
    return Response(status_code=204, headers={"Access-Control-Allow-Origin": "*"})


@router.options(ENDPOINT_PATH)
async def preflight() -> Response:
    return Response(status_code=204, headers=CORS_PREFLIGHT_HEADERS)
