"""Session abstraction shared by all transport bindings.

A Session is the only thing the dispatcher knows about a connection: it
can push a message (optionally tagged with an event name), be closed,
and report whether it is closed. Each binding supplies a subclass.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar, TypeVar

from sleeper_mcp.protocol.lifecycle import heartbeat_payload

logger = logging.getLogger(__name__)


class Session(ABC):
    """Abstract push channel to one connected client.

    Sending on a closed session is a no-op. A transport failure during a
    send marks the session closed instead of raising, so one broken
    client never disturbs the handling of another.
    """

    transport: ClassVar[str] = "abstract"

    # Exceptions from _send that mean "the peer is gone"
    send_errors: ClassVar[tuple[type[BaseException], ...]] = ()

    def __init__(self, session_id: str) -> None:
        self.id = session_id
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: dict[str, Any], event: str | None = None) -> None:
        """Push a message to the client.

        Args:
            message: JSON-serialisable envelope.
            event: Optional event tag; stream transports label frames with it.
        """
        if self._closed:
            logger.debug("Dropping message for closed session %s", self.id)
            return
        try:
            await self._send(message, event)
        except self.send_errors as e:
            logger.debug("Send to session %s failed, marking closed: %r", self.id, e)
            self._closed = True

    async def close(self) -> None:
        """Close the channel. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._close()

    @abstractmethod
    async def _send(self, message: dict[str, Any], event: str | None) -> None:
        pass

    @abstractmethod
    async def _close(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} closed={self._closed}>"


SessionT = TypeVar("SessionT", bound=Session)


class SessionRegistry:
    """Table of live sessions keyed by session id.

    Owned by the application instance. Every operation takes the lock,
    so handlers for independent connections can use it concurrently.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, factory: Callable[[str], SessionT]) -> SessionT:
        """Allocate an id, build a session for it, and store it.

        Args:
            factory: Called with the new id; returns the transport's session.

        Returns:
            The registered session.
        """
        with self._lock:
            session_id = str(uuid.uuid4())
            while session_id in self._sessions:
                session_id = str(uuid.uuid4())
            session = factory(session_id)
            self._sessions[session_id] = session
        logger.info("Session %s opened (%s)", session_id, session.transport)
        return session

    def lookup(self, session_id: str) -> Session | None:
        """Return the live session for an id, or None."""
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Session | None:
        """Remove a session. Returns the removed session, or None if absent."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info("Session %s removed (%s)", session_id, session.transport)
        return session

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions


class Heartbeat:
    """Periodic keepalive bound to one session.

    Pushes a tagged liveness payload every ``interval`` seconds until
    stopped or until the session closes.
    """

    def __init__(self, session: Session, interval: float, event: str = "ping") -> None:
        self._session = session
        self._interval = interval
        self._event = event
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"heartbeat-{self._session.id}")

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while not self._session.closed:
            await asyncio.sleep(self._interval)
            if self._session.closed:
                break
            await self._session.send(heartbeat_payload(), event=self._event)
