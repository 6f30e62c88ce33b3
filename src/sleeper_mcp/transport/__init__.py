"""Transport bindings and the session abstraction they share.

The binding modules (``websocket``, ``sse``) carry FastAPI routers and are
imported by the application factory, not from here.
"""

from sleeper_mcp.transport.session import Heartbeat, Session, SessionRegistry

__all__ = ["Heartbeat", "Session", "SessionRegistry"]
