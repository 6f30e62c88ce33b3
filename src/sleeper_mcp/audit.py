"""Audit trail for tool calls and session lifecycle.

Append-only JSON Lines log. Each line is one event with a UTC timestamp
and a ``type`` of ``tool_call``, ``tool_result`` or ``session``.
"""

from __future__ import annotations

import json
import re
import threading
from pathlib import Path
from typing import Any

from sleeper_mcp.protocol.lifecycle import utc_timestamp

REDACTED = "[REDACTED]"

# Argument keys whose values never reach the log
SENSITIVE_KEY = re.compile(r"password|secret|api[_-]?key|token|auth|credential", re.IGNORECASE)


def redact(value: Any) -> Any:
    """Return a copy of ``value`` with sensitive mapping entries masked.

    Nested mappings and lists are walked; other values pass through.
    """
    if isinstance(value, dict):
        return {
            key: REDACTED if SENSITIVE_KEY.search(str(key)) else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact(item) for item in value]
    return value


class AuditLogger:
    """JSONL audit sink shared by every session.

    Lines are flushed as they are written. A lock serialises writers;
    once closed, further events are discarded.
    """

    def __init__(self, log_path: Path) -> None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._file = log_path.open("a", encoding="utf-8")

    def _append(self, event_type: str, **fields: Any) -> None:
        record = {"type": event_type, "timestamp": utc_timestamp(), **fields}
        line = json.dumps(record, default=str)
        with self._lock:
            if self._file.closed:
                return
            self._file.write(f"{line}\n")
            self._file.flush()

    def log_tool_call(self, request_id: Any, tool_name: str, arguments: dict[str, Any]) -> None:
        """Record an incoming tools/call.

        Args:
            request_id: JSON-RPC id of the originating request.
            tool_name: Requested tool, possibly unknown.
            arguments: Call arguments; sensitive values are masked.
        """
        self._append(
            "tool_call",
            request_id=request_id,
            tool_name=tool_name,
            arguments=redact(arguments),
        )

    def log_tool_result(self, request_id: Any, status: str, duration_ms: float) -> None:
        """Record how a tools/call ended.

        Args:
            request_id: JSON-RPC id, matching the earlier tool_call line.
            status: ``success``, ``tool_error`` or ``error``.
            duration_ms: Wall time spent in the tool.
        """
        self._append(
            "tool_result",
            request_id=request_id,
            result_status=status,
            execution_time_ms=round(duration_ms, 3),
        )

    def log_session(self, session_id: str, transport: str, action: str) -> None:
        self._append("session", session_id=session_id, transport=transport, action=action)

    def close(self) -> None:
        with self._lock:
            if not self._file.closed:
                self._file.close()

    def __enter__(self) -> AuditLogger:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
