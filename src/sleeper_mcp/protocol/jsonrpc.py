"""JSON-RPC 2.0 message parsing and envelope construction.

Envelopes are built as plain dicts; each transport serialises them itself.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
# Implementation-defined server error, used for any failure inside a handler
SERVER_ERROR = -32000

# Maximum inbound message size (1 MB)
MAX_MESSAGE_SIZE = 1_048_576

JsonRpcId = int | float | str | None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"Number out of range: {text}")
    return value


class JsonRpcError(Exception):
    """Protocol-level failure carrying the code to report on the wire."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


@dataclass
class JsonRpcRequest:
    """An inbound JSON-RPC message.

    ``has_id`` is False for notifications, which must never be answered.
    """

    method: str
    id: JsonRpcId = None
    params: dict[str, Any] | None = None
    has_id: bool = True

    @property
    def is_notification(self) -> bool:
        """True when the sender expects no reply."""
        return not self.has_id


def parse_message(raw: str | bytes | bytearray) -> JsonRpcRequest:
    """Parse a JSON-RPC message.

    Only structural failures raise: the ``jsonrpc`` tag is not enforced,
    a missing or non-string method becomes an unroutable method name, and
    non-object params are dropped.

    Args:
        raw: Raw JSON text.

    Returns:
        Parsed request or notification.

    Raises:
        JsonRpcError: If the message is oversized, not JSON, or not an object.
    """
    size = len(raw.encode("utf-8")) if isinstance(raw, str) else len(raw)
    if size > MAX_MESSAGE_SIZE:
        raise JsonRpcError(
            PARSE_ERROR, f"Message of {size} bytes exceeds the {MAX_MESSAGE_SIZE} byte limit"
        )

    try:
        data = json.loads(raw, parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError as e:
        raise JsonRpcError(PARSE_ERROR, f"Malformed JSON: {e}") from e

    if not isinstance(data, dict):
        raise JsonRpcError(INVALID_REQUEST, "Message is not a JSON object")

    method = data.get("method")
    if not isinstance(method, str):
        method = "" if method is None else str(method)

    params = data.get("params")
    if not isinstance(params, dict):
        params = None

    msg_id = data.get("id")
    if isinstance(msg_id, bool) or not isinstance(msg_id, int | float | str | None):
        msg_id = None

    return JsonRpcRequest(method=method, id=msg_id, params=params, has_id="id" in data)


def make_response(msg_id: JsonRpcId, result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": msg_id, "result": result}


def make_error(msg_id: JsonRpcId, code: int, message: str, data: Any = None) -> dict[str, Any]:
    """Build an error envelope. ``data`` is omitted from the wire when None."""
    error = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": msg_id, "error": error}


def make_notification(method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build a server-initiated message. Notifications carry no id."""
    message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        message["params"] = params
    return message


def encode(message: dict[str, Any]) -> str:
    """Serialise an envelope for the wire.

    Raises:
        ValueError: If the envelope holds a NaN or infinite float.
    """
    return json.dumps(message, separators=(",", ":"), allow_nan=False)
