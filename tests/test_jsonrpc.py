"""Tests for JSON-RPC 2.0 message parsing and envelope construction."""

import json

import pytest

from sleeper_mcp.protocol.jsonrpc import (
    INVALID_REQUEST,
    MAX_MESSAGE_SIZE,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcRequest,
    encode,
    make_error,
    make_notification,
    make_response,
    parse_message,
)


class TestParseRequest:
    """Tests for parsing JSON-RPC requests."""

    def test_parses_valid_request(self):
        """Should parse a valid request."""
        data = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/list",
            "params": {"cursor": "abc"},
        }
        msg = parse_message(json.dumps(data))

        assert isinstance(msg, JsonRpcRequest)
        assert msg.id == 1
        assert msg.method == "tools/list"
        assert msg.params == {"cursor": "abc"}
        assert msg.is_notification is False

    def test_parses_request_with_string_id(self):
        """Should accept string IDs."""
        msg = parse_message(json.dumps({"jsonrpc": "2.0", "id": "req-123", "method": "ping"}))
        assert msg.id == "req-123"

    def test_parses_bytes(self):
        """Should accept raw bytes, as delivered by binary frames and POST bodies."""
        msg = parse_message(b'{"jsonrpc": "2.0", "id": 7, "method": "ping"}')
        assert msg.id == 7
        assert msg.method == "ping"

    def test_parses_request_without_params(self):
        """Should parse request without params."""
        msg = parse_message(json.dumps({"jsonrpc": "2.0", "id": 1, "method": "ping"}))
        assert msg.params is None

    def test_tolerates_missing_jsonrpc_tag(self):
        """Should accept messages that omit the jsonrpc field."""
        msg = parse_message(json.dumps({"id": 1, "method": "ping"}))
        assert msg.method == "ping"

    def test_missing_method_becomes_empty_name(self):
        """Should keep the id so the dispatcher can answer method-not-found."""
        msg = parse_message(json.dumps({"jsonrpc": "2.0", "id": 4}))
        assert msg.method == ""
        assert msg.id == 4

    def test_non_object_params_are_dropped(self):
        """Should ignore params that are not an object."""
        msg = parse_message(json.dumps({"jsonrpc": "2.0", "id": 1, "method": "x", "params": [1]}))
        assert msg.params is None

    def test_explicit_null_id_is_still_a_request(self):
        """Should treat id: null as a request expecting a reply."""
        msg = parse_message(json.dumps({"jsonrpc": "2.0", "id": None, "method": "ping"}))
        assert msg.id is None
        assert msg.is_notification is False


class TestParseNotification:
    """Tests for parsing JSON-RPC notifications."""

    def test_absent_id_is_notification(self):
        """Should mark messages without id as notifications."""
        msg = parse_message(json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}))
        assert msg.is_notification is True
        assert msg.method == "notifications/initialized"


class TestParseErrors:
    """Tests for unparseable input."""

    def test_rejects_invalid_json(self):
        """Should raise PARSE_ERROR for invalid JSON."""
        with pytest.raises(JsonRpcError) as exc_info:
            parse_message("{not json")
        assert exc_info.value.code == PARSE_ERROR

    def test_rejects_non_object(self):
        """Should raise INVALID_REQUEST for arrays and scalars."""
        for raw in ("[1, 2]", "42", '"text"'):
            with pytest.raises(JsonRpcError) as exc_info:
                parse_message(raw)
            assert exc_info.value.code == INVALID_REQUEST

    def test_rejects_oversized_message(self):
        """Should refuse messages above the size limit before parsing."""
        raw = '{"method": "' + "x" * MAX_MESSAGE_SIZE + '"}'
        with pytest.raises(JsonRpcError) as exc_info:
            parse_message(raw)
        assert exc_info.value.code == PARSE_ERROR
        assert "byte limit" in str(exc_info.value)

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_rejects_non_json_constants(self, literal: str):
        """Should refuse NaN and Infinity, which JSON does not define."""
        with pytest.raises(JsonRpcError) as exc_info:
            parse_message('{"jsonrpc": "2.0", "id": %s, "method": "ping"}' % literal)
        assert exc_info.value.code == PARSE_ERROR

    def test_rejects_constants_nested_in_params(self):
        raw = '{"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"week": NaN}}'
        with pytest.raises(JsonRpcError) as exc_info:
            parse_message(raw)
        assert exc_info.value.code == PARSE_ERROR

    def test_rejects_float_overflow(self):
        """Should refuse numbers that only fit as infinity."""
        with pytest.raises(JsonRpcError) as exc_info:
            parse_message('{"jsonrpc": "2.0", "id": 1e400, "method": "ping"}')
        assert exc_info.value.code == PARSE_ERROR

    def test_size_limit_counts_encoded_bytes(self):
        """Should measure text input in UTF-8 bytes, not characters."""
        padding = "é" * (MAX_MESSAGE_SIZE // 2)
        raw = '{"method": "' + padding + '"}'
        assert len(raw) < MAX_MESSAGE_SIZE

        with pytest.raises(JsonRpcError) as exc_info:
            parse_message(raw)
        assert exc_info.value.code == PARSE_ERROR
        assert f"{len(raw.encode('utf-8'))} bytes" in str(exc_info.value)


class TestEnvelopes:
    """Tests for response and notification construction."""

    def test_make_response(self):
        """Should echo id and carry result only."""
        response = make_response(5, {"ok": True})
        assert response == {"jsonrpc": "2.0", "id": 5, "result": {"ok": True}}

    def test_make_error_without_data(self):
        """Should omit data when not provided."""
        response = make_error("abc", METHOD_NOT_FOUND, "Method not found: x")
        assert response == {
            "jsonrpc": "2.0",
            "id": "abc",
            "error": {"code": -32601, "message": "Method not found: x"},
        }
        assert "result" not in response

    def test_make_error_with_data(self):
        """Should include data when provided."""
        response = make_error(1, -32000, "boom", data={"detail": 1})
        assert response["error"]["data"] == {"detail": 1}

    def test_make_notification_has_no_id(self):
        """Should build a method-only envelope."""
        note = make_notification("notifications/ready", {"now": "t"})
        assert note == {"jsonrpc": "2.0", "method": "notifications/ready", "params": {"now": "t"}}
        assert "id" not in note

    def test_encode_is_compact_json(self):
        """Should serialise without whitespace."""
        assert encode({"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_encode_refuses_non_finite_floats(self, value: float):
        """Should never put a non-JSON number on the wire."""
        with pytest.raises(ValueError):
            encode(make_response(value, {}))
