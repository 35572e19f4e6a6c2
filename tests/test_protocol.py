"""Tests for roborock_client.protocol — request building and message parsing."""

from __future__ import annotations

import json

import pytest

from roborock_client.exceptions import RoborockError
from roborock_client.protocol import ProtocolError, RoborockMessage, build_request, parse_message


class TestParseMessage:
    """Tests for parse_message()."""

    def test_parse_result(self) -> None:
        msg = parse_message('{"id": 7, "result": ["ok"]}')
        assert isinstance(msg, RoborockMessage)
        assert msg.id == 7
        assert msg.result == ["ok"]
        assert msg.error is None
        assert msg.is_response

    def test_parse_bytes(self) -> None:
        msg = parse_message(b'{"id": 1, "result": 0}')
        assert msg.result == 0
        assert msg.raw == '{"id": 1, "result": 0}'

    def test_parse_error(self) -> None:
        msg = parse_message('{"id": 2, "error": {"code": -10000, "message": "invalid params"}}')
        assert msg.is_response
        assert msg.error_code == -10000
        assert msg.error_message == "invalid params"

    def test_parse_string_error(self) -> None:
        msg = parse_message('{"id": 2, "error": "busy"}')
        assert msg.error_code is None
        assert msg.error_message == "busy"

    def test_parse_event(self) -> None:
        msg = parse_message('{"method": "props", "params": {"state": 8}}')
        assert msg.id is None
        assert msg.method == "props"
        assert msg.params == {"state": 8}
        assert not msg.is_response

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(ProtocolError, match="Invalid JSON"):
            parse_message("{not json")

    def test_invalid_utf8_raises(self) -> None:
        with pytest.raises(ProtocolError, match="UTF-8"):
            parse_message(b"\xff\xfe")

    def test_non_object_raises(self) -> None:
        with pytest.raises(ProtocolError, match="JSON object"):
            parse_message("[1, 2]")

    def test_bad_id_raises(self) -> None:
        with pytest.raises(ProtocolError, match="message id"):
            parse_message('{"id": "1", "result": 0}')

    def test_empty_body_raises(self) -> None:
        with pytest.raises(ProtocolError, match="neither"):
            parse_message('{"id": 1}')

    def test_protocol_error_is_roborock_error(self) -> None:
        with pytest.raises(RoborockError):
            parse_message("")


class TestBuildRequest:
    """Tests for build_request()."""

    def test_structure(self) -> None:
        text = build_request(5, "set_lab_status", [1])
        assert text == '{"id":5,"method":"set_lab_status","params":[1]}'

    def test_tuple_params_become_list(self) -> None:
        body = json.loads(build_request(1, "get_status", ()))
        assert body["params"] == []

    def test_mapping_params(self) -> None:
        body = json.loads(build_request(1, "app_start", {"clean_mode": 1}))
        assert body["params"] == {"clean_mode": 1}

    def test_nested_timer_params(self) -> None:
        params = [["123", ["0 0 * * *", ["", ""]]]]
        body = json.loads(build_request(3, "set_timer", params))
        assert body["params"] == params

    def test_empty_method_raises(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            build_request(1, "", [])

    def test_bad_id_raises(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            build_request(0, "get_status", [])
