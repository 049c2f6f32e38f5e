"""Tests for jsoncall.utils.exceptions module."""

from __future__ import annotations

from jsoncall.utils.exceptions import (
    ErrorCategory,
    JsonCallError,
    ProtocolError,
    RemoteError,
    TransportError,
    preview,
)


class TestExceptionClasses:
    """Test custom exception classes."""

    def test_base_error_to_dict(self) -> None:
        exc = JsonCallError("test message", code="TEST_CODE")
        assert exc.to_dict() == {
            "error": "TEST_CODE",
            "message": "test message",
            "category": ErrorCategory.PROTOCOL.value,
            "details": {},
        }
        assert str(exc) == "[TEST_CODE] test message"

    def test_transport_error(self) -> None:
        exc = TransportError("Connection refused", "127.0.0.1", 5959)
        assert exc.code == "TRANSPORT_ERROR"
        assert exc.category == ErrorCategory.TRANSPORT
        assert exc.details == {"address": "127.0.0.1", "port": 5959}
        assert exc.message == "127.0.0.1:5959: Connection refused"

    def test_protocol_error_keeps_preview(self) -> None:
        exc = ProtocolError("bad", raw=b"not json")
        assert exc.code == "PROTOCOL_ERROR"
        assert exc.details == {"response": "not json"}
        assert ProtocolError("bad").details == {}

    def test_remote_error_carries_payload(self) -> None:
        exc = RemoteError({"kind": "Other"})
        assert exc.category == ErrorCategory.APPLICATION
        assert exc.payload == {"kind": "Other"}
        assert isinstance(exc, JsonCallError)


class TestPreview:
    def test_short_text_unchanged(self) -> None:
        assert preview("abc") == "abc"

    def test_long_text_truncated(self) -> None:
        out = preview("x" * 500, limit=10)
        assert out == "x" * 10 + "..."

    def test_invalid_utf8_replaced(self) -> None:
        assert preview(b"\xffok") == "�ok"


def test_error_categories_match_failure_layers() -> None:
    assert {c.value for c in ErrorCategory} == {"transport", "protocol", "application"}
