"""
Exception hierarchy for jsoncall.

Provides:
- Error classes with codes for each failure layer (transport, protocol, application)
- Error categorization carried in debug logs via to_dict()
- Safe preview formatting for offending responses
"""

from __future__ import annotations

from enum import Enum
from typing import Any

_PREVIEW_LIMIT = 200


class ErrorCategory(Enum):
    """Error categories for classification."""
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    APPLICATION = "application"


class JsonCallError(Exception):
    """Base exception for all jsoncall errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.PROTOCOL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class TransportError(JsonCallError):
    """Connection could not be established or failed mid-flight."""

    def __init__(self, message: str, address: str, port: int):
        super().__init__(
            f"{address}:{port}: {message}",
            code="TRANSPORT_ERROR",
            category=ErrorCategory.TRANSPORT,
            details={"address": address, "port": port},
        )
        self.address = address
        self.port = port


class ProtocolError(JsonCallError):
    """Response is not valid JSON or lacks the expected structure."""

    def __init__(self, message: str, raw: bytes | str | None = None):
        details = {"response": preview(raw)} if raw is not None else {}
        super().__init__(message, code="PROTOCOL_ERROR", category=ErrorCategory.PROTOCOL, details=details)


class RemoteError(JsonCallError):
    """Server answered with an explicit ``Err`` payload."""

    def __init__(self, payload: Any):
        super().__init__(
            f"Remote error: {payload!r}",
            code="REMOTE_ERROR",
            category=ErrorCategory.APPLICATION,
            details={"payload": payload},
        )
        self.payload = payload


def preview(raw: bytes | str, limit: int = _PREVIEW_LIMIT) -> str:
    """Short, printable excerpt of a response body for error messages."""
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    if len(text) > limit:
        return text[:limit] + "..."
    return text
