"""Response envelope parsing."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from jsoncall.utils.exceptions import ProtocolError, RemoteError


@dataclass
class Reply:
    """Outcome of one call: the ``Ok`` result or the ``Err`` payload."""
    ok: bool
    value: Any

    def to_json(self) -> str:
        return json.dumps(self.value)

    def unwrap(self) -> Any:
        """Return the result, or raise :class:`RemoteError` for an ``Err`` reply."""
        if not self.ok:
            raise RemoteError(self.value)
        return self.value


def parse_reply(raw: bytes | str, method: str) -> Reply:
    """
    Parse a response envelope and extract the part that matters to the caller.

    ``{"message": {"Ok": {method: result}}}`` yields ``Reply(ok=True, value=result)``;
    ``{"message": {"Err": error}}`` yields ``Reply(ok=False, value=error)``.

    Raises:
        ProtocolError: Not JSON, or the expected structure is missing.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        body = json.loads(text)
    except ValueError as exc:
        raise ProtocolError(f"Response is not valid JSON: {exc}", raw) from exc

    if not isinstance(body, dict) or "message" not in body:
        raise ProtocolError("Response has no 'message' field", raw)
    message = body["message"]
    if not isinstance(message, dict):
        raise ProtocolError("Response 'message' is not an object", raw)

    if "Ok" in message:
        ok = message["Ok"]
        if not isinstance(ok, dict):
            raise ProtocolError("Response 'Ok' is not an object", raw)
        if method not in ok:
            keys = ", ".join(sorted(str(k) for k in ok)) or "none"
            raise ProtocolError(f"Response 'Ok' has no result for method '{method}' (keys: {keys})", raw)
        return Reply(ok=True, value=ok[method])
    if "Err" in message:
        return Reply(ok=False, value=message["Err"])
    raise ProtocolError("Response 'message' has neither 'Ok' nor 'Err'", raw)
