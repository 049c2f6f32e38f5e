"""Example service speaking the request/response envelope over TCP.

One request per connection: the handler reads until it has decoded a complete
JSON value, the bytes can no longer become one, or the client half-closes. It
then dispatches the call, writes the response envelope and closes the
connection, which is what tells the client the response is complete.
"""

from __future__ import annotations

import inspect
import json
import re
import socketserver
from typing import Any, Callable

from loguru import logger

KIND_INVALID_INPUT = "InvalidInput"
KIND_OTHER = "Other"

I32_MIN = -(2**31)
I32_MAX = 2**31 - 1

Handler = Callable[..., Any]


def ok_response(request_id: Any, method: str, result: Any) -> dict[str, Any]:
    return {"request_id": request_id, "message": {"Ok": {method: result}}}


def err_response(request_id: Any, kind: str, detail: str) -> dict[str, Any]:
    return {"request_id": request_id, "message": {"Err": {"kind": kind, "detail": detail}}}


class ServiceRegistry:
    """Method name -> handler table with envelope-level dispatch."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, name: str | None = None) -> Callable[[Handler], Handler]:
        """Decorator registering a handler under ``name`` (defaults to the function name)."""

        def decorator(func: Handler) -> Handler:
            self._handlers[name or func.__name__] = func
            return func

        return decorator

    @property
    def methods(self) -> list[str]:
        return sorted(self._handlers)

    def dispatch(self, method: str, args: list[Any], request_id: Any = 0) -> dict[str, Any]:
        """Run ``method`` with positional ``args`` and wrap the outcome in a response envelope."""
        handler = self._handlers.get(method)
        if handler is None:
            return err_response(request_id, KIND_INVALID_INPUT, f"unknown method '{method}'")
        try:
            inspect.signature(handler).bind(*args)
        except TypeError as exc:
            return err_response(request_id, KIND_INVALID_INPUT, f"{method}: {exc}")
        try:
            result = handler(*args)
        except (TypeError, ValueError) as exc:
            return err_response(request_id, KIND_INVALID_INPUT, f"{method}: {exc}")
        except Exception as exc:
            logger.exception("Handler {} failed", method)
            return err_response(request_id, KIND_OTHER, f"{method}: {exc}")
        return ok_response(request_id, method, result)

    def handle_envelope(self, envelope: Any) -> dict[str, Any]:
        """Validate a decoded request envelope and dispatch it."""
        message = envelope.get("message") if isinstance(envelope, dict) else None
        request = message.get("Request") if isinstance(message, dict) else None
        if not isinstance(request, dict):
            return err_response(0, KIND_INVALID_INPUT, "expected message.Request object")
        request_id = request.get("id", 0)
        call = request.get("message")
        if not isinstance(call, dict) or len(call) != 1:
            return err_response(request_id, KIND_INVALID_INPUT, "expected exactly one method in Request.message")
        method, args = next(iter(call.items()))
        if not isinstance(args, list):
            return err_response(request_id, KIND_INVALID_INPUT, f"{method}: arguments must be an array")
        return self.dispatch(method, args, request_id=request_id)


def _require_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string")
    return value


def _require_i32(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer")
    if not I32_MIN <= value <= I32_MAX:
        raise ValueError(f"{name} out of i32 range")
    return value


def example_registry() -> ServiceRegistry:
    """Registry with the example ``hello`` and ``add`` methods."""
    registry = ServiceRegistry()

    @registry.register()
    def hello(first, last):
        """Returns a greeting for name."""
        return f"Hello, {_require_str('first', first)} {_require_str('last', last)}!"

    @registry.register()
    def add(x, y):
        total = _require_i32("x", x) + _require_i32("y", y)
        if not I32_MIN <= total <= I32_MAX:
            raise ValueError("sum overflows i32")
        return total

    return registry


# Tails that a later read can still complete: a cut-off literal, a number cut
# after "-", "." or the exponent marker, or a \uXXXX escape missing digits.
_TRUNCATED_TAIL = re.compile(r"t(r(ue?)?)?|f(a(l(se?)?)?)?|n(u(ll?)?)?|-|\.|[eE][+-]?|\\?u[0-9a-fA-F]{0,4}")


def _is_truncated(text: str, exc: json.JSONDecodeError) -> bool:
    """True when ``text`` failed to decode only because it ends too early."""
    if exc.msg.startswith("Unterminated string"):
        return True
    rest = text[exc.pos:]
    return rest == "" or _TRUNCATED_TAIL.fullmatch(rest) is not None


def read_request(rfile, chunk_size: int = 4096) -> Any:
    """
    Read from ``rfile`` until one complete JSON value is decoded.

    Only keeps reading while the buffer is a possible prefix of a JSON value;
    anything already invalid is rejected without waiting for the peer.

    Raises:
        ValueError: The peer closed before a complete value arrived, or sent
            something that is not JSON.
    """
    decoder = json.JSONDecoder()
    buf = b""
    while True:
        chunk = rfile.read1(chunk_size)
        buf += chunk
        try:
            text = buf.decode("utf-8").strip()
        except UnicodeDecodeError as exc:
            # Multi-byte character split across reads.
            if chunk and exc.start >= len(buf) - 3:
                continue
            raise
        if text:
            try:
                value, _ = decoder.raw_decode(text)
            except json.JSONDecodeError as exc:
                if chunk and _is_truncated(text, exc):
                    continue
                raise
            return value
        if not chunk:
            raise ValueError("connection closed before a request was received")


class EnvelopeRequestHandler(socketserver.StreamRequestHandler):
    """Serves exactly one request per connection."""

    def handle(self) -> None:
        registry: ServiceRegistry = self.server.registry  # type: ignore[attr-defined]
        peer = "%s:%s" % self.client_address[:2]
        try:
            envelope = read_request(self.rfile)
        except ValueError as exc:
            logger.warning("Bad request from {}: {}", peer, exc)
            response = err_response(0, KIND_INVALID_INPUT, f"malformed request: {exc}")
        else:
            response = registry.handle_envelope(envelope)
        logger.info("{} -> {}", peer, "Ok" if "Ok" in response["message"] else "Err")
        self.wfile.write(json.dumps(response).encode("utf-8"))


class EnvelopeServer(socketserver.TCPServer):
    """Blocking TCP server handling one connection at a time."""

    allow_reuse_address = True

    def __init__(self, server_address: tuple[str, int], registry: ServiceRegistry | None = None):
        self.registry = registry or example_registry()
        super().__init__(server_address, EnvelopeRequestHandler)


def serve(host: str, port: int, registry: ServiceRegistry | None = None) -> None:
    """Run the service in the foreground until interrupted."""
    with EnvelopeServer((host, port), registry) as server:
        bound_host, bound_port = server.server_address[:2]
        logger.info("Serving {} on {}:{}", ", ".join(server.registry.methods), bound_host, bound_port)
        server.serve_forever()
