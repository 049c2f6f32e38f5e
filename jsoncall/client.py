"""Call facade: build, send, receive, parse."""

from __future__ import annotations

from typing import Iterable

from loguru import logger

from jsoncall.envelope import Argument, encode_request
from jsoncall.reply import Reply, parse_reply
from jsoncall.transport import DEFAULT_CHUNK_SIZE, exchange


def call(
    address: str,
    port: int,
    method: str,
    args: Iterable[Argument | str] = (),
    *,
    half_close: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Reply:
    """
    Invoke ``method`` on the server at ``address:port``.

    Application errors come back as ``Reply(ok=False, ...)``; transport and
    protocol failures raise ``TransportError`` / ``ProtocolError``.
    """
    payload = encode_request(method, args)
    logger.debug("Request: {}", payload.decode("utf-8"))
    raw = exchange(address, port, payload, half_close=half_close, chunk_size=chunk_size)
    logger.debug("Response: {}", raw.decode("utf-8", errors="replace"))
    reply = parse_reply(raw, method)
    logger.debug("Call {} finished ok={}", method, reply.ok)
    return reply
