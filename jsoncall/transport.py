"""Single-shot TCP exchange: one request out, read until the peer closes."""

from __future__ import annotations

import socket

from loguru import logger

from jsoncall.utils.exceptions import TransportError

DEFAULT_CHUNK_SIZE = 4096


def exchange(
    address: str,
    port: int,
    payload: bytes,
    *,
    half_close: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bytes:
    """
    Send ``payload`` to ``address:port`` and return everything the peer sends back.

    The response has no framing; it ends when the peer closes the connection.
    There is no timeout, so a peer that never closes blocks this call.

    Args:
        address: Host name or IP address.
        port: TCP port.
        payload: Complete request bytes.
        half_close: Shut down the write side after sending, for servers that
            read the request until EOF.
        chunk_size: Size of each ``recv`` call.

    Raises:
        TransportError: Resolution, connect, send or receive failed.
    """
    logger.debug("Connecting to {}:{}", address, port)
    try:
        sock = socket.create_connection((address, port))
    except OSError as exc:
        raise TransportError(str(exc) or exc.__class__.__name__, address, port) from exc

    with sock:
        try:
            sock.sendall(payload)
            logger.debug("Sent {} bytes", len(payload))
            if half_close:
                sock.shutdown(socket.SHUT_WR)
            chunks: list[bytes] = []
            while True:
                chunk = sock.recv(chunk_size)
                if not chunk:
                    break
                chunks.append(chunk)
        except OSError as exc:
            raise TransportError(str(exc) or exc.__class__.__name__, address, port) from exc

    data = b"".join(chunks)
    logger.debug("Received {} bytes from {}:{}", len(data), address, port)
    return data
