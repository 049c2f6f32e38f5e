"""Pytest hooks and fixtures."""

import json
import os
import socket
import threading

import pytest
from loguru import logger

from jsoncall.cli.shared import logging_utils
from jsoncall.server import EnvelopeServer


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "network: opens real sockets on localhost (skipped with JSONCALL_SKIP_NETWORK_TESTS=1)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip network tests in sandboxes without loopback sockets."""
    if os.environ.get("JSONCALL_SKIP_NETWORK_TESTS") != "1":
        return
    skip = pytest.mark.skip(reason="Loopback sockets disabled (JSONCALL_SKIP_NETWORK_TESTS=1)")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def _quiet_loguru():
    """CLI commands swap loguru sinks; drop them so later tests do not write to closed streams."""
    yield
    logger.remove()
    logger.disable("jsoncall")
    logging_utils._SINK_IDS.clear()


class CannedServer:
    """Accepts one connection, records the request, answers with fixed bytes, closes."""

    def __init__(self, response: bytes):
        self.response = response
        self.requests: list[bytes] = []
        self._sock = socket.create_server(("127.0.0.1", 0))
        self.address, self.port = self._sock.getsockname()[:2]
        self._thread = threading.Thread(target=self._serve_once, daemon=True)
        self._thread.start()

    def _serve_once(self) -> None:
        try:
            conn, _ = self._sock.accept()
        except OSError:
            return
        with conn:
            decoder = json.JSONDecoder()
            buf = b""
            while True:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                buf += chunk
                try:
                    decoder.raw_decode(buf.decode("utf-8"))
                except ValueError:
                    continue
                break
            self.requests.append(buf)
            conn.sendall(self.response)

    @property
    def request_text(self) -> str:
        self._thread.join(timeout=5)
        assert self.requests, "server received no request"
        return self.requests[0].decode("utf-8")

    def close(self) -> None:
        self._sock.close()
        self._thread.join(timeout=5)


@pytest.fixture
def canned_server():
    """Factory: ``canned_server('{"message": ...}')`` -> running :class:`CannedServer`."""
    servers: list[CannedServer] = []

    def start(response: str | bytes) -> CannedServer:
        server = CannedServer(response.encode("utf-8") if isinstance(response, str) else response)
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()


@pytest.fixture
def example_server():
    """Example service (hello, add) on an ephemeral port; yields (host, port)."""
    server = EnvelopeServer(("127.0.0.1", 0))
    thread = threading.Thread(target=server.serve_forever, kwargs={"poll_interval": 0.05}, daemon=True)
    thread.start()
    try:
        yield server.server_address[:2]
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def free_port() -> int:
    """A localhost port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
