"""Shared test fixtures for rxtelnet tests."""

import queue
import socket
import threading
import time
from unittest.mock import MagicMock

import pytest
from opentelemetry.sdk._logs import LoggerProvider

from rxtelnet import TelnetConnection
from rxtelnet.telemetry import OTelLogger
from rxtelnet.transport import SocketTransport


class ScriptedTransport:
    """In-memory transport: reads replay pushed chunks, writes are recorded.

    Pushing an exception makes the next read raise it; pushing ``b""`` reads
    as end of stream.
    """

    def __init__(self, chunks=()):
        self._reads: queue.Queue = queue.Queue()
        for chunk in chunks:
            self._reads.put(chunk)
        self.written = bytearray()
        self.closed = threading.Event()

    def push(self, item) -> None:
        self._reads.put(item)

    def read(self, size: int) -> bytes:
        item = self._reads.get()
        if isinstance(item, BaseException):
            raise item
        return item

    def write(self, data: bytes) -> int:
        self.written += data
        return len(data)

    def close(self) -> None:
        self.closed.set()
        self._reads.put(b"")


def recv_exactly(sock: socket.socket, n: int, timeout: float = 2.0) -> bytes:
    """Read exactly ``n`` bytes from a raw socket."""
    sock.settimeout(timeout)
    data = bytearray()
    while len(data) < n:
        chunk = sock.recv(n - len(data))
        if not chunk:
            break
        data += chunk
    return bytes(data)


def read_exactly(conn: TelnetConnection, n: int, timeout: float = 2.0) -> bytes:
    """Read exactly ``n`` payload bytes from a connection."""
    deadline = time.monotonic() + timeout
    data = bytearray()
    while len(data) < n:
        data += conn.read(n - len(data), timeout=max(deadline - time.monotonic(), 0.01))
    return bytes(data)


@pytest.fixture
def silent_logger_provider():
    """LoggerProvider without processors, so tests print nothing."""
    return LoggerProvider()


@pytest.fixture
def mock_logger():
    """OTelLogger around a MagicMock OTel logger."""
    otel = MagicMock()
    return OTelLogger(otel, source="test")


@pytest.fixture
def scripted_transport():
    return ScriptedTransport()


@pytest.fixture
def socket_pair():
    """(client socket, server socket) connected to each other."""
    client, server = socket.socketpair()
    yield client, server
    for sock in (client, server):
        try:
            sock.close()
        except OSError:
            pass


@pytest.fixture
def telnet_pair(socket_pair, silent_logger_provider):
    """(TelnetConnection over the client socket, raw server socket)."""
    client, server = socket_pair
    conn = TelnetConnection(
        SocketTransport(client),
        logger_provider=silent_logger_provider,
    )
    yield conn, server
    conn.close()
