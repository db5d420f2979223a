"""Byte-stream transports underneath a telnet connection.

The engine needs very little from the stream it wraps:
    - read(size): up to ``size`` bytes, ``b""`` at end of stream
    - write(data): send all of ``data``
    - close()

Addresses and deadlines are optional pass-throughs. :class:`SocketTransport`
adapts a connected ``socket.socket``; :func:`open_socket` resolves the
``network``/``address`` pair accepted by :func:`rxtelnet.dial`.

Example:
    >>> import socket
    >>> a, b = socket.socketpair()
    >>> transport = SocketTransport(a)
    >>> transport.write(b"ping")
    4
    >>> b.recv(4)
    b'ping'
"""

import socket
import time
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """Minimal byte-stream contract.

    Implementers must provide read, write and close. ``read`` may return fewer
    bytes than requested and must be safe to call repeatedly from one thread.
    """

    def read(self, size: int) -> bytes: ...

    def write(self, data: bytes) -> int: ...

    def close(self) -> None: ...


class SocketTransport:
    """Transport over a connected stream socket.

    Deadlines are absolute ``time.time()`` values, translated into socket
    timeouts when set. A socket has a single timeout, so the read and write
    deadlines share it; the most recent call wins.

    The translation happens once, at the call: the resulting timeout then
    applies to each ``recv``/``send`` separately, so every operation gets the
    full remaining time again rather than sharing one absolute cut-off.

    Under a :class:`~rxtelnet.TelnetConnection` an expired read deadline is
    fatal: the reader thread gets ``TimeoutError``, which becomes the
    connection's cached error, and no more payload is read.
    """

    def __init__(self, sock: socket.socket):
        self._sock = sock

    @property
    def socket(self) -> socket.socket:
        return self._sock

    def read(self, size: int) -> bytes:
        return self._sock.recv(size)

    def write(self, data: bytes) -> int:
        self._sock.sendall(data)
        return len(data)

    def close(self) -> None:
        # shutdown() wakes a thread blocked in recv(); close() alone does not
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()

    def local_addr(self) -> Any:
        return self._sock.getsockname()

    def remote_addr(self) -> Any:
        return self._sock.getpeername()

    def set_deadline(self, deadline: float | None) -> None:
        if deadline is None:
            self._sock.settimeout(None)
            return
        # A deadline in the past still has to time out, not block
        self._sock.settimeout(max(deadline - time.time(), 1e-6))

    def set_read_deadline(self, deadline: float | None) -> None:
        self.set_deadline(deadline)

    def set_write_deadline(self, deadline: float | None) -> None:
        self.set_deadline(deadline)


def split_host_port(address: str) -> tuple[str, int]:
    """Split ``"host:port"`` or ``"[v6addr]:port"``.

    Raises:
        ValueError: If the port is missing or not a number
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port:
        raise ValueError(f"missing port in address {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {address!r}") from None


_FAMILIES = {
    "tcp": socket.AF_UNSPEC,
    "tcp4": socket.AF_INET,
    "tcp6": socket.AF_INET6,
}


def open_socket(
    network: str,
    address: str | tuple[str, int],
    timeout: float | None = None,
) -> socket.socket:
    """Connect a stream socket for ``network``.

    Args:
        network: One of "tcp", "tcp4", "tcp6", "unix"
        address: "host:port", "[v6]:port", a (host, port) tuple, or a path
            for "unix"
        timeout: Connect timeout in seconds; None blocks

    Raises:
        ValueError: For an unknown network or malformed address
        OSError: If the connection cannot be established
    """
    if network == "unix":
        if not hasattr(socket, "AF_UNIX"):
            raise ValueError("unix sockets are not supported on this platform")
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(timeout)
            sock.connect(str(address))
        except OSError:
            sock.close()
            raise
        sock.settimeout(None)
        return sock

    try:
        family = _FAMILIES[network]
    except KeyError:
        raise ValueError(f"unknown network {network!r}") from None

    host, port = split_host_port(address) if isinstance(address, str) else address

    last_error: OSError | None = None
    for af, socktype, proto, _, sockaddr in socket.getaddrinfo(
        host, port, family, socket.SOCK_STREAM
    ):
        sock = socket.socket(af, socktype, proto)
        try:
            sock.settimeout(timeout)
            sock.connect(sockaddr)
        except OSError as e:
            last_error = e
            sock.close()
            continue
        sock.settimeout(None)
        return sock

    if last_error is not None:
        raise last_error
    raise OSError(f"no addresses found for {host}:{port}")
