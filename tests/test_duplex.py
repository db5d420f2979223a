import socket
import threading

from reactivex.subject import Subject

from rxtelnet import Command, Option, TelnetConnection, bridge, make_duplex
from rxtelnet.transport import SocketTransport
from tests.conftest import read_exactly, recv_exactly

IAC = 0xFF


def test_make_duplex_wires_both_directions(telnet_pair):
    conn, server = telnet_pair
    duplex, cd = make_duplex(conn)
    assert isinstance(duplex.sink, Subject)
    assert isinstance(duplex.stream, Subject)

    received = []
    got = threading.Event()

    def on_next(chunk):
        received.append(chunk)
        got.set()

    duplex.stream.subscribe(on_next=on_next, on_error=lambda e: None)

    server.sendall(b"from server")
    assert got.wait(2.0)
    assert b"".join(received).startswith(b"f")

    duplex.sink.on_next(b"to server\xff")
    assert recv_exactly(server, 11) == b"to server\xff\xff"

    cd.dispose()


def test_completing_sink_closes_connection(telnet_pair):
    conn, _ = telnet_pair
    duplex, cd = make_duplex(conn)
    duplex.sink.on_completed()
    assert conn.closed
    cd.dispose()


def test_bridge_forwards_payload(silent_logger_provider):
    a_client, a_server = socket.socketpair()
    b_client, b_server = socket.socketpair()
    a = TelnetConnection(SocketTransport(a_client), logger_provider=silent_logger_provider)
    b = TelnetConnection(SocketTransport(b_client), logger_provider=silent_logger_provider)
    cd = bridge(a, b)
    try:
        a_server.sendall(b"ping\xff\xff")
        assert recv_exactly(b_server, 6) == b"ping\xff\xff"
        b_server.sendall(b"pong")
        assert recv_exactly(a_server, 4) == b"pong"
        # Bridged payload is still readable from each side
        assert read_exactly(a, 5) == b"ping\xff"
    finally:
        cd.dispose()
        a.close()
        b.close()
        a_server.close()
        b_server.close()


def test_bridge_survives_closed_partner(silent_logger_provider):
    a_client, a_server = socket.socketpair()
    b_client, b_server = socket.socketpair()
    a = TelnetConnection(SocketTransport(a_client), logger_provider=silent_logger_provider)
    b = TelnetConnection(SocketTransport(b_client), logger_provider=silent_logger_provider)
    cd = bridge(a, b)
    try:
        b.close()
        a_server.sendall(b"x" + bytes([IAC, Command.DO, Option.ECHO]))
        assert recv_exactly(a_server, 3) == bytes([IAC, Command.WONT, Option.ECHO])
        assert read_exactly(a, 1) == b"x"

        # a keeps negotiating after the forward to b failed
        a_server.sendall(bytes([IAC, Command.WILL, Option.SUPPRESS_GO_AHEAD]))
        assert recv_exactly(a_server, 3) == bytes(
            [IAC, Command.DO, Option.SUPPRESS_GO_AHEAD]
        )
        assert not a.closed
    finally:
        cd.dispose()
        a.close()
        a_server.close()
        b_server.close()
