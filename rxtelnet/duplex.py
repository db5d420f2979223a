"""Helpers for using a telnet connection inside Rx pipelines."""

from dataclasses import dataclass

from reactivex.disposable import CompositeDisposable
from reactivex.subject import Subject

from .connection import TelnetConnection


@dataclass(frozen=True)
class Duplex:
    sink: Subject  # bytes pushed here are written to the connection
    stream: Subject  # payload received from the connection


def make_duplex(conn: TelnetConnection) -> tuple[Duplex, CompositeDisposable]:
    """
    Expose ``conn`` as a pair of subjects.

    Items pushed to ``duplex.sink`` are written with ``conn.write``; payload
    chunks read by the connection are emitted on ``duplex.stream``. Completing
    the sink closes the connection.

    Return the duplex and a `CompositeDisposable` that detaches both directions.
    """
    sink: Subject = Subject()
    stream: Subject = Subject()

    cd = CompositeDisposable()
    cd.add(
        conn.payload.subscribe(
            on_next=stream.on_next,
            on_error=stream.on_error,
            on_completed=stream.on_completed,
        )
    )
    cd.add(
        sink.subscribe(
            on_next=conn.write,
            on_error=lambda _: conn.close(),
            on_completed=conn.close,
        )
    )
    return Duplex(sink, stream), cd


def bridge(a: TelnetConnection, b: TelnetConnection) -> CompositeDisposable:
    """
    Forward the payload of each connection into the other.

    Forwarding in one direction stops when its source fails or closes; the
    failure itself is still raised by that connection's ``read``. To
    disconnect, call `dispose()` on the returned `CompositeDisposable`; the
    connections themselves stay open.
    """
    cd = CompositeDisposable()
    cd.add(a.payload.subscribe(on_next=b.write, on_error=lambda _: None))
    cd.add(b.payload.subscribe(on_next=a.write, on_error=lambda _: None))
    return cd
