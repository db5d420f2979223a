"""Telnet connection facade.

:class:`TelnetConnection` wraps a transport so the application sees a plain
bidirectional byte stream: ``read`` returns payload with all IAC commands
removed and escaped IACs collapsed, ``write`` escapes IAC bytes before they
reach the wire, and option negotiation happens in the background.

Example:
    >>> from rxtelnet import dial
    >>> with dial("tcp", "rainmaker.wunderground.com:23") as conn:
    ...     banner = conn.read(30)
    ...     conn.write(b"Hello world!\\r\\n")
"""

import threading
import uuid
from contextlib import nullcontext
from typing import Any

from opentelemetry._logs import LoggerProvider
from opentelemetry.metrics import MeterProvider
from opentelemetry.trace import TracerProvider
from reactivex import Observable

from .buffer import PayloadBuffer
from .config import TelnetConfig
from .mechanism import ConnectionClosedError
from .protocol import DEFAULT_POLICY, NegotiationPolicy, escape
from .pump import StreamPump
from .telemetry import (
    SEVERITY_BY_NAME,
    ConnectionMetrics,
    LogContext,
    OTelLogger,
    get_default_providers,
)
from .transport import SocketTransport, Transport, open_socket
from .utils import get_short_error_info


def _describe_peer(transport: Transport) -> str:
    remote_addr = getattr(transport, "remote_addr", None)
    if remote_addr is None:
        return ""
    try:
        return str(remote_addr())
    except OSError:
        return ""


class TelnetConnection:
    """A byte stream with TELNET negotiation and IAC escaping handled.

    Reads and writes may happen from different threads. ``read`` blocks on a
    condition until payload or an error is available; ``write`` and the
    background negotiation replies share one lock on the transport.

    Parameters
    ----------
    transport : Transport
        Connected byte stream to wrap.
    config : TelnetConfig | None
        Tuning knobs; defaults to ``TelnetConfig()``.
    policy : NegotiationPolicy | None
        Negotiation table; defaults to ``DEFAULT_POLICY``.
    logger_provider : LoggerProvider | None
        OTel provider for log records; console defaults when None.
    meter_provider : MeterProvider | None
        OTel provider for byte and command counters; no metrics when None.
    name : str | None
        Source name for logs, defaults to ``"TelnetConnection:<id>"``.
    """

    def __init__(
        self,
        transport: Transport,
        config: TelnetConfig | None = None,
        *,
        policy: NegotiationPolicy | None = None,
        logger_provider: LoggerProvider | None = None,
        meter_provider: MeterProvider | None = None,
        name: str | None = None,
    ):
        self._transport = transport
        self._config = config or TelnetConfig()
        self._conn_id = uuid.uuid4().hex[:8]
        self._name = name or f"TelnetConnection:{self._conn_id}"

        if logger_provider is None:
            _, logger_provider = get_default_providers()
        self._logger = OTelLogger(
            logger_provider.get_logger(f"rxtelnet.{self._name}"),
            source=self._name,
            context=LogContext(
                service="rxtelnet",
                component="connection",
                connection_id=self._conn_id,
                peer=_describe_peer(transport),
            ),
            min_severity=SEVERITY_BY_NAME[self._config.log_level],
        )
        self._metrics = (
            ConnectionMetrics(meter_provider) if meter_provider is not None else None
        )

        self._buffer = PayloadBuffer()
        self._write_lock = threading.Lock()
        self._close_lock = threading.Lock()
        self._closed = False

        self._pump = StreamPump(
            transport,
            self._buffer,
            send=self._send_raw,
            policy=policy or DEFAULT_POLICY,
            config=self._config,
            logger=self._logger.with_context(
                source=f"{self._name}:pump", component="pump"
            ),
            metrics=self._metrics,
            name=f"{self._name}:pump",
        )
        self._pump.start()
        self._logger.info("Connection opened")

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def payload(self) -> Observable:
        """Observable of payload chunks, in arrival order.

        Errors with RxTelnetException when the transport fails and completes
        when the connection is closed. Chunks are also kept for ``read``.
        """
        return self._pump.payload

    @property
    def negotiations(self) -> Observable:
        """Observable of NegotiationEvent, one per WILL/WONT/DO/DONT received."""
        return self._pump.negotiations

    # ---------------- byte stream ---------------- #

    def read(self, size: int = -1, timeout: float | None = None) -> bytes:
        """Return up to ``size`` bytes of payload, blocking until some arrive.

        Args:
            size: Maximum bytes to return; everything available when negative.
            timeout: Seconds to wait; None waits until payload or an error.

        Raises:
            The cached transport error once buffered payload is drained
            (TransportClosedError at end of stream, ConnectionClosedError
            after close()).
            TimeoutError: If ``timeout`` expires first.
        """
        return self._buffer.read(size, timeout)

    def readinto(self, buffer, timeout: float | None = None) -> int:
        """Like :meth:`read`, filling a writable buffer; returns the count."""
        return self._buffer.readinto(buffer, timeout)

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Escape IAC bytes in ``data`` and send it.

        Returns:
            ``len(data)``, the number of payload bytes accepted. The wire
            carries one extra byte per 0xFF in ``data``.

        Raises:
            ConnectionClosedError: If the connection was closed.
            OSError: If the transport write fails.
        """
        if self._closed:
            raise ConnectionClosedError(f"{self._name} is closed")
        data = bytes(data)
        self._send_raw(escape(data))
        if self._metrics is not None:
            self._metrics.payload_out.add(len(data))
        return len(data)

    def _send_raw(self, data: bytes) -> None:
        with self._write_lock:
            self._transport.write(data)

    def close(self) -> None:
        """Stop the pump and close the transport. Safe to call twice."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        self._pump.signal_quit()
        try:
            self._transport.close()
        finally:
            self._pump.stop(self._config.close_timeout)
            self._buffer.fail(ConnectionClosedError(f"{self._name} is closed"))
            self._logger.info("Connection closed")

    def __enter__(self) -> "TelnetConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- pass-through ---------------- #

    def local_addr(self) -> Any:
        return self._transport.local_addr()  # type: ignore[attr-defined]

    def remote_addr(self) -> Any:
        return self._transport.remote_addr()  # type: ignore[attr-defined]

    def set_deadline(self, deadline: float | None) -> None:
        self._transport.set_deadline(deadline)  # type: ignore[attr-defined]

    def set_read_deadline(self, deadline: float | None) -> None:
        self._transport.set_read_deadline(deadline)  # type: ignore[attr-defined]

    def set_write_deadline(self, deadline: float | None) -> None:
        self._transport.set_write_deadline(deadline)  # type: ignore[attr-defined]


def dial(
    network: str,
    address: str | tuple[str, int],
    config: TelnetConfig | None = None,
    *,
    policy: NegotiationPolicy | None = None,
    tracer_provider: TracerProvider | None = None,
    logger_provider: LoggerProvider | None = None,
    meter_provider: MeterProvider | None = None,
    name: str | None = None,
) -> TelnetConnection:
    """Connect to a telnet server and return a :class:`TelnetConnection`.

    Args:
        network: "tcp", "tcp4", "tcp6" or "unix"
        address: "host:port", "[v6]:port", (host, port), or a unix socket path
        config: Connection configuration
        policy: Negotiation table
        tracer_provider: Optional OTel TracerProvider; the connect runs inside
            a ``telnet.dial`` span when given
        logger_provider: Optional OTel LoggerProvider
        meter_provider: Optional OTel MeterProvider
        name: Source name for logs

    Raises:
        ValueError: For an unknown network or malformed address
        OSError: If the connection cannot be established
    """
    config = config or TelnetConfig()
    if logger_provider is None:
        _, logger_provider = get_default_providers()
    logger = OTelLogger(
        logger_provider.get_logger("rxtelnet.dial"),
        source="dial",
        context=LogContext(service="rxtelnet", peer=str(address)),
        min_severity=SEVERITY_BY_NAME[config.log_level],
    )

    span = (
        tracer_provider.get_tracer("rxtelnet").start_as_current_span(
            "telnet.dial",
            attributes={"net.transport": network, "net.peer": str(address)},
        )
        if tracer_provider is not None
        else nullcontext()
    )

    with span:
        try:
            sock = open_socket(network, address, config.connect_timeout)
        except OSError as e:
            logger.error(f"Connect to {address} failed: {get_short_error_info(e)}")
            raise

    logger.debug(f"Connected to {address} over {network}")
    return TelnetConnection(
        SocketTransport(sock),
        config,
        policy=policy,
        logger_provider=logger_provider,
        meter_provider=meter_provider,
        name=name,
    )
