"""Background stream pump for a telnet connection.

The pump owns two threads:
    - a raw reader that blocks in ``transport.read`` and pushes chunks (or the
      exception that ended reading) into a single-consumer queue
    - the pump itself, the only owner of the inbound buffer and the only
      writer of the payload buffer

Each pump iteration takes the next queued chunk (waiting at most
``idle_interval`` seconds), appends it to the inbound buffer and classifies
bytes from the front:
    - payload up to the next IAC goes to the payload buffer
    - the IAC window is handed to the parser; escaped IACs become payload,
      negotiations are answered through the policy, other commands and
      sub-negotiation blocks are consumed and dropped
    - an incomplete command stays in the inbound buffer until more bytes arrive

The first transport error is cached in the payload buffer; the pump keeps
running until ``stop()`` so buffered payload still drains. Reader errors that
arrive after quit was signalled come from closing the transport and are not
recorded. Exceptions raised by Rx subscribers are logged and dropped.

Example:
    >>> pump = StreamPump(transport, PayloadBuffer(), send=transport.write)
    >>> pump.feed(b"\\x01\\x02\\xff\\xfd\\x01")  # payload, then IAC DO ECHO
    >>> # buffer now holds b"\\x01\\x02"; IAC WONT ECHO was written to transport
"""

import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass

from reactivex import Observable
from reactivex import operators as ops
from reactivex.subject import Subject

from .buffer import PayloadBuffer
from .config import TelnetConfig
from .mechanism import RxTelnetException, TransportClosedError
from .protocol import (
    DEFAULT_POLICY,
    IAC_BYTE,
    Command,
    NegotiationPolicy,
    ParseResult,
    ParseStatus,
    command_name,
    option_name,
    parse_command,
)
from .telemetry import ConnectionMetrics, OTelLogger, get_default_providers
from .transport import Transport
from .utils import get_full_error_info, get_short_error_info, hex_preview


@dataclass(frozen=True)
class NegotiationEvent:
    """One negotiation request received from the peer and our answer.

    Attributes:
        command: WILL, WONT, DO or DONT as received
        option: Option byte as received
        reply: Command sent back, None when nothing was sent
    """

    command: Command
    option: int
    reply: Command | None


class StreamPump:
    """Separates payload from IAC commands on one connection."""

    def __init__(
        self,
        transport: Transport,
        buffer: PayloadBuffer,
        send: Callable[[bytes], object],
        policy: NegotiationPolicy = DEFAULT_POLICY,
        config: TelnetConfig | None = None,
        logger: OTelLogger | None = None,
        metrics: ConnectionMetrics | None = None,
        name: str = "StreamPump",
    ):
        """Create a pump; threads start with :meth:`start`.

        Args:
            transport: Stream to read from
            buffer: Payload buffer the application reads
            send: Writes raw bytes to the transport (negotiation replies)
            policy: Negotiation table
            config: Connection configuration
            logger: Logger; the default console providers are used when None
            metrics: Counters to update, if metrics are enabled
            name: Source name for logs and errors
        """
        self._transport = transport
        self._buffer = buffer
        self._send = send
        self._policy = policy
        self._config = config or TelnetConfig()
        self._metrics = metrics
        self._name = name

        if logger is None:
            _, logger_provider = get_default_providers()
            logger = OTelLogger(
                logger_provider.get_logger("rxtelnet.pump"), source=name
            )
        self._logger = logger

        self._inbound = bytearray()
        self._channel: queue.Queue[bytes | BaseException] = queue.Queue()
        self._quit = threading.Event()
        self._finished = False
        self._finish_lock = threading.Lock()

        self._payload_subject: Subject[bytes] = Subject()
        self._negotiation_subject: Subject[NegotiationEvent] = Subject()

        self._reader_thread: threading.Thread | None = None
        self._pump_thread: threading.Thread | None = None

    @property
    def payload(self) -> Observable:
        """Payload chunks in transport order, minus protocol bytes."""
        return self._payload_subject.pipe(ops.share())

    @property
    def negotiations(self) -> Observable:
        """NegotiationEvent for every WILL/WONT/DO/DONT received."""
        return self._negotiation_subject.pipe(ops.share())

    @property
    def pending(self) -> bytes:
        """Inbound bytes not yet classified (an incomplete command)."""
        return bytes(self._inbound)

    @property
    def running(self) -> bool:
        return self._pump_thread is not None and self._pump_thread.is_alive()

    # ---------------- lifecycle ---------------- #

    def start(self) -> None:
        if self._pump_thread is not None:
            raise RuntimeError(f"{self._name} already started")
        self._reader_thread = threading.Thread(
            target=self._read_loop, name=f"{self._name}:reader", daemon=True
        )
        self._pump_thread = threading.Thread(
            target=self._run, name=f"{self._name}:pump", daemon=True
        )
        self._reader_thread.start()
        self._pump_thread.start()

    def signal_quit(self) -> None:
        """Ask the pump to exit after its current iteration."""
        self._quit.set()

    def stop(self, timeout: float | None = None) -> None:
        """Signal the pump to quit and wait up to ``timeout`` for it."""
        self.signal_quit()
        if self._pump_thread is None:
            self._finish()
            return
        if self._pump_thread is not threading.current_thread():
            self._pump_thread.join(timeout)
            if self._pump_thread.is_alive():
                self._logger.warning("Pump thread did not stop in time")
        # The reader may stay blocked until the transport is closed
        if self._reader_thread is not None:
            self._reader_thread.join(timeout)

    # ---------------- classification ---------------- #

    def feed(self, data: bytes | bytearray) -> None:
        """Append transport bytes to the inbound buffer and classify them."""
        self._inbound += data
        self.process()

    def process(self) -> None:
        """Classify inbound bytes until empty or a command needs more input."""
        inbound = self._inbound
        while inbound:
            idx = inbound.find(IAC_BYTE)
            if idx == -1:
                self._forward(bytes(inbound))
                inbound.clear()
                return
            if idx > 0:
                self._forward(bytes(inbound[:idx]))
                del inbound[:idx]

            result = parse_command(inbound)
            if result.status is ParseStatus.NEED_MORE:
                return
            self._dispatch(result, inbound)
            del inbound[: result.length]

    def _dispatch(self, result: ParseResult, window: bytearray) -> None:
        if result.status is ParseStatus.ESCAPED:
            self._forward(IAC_BYTE)
            return

        self._count_command(result)
        if result.status is ParseStatus.NEGOTIATION:
            assert result.command is not None and result.option is not None
            self._negotiate(result.command, result.option)
        elif result.status is ParseStatus.SUBNEGOTIATION:
            option = "none" if result.option is None else option_name(result.option)
            self._logger.debug(
                f"Discarded sub-negotiation for option {option} ({result.length} bytes)"
            )
        else:
            self._logger.debug(
                f"Ignored command {command_name(window[1])}"
            )

    def _negotiate(self, command: Command, option: int) -> None:
        reply = self._policy.reply_command(command, option)
        response = self._policy.respond(command, option)
        self._logger.debug(
            f"Received {command.name} {option_name(option)}, "
            f"replying {reply.name if reply else 'nothing'}"
        )
        if response is not None:
            try:
                self._send(response)
            except OSError as e:
                self.record_error(e, note="negotiation reply")
        self._notify(
            lambda: self._negotiation_subject.on_next(
                NegotiationEvent(command, option, reply)
            )
        )

    def _forward(self, chunk: bytes) -> None:
        self._buffer.feed(chunk)
        if self._metrics is not None:
            self._metrics.payload_in.add(len(chunk))
        self._notify(lambda: self._payload_subject.on_next(chunk))

    def _notify(self, emit: Callable[[], None]) -> None:
        # Subscribers run on the pump thread and must not end it
        try:
            emit()
        except Exception as e:
            self._logger.error(f"Subscriber failed: {get_short_error_info(e)}")

    def _count_command(self, result: ParseResult) -> None:
        if self._metrics is None:
            return
        name = result.command.name if result.command is not None else "UNKNOWN"
        self._metrics.commands_in.add(1, {"command": name})

    # ---------------- errors ---------------- #

    def record_error(self, error: BaseException, note: str = "transport read") -> bool:
        """Cache ``error`` as the connection error if none is cached yet."""
        if not self._buffer.fail(error):
            return False
        if self._quit.is_set():
            self._logger.debug(f"Transport finished: {get_short_error_info(error)}")
        else:
            self._logger.warning(f"Transport error: {get_short_error_info(error)}")
        wrapped = RxTelnetException(error, source=self._name, note=note)
        self._notify(lambda: self._payload_subject.on_error(wrapped))
        return True

    # ---------------- threads ---------------- #

    def _read_loop(self) -> None:
        while not self._quit.is_set():
            try:
                data = self._transport.read(self._config.read_chunk_size)
            except Exception as e:
                self._channel.put(e)
                return
            if not data:
                self._channel.put(TransportClosedError("transport reached end of stream"))
                return
            self._channel.put(data)

    def _run(self) -> None:
        try:
            while True:
                try:
                    item = self._channel.get(timeout=self._config.idle_interval)
                except queue.Empty:
                    item = None

                if isinstance(item, BaseException):
                    if self._quit.is_set():
                        # Closing the transport wakes the reader with an error
                        self._logger.debug(
                            f"Reader stopped: {get_short_error_info(item)}"
                        )
                    else:
                        self.record_error(item)
                elif item:
                    self.feed(item)

                if self._quit.is_set():
                    break
        except Exception as e:
            self._logger.error(f"Stream pump failed:\n{get_full_error_info(e)}")
            self.record_error(e, note="pump")
        finally:
            self._finish()

    def _finish(self) -> None:
        with self._finish_lock:
            if self._finished:
                return
            self._finished = True

        if self._inbound:
            self._logger.debug(
                f"Discarding incomplete command at close: {hex_preview(self._inbound)}"
            )
            self._inbound.clear()
        self._notify(self._payload_subject.on_completed)
        self._notify(self._negotiation_subject.on_completed)
