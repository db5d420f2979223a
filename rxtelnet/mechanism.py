"""Core error types for :mod:`rxtelnet`."""


class RxTelnetException(Exception):
    """A connection's transport failure, as delivered to Rx observers.

    The stream pump sends one of these through ``on_error`` of the
    ``payload`` observable when it records the connection error. ``error`` is
    the exception ``read`` raises from then on, ``source`` names the pump that
    saw it and ``note`` says which step failed (reading the transport or
    sending a negotiation reply).
    """

    def __init__(self, error: BaseException, source: str = "Unknown", note: str = ""):
        super().__init__(error, source, note)
        self.error = error
        self.source = source
        self.note = note
        self.__cause__ = error

    def __str__(self):
        note = f" {self.note}" if self.note else ""
        return f"<{self.source}>{note} failed: {self.error!r}"


class TransportClosedError(ConnectionError):
    """The underlying transport reached end of stream."""


class ConnectionClosedError(ConnectionError):
    """Operation attempted on a connection that was already closed."""
