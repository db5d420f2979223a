"""Convenience exports for the :mod:`rxtelnet` package."""

from .buffer import PayloadBuffer  # noqa: F401
from .config import TelnetConfig  # noqa: F401
from .connection import TelnetConnection, dial  # noqa: F401
from .duplex import Duplex, bridge, make_duplex  # noqa: F401
from .mechanism import (  # noqa: F401
    ConnectionClosedError,
    RxTelnetException,
    TransportClosedError,
)
from .protocol import (  # noqa: F401
    DEFAULT_POLICY,
    Command,
    NegotiationPolicy,
    Option,
    create_policy,
    escape,
    parse_command,
    unescape,
)
from .pump import NegotiationEvent, StreamPump  # noqa: F401
from .transport import SocketTransport, Transport  # noqa: F401

__all__ = [
    "RxTelnetException",
    "TransportClosedError",
    "ConnectionClosedError",

    # Protocol
    "Command",
    "Option",
    "escape",
    "unescape",
    "parse_command",
    "NegotiationPolicy",
    "DEFAULT_POLICY",
    "create_policy",

    # Engine
    "PayloadBuffer",
    "StreamPump",
    "NegotiationEvent",

    # Connection
    "TelnetConfig",
    "TelnetConnection",
    "dial",
    "Transport",
    "SocketTransport",

    # Rx adapters
    "Duplex",
    "make_duplex",
    "bridge",
]
