"""IAC byte-stuffing.

A literal 0xFF in payload travels as ``IAC IAC`` so it cannot be mistaken for
the start of a command.
"""

from .codes import IAC_BYTE

_ESCAPED_IAC = IAC_BYTE * 2


def escape(payload: bytes | bytearray | memoryview) -> bytes:
    """Double every IAC byte in ``payload``.

    The result is ``len(payload) + payload.count(0xFF)`` bytes long.
    """
    return bytes(payload).replace(IAC_BYTE, _ESCAPED_IAC)


def unescape(data: bytes | bytearray | memoryview) -> bytes:
    """Collapse every ``IAC IAC`` pair into a single IAC byte."""
    return bytes(data).replace(_ESCAPED_IAC, IAC_BYTE)
