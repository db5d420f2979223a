"""Recognition of IAC command sequences at the head of an inbound buffer.

The parser looks at a window that starts at an IAC byte and reports what the
window holds without consuming anything:
    - NEED_MORE: not enough bytes yet to interpret the command
    - ESCAPED: ``IAC IAC``, a literal 0xFF of payload
    - NEGOTIATION: ``IAC WILL|WONT|DO|DONT <option>``
    - SUBNEGOTIATION: ``IAC SB ... IAC SE``
    - COMMAND: any other two-byte ``IAC <cmd>`` sequence (NOP, GA, AYT, ...)

The caller removes ``result.length`` bytes once it has acted on the result,
so a command is never partially consumed.

Example:
    >>> parse_command(b"\\xff\\xfd\\x01")
    ParseResult(status=<ParseStatus.NEGOTIATION: 3>, length=3, command=<Command.DO: 253>, option=1)
    >>> parse_command(b"\\xff").status
    <ParseStatus.NEED_MORE: 1>
"""

from dataclasses import dataclass
from enum import Enum, auto

from .codes import IAC, NEGOTIATION_COMMANDS, Command


class ParseStatus(Enum):
    NEED_MORE = auto()
    ESCAPED = auto()
    NEGOTIATION = auto()
    SUBNEGOTIATION = auto()
    COMMAND = auto()


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one command window.

    Attributes:
        status: What the window holds
        length: Number of bytes the sequence occupies (0 for NEED_MORE)
        command: Decoded command, None for NEED_MORE or codes outside Command
        option: Option byte for NEGOTIATION and SUBNEGOTIATION results; None
            for an empty IAC SB IAC SE block
    """

    status: ParseStatus
    length: int = 0
    command: Command | None = None
    option: int | None = None


NEED_MORE = ParseResult(ParseStatus.NEED_MORE)


def parse_command(window: bytes | bytearray | memoryview) -> ParseResult:
    """Parse the command that starts at ``window[0]``.

    Args:
        window: Unconsumed inbound bytes, starting at an IAC byte

    Returns:
        ParseResult describing the sequence

    Raises:
        ValueError: If the window does not start with IAC
    """
    if not window:
        return NEED_MORE
    if window[0] != IAC:
        raise ValueError(f"command window must start with IAC, got 0x{window[0]:02x}")

    # A lone trailing IAC may be the first half of a split read
    if len(window) < 2:
        return NEED_MORE

    code = window[1]
    if code == IAC:
        return ParseResult(ParseStatus.ESCAPED, length=2, command=Command.IAC)

    if code in NEGOTIATION_COMMANDS:
        if len(window) < 3:
            return NEED_MORE
        return ParseResult(
            ParseStatus.NEGOTIATION,
            length=3,
            command=Command(code),
            option=window[2],
        )

    if code == Command.SB:
        return _parse_subnegotiation(window)

    try:
        command = Command(code)
    except ValueError:
        command = None
    return ParseResult(ParseStatus.COMMAND, length=2, command=command)


def _parse_subnegotiation(window: bytes | bytearray | memoryview) -> ParseResult:
    """Find the ``IAC SE`` that closes an ``IAC SB`` block."""
    n = len(window)
    if n < 3:
        return NEED_MORE

    # IAC SB IAC SE is an empty block without an option byte
    i = 2
    while i < n - 1:
        if window[i] == IAC:
            if window[i + 1] == Command.SE:
                return ParseResult(
                    ParseStatus.SUBNEGOTIATION,
                    length=i + 2,
                    command=Command.SB,
                    option=window[2] if i > 2 else None,
                )
            # IAC IAC inside the block is an escaped data byte
            i += 2
            continue
        i += 1

    return NEED_MORE
