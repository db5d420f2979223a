"""TELNET command and option codes.

Commands are the bytes that may follow IAC; options are the byte that follows
WILL/WONT/DO/DONT. Options outside :class:`Option` are legal on the wire and are
carried around as plain ``int``.
"""

from enum import IntEnum


class Command(IntEnum):
    """Bytes that may follow IAC."""

    SE = 240  # End of sub-negotiation
    NOP = 241  # No operation
    DM = 242  # Data mark
    BRK = 243  # Break
    IP = 244  # Interrupt process
    AO = 245  # Abort output
    AYT = 246  # Are you there
    EC = 247  # Erase character
    EL = 248  # Erase line
    GA = 249  # Go ahead
    SB = 250  # Start of sub-negotiation
    WILL = 251
    WONT = 252
    DO = 253
    DONT = 254
    IAC = 255


class Option(IntEnum):
    """Options known to the default negotiation policy."""

    BINARY = 0
    ECHO = 1
    RECONNECT = 2
    SUPPRESS_GO_AHEAD = 3
    LOGOUT = 18
    TERMINAL_SPEED = 32
    REMOTE_FLOW_CONTROL = 33


IAC = Command.IAC.value
IAC_BYTE = bytes([IAC])

NEGOTIATION_COMMANDS = frozenset(
    {Command.WILL, Command.WONT, Command.DO, Command.DONT}
)


def command_name(code: int) -> str:
    try:
        return Command(code).name
    except ValueError:
        return f"0x{code:02x}"


def option_name(code: int) -> str:
    try:
        return Option(code).name
    except ValueError:
        return str(code)
