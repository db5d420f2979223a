"""TELNET IAC protocol primitives.

This package holds the pure, thread-free parts of the engine:
    - Command/Option code enumerations
    - IAC escaping and unescaping
    - Command window parsing (split-read aware)
    - The option negotiation table

Example:
    >>> from rxtelnet.protocol import escape, parse_command, DEFAULT_POLICY
    >>> escape(b"a\\xffb")
    b'a\\xff\\xffb'
"""

from .codes import (
    IAC,
    IAC_BYTE,
    NEGOTIATION_COMMANDS,
    Command,
    Option,
    command_name,
    option_name,
)
from .escape import escape, unescape
from .parser import ParseResult, ParseStatus, parse_command
from .policy import DEFAULT_POLICY, REPLY_TABLE, NegotiationPolicy, create_policy

__all__ = [
    # Codes
    "IAC",
    "IAC_BYTE",
    "NEGOTIATION_COMMANDS",
    "Command",
    "Option",
    "command_name",
    "option_name",
    # Escaping
    "escape",
    "unescape",
    # Parsing
    "ParseStatus",
    "ParseResult",
    "parse_command",
    # Policy
    "NegotiationPolicy",
    "DEFAULT_POLICY",
    "REPLY_TABLE",
    "create_policy",
]
