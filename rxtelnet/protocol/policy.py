"""Option negotiation policy.

The policy is a table: for each negotiation command it names the reply sent
when the option is accepted and the reply sent when it is refused, plus the set
of accepted options. Replies are raw ``IAC <cmd> <opt>`` triples written to the
transport as-is (never escaped).

Default table:
    WILL opt -> DO opt for SUPPRESS_GO_AHEAD, DONT opt otherwise
    DO opt   -> WILL opt for BINARY, WONT opt otherwise
    DONT opt -> WONT opt
    WONT opt -> no reply

Example:
    >>> DEFAULT_POLICY.respond(Command.DO, Option.ECHO)
    b'\\xff\\xfc\\x01'
    >>> strict = NegotiationPolicy(accept_will=frozenset(), accept_do=frozenset())
    >>> strict.respond(Command.WILL, Option.SUPPRESS_GO_AHEAD)
    b'\\xff\\xfe\\x03'
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from .codes import IAC, Command, Option

# command -> (reply when accepted, reply when refused)
REPLY_TABLE: dict[Command, tuple[Command | None, Command | None]] = {
    Command.WILL: (Command.DO, Command.DONT),
    Command.DO: (Command.WILL, Command.WONT),
    Command.DONT: (Command.WONT, Command.WONT),
    Command.WONT: (None, None),
}


@dataclass(frozen=True)
class NegotiationPolicy:
    """Accept/refuse table for WILL and DO requests.

    Attributes:
        accept_will: Options the peer may enable on its side (answered with DO)
        accept_do: Options we agree to enable on our side (answered with WILL)
    """

    accept_will: frozenset[int] = field(
        default_factory=lambda: frozenset({Option.SUPPRESS_GO_AHEAD})
    )
    accept_do: frozenset[int] = field(
        default_factory=lambda: frozenset({Option.BINARY})
    )

    def accepts(self, command: Command, option: int) -> bool:
        if command == Command.WILL:
            return option in self.accept_will
        if command == Command.DO:
            return option in self.accept_do
        return False

    def reply_command(self, command: Command, option: int) -> Command | None:
        """Return the command to answer ``command option`` with, if any.

        Raises:
            ValueError: If ``command`` is not WILL, WONT, DO or DONT
        """
        try:
            accepted, refused = REPLY_TABLE[command]
        except KeyError:
            raise ValueError(f"{command!r} is not a negotiation command") from None
        return accepted if self.accepts(command, option) else refused

    def respond(self, command: Command, option: int) -> bytes | None:
        """Return the raw reply bytes for ``IAC command option``, or None."""
        reply = self.reply_command(command, option)
        if reply is None:
            return None
        return bytes([IAC, reply, option])


DEFAULT_POLICY = NegotiationPolicy()


def create_policy(
    accept_will: Iterable[int] = (Option.SUPPRESS_GO_AHEAD,),
    accept_do: Iterable[int] = (Option.BINARY,),
) -> NegotiationPolicy:
    """Build a policy from any iterables of option codes."""
    return NegotiationPolicy(
        accept_will=frozenset(int(o) for o in accept_will),
        accept_do=frozenset(int(o) for o in accept_do),
    )
