"""
Interpret the TELNET commands embedded in received data.
"""
# std imports
import logging
from enum import Enum
from typing import Protocol, Tuple

# local imports
from .telopt import (Cmd, Opt, IAC, SB, SE, IS, DO, DONT, WILL, WONT,
                     TTYPE, SUPPRESS_LOCAL_ECHO)

__all__ = ('NegotiationEvent', 'NegotiationEngine', 'EchoControl', 'classify',
        'DEFAULT_TERM')

DEFAULT_TERM = 'XTERM-256COLOR'


class EchoControl(Protocol):
    """Something that can turn local echo on or off."""
    def set_echo(self, enabled: bool) -> None:
        ...


class NegotiationEvent(Enum):
    TERMINAL_TYPE_QUERY = "ttype"
    ECHO_SUPPRESS_REQUEST = "will_echo"
    ECHO_SUPPRESS_WITHDRAW = "wont_echo"
    UNRECOGNIZED = "unknown"


# Every (command, option) pair we answer. Everything else is ignored.
_EVENTS = {
    (DO, TTYPE): NegotiationEvent.TERMINAL_TYPE_QUERY,
    (WILL, SUPPRESS_LOCAL_ECHO): NegotiationEvent.ECHO_SUPPRESS_REQUEST,
    (WONT, SUPPRESS_LOCAL_ECHO): NegotiationEvent.ECHO_SUPPRESS_WITHDRAW,
}


def classify(cmd: int, opt: int) -> NegotiationEvent:
    """Map the two bytes following an IAC to a negotiation event."""
    return _EVENTS.get((cmd, opt), NegotiationEvent.UNRECOGNIZED)


def _name(byte, enum):
    try:
        return enum(byte).name
    except ValueError:
        return str(byte)


class NegotiationEngine:
    """
    Telnet IAC interpreter for a minimal client.

    Only three commands are answered: ``DO TTYPE`` with our terminal type,
    and ``WILL``/``WONT ECHO`` by switching local echo off resp. on. No
    reply is sent for anything else.

    Known limitation: a command is only recognized when all three bytes
    are in the same chunk. An IAC within the last two bytes of a chunk is
    passed through as data and the rest of the command shows up as data
    at the start of the next chunk.
    """
    def __init__(self, echo: EchoControl, term: str = DEFAULT_TERM, log=None):
        if not term.isascii():
            raise ValueError("terminal type must be ASCII: %r" % (term,))
        self.echo = echo
        self.term = term
        self.log = log or logging.getLogger('tinytelnet.negotiation')
        self._echo_suppressed = False

    @property
    def echo_suppressed(self) -> bool:
        """Whether the server echoes for us, so our local echo is off."""
        return self._echo_suppressed

    def feed(self, data: bytes) -> Tuple[bytes, bytes]:
        """
        Scan one received chunk.

        :returns: a tuple ``(display, response)``: the bytes to show
            locally and the bytes to send back to the server.
        """
        display = bytearray()
        response = bytearray()
        i = 0
        n = len(data)
        while i < n:
            if data[i] == IAC and i + 2 < n:
                reply = self._dispatch(data[i+1], data[i+2])
                if reply is not None:
                    response += reply
                    i += 3
                    continue
            # plain data, a truncated command, or an unknown one
            display.append(data[i])
            i += 1
        return bytes(display), bytes(response)

    def _dispatch(self, cmd, opt):
        event = classify(cmd, opt)
        if event is NegotiationEvent.UNRECOGNIZED:
            self.log.debug('recv IAC %s %s: ignored',
                    _name(cmd, Cmd), _name(opt, Opt))
            return None
        self.log.debug('recv IAC %s %s', Cmd(cmd).name, Opt(opt).name)
        return getattr(self, 'handle_' + event.name.lower())()

    def _set_echo_suppressed(self, value: bool):
        if self._echo_suppressed is value:
            return
        self._echo_suppressed = value
        self.echo.set_echo(not value)

    def handle_terminal_type_query(self) -> bytes:
        """Report our terminal type."""
        self.log.debug('send IAC SB TTYPE IS %s IAC SE', self.term)
        return (bytes([IAC, SB, TTYPE, IS]) + self.term.encode('ascii')
                + bytes([IAC, SE]))

    def handle_echo_suppress_request(self) -> bytes:
        """The server will echo: stop echoing ourselves."""
        self._set_echo_suppressed(True)
        return bytes([IAC, DO, SUPPRESS_LOCAL_ECHO])

    def handle_echo_suppress_withdraw(self) -> bytes:
        """The server won't echo (any more): echo locally."""
        self._set_echo_suppressed(False)
        return bytes([IAC, DONT, SUPPRESS_LOCAL_ECHO])
