"""
The session pump: move bytes between the console and the remote host.
"""
# std imports
import logging
import socket
from contextlib import asynccontextmanager
from enum import Enum

import anyio

# local imports
from .accessories import CtxObj
from .connection import TcpConnection, is_closed, poll
from .errors import ConnectionFailure
from .negotiation import NegotiationEngine, DEFAULT_TERM

__all__ = ('SessionState', 'Session', 'SessionPump')

CLOSED_BY_PEER = b"Connection closed by foreign host.\n"


class SessionState(Enum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


class Session:
    """
    The state of one connection.

    ``history`` lists every state the session went through, in order.
    """
    handle = None

    def __init__(self, address, port, engine):
        self.address = address
        self.port = port
        self._engine = engine
        self.state = SessionState.CONNECTING
        self.history = [self.state]

    @property
    def connected(self):
        return self.state is SessionState.ACTIVE

    @property
    def echo_suppressed(self):
        return self._engine.echo_suppressed

    def __repr__(self):
        return '<%s: %s:%d %s>' % (self.__class__.__name__,
                self.address, self.port, self.state.value)


class SessionPump(CtxObj):
    """
    Talk to a telnet server until either side quits.

    Usage::

        async with SessionPump(address, port, console=console) as pump:
            await pump.run()

    Entering the context connects; leaving it releases the connection,
    whatever happened in between.

    :param console: local I/O, see :class:`tinytelnet.console.Console`.
        It also acts as the echo control of the negotiation engine.
    :param opener: called with the address family, returns an unconnected
        :class:`tinytelnet.connection.TcpConnection` (or lookalike).
    :param poll: an async callable ``poll(handles, timeout)`` returning the
        first readable handle, or ``None``.
    :param float timeout: seconds to wait for the connection to be
        established.
    """
    #: Seconds to sleep when nothing is ready
    idle_interval = 0.01
    #: Seconds one readiness poll may take
    poll_interval = 0.1

    def __init__(self, address, port, *, console, opener=None, poll=poll,
                 timeout=5.0, term=DEFAULT_TERM, log=None):
        self.log = log or logging.getLogger('tinytelnet.session')
        self.console = console
        self.timeout = timeout
        self._opener = opener or TcpConnection.open
        self._poll = poll
        self.engine = NegotiationEngine(console, term=term, log=self.log)
        self.session = Session(address, port, self.engine)

    def _set_state(self, state):
        session = self.session
        self.log.debug("session %s -> %s", session.state.value, state.value)
        session.state = state
        session.history.append(state)

    @asynccontextmanager
    async def _ctx(self):
        session = self.session
        family = socket.AF_INET6 if session.address.version == 6 else socket.AF_INET
        session.handle = self._opener(family)
        try:
            try:
                with anyio.fail_after(self.timeout):
                    await session.handle.connect(session.address, session.port)
            except TimeoutError:
                raise ConnectionFailure(session.address, session.port,
                        "timed out") from None
            except ConnectionFailure:
                raise
            except OSError as exc:
                raise ConnectionFailure(session.address, session.port,
                        exc.strerror or str(exc)) from exc
        except BaseException:
            await self.aclose()
            raise
        self.log.debug("Connected to %s:%d", session.address, session.port)
        self._set_state(SessionState.ACTIVE)
        yield self

    async def aclose(self):
        """Release the connection. Idempotent."""
        session = self.session
        if session.state is SessionState.ACTIVE:
            self._set_state(SessionState.CLOSING)
        handle, session.handle = session.handle, None
        if handle is not None:
            with anyio.CancelScope(shield=True):
                await handle.aclose()
        if session.state is not SessionState.CLOSED:
            self._set_state(SessionState.CLOSED)

    async def run(self):
        """
        Pump data until the user cancels or the server hangs up.
        """
        session = self.session
        console = self.console
        handle = session.handle
        while session.connected:
            if console.end_of_text() or console.end_of_transmission():
                console.write(b"\n")
                self._set_state(SessionState.CLOSING)
                break

            ready = await self._poll([console, handle], self.poll_interval)
            if ready is console:
                line = await console.read_line()
                if line:
                    await handle.write(line.replace(b"\n", b"\r\n"))
            elif ready is handle:
                data = handle.read(handle.mtu)
                if data:
                    display, response = self.engine.feed(data)
                    console.write(display)
                    if response:
                        await handle.write(response)
                elif data is not None:
                    # readable but empty: the peer may have hung up
                    self._check_alive()
            else:
                await anyio.sleep(self.idle_interval)
                self._check_alive()

    def _check_alive(self):
        status = self.session.handle.status()
        if status is not None and is_closed(status):
            self.log.debug("connection closed by peer")
            self.console.write(CLOSED_BY_PEER)
            self._set_state(SessionState.CLOSING)
