"""
A small non-blocking TCP connection, plus readiness polling.
"""
# std imports
import errno
import logging
import os
import socket
from enum import IntFlag
from typing import Optional

import anyio

# local imports
from .errors import ConnectionFailure, DeviceUnavailable

__all__ = ('SocketStatus', 'TcpConnection', 'is_closed', 'poll')

#: largest chunk handed out by a single read
DEFAULT_MTU = 1500


class SocketStatus(IntFlag):
    """The bits of a socket's one-byte liveness status."""
    IS_LISTENING = 1 << 0
    IS_ACTIVE = 1 << 1
    IS_OPEN = 1 << 2
    MAY_SEND = 1 << 3
    CAN_SEND = 1 << 4
    MAY_RECV = 1 << 5
    CAN_RECV = 1 << 6


def is_closed(status: int) -> bool:
    """Whether the peer has closed its side, so no more data may arrive."""
    return not status & SocketStatus.MAY_RECV


class TcpConnection:
    """
    A TCP socket that never blocks on reads.

    Reads return whatever is available right now, writes wait until the
    kernel took all of the data. Use :meth:`open` to create one.
    """
    _sock = None

    def __init__(self, sock: socket.socket, mtu=DEFAULT_MTU, log=None):
        self._sock = sock
        self.mtu = mtu
        self.log = log or logging.getLogger('tinytelnet.connection')
        self._connected = False
        self._eof = False

    @classmethod
    def open(cls, family=socket.AF_INET, mtu=DEFAULT_MTU, log=None):
        """
        Create an unconnected, non-blocking stream socket.

        :raises DeviceUnavailable: if the socket cannot be created.
        """
        try:
            sock = socket.socket(family, socket.SOCK_STREAM)
        except OSError as exc:
            raise DeviceUnavailable(exc.strerror or str(exc)) from exc
        sock.setblocking(False)
        return cls(sock, mtu=mtu, log=log)

    def fileno(self):
        return self._sock.fileno()

    @property
    def closed(self):
        return self._sock is None

    async def connect(self, address, port: int):
        """
        Connect to ``address`` (an :mod:`ipaddress` address) and ``port``.

        :raises ConnectionFailure: on any error.
        """
        sock = self._sock
        err = sock.connect_ex((str(address), port))
        if err in (errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EAGAIN):
            await anyio.wait_writable(sock)
            err = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if err:
            raise ConnectionFailure(address, port, os.strerror(err))
        self._connected = True

    def read(self, max_bytes: Optional[int] = None) -> Optional[bytes]:
        """
        Return the bytes that are available right now.

        ``None`` means that nothing could be read; ``b''`` signals the end
        of the stream.
        """
        if self._sock is None:
            return None
        try:
            data = self._sock.recv(max_bytes or self.mtu)
        except BlockingIOError:
            return None
        except OSError as exc:
            self.log.debug("read failed: %r", exc)
            return None
        if not data:
            self._eof = True
        return data

    async def write(self, data: bytes):
        """
        Send all of ``data``.

        Errors are logged and otherwise ignored: a connection that went
        away is noticed by :meth:`status`.
        """
        if self._sock is None:
            return
        view = memoryview(data)
        try:
            while view:
                await anyio.wait_writable(self._sock)
                try:
                    done = self._sock.send(view)
                except BlockingIOError:
                    # spurious wakeup
                    continue
                view = view[done:]
        except OSError as exc:
            self.log.debug("write failed: %r", exc)

    def status(self) -> Optional[SocketStatus]:
        """
        Return the current :class:`SocketStatus`, or ``None`` if it cannot
        be determined.

        Peeks at the socket, so no data is consumed.
        """
        if self._sock is None:
            return None
        status = SocketStatus.IS_OPEN
        if not self._connected:
            return status
        status |= SocketStatus.IS_ACTIVE | SocketStatus.MAY_SEND
        if self._eof:
            return status
        try:
            peek = self._sock.recv(1, socket.MSG_PEEK)
        except BlockingIOError:
            return status | SocketStatus.MAY_RECV
        except OSError as exc:
            self.log.debug("status failed: %r", exc)
            return SocketStatus.IS_OPEN
        if not peek:
            self._eof = True
            return status
        return status | SocketStatus.MAY_RECV | SocketStatus.CAN_RECV

    async def aclose(self):
        """Close the socket. Safe to call more than once."""
        sock, self._sock = self._sock, None
        if sock is None:
            return
        anyio.notify_closing(sock)
        sock.close()


async def poll(handles, timeout: float):
    """
    Wait until one of ``handles`` is readable.

    :param handles: a sequence of integer file descriptors or objects with
        a ``fileno`` method. A handle whose ``pollable`` attribute is false
        (a regular file, say) counts as always readable.
    :returns: the first handle that became readable, or ``None`` if none
        did within ``timeout`` seconds.
    """
    for handle in handles:
        if not getattr(handle, "pollable", True):
            return handle

    ready = None

    async def _wait(tg, handle):
        nonlocal ready
        await anyio.wait_readable(handle)
        if ready is None:
            ready = handle
        tg.cancel_scope.cancel()

    with anyio.move_on_after(timeout):
        async with anyio.create_task_group() as tg:
            for handle in handles:
                tg.start_soon(_wait, tg, handle)
    return ready
