"""Test the TCP connection and the full client against a local server."""
# std imports
import io
import ipaddress
import os

import anyio
from anyio.abc import SocketAttribute
from anyio.streams.buffered import BufferedByteReceiveStream

# local imports
from tinytelnet.client import run_client
from tinytelnet.connection import TcpConnection, SocketStatus, is_closed, poll
from tinytelnet.console import Console
from tinytelnet.errors import ConnectionFailure
from tinytelnet.session import SessionState, CLOSED_BY_PEER
from tinytelnet.telopt import IAC, DO, SB, SE, TTYPE

# 3rd party
import pytest


async def _wait_closed(conn):
    with anyio.fail_after(2):
        while not is_closed(conn.status()):
            await anyio.sleep(0.01)


@pytest.mark.anyio
async def test_connect_read_write(bind_host):
    received = []
    done = anyio.Event()

    async def handler(stream):
        async with stream:
            await stream.send(b'hello')
            received.append(await stream.receive())
            done.set()

    async with await anyio.create_tcp_listener(local_host=bind_host) as listener, \
            anyio.create_task_group() as tg:
        port = listener.extra(SocketAttribute.local_port)
        tg.start_soon(listener.serve, handler)

        conn = TcpConnection.open()
        assert conn.status() == SocketStatus.IS_OPEN
        await conn.connect(ipaddress.ip_address(bind_host), port)

        assert await poll([conn], 2) is conn
        assert conn.read() == b'hello'
        assert conn.read() is None
        assert not is_closed(conn.status())

        await conn.write(b'world')
        with anyio.fail_after(2):
            await done.wait()
        assert received == [b'world']

        # the handler has closed its side
        await _wait_closed(conn)
        assert conn.read() == b''

        await conn.aclose()
        await conn.aclose()
        assert conn.closed
        assert conn.status() is None
        assert conn.read() is None
        tg.cancel_scope.cancel()


@pytest.mark.anyio
async def test_poll_times_out(bind_host):
    async def handler(stream):
        async with stream:
            await anyio.sleep_forever()

    async with await anyio.create_tcp_listener(local_host=bind_host) as listener, \
            anyio.create_task_group() as tg:
        port = listener.extra(SocketAttribute.local_port)
        tg.start_soon(listener.serve, handler)

        conn = TcpConnection.open()
        await conn.connect(ipaddress.ip_address(bind_host), port)
        assert await poll([conn], 0.05) is None
        assert not is_closed(conn.status())
        await conn.aclose()
        tg.cancel_scope.cancel()


@pytest.mark.anyio
async def test_connect_refused(bind_host, unused_tcp_port):
    conn = TcpConnection.open()
    with pytest.raises(ConnectionFailure) as exc_info:
        await conn.connect(ipaddress.ip_address(bind_host), unused_tcp_port)
    assert exc_info.value.port == unused_tcp_port
    await conn.aclose()


@pytest.mark.anyio
async def test_client_session(bind_host):
    """Full session: terminal type, one typed line, server hangs up."""
    got = []
    ttype_seen = anyio.Event()
    ttype_reply = bytes([IAC, SB, TTYPE, 0]) + b'XTERM-256COLOR' + bytes([IAC, SE])

    async def handler(stream):
        async with stream:
            buffered = BufferedByteReceiveStream(stream)
            await stream.send(bytes([IAC, DO, TTYPE]) + b'login: ')
            got.append(await buffered.receive_exactly(len(ttype_reply)))
            ttype_seen.set()
            got.append(await buffered.receive_exactly(6))
            await stream.send(b'bye\r\n')

    rfd, wfd = os.pipe()
    out = io.BytesIO()

    async def typist():
        await ttype_seen.wait()
        os.write(wfd, b'root\n')

    try:
        async with await anyio.create_tcp_listener(local_host=bind_host) as listener, \
                anyio.create_task_group() as tg:
            port = listener.extra(SocketAttribute.local_port)
            tg.start_soon(listener.serve, handler)
            tg.start_soon(typist)

            with os.fdopen(rfd, 'r') as stdin, \
                    Console(stdin=stdin, stdout=out) as console, \
                    anyio.fail_after(10):
                session = await run_client('%s:%d' % (bind_host, port),
                        console=console, catch_interrupt=False)
            tg.cancel_scope.cancel()
    finally:
        os.close(wfd)

    assert got == [ttype_reply, b'root\r\n']
    assert session.state is SessionState.CLOSED
    output = out.getvalue()
    assert output.startswith(b'login: ')
    assert b'bye\r\n' in output
    assert output.endswith(CLOSED_BY_PEER)


class _FileLike:
    """Always readable, like a regular file."""
    pollable = False

    def fileno(self):
        raise AssertionError("must not be waited on")


@pytest.mark.anyio
async def test_poll_unpollable_handle_is_ready():
    rfd, wfd = os.pipe()
    try:
        handle = _FileLike()
        with anyio.fail_after(1):
            assert await poll([rfd, handle], 5) is handle
    finally:
        os.close(rfd)
        os.close(wfd)


@pytest.mark.anyio
async def test_client_session_from_file(bind_host, tmp_path):
    """Input redirected from a regular file: send it, then stop at its end."""
    got = []
    received = anyio.Event()

    async def handler(stream):
        async with stream:
            buffered = BufferedByteReceiveStream(stream)
            got.append(await buffered.receive_exactly(6))
            received.set()

    path = tmp_path / 'input'
    path.write_bytes(b'root\n')
    out = io.BytesIO()

    async with await anyio.create_tcp_listener(local_host=bind_host) as listener, \
            anyio.create_task_group() as tg:
        port = listener.extra(SocketAttribute.local_port)
        tg.start_soon(listener.serve, handler)

        with open(path, 'rb') as stdin, \
                Console(stdin=stdin, stdout=out) as console, \
                anyio.fail_after(10):
            session = await run_client('%s:%d' % (bind_host, port),
                    console=console, catch_interrupt=False)
            await received.wait()
        tg.cancel_scope.cancel()

    assert got == [b'root\r\n']
    assert session.state is SessionState.CLOSED
    assert out.getvalue() == b'\n'


def test_device_unavailable(monkeypatch):
    import errno
    import socket
    from tinytelnet.errors import DeviceUnavailable

    def broken(*args, **kwargs):
        raise OSError(errno.EMFILE, "Too many open files")
    monkeypatch.setattr(socket, "socket", broken)

    with pytest.raises(DeviceUnavailable) as exc_info:
        TcpConnection.open()
    assert str(exc_info.value) == "Could not open network device: Too many open files"
