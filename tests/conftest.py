import pytest
import socket
from contextlib import closing


@pytest.fixture(scope="module", params=['127.0.0.1'])
def bind_host(request):
    """ Localhost bind address. """
    return request.param

def _unused_tcp_port():
    """Find an unused localhost TCP port from 1024-65535 and return it."""
    with closing(socket.socket()) as sock:
        sock.bind(('127.0.0.1', 0))
        return sock.getsockname()[1]

@pytest.fixture
def unused_tcp_port():
    return _unused_tcp_port()

@pytest.fixture(params=[
    pytest.param(('asyncio', {}), id='asyncio'),
    pytest.param(('trio', {}), id='trio'),
])
def anyio_backend(request):
    return request.param
