"""
Turn a ``host[:port]`` argument into something we can connect to.
"""
# std imports
import ipaddress
import logging
import socket
from dataclasses import dataclass

import anyio

# local imports
from .errors import InvalidAddressFormat, ResolutionFailure

__all__ = ('Endpoint', 'parse_target', 'resolve', 'DEFAULT_PORT')

DEFAULT_PORT = 23


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int = DEFAULT_PORT

    def __str__(self):
        return "%s:%d" % (self.host, self.port)


def _parse_port(text: str) -> int:
    if text.isascii() and text.isdigit():
        port = int(text)
        if port <= 0xFFFF:
            return port
    return DEFAULT_PORT


def parse_target(text: str) -> Endpoint:
    """
    Split ``text`` at its first colon.

    A missing or unparseable port is silently replaced by 23; this never
    fails.

        >>> parse_target('example.com:2323')
        Endpoint(host='example.com', port=2323)
        >>> parse_target('example.com:telnet')
        Endpoint(host='example.com', port=23)
    """
    host, sep, port = text.partition(':')
    if not sep:
        return Endpoint(host)
    return Endpoint(host, _parse_port(port))


def is_ip_literal(host: str) -> bool:
    """Host names never end with a digit, IPv4 addresses always do."""
    return host[-1:].isdigit()


async def _getaddrinfo(host):
    res = await anyio.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    for family, _, _, _, sockaddr in res:
        if family in (socket.AF_INET, socket.AF_INET6):
            return sockaddr[0]
    raise OSError("no address found")


async def resolve(host: str, *, resolver=None, log=None):
    """
    Return the :mod:`ipaddress` address for ``host``.

    :param resolver: an async callable mapping a host name to an address
        (anything :func:`ipaddress.ip_address` accepts). Defaults to a
        lookup via :func:`anyio.getaddrinfo`.
    :raises InvalidAddressFormat: ``host`` looks like an IP literal but is not.
    :raises ResolutionFailure: the resolver failed, or the name cannot be
        IDNA-encoded.
    """
    log = log or logging.getLogger('tinytelnet.target')

    if is_ip_literal(host):
        try:
            return ipaddress.ip_address(host)
        except ValueError:
            raise InvalidAddressFormat(host) from None

    if resolver is None:
        resolver = _getaddrinfo
    try:
        addr = await resolver(host)
    except OSError as exc:
        raise ResolutionFailure(host, exc.strerror or str(exc)) from exc
    except UnicodeError as exc:
        # not a valid internationalized host name
        raise ResolutionFailure(host, str(exc) or "invalid host name") from exc
    log.debug("resolved %s to %s", host, addr)
    return ipaddress.ip_address(addr)
