#!/usr/bin/env python3
"""
Telnet client command line for the 'tinytelnet' python package.
"""
# std imports
import argparse
import logging
import signal
import sys
from functools import partial

import anyio

# local imports
from . import accessories
from .console import Console
from .errors import ExitCode, TelnetError, UsageError
from .negotiation import DEFAULT_TERM
from .session import SessionPump
from .target import parse_target, resolve

__all__ = ('run_client', 'main')

DEFAULT_TIMEOUT = 5.0


async def _route_interrupts(console):
    # ^C is a request to disconnect, not to kill us
    with anyio.open_signal_receiver(signal.SIGINT) as signals:
        async for _ in signals:
            console.interrupt()


async def run_client(target, *, console, timeout=DEFAULT_TIMEOUT,
                     term=DEFAULT_TERM, log=None, resolver=None,
                     catch_interrupt=True, **kwargs):
    """
    Connect to ``target`` (``host[:port]``) and run a session to completion.

    :param console: local I/O, a :class:`~tinytelnet.console.Console`.
    :param float timeout: seconds to wait for the connection.
    :param str term: terminal type reported to the server.
    :param resolver: async host name resolver, see
        :func:`tinytelnet.target.resolve`.
    :param bool catch_interrupt: route SIGINT to ``console.interrupt``
        while the session is running.

    Remaining keyword arguments are passed to
    :class:`~tinytelnet.session.SessionPump`.

    :returns: the finished :class:`~tinytelnet.session.Session`.
    :raises TelnetError: when the host cannot be resolved or connected to.
    """
    log = log or logging.getLogger('tinytelnet.client')
    endpoint = parse_target(target)
    address = await resolve(endpoint.host, resolver=resolver, log=log)
    log.debug("Connecting to %s (%s)", endpoint, address)

    pump = SessionPump(address, endpoint.port, console=console,
            timeout=timeout, term=term, log=log, **kwargs)
    error = None
    async with anyio.create_task_group() as tg:
        if catch_interrupt:
            tg.start_soon(_route_interrupts, console)
        try:
            async with pump:
                await pump.run()
        except TelnetError as exc:
            error = exc
        finally:
            tg.cancel_scope.cancel()
    if error is not None:
        raise error
    return pump.session


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def _seconds(text):
    try:
        return float(text)
    except ValueError:
        return DEFAULT_TIMEOUT


def _terminal_type(text):
    if not text.isascii():
        raise argparse.ArgumentTypeError("terminal type must be ASCII: %r" % (text,))
    return text


def _get_argument_parser():
    parser = _ArgumentParser(
        prog='tinytelnet',
        description="Minimal telnet client",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument('host', action='store',
                        help='host[:port], the port defaults to 23')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log connection and negotiation events')
    parser.add_argument('-t', '--timeout', default=DEFAULT_TIMEOUT,
                        type=_seconds, metavar='SECONDS',
                        help='connection timeout')
    parser.add_argument('--term', default=DEFAULT_TERM, type=_terminal_type,
                        help='terminal type')
    parser.add_argument('--loglevel', default='warn',
                        help='log level')
    parser.add_argument('--logfmt', default=accessories._DEFAULT_LOGFMT,
                        help='log format')
    parser.add_argument('--logfile',
                        help='filepath')
    return parser


def _transform_args(args):
    return {
        'target': args.host,
        'timeout': args.timeout,
        'term': args.term,
        'loglevel': 'debug' if args.verbose else args.loglevel,
        'logfile': args.logfile,
        'logfmt': args.logfmt,
    }


def main(argv=None):
    """Command-line 'tinytelnet' entry point, via setuptools."""
    try:
        kwargs = _transform_args(_get_argument_parser().parse_args(argv))
    except UsageError as exc:
        print("Error: %s" % (exc,), file=sys.stderr)
        return exc.exit_code
    config_msg = (
        'Client configuration: {key_values}'
        .format(key_values=accessories.repr_mapping(kwargs)))

    log = kwargs['log'] = accessories.make_logger(
        name=__name__,
        loglevel=kwargs.pop('loglevel'),
        logfile=kwargs.pop('logfile'),
        logfmt=kwargs.pop('logfmt'))
    log.debug(config_msg)

    try:
        with Console() as console:
            anyio.run(partial(run_client, console=console, **kwargs))
    except TelnetError as exc:
        print("Error: %s" % (exc,), file=sys.stderr)
        return exc.exit_code
    except KeyboardInterrupt:
        # ^C before the session took over: the user quit
        print(file=sys.stderr)
        return ExitCode.SUCCESS
    return ExitCode.SUCCESS


if __name__ == '__main__':
    sys.exit(main())
