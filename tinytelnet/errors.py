"""Errors that end a telnet invocation."""
from enum import IntEnum

__all__ = ('ExitCode', 'TelnetError', 'UsageError', 'ResolutionFailure',
        'InvalidAddressFormat', 'ConnectionFailure', 'DeviceUnavailable')


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1
    USAGE_ERROR = 64


class TelnetError(Exception):
    """
    Base class for errors that terminate the client.

    None of these are retried. The command line reports ``str(err)`` and
    exits with :attr:`exit_code`.
    """
    exit_code = ExitCode.FAILURE


class UsageError(TelnetError):
    """Bad or missing command line arguments"""
    exit_code = ExitCode.USAGE_ERROR


class InvalidAddressFormat(TelnetError):
    """The host looks like an IP address but isn't one"""
    exit_code = ExitCode.USAGE_ERROR

    def __init__(self, host):
        super().__init__(host)
        self.host = host

    def __str__(self):
        return "Invalid address format: %r" % (self.host,)


class ResolutionFailure(TelnetError):
    """Host name lookup failed"""
    def __init__(self, host, reason):
        super().__init__(host, reason)
        self.host = host
        self.reason = reason

    def __str__(self):
        return "Could not resolve host %r: %s" % (self.host, self.reason)


class ConnectionFailure(TelnetError):
    """The socket could not be connected"""
    def __init__(self, address, port, reason=None):
        super().__init__(address, port, reason)
        self.address = address
        self.port = port
        self.reason = reason

    def __str__(self):
        msg = "Could not connect to %s:%d" % (self.address, self.port)
        if self.reason:
            msg += ": %s" % (self.reason,)
        return msg


class DeviceUnavailable(TelnetError):
    """The network device (a socket) could not be opened at all"""
    def __str__(self):
        return "Could not open network device: %s" % (self.args[0],)
