"""
The local side of a session: keyboard lines in, raw bytes out.
"""
# std imports
import collections
import logging
import os
import stat
import sys

import anyio

# local imports
from .accessories import name_unicode

__all__ = ('Console', 'ETX', 'EOT')

if sys.platform == 'win32':
    raise NotImplementedError(
        'win32 not yet supported as telnet client. Please contribute!')

import termios

ETX = b"\x03"  # ^C, end of text
EOT = b"\x04"  # ^D, end of transmission


class Console:
    """
    Line-buffered terminal I/O.

    When stdin is attached to a terminal, its mode is saved on entry and
    restored on exit, so echo switched off by the server does not outlive
    the session.

    This class should be used as a context manager.
    """
    _saved_mode = None

    _ModeDef = collections.namedtuple(
        'mode', ['iflag', 'oflag', 'cflag', 'lflag',
                    'ispeed', 'ospeed', 'cc'])

    def __init__(self, stdin=None, stdout=None, log=None):
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout.buffer
        self._fileno = self._stdin.fileno()
        self._istty = os.isatty(self._fileno)
        #: regular files cannot be waited on, they are always readable
        self.pollable = not stat.S_ISREG(os.fstat(self._fileno).st_mode)
        self.log = log or logging.getLogger('tinytelnet.console')
        self._echo = True
        self._end_of_text = False
        self._end_of_transmission = False

    def __enter__(self):
        if self._istty:
            self._saved_mode = self._ModeDef(*termios.tcgetattr(self._fileno))
        return self

    def __exit__(self, *tb):
        if self._saved_mode is not None:
            termios.tcsetattr(
                self._fileno, termios.TCSAFLUSH, list(self._saved_mode))
            self._saved_mode = None

    def fileno(self):
        return self._fileno

    @property
    def echo(self):
        return self._echo

    def set_echo(self, enabled: bool):
        """Switch the terminal's own echo of typed characters."""
        self.log.debug("local echo %s", "on" if enabled else "off")
        self._echo = enabled
        if not self._istty:
            return
        mode = termios.tcgetattr(self._fileno)
        if enabled:
            mode[3] |= termios.ECHO
        else:
            mode[3] &= ~termios.ECHO
        termios.tcsetattr(self._fileno, termios.TCSANOW, mode)

    def interrupt(self):
        """Record a ^C that arrived as a signal."""
        self._end_of_text = True

    def end_of_text(self) -> bool:
        return self._end_of_text

    def end_of_transmission(self) -> bool:
        return self._end_of_transmission

    async def read_line(self) -> bytes:
        """
        Read one complete line.

        A line containing ^C or ^D, or the end of input, ends the session
        and yields an empty line. Lines are passed on as bytes, undecoded.
        """
        stdin = getattr(self._stdin, "buffer", self._stdin)
        line = await anyio.to_thread.run_sync(stdin.readline)
        if not line:
            self._end_of_transmission = True
        elif ETX in line:
            self.log.debug("%s on input", name_unicode(ETX.decode()))
            self._end_of_text = True
            line = b""
        elif EOT in line:
            self.log.debug("%s on input", name_unicode(EOT.decode()))
            self._end_of_transmission = True
            line = b""
        return line

    def write(self, data: bytes):
        if not data:
            return
        self._stdout.write(data)
        self._stdout.flush()
