# Telnet commands and options.
#
# No we don't import from telnetlib. Enums are way nicer.

from enum import IntEnum

__all__ = (
    'Cmd', 'Opt', 'SubT',
    'ABORT', 'AO', 'AYT', 'BINARY', 'BRK', 'DM', 'DO', 'DONT', 'EC', 'ECHO',
    'EL', 'EOF', 'EOR', 'GA', 'IAC', 'IP', 'IS', 'NAWS', 'NOP', 'SB', 'SE',
    'SGA', 'SUPPRESS_LOCAL_ECHO', 'SUSP', 'TERMINAL_TYPE', 'TTYPE', 'WILL',
    'WONT', 'name_command', 'name_commands',
)

def _exp(cls):
    for k in cls.__members__:
        globals()[k] = cls[k]
    return cls

@_exp
class Cmd(IntEnum):
    EOF = 236  # End of File
    SUSP = 237  # Suspend
    ABORT = 238  # Abort
    EOR = 239  # End of Record
    SE = 240  # Subnegotiation End
    NOP = 241  # No Operation
    DM = 242  # Data Mark
    BRK = 243  # Break
    IP = 244  # Interrupt Process
    AO = 245  # Abort Output
    AYT = 246  # Are You There
    EC = 247  # Erase Character
    EL = 248  # Erase Line
    GA = 249  # Go Ahead
    SB = 250  # Subnegotiation Begin
    WILL = 251  # I want to do …
    WONT = 252  # I will not do …
    DO = 253  # Please do …
    DONT = 254  # You should not do …
    IAC = 255  # Escape

@_exp
class Opt(IntEnum):
    BINARY = 0  # 8-bit data path
    ECHO = 1  # remote echo, i.e. suppressed local echo
    SUPPRESS_LOCAL_ECHO = 1
    SGA = 3  # suppress go ahead
    TTYPE = 24  # terminal type
    TERMINAL_TYPE = 24
    NAWS = 31  # window size

@_exp
class SubT(IntEnum):
    IS = 0
    SEND = 1


def name_command(byte):
    """Return string description for (maybe) telnet command byte."""
    try:
        return Cmd(byte).name
    except ValueError:
        try:
            return Opt(byte).name
        except ValueError:
            raise ValueError("Unknown: %r"%(byte,)) from None

def name_commands(cmds, sep=' '):
    """Return string description for array of (maybe) telnet command bytes."""
    return sep.join(name_command(byte) for byte in cmds)
