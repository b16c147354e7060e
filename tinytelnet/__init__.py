"""tinytelnet: a minimal anyio-based Telnet client."""
# pylint: disable=wildcard-import,undefined-variable
from .errors import *           # noqa
from .telopt import *           # noqa
from .target import *           # noqa
from .negotiation import *      # noqa
from .connection import *       # noqa
from .console import *          # noqa
from .session import *          # noqa
from .client import *           # noqa
from .accessories import get_version as __get_version

__all__ = (
    errors.__all__ +
    telopt.__all__ +
    target.__all__ +
    negotiation.__all__ +
    connection.__all__ +
    console.__all__ +
    session.__all__ +
    client.__all__
)  # noqa

__license__ = 'ISC'
__version__ = __get_version()
