"""
Socket Error Types

Exceptions raised by the socket layer. Each one carries the UPnP status
code the surrounding stack reports for it.
"""

from typing import Optional

UPNP_E_SUCCESS = 0
UPNP_E_TIMEDOUT = -207
UPNP_E_SOCKET_ERROR = -208


class SockError(Exception):
    """Raised when a socket call fails for any reason other than a timeout"""

    code = UPNP_E_SOCKET_ERROR

    def __init__(self, message: str, errno: Optional[int] = None):
        super().__init__(message)
        self.errno = errno


class SockTimeoutError(SockError, TimeoutError):
    """Raised when the timeout budget runs out, or was already spent before the call"""

    code = UPNP_E_TIMEDOUT


class SendError(SockError):
    """
    Raised when a send fails part way through a write.

    Unlike a read failure, the raw errno from the failing send is kept,
    along with how many bytes went out before it.
    """

    def __init__(self, message: str, errno: Optional[int] = None, bytes_sent: int = 0):
        super().__init__(message, errno)
        self.bytes_sent = bytes_sent
