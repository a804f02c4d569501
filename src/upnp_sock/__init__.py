"""
upnp-sock - deadline-bounded socket I/O for a UPnP stack
"""

__version__ = "0.1.0"

from upnp_sock.budget import TimeoutBudget
from upnp_sock.compat import is_nonblocking, make_blocking, make_nonblocking
from upnp_sock.errors import (
    UPNP_E_SOCKET_ERROR,
    UPNP_E_SUCCESS,
    UPNP_E_TIMEDOUT,
    SendError,
    SockError,
    SockTimeoutError,
)
from upnp_sock.sock import INVALID_SOCKET, SockInfo, sock_close, sock_read, sock_write
from upnp_sock.main import main

# This function is a direct entry point for CLI use
def cli_main():
    """
    Entry point for the CLI command.
    This function is referenced in pyproject.toml
    """
    import sys
    sys.exit(main())
