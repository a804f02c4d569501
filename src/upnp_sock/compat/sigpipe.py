"""
Broken-Pipe Suppression

Writing to a socket whose peer has gone away raises SIGPIPE on POSIX
systems. Linux lets each send/recv opt out with MSG_NOSIGNAL; BSD and
macOS instead offer the SO_NOSIGPIPE socket option. SigPipeGuard covers
both: use its flags on every call and wrap the transfer in suppress().
"""

import contextlib
import logging
import socket
import sys
from typing import Iterator, Optional

log = logging.getLogger("SigPipeGuard")

MSG_NOSIGNAL: int = getattr(socket, "MSG_NOSIGNAL", 0)

SO_NOSIGPIPE: Optional[int] = getattr(socket, "SO_NOSIGPIPE", None)
if SO_NOSIGPIPE is None and sys.platform == "darwin":
    SO_NOSIGPIPE = 0x1022


class SigPipeGuard:
    """
    Platform-specific broken-pipe suppression.

    Args:
        msg_flags: Flags OR'ed into every send/recv (MSG_NOSIGNAL or 0).
        sockopt: SO_NOSIGPIPE option number, or None where it does not exist.
    """

    def __init__(self, msg_flags: int = MSG_NOSIGNAL, sockopt: Optional[int] = SO_NOSIGPIPE):
        self.msg_flags = msg_flags
        self.sockopt = sockopt

    @contextlib.contextmanager
    def suppress(self, sock: socket.socket) -> Iterator[None]:
        """
        Sets SO_NOSIGPIPE for the duration of the block and puts back the
        previous value on every exit path. A no-op without SO_NOSIGPIPE.
        """
        if self.sockopt is None:
            yield
            return

        old = sock.getsockopt(socket.SOL_SOCKET, self.sockopt)
        sock.setsockopt(socket.SOL_SOCKET, self.sockopt, 1)
        try:
            yield
        finally:
            try:
                sock.setsockopt(socket.SOL_SOCKET, self.sockopt, old)
            except OSError as e:
                # Socket may already be unusable after a failed transfer
                log.debug(f"Could not restore SO_NOSIGPIPE={old}: {e}")

    def __repr__(self) -> str:
        return f"SigPipeGuard(msg_flags={self.msg_flags:#x}, sockopt={self.sockopt})"


_guard = SigPipeGuard()


def get_sigpipe_guard() -> SigPipeGuard:
    """Returns the broken-pipe suppression for this platform."""
    return _guard
