"""
Socket Handle

SockInfo wraps one connected socket (and optionally its peer address) and
provides deadline-bounded read/write plus a destroy that closes the socket
exactly once.
"""

import logging
import socket
from typing import Any, Optional, Union

from upnp_sock.budget import TimeoutBudget
from upnp_sock.errors import SockError, SockTimeoutError
from upnp_sock.transfer.engine import read_write

INVALID_SOCKET = -1
DEFAULT_SHUTDOWN = socket.SHUT_RDWR

log = logging.getLogger("SockInfo")


def sock_close(sock: socket.socket) -> bool:
    """Close a socket without shutting it down. Returns False if close failed."""
    try:
        sock.close()
        return True
    except OSError as e:
        log.error(f"Error closing socket: {e}")
        return False


def _format_addr(addr: Any) -> str:
    if isinstance(addr, tuple) and len(addr) >= 2:
        host, port = addr[0], addr[1]
        return f"[{host}]:{port}" if ":" in str(host) else f"{host}:{port}"
    return str(addr)


class _PeerAdapter(logging.LoggerAdapter):
    """Prefixes messages with the handle's descriptor or peer address."""

    def process(self, msg, kwargs):
        return f"[{self.extra['peer']}] {msg}", kwargs


class SockInfo:
    """Connected socket plus optional peer address."""

    def __init__(self, sock: Union[socket.socket, int], verbose: bool = False,
                 dont_route: bool = True):
        """
        Take ownership of a connected socket.

        Args:
            sock: A connected socket, or a raw descriptor to adopt.
            verbose: Include tracebacks when logging socket errors.
            dont_route: Send with MSG_DONTROUTE, as LAN-only UPnP traffic does.

        Raises:
            OSError: sock is a descriptor that is closed or not a socket.
        """
        if isinstance(sock, int):
            sock = socket.socket(fileno=sock)
        self.socket: Optional[socket.socket] = sock
        self.foreign_addr: Optional[Any] = None
        self.verbose = verbose
        self.dont_route = dont_route
        self.log = _PeerAdapter(log, {"peer": f"fd {self.descriptor}"})

    @classmethod
    def with_address(cls, sock: Union[socket.socket, int], foreign_addr: Any, **kwargs) -> "SockInfo":
        """Like SockInfo(sock), also recording the peer's address."""
        info = cls(sock, **kwargs)
        info.foreign_addr = tuple(foreign_addr) if isinstance(foreign_addr, (tuple, list)) else foreign_addr
        info.log = _PeerAdapter(log, {"peer": _format_addr(info.foreign_addr)})
        return info

    @property
    def descriptor(self) -> int:
        """OS file number, or INVALID_SOCKET once destroyed."""
        if self.socket is None:
            return INVALID_SOCKET
        return self.socket.fileno()

    def is_open(self) -> bool:
        return self.socket is not None

    def destroy(self, how: int = DEFAULT_SHUTDOWN) -> bool:
        """
        Shut down and close the socket.

        The handle lets go of the socket whether or not close succeeds, so
        the socket is never closed twice. Calling destroy again is a no-op.

        Args:
            how: socket.SHUT_RD, socket.SHUT_WR or socket.SHUT_RDWR.

        Returns:
            False if close failed, True otherwise.
        """
        if self.socket is None:
            self.log.debug("destroy called but socket is already None.")
            return True

        closed_successfully = True
        try:
            try:
                self.socket.shutdown(how)
            except OSError as e:
                # Peer may already be gone; close regardless
                self.log.debug(f"shutdown({how}) failed: {e}")
            closed_successfully = sock_close(self.socket)
        finally:
            self.socket = None
        self.log.debug(f"Socket destroyed (closed cleanly: {closed_successfully})")
        return closed_successfully

    def _require_socket(self) -> socket.socket:
        if self.socket is None:
            raise SockError("I/O on a destroyed socket handle")
        return self.socket

    def _transfer(self, buffer, bufsize: Optional[int], budget: TimeoutBudget, reading: bool) -> int:
        sock = self._require_socket()
        try:
            return read_write(sock, buffer, bufsize, budget, reading, dont_route=self.dont_route)
        except SockTimeoutError as e:
            self.log.debug(f"{'Read' if reading else 'Write'} timed out: {e}")
            raise
        except SockError as e:
            self.log.error(f"Socket {'read' if reading else 'write'} error: {e}", exc_info=self.verbose)
            raise

    def read(self, buffer, budget: TimeoutBudget, bufsize: Optional[int] = None) -> int:
        """
        Receive up to bufsize bytes into buffer with a single recv.

        Returns:
            Bytes received; 0 when the peer has closed the connection.
        """
        return self._transfer(buffer, bufsize, budget, reading=True)

    def write(self, buffer, budget: TimeoutBudget, bufsize: Optional[int] = None) -> int:
        """Send bufsize bytes of buffer, looping over short sends. Returns bufsize."""
        return self._transfer(buffer, bufsize, budget, reading=False)

    def recv(self, nbytes: int, budget: TimeoutBudget) -> bytes:
        """Like read(), returning the received bytes."""
        data = bytearray(nbytes)
        received = self.read(data, budget)
        return bytes(data[:received])

    def __enter__(self) -> "SockInfo":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.destroy()

    def __repr__(self) -> str:
        peer = _format_addr(self.foreign_addr) if self.foreign_addr is not None else None
        return f"SockInfo(descriptor={self.descriptor}, foreign_addr={peer})"


def sock_read(info: SockInfo, buffer, budget: TimeoutBudget, bufsize: Optional[int] = None) -> int:
    return info.read(buffer, budget, bufsize)


def sock_write(info: SockInfo, buffer, budget: TimeoutBudget, bufsize: Optional[int] = None) -> int:
    return info.write(buffer, budget, bufsize)
