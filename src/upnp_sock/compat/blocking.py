import logging
import os
import socket
from typing import Protocol, Union, runtime_checkable

from upnp_sock.errors import SockError

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None

Descriptor = Union[int, socket.socket]

log = logging.getLogger("BlockingMode")


def _fileno(descriptor: Descriptor) -> int:
    if isinstance(descriptor, int):
        return descriptor
    return descriptor.fileno()


@runtime_checkable
class BlockingMode(Protocol):
    """Switches a descriptor between blocking and non-blocking I/O."""

    def set_nonblocking(self, descriptor: Descriptor, enabled: bool) -> None:
        """Sets or clears non-blocking mode. Raises SockError on failure."""
        ...

    def is_nonblocking(self, descriptor: Descriptor) -> bool:
        ...


class PosixBlockingMode:
    """Reads the file status flags and writes them back with O_NONBLOCK flipped."""

    def set_nonblocking(self, descriptor: Descriptor, enabled: bool) -> None:
        fd = _fileno(descriptor)
        try:
            flags = fcntl.fcntl(fd, fcntl.F_GETFL, 0)
            if enabled:
                flags |= os.O_NONBLOCK
            else:
                flags &= ~os.O_NONBLOCK
            fcntl.fcntl(fd, fcntl.F_SETFL, flags)
        except (OSError, ValueError) as e:
            log.debug(f"Could not {'set' if enabled else 'clear'} O_NONBLOCK on fd {fd}: {e}")
            raise SockError(f"Failed to change blocking mode of fd {fd}: {e}",
                            getattr(e, "errno", None)) from e

    def is_nonblocking(self, descriptor: Descriptor) -> bool:
        fd = _fileno(descriptor)
        try:
            return bool(fcntl.fcntl(fd, fcntl.F_GETFL, 0) & os.O_NONBLOCK)
        except (OSError, ValueError) as e:
            raise SockError(f"Failed to read flags of fd {fd}: {e}",
                            getattr(e, "errno", None)) from e


class WindowsBlockingMode:
    """
    No fcntl on Windows; the socket's own setblocking() issues FIONBIO.

    An integer descriptor is wrapped for the call and detached again so the
    socket is never closed here. Windows cannot report the FIONBIO state, so
    the last value set through this object is remembered.
    """

    def __init__(self):
        self._modes = {}

    def set_nonblocking(self, descriptor: Descriptor, enabled: bool) -> None:
        fd = _fileno(descriptor)
        try:
            if isinstance(descriptor, socket.socket):
                descriptor.setblocking(not enabled)
            else:
                sock = socket.socket(fileno=fd)
                try:
                    sock.setblocking(not enabled)
                finally:
                    sock.detach()
        except (OSError, ValueError) as e:
            raise SockError(f"Failed to change blocking mode of socket {fd}: {e}",
                            getattr(e, "errno", None)) from e
        self._modes[fd] = enabled

    def is_nonblocking(self, descriptor: Descriptor) -> bool:
        if isinstance(descriptor, socket.socket):
            return not descriptor.getblocking()
        return self._modes.get(descriptor, False)


_blocking_mode: BlockingMode = PosixBlockingMode() if fcntl is not None else WindowsBlockingMode()


def get_blocking_mode() -> BlockingMode:
    """Returns the blocking-mode capability for this platform."""
    return _blocking_mode


def make_blocking(descriptor: Descriptor) -> None:
    """Clears non-blocking mode on a socket or raw descriptor."""
    _blocking_mode.set_nonblocking(descriptor, False)


def make_nonblocking(descriptor: Descriptor) -> None:
    """Sets non-blocking mode on a socket or raw descriptor."""
    _blocking_mode.set_nonblocking(descriptor, True)


def is_nonblocking(descriptor: Descriptor) -> bool:
    return _blocking_mode.is_nonblocking(descriptor)
