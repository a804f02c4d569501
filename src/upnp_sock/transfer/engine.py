"""
Deadline-Bounded Transfer

Waits for a single socket to become ready, performs one read or a complete
write, and charges the elapsed wall-clock seconds to the caller's budget.
"""

import logging
import select
import socket
from typing import Optional

from upnp_sock.budget import TimeoutBudget, wall_seconds
from upnp_sock.compat.sigpipe import SigPipeGuard, get_sigpipe_guard
from upnp_sock.errors import SendError, SockError, SockTimeoutError

log = logging.getLogger("Engine")


def _buffer_view(buffer, bufsize: Optional[int], writable: bool) -> memoryview:
    view = memoryview(buffer)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    if writable and view.readonly:
        raise TypeError("read buffer must be writable (bytearray, memoryview, ...)")
    if bufsize is None:
        return view
    if bufsize < 0 or bufsize > view.nbytes:
        raise ValueError(f"bufsize {bufsize} out of range for a {view.nbytes} byte buffer")
    return view[:bufsize]


def wait_ready(sock: socket.socket, reading: bool, budget: TimeoutBudget) -> None:
    """
    Blocks until sock is readable (or writable) or the budget's timeout
    passes. An interrupted wait is retried with the same timeout.

    Raises:
        SockTimeoutError: Nothing became ready in time.
        SockError: The wait itself failed.
    """
    timeout = budget.wait_timeout()
    rlist = [sock] if reading else []
    wlist = [] if reading else [sock]

    while True:
        try:
            readable, writable, _ = select.select(rlist, wlist, [], timeout)
        except InterruptedError:
            log.debug("Readiness wait interrupted by a signal, retrying")
            continue
        except (OSError, ValueError) as e:
            raise SockError(f"Readiness wait failed: {e}", getattr(e, "errno", None)) from e
        break

    if not readable and not writable:
        raise SockTimeoutError(f"Socket not {'readable' if reading else 'writable'} within {timeout}s")


def _recv(sock: socket.socket, view: memoryview, flags: int) -> int:
    try:
        return sock.recv_into(view, len(view), flags)
    except OSError as e:
        raise SockError(f"recv failed: {e}", e.errno) from e


def _send_all(sock: socket.socket, view: memoryview, flags: int) -> int:
    bytes_sent = 0
    byte_left = len(view)
    while byte_left > 0:
        try:
            num_written = sock.send(view[bytes_sent:], flags)
        except OSError as e:
            raise SendError(f"send failed after {bytes_sent} of {len(view)} bytes: {e}",
                            e.errno, bytes_sent) from e
        if num_written < byte_left:
            log.debug(f"Short send: {num_written} of {byte_left} remaining bytes")
        bytes_sent += num_written
        byte_left -= num_written
    return bytes_sent


def read_write(sock: socket.socket, buffer, bufsize: Optional[int], budget: TimeoutBudget,
               reading: bool, dont_route: bool = True,
               guard: Optional[SigPipeGuard] = None) -> int:
    """
    Reads into or writes from buffer, bounded by budget.

    Args:
        sock: Connected socket.
        buffer: Writable buffer for reads, any bytes-like object for writes.
        bufsize: Bytes to transfer; defaults to the whole buffer. A read
                 returns after a single recv of at most this many bytes,
                 a write sends all of them.
        budget: Shared timeout budget, charged in place unless it is zero.
        reading: True to read, False to write.
        dont_route: Send with MSG_DONTROUTE.
        guard: Broken-pipe suppression; defaults to the platform's.

    Returns:
        Bytes transferred. A read of 0 means the peer closed the connection.

    Raises:
        SockTimeoutError: Budget already negative, or readiness wait timed out.
        SendError: A send failed part way through a write.
        SockError: Any other socket failure.
    """
    start_time = wall_seconds()
    view = _buffer_view(buffer, bufsize, writable=reading)

    if budget.expired:
        raise SockTimeoutError(f"Timeout budget already spent ({budget.seconds}s)")

    wait_ready(sock, reading, budget)

    guard = guard if guard is not None else get_sigpipe_guard()
    try:
        with guard.suppress(sock):
            if reading:
                num_bytes = _recv(sock, view, guard.msg_flags)
            else:
                flags = guard.msg_flags
                if dont_route:
                    flags |= socket.MSG_DONTROUTE
                num_bytes = _send_all(sock, view, flags)
    except OSError as e:
        # getsockopt/setsockopt around the transfer
        raise SockError(f"Socket option error: {e}", e.errno) from e

    if not budget.unbounded:
        elapsed = wall_seconds() - start_time
        budget.charge(elapsed)
        if elapsed:
            log.debug(f"{'Read' if reading else 'Write'} took {elapsed}s, {budget.seconds}s left")

    log.debug(f"{'Read' if reading else 'Wrote'} {num_bytes} bytes on fd {sock.fileno()}")
    return num_bytes
