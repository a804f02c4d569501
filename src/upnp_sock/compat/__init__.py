"""
Platform Capabilities

Blocking-mode control and broken-pipe suppression, each picked once for
the running platform.
"""

from upnp_sock.compat.blocking import (
    BlockingMode,
    get_blocking_mode,
    is_nonblocking,
    make_blocking,
    make_nonblocking,
)
from upnp_sock.compat.sigpipe import SigPipeGuard, get_sigpipe_guard

__all__ = [
    "BlockingMode",
    "get_blocking_mode",
    "is_nonblocking",
    "make_blocking",
    "make_nonblocking",
    "SigPipeGuard",
    "get_sigpipe_guard",
]
