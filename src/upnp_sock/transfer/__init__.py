from upnp_sock.transfer.engine import read_write, wait_ready
from upnp_sock.transfer.utils import transfer_timer

__all__ = ["read_write", "wait_ready", "transfer_timer"]
