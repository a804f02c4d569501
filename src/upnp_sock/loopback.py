import socket
from typing import Tuple

LOOPBACK_HOST = "127.0.0.1"
CONNECTION_TIMEOUT = 5.0  # seconds


def loopback_pair(host: str = LOOPBACK_HOST) -> Tuple[socket.socket, socket.socket, Tuple[str, int]]:
    """
    Connect two TCP sockets to each other over loopback.

    Returns:
        (client, server, client_addr) where server is the accepted end and
        client_addr is the client's address as the server sees it.
    """
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        listener.bind((host, 0))
        listener.listen(1)
        listener.settimeout(CONNECTION_TIMEOUT)
        client = socket.create_connection(listener.getsockname(), timeout=CONNECTION_TIMEOUT)
        try:
            server, client_addr = listener.accept()
        except OSError:
            client.close()
            raise
    finally:
        listener.close()

    # Leave both ends in plain blocking mode; readiness waits bound the calls
    client.settimeout(None)
    server.settimeout(None)
    return client, server, client_addr
