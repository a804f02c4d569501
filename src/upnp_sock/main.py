"""
upnp-sock CLI

Manual checks of the socket layer: a loopback write/read round trip, or a
single request/response against a live host.
"""

import argparse
import logging
import socket
import sys
import threading
from typing import List, Optional

from upnp_sock.budget import TimeoutBudget
from upnp_sock.errors import SockError, SockTimeoutError
from upnp_sock.loopback import CONNECTION_TIMEOUT, loopback_pair
from upnp_sock.sock import SockInfo
from upnp_sock.transfer.utils import transfer_timer

DEFAULT_TIMEOUT = 5  # seconds
DEFAULT_SIZE = 10000  # bytes
READ_CHUNK = 65536  # bytes
DEFAULT_PROBE_DATA = "M-SEARCH * HTTP/1.1\r\n\r\n"


def run_loopback(size: int, timeout: int) -> int:
    """
    Write size bytes through a loopback pair and read them back.

    The write runs on a worker thread so payloads larger than the kernel's
    socket buffers drain while they are sent. Each direction has its own
    budget of timeout seconds.
    """
    log = logging.getLogger("loopback")
    client, server, client_addr = loopback_pair()
    writer = SockInfo(client)
    reader = SockInfo.with_address(server, client_addr)
    pattern = bytes(range(251))
    payload = (pattern * (size // len(pattern) + 1))[:size]

    write_budget = TimeoutBudget(timeout)
    write_result = {}

    def write_payload():
        try:
            with transfer_timer(log, "Write", size):
                write_result["written"] = writer.write(payload, write_budget)
        except SockError as e:
            write_result["error"] = e

    write_thread = threading.Thread(target=write_payload, name="loopback-writer", daemon=True)
    write_thread.start()

    try:
        budget = TimeoutBudget(timeout)
        received = bytearray()
        buffer = bytearray(min(size, READ_CHUNK) or 1)
        with transfer_timer(log, "Read", size):
            while len(received) < size:
                count = reader.read(buffer, budget)
                if count == 0:
                    log.warning("Peer closed the connection before all data arrived.")
                    break
                received += buffer[:count]

        write_thread.join()
        if "error" in write_result:
            log.error(f"Write failed: {write_result['error']}")
            return 1
        print(f"Wrote {write_result['written']} bytes, {write_budget.seconds}s left")
        print(f"Read {len(received)} bytes, {budget.seconds}s left")

        if bytes(received) != payload:
            log.error("Data read back does not match data written.")
            return 1
        return 0
    except SockTimeoutError as e:
        log.error(f"Timed out: {e}")
        return 1
    except SockError as e:
        log.error(f"Socket error: {e}")
        return 1
    finally:
        # Shutting the writer down unblocks a send still waiting on a full buffer
        writer.destroy()
        reader.destroy()
        write_thread.join(CONNECTION_TIMEOUT)


def run_probe(address: str, data: str, timeout: int) -> int:
    """Connect to address, send data and print one response."""
    log = logging.getLogger("probe")
    host, _, port = address.rpartition(":")
    if not host or not port.isdigit():
        log.error(f"Address must be HOST:PORT, got {address!r}")
        return 1

    try:
        sock = socket.create_connection((host.strip("[]"), int(port)), timeout=CONNECTION_TIMEOUT)
    except OSError as e:
        log.error(f"Failed to connect to {address}: {e}")
        return 1
    sock.settimeout(None)

    with SockInfo.with_address(sock, sock.getpeername()) as info:
        budget = TimeoutBudget(timeout)
        try:
            sent = info.write(data.encode("utf-8"), budget)
            log.info(f"Sent {sent} bytes, waiting for response...")
            response = info.recv(4096, budget)
        except SockTimeoutError as e:
            log.error(f"Timed out: {e}")
            return 1
        except SockError as e:
            log.error(f"Socket error: {e}")
            return 1

    if not response:
        log.warning("Connection closed without a response.")
    print(response.decode("utf-8", errors="replace"))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="upnp-sock",
                                     description="Exercise deadline-bounded socket I/O.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    loop = subparsers.add_parser("loopback", help="Write then read back over a loopback pair")
    loop.add_argument("-s", "--size", type=int, default=DEFAULT_SIZE, help="Bytes to transfer")
    loop.add_argument("-t", "--timeout", type=int, default=DEFAULT_TIMEOUT,
                      help="Budget in seconds (0 waits forever)")

    probe = subparsers.add_parser("probe", help="Send one request to a host and print the response")
    probe.add_argument("-a", "--address", required=True, help="Host and port (e.g., 192.168.1.1:49152)")
    probe.add_argument("-d", "--data", default=DEFAULT_PROBE_DATA, help="Request text to send")
    probe.add_argument("-t", "--timeout", type=int, default=DEFAULT_TIMEOUT,
                       help="Budget in seconds (0 waits forever)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    if args.command == "loopback":
        return run_loopback(args.size, args.timeout)
    return run_probe(args.address, args.data, args.timeout)


if __name__ == "__main__":
    sys.exit(main())
