import io
import socket
import threading
import unittest
from unittest.mock import patch

from .main import main


class TestMain(unittest.TestCase):

    def test_loopback_round_trip(self):
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            code = main(["loopback", "--size", "10000", "--timeout", "5"])
        self.assertEqual(code, 0)
        self.assertIn("Wrote 10000 bytes", out.getvalue())
        self.assertIn("Read 10000 bytes", out.getvalue())

    def test_loopback_larger_than_socket_buffers(self):
        # Well past default TCP send+receive buffer sizes on loopback
        size = 32 * 1024 * 1024
        result = {}

        def run():
            with patch("sys.stdout", new_callable=io.StringIO) as out:
                result["code"] = main(["loopback", "--size", str(size), "--timeout", "10"])
                result["output"] = out.getvalue()

        runner = threading.Thread(target=run, daemon=True)
        runner.start()
        runner.join(60)

        self.assertFalse(runner.is_alive(), "loopback should finish for payloads bigger than the socket buffers")
        self.assertEqual(result["code"], 0)
        self.assertIn(f"Read {size} bytes", result["output"])

    def test_probe_prints_response(self):
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        self.addCleanup(listener.close)
        port = listener.getsockname()[1]
        requests = []

        def serve():
            conn, _ = listener.accept()
            with conn:
                requests.append(conn.recv(1024))
                conn.sendall(b"HTTP/1.1 200 OK\r\n\r\n")

        server = threading.Thread(target=serve, daemon=True)
        server.start()

        with patch("sys.stdout", new_callable=io.StringIO) as out:
            code = main(["probe", "-a", f"127.0.0.1:{port}", "-d", "PING", "-t", "5"])
        server.join(5)

        self.assertEqual(code, 0)
        self.assertEqual(requests, [b"PING"])
        self.assertIn("200 OK", out.getvalue())

    def test_probe_rejects_bad_address(self):
        self.assertEqual(main(["probe", "-a", "no-port-here"]), 1)

    def test_probe_connection_refused(self):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
        sock.close()
        self.assertEqual(main(["probe", "-a", f"127.0.0.1:{port}"]), 1)


if __name__ == '__main__':
    unittest.main()
