import socket
import unittest
from unittest.mock import MagicMock

from .sigpipe import SigPipeGuard, get_sigpipe_guard


class TestSigPipeGuard(unittest.TestCase):

    def test_without_sockopt_socket_is_untouched(self):
        sock = MagicMock()
        guard = SigPipeGuard(msg_flags=0, sockopt=None)
        with guard.suppress(sock):
            pass
        sock.getsockopt.assert_not_called()
        sock.setsockopt.assert_not_called()

    def test_previous_value_restored(self):
        sock = MagicMock()
        sock.getsockopt.return_value = 0
        guard = SigPipeGuard(msg_flags=0, sockopt=0x1022)

        with guard.suppress(sock):
            sock.setsockopt.assert_called_once_with(socket.SOL_SOCKET, 0x1022, 1)

        sock.setsockopt.assert_called_with(socket.SOL_SOCKET, 0x1022, 0)
        self.assertEqual(sock.setsockopt.call_count, 2)

    def test_previous_value_restored_on_error(self):
        sock = MagicMock()
        sock.getsockopt.return_value = 1
        guard = SigPipeGuard(msg_flags=0, sockopt=0x1022)

        with self.assertRaises(RuntimeError):
            with guard.suppress(sock):
                raise RuntimeError("transfer failed")

        sock.setsockopt.assert_called_with(socket.SOL_SOCKET, 0x1022, 1)
        self.assertEqual(sock.setsockopt.call_count, 2)

    def test_restore_failure_does_not_mask_result(self):
        sock = MagicMock()
        sock.getsockopt.return_value = 0
        sock.setsockopt.side_effect = [None, OSError("socket gone")]
        guard = SigPipeGuard(msg_flags=0, sockopt=0x1022)

        with guard.suppress(sock):
            pass
        self.assertEqual(sock.setsockopt.call_count, 2)

    def test_platform_guard(self):
        guard = get_sigpipe_guard()
        self.assertIsInstance(guard, SigPipeGuard)
        self.assertEqual(guard.msg_flags, getattr(socket, "MSG_NOSIGNAL", 0))


if __name__ == '__main__':
    unittest.main()
