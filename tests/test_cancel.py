"""Tests for cancellation tokens."""

import threading
import unittest
from unittest.mock import MagicMock

from goalwire import CancelToken, create_cancel_token


class TestCancelToken(unittest.TestCase):
    """Tests for CancelToken."""

    def test_starts_not_cancelled(self):
        """Should not be cancelled on creation."""
        self.assertFalse(CancelToken().is_cancelled)

    def test_cancel_sets_flag(self):
        """Should be cancelled after cancel()."""
        token = CancelToken()
        token.cancel()
        self.assertTrue(token.is_cancelled)

    def test_callbacks_run_once(self):
        """Should run registered callbacks exactly once."""
        token = CancelToken()
        callback = MagicMock()
        token.add_callback(callback)

        token.cancel()
        token.cancel()

        callback.assert_called_once_with()

    def test_callback_added_after_cancel_runs_immediately(self):
        """Should run a late callback right away."""
        token = CancelToken()
        token.cancel()
        callback = MagicMock()

        token.add_callback(callback)

        callback.assert_called_once_with()

    def test_unregistered_callback_does_not_run(self):
        """Should not run a callback after it was unregistered."""
        token = CancelToken()
        callback = MagicMock()
        unregister = token.add_callback(callback)

        unregister()
        unregister()  # idempotent
        token.cancel()

        callback.assert_not_called()

    def test_wait_returns_true_when_cancelled_from_another_thread(self):
        """Should wake waiters when cancelled from another thread."""
        token = CancelToken()
        threading.Timer(0.05, token.cancel).start()

        self.assertTrue(token.wait(timeout=2.0))

    def test_wait_returns_false_on_timeout(self):
        """Should return False when the timeout elapses first."""
        self.assertFalse(CancelToken().wait(timeout=0.01))


class TestCreateCancelToken(unittest.TestCase):
    """Tests for create_cancel_token()."""

    def test_returns_token_and_cancel_function(self):
        """Should pair a token with its cancel function."""
        token, cancel = create_cancel_token()

        cancel()

        self.assertTrue(token.is_cancelled)


if __name__ == "__main__":
    unittest.main()
