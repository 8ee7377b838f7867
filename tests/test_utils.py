"""Tests for utility functions."""

import json
import socket
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from goalwire._utils import build_url, is_host_reachable, load_json_file, save_json_file, sleep_with_jitter


class TestSleepWithJitter(unittest.TestCase):
    """Tests for sleep_with_jitter()."""

    @patch("goalwire._utils.time.sleep")
    @patch("goalwire._utils.random.random", return_value=0.0)
    def test_lower_bound_is_base_delay(self, mock_random, mock_sleep):
        """Should sleep at least the base delay."""
        self.assertEqual(sleep_with_jitter(4.0), 4.0)
        mock_sleep.assert_called_once_with(4.0)

    @patch("goalwire._utils.time.sleep")
    @patch("goalwire._utils.random.random", return_value=0.999)
    def test_upper_bound_is_below_base_plus_jitter(self, mock_random, mock_sleep):
        """Should add strictly less than max_jitter on top of the base."""
        slept = sleep_with_jitter(2.0, max_jitter=1.0)

        self.assertGreaterEqual(slept, 2.0)
        self.assertLess(slept, 3.0)

    @patch("goalwire._utils.time.sleep")
    def test_real_random_stays_within_bounds(self, mock_sleep):
        """Should always land in [base, base + jitter)."""
        for _ in range(200):
            slept = sleep_with_jitter(1.0)
            self.assertGreaterEqual(slept, 1.0)
            self.assertLess(slept, 2.0)


class TestBuildUrl(unittest.TestCase):
    """Tests for build_url()."""

    def test_joins_with_single_slash(self):
        """Should join base and path with exactly one slash."""
        self.assertEqual(build_url("/api", "/goals"), "/api/goals")
        self.assertEqual(build_url("/api/", "/goals"), "/api/goals")
        self.assertEqual(build_url("/api", "goals"), "/api/goals")
        self.assertEqual(build_url("https://h.com/api/", "goals"), "https://h.com/api/goals")

    def test_absolute_urls_are_kept(self):
        """Should ignore the base URL for absolute http(s) URLs."""
        self.assertEqual(build_url("/api", "https://other.com/x"), "https://other.com/x")
        self.assertEqual(build_url("/api", "http://other.com/x"), "http://other.com/x")

    def test_params_are_encoded_and_none_dropped(self):
        """Should URL-encode params and skip None values."""
        url = build_url("/api", "/goals", {"search": "run fast", "page": 2, "status": None})

        self.assertEqual(url, "/api/goals?search=run+fast&page=2")

    def test_params_append_to_existing_query(self):
        """Should use '&' when the URL already has a query string."""
        self.assertEqual(build_url("/api", "/goals?x=1", {"y": 2}), "/api/goals?x=1&y=2")

    def test_booleans_use_json_spelling(self):
        """Should send booleans as true/false."""
        self.assertEqual(build_url("/api", "/goals/1", {"permanent": True}), "/api/goals/1?permanent=true")

    def test_empty_params_leave_url_untouched(self):
        """Should not append '?' when every param is dropped."""
        self.assertEqual(build_url("/api", "/goals", {"a": None}), "/api/goals")
        self.assertEqual(build_url("/api", "/goals", {}), "/api/goals")


class TestIsHostReachable(unittest.TestCase):
    """Tests for is_host_reachable()."""

    @patch("goalwire._utils.socket.create_connection")
    def test_reachable(self, mock_connect):
        """Should return True when the TCP connection succeeds."""
        mock_connect.return_value = MagicMock()

        self.assertTrue(is_host_reachable("https://api.example.com/api"))
        mock_connect.assert_called_once_with(("api.example.com", 443), timeout=3.0)

    @patch("goalwire._utils.socket.create_connection", side_effect=socket.timeout("timed out"))
    def test_unreachable(self, mock_connect):
        """Should return False when the connection fails."""
        self.assertFalse(is_host_reachable("http://api.example.com:8080/api"))
        mock_connect.assert_called_once_with(("api.example.com", 8080), timeout=3.0)

    def test_relative_url_has_no_host(self):
        """Should return False for URLs without a host."""
        self.assertFalse(is_host_reachable("/api"))


class TestJsonFiles(unittest.TestCase):
    """Tests for save_json_file() and load_json_file()."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = Path(self.tmp.name) / "nested" / "data.json"

    def test_round_trip_creates_parent_dirs(self):
        """Should create missing directories and read back the same dict."""
        save_json_file({"auth_token": "abc"}, self.path)

        self.assertTrue(self.path.exists())
        self.assertEqual(load_json_file(self.path), {"auth_token": "abc"})

    def test_missing_file_loads_empty(self):
        """Should return an empty dict for a missing file."""
        self.assertEqual(load_json_file(self.path), {})

    def test_non_object_loads_empty(self):
        """Should ignore JSON documents that are not objects."""
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps([1, 2]), encoding="utf-8")

        self.assertEqual(load_json_file(self.path), {})

    def test_corrupted_file_raises(self):
        """Should raise RuntimeError for unparsable files."""
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")

        with self.assertRaises(RuntimeError):
            load_json_file(self.path)


if __name__ == "__main__":
    unittest.main()
