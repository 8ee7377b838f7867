"""Tests for the goals resource client."""

import unittest
from datetime import datetime
from unittest.mock import MagicMock, call, patch

from goalwire import ApiClient, ApiResponse
from goalwire.goals import GoalPriority, GoalQuery, GoalsApi, GoalStatus, Page, SortDirection
from goalwire.goals._api import GOALS_CACHE_PATTERN

PAGE_PAYLOAD = {
    "data": [{"id": "g1", "title": "Run a marathon"}],
    "page": 2,
    "limit": 1,
    "total": 3,
    "totalPages": 3,
    "hasNext": True,
    "hasPrev": True,
}


def ok(data):
    return ApiResponse(data=data, status=200, status_text="OK")


class TestGoalQuery(unittest.TestCase):

    def test_defaults(self):
        """Should send only pagination params by default."""
        self.assertEqual(GoalQuery().to_params(), {"page": 1, "limit": 10})

    def test_all_filters(self):
        """Should join list filters with commas and use the API's param names."""
        query = GoalQuery(
            status=[GoalStatus.ACTIVE, GoalStatus.ON_HOLD],
            priority=[GoalPriority.HIGH],
            search="marathon",
            page=3,
            limit=50,
            sort_field="updatedAt",
            sort_direction=SortDirection.DESC,
        )

        self.assertEqual(query.to_params(), {
            "status": "active,on_hold",
            "priority": "high",
            "search": "marathon",
            "page": 3,
            "limit": 50,
            "sortField": "updatedAt",
            "sortDirection": "desc",
        })

    def test_invalid_pagination(self):
        """Should reject a page below 1 and a limit outside 1..100."""
        with self.assertRaises(AssertionError):
            GoalQuery(page=0)
        with self.assertRaises(AssertionError):
            GoalQuery(limit=101)


class TestPage(unittest.TestCase):

    def test_from_dict(self):
        """Should map the camelCase pagination fields."""
        page = Page.from_dict(PAGE_PAYLOAD)

        self.assertEqual(page.data, PAGE_PAYLOAD["data"])
        self.assertEqual(page.page, 2)
        self.assertEqual(page.total_pages, 3)
        self.assertTrue(page.has_next)
        self.assertTrue(page.has_prev)

    def test_from_dict_rejects_non_paginated_payload(self):
        """Should raise ValueError when 'data' is not a list."""
        with self.assertRaises(ValueError):
            Page.from_dict({"id": "g1"})
        with self.assertRaises(ValueError):
            Page.from_dict([])


class TestGoalsApiReads(unittest.TestCase):

    def setUp(self):
        self.client = MagicMock(spec=ApiClient)
        self.api = GoalsApi(self.client)

    def test_list_goals(self):
        """Should GET /goals with the query params and parse the page."""
        self.client.get.return_value = ok(PAGE_PAYLOAD)

        page = self.api.list_goals(GoalQuery(status=[GoalStatus.ACTIVE], page=2, limit=1))

        self.client.get.assert_called_once_with("/goals", params={"status": "active", "page": 2, "limit": 1})
        self.assertEqual(page.total, 3)
        self.assertEqual(page.data[0]["id"], "g1")

    def test_list_goals_forwards_options(self):
        """Should pass per-call options to the client."""
        self.client.get.return_value = ok(PAGE_PAYLOAD)

        self.api.list_goals(timeout=5.0)

        self.client.get.assert_called_once_with("/goals", params={"page": 1, "limit": 10}, timeout=5.0)

    def test_get_goal_quotes_id(self):
        """Should quote the goal id into the path."""
        self.client.get.return_value = ok({"id": "a/b"})

        self.api.get_goal("a/b")

        self.client.get.assert_called_once_with("/goals/a%2Fb")

    def test_search_goals(self):
        """Should list with the search text and return the items only."""
        self.client.get.return_value = ok(PAGE_PAYLOAD)

        result = self.api.search_goals("marathon", limit=5)

        self.assertEqual(result, PAGE_PAYLOAD["data"])
        self.client.get.assert_called_once_with("/goals", params={"search": "marathon", "page": 1, "limit": 5})

    def test_reads_do_not_invalidate_cache(self):
        """Should not clear the cache on reads."""
        self.client.get.return_value = ok({"id": "g1"})

        self.api.get_goal("g1")

        self.client.clear_cache.assert_not_called()


class TestGoalsApiWrites(unittest.TestCase):

    def setUp(self):
        self.client = MagicMock(spec=ApiClient)
        self.client.clear_cache.return_value = 0
        self.client.post.return_value = ok({"id": "g1"})
        self.client.patch.return_value = ok({"id": "g1"})
        self.client.delete.return_value = ok({"id": "g1"})
        self.api = GoalsApi(self.client)

    def test_create_goal(self):
        """Should POST the goal and invalidate cached goals reads."""
        created = self.api.create_goal({"title": "Run"})

        self.assertEqual(created, {"id": "g1"})
        self.client.post.assert_called_once_with("/goals", body={"title": "Run"})
        self.client.clear_cache.assert_called_once_with(GOALS_CACHE_PATTERN)

    def test_update_goal(self):
        """Should PATCH the goal and invalidate cached goals reads."""
        self.api.update_goal("g1", {"title": "Walk"})

        self.client.patch.assert_called_once_with("/goals/g1", body={"title": "Walk"})
        self.client.clear_cache.assert_called_once_with(GOALS_CACHE_PATTERN)

    def test_update_goal_status(self):
        """Should PATCH only the status value."""
        self.api.update_goal_status("g1", GoalStatus.COMPLETED)

        self.client.patch.assert_called_once_with("/goals/g1", body={"status": "completed"})

    def test_update_goal_status_accepts_plain_string(self):
        """Should accept a status given as its string value."""
        self.api.update_goal_status("g1", "on_hold")

        self.client.patch.assert_called_once_with("/goals/g1", body={"status": "on_hold"})

    def test_update_goal_progress(self):
        """Should PATCH the progress within 0..100."""
        self.api.update_goal_progress("g1", 100)

        self.client.patch.assert_called_once_with("/goals/g1", body={"progress": 100})

    def test_update_goal_progress_out_of_range(self):
        """Should raise ValueError without calling the API."""
        for progress in (-1, 100.5):
            with self.subTest(progress=progress):
                with self.assertRaises(ValueError):
                    self.api.update_goal_progress("g1", progress)

        self.client.patch.assert_not_called()

    def test_soft_delete(self):
        """Should DELETE without params by default."""
        self.api.delete_goal("g1")

        self.client.delete.assert_called_once_with("/goals/g1", params=None)
        self.client.clear_cache.assert_called_once_with(GOALS_CACHE_PATTERN)

    def test_permanent_delete(self):
        """Should send permanent=true for a permanent delete."""
        self.api.delete_goal("g1", permanent=True)

        self.client.delete.assert_called_once_with("/goals/g1", params={"permanent": True})

    def test_restore_goal(self):
        """Should clear the soft-delete flags."""
        self.api.restore_goal("g1")

        self.client.patch.assert_called_once_with("/goals/g1", body={"isDeleted": False, "deletedAt": None})

    def test_archive_goal(self):
        """Should mark the goal archived with a UTC timestamp and reason."""
        self.api.archive_goal("g1", reason="Done for the year")

        body = self.client.patch.call_args.kwargs["body"]
        self.assertTrue(body["isArchived"])
        self.assertEqual(body["archiveReason"], "Done for the year")
        self.assertIsNotNone(datetime.fromisoformat(body["archivedAt"]).tzinfo)

    def test_archive_goal_without_reason(self):
        """Should omit archiveReason when no reason is given."""
        self.api.archive_goal("g1")

        self.assertNotIn("archiveReason", self.client.patch.call_args.kwargs["body"])

    def test_failed_write_keeps_cache(self):
        """Should not invalidate the cache when the write fails."""
        self.client.post.side_effect = RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            self.api.create_goal({"title": "Run"})

        self.client.clear_cache.assert_not_called()

    def test_several_writes_invalidate_each_time(self):
        """Should invalidate once per write."""
        self.api.create_goal({"title": "Run"})
        self.api.delete_goal("g1")

        self.assertEqual(self.client.clear_cache.call_args_list, [call(GOALS_CACHE_PATTERN)] * 2)


class TestGoalsApiDefaultClient(unittest.TestCase):

    def test_uses_default_client(self):
        """Should fall back to the process-wide default client."""
        default = MagicMock(spec=ApiClient)

        with patch("goalwire.goals._api.default_client", return_value=default):
            api = GoalsApi()

        self.assertIs(api.client, default)
