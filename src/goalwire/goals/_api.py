"""
Client for the goals resource of the dashboard API.

Every call goes through an `ApiClient`, so goals requests get the same
interceptors, rate limiting, caching, deduplication and retries as any other
call. Writes invalidate every cached goals read.

Example:
    >>> from goalwire import ApiClient
    >>> from goalwire.goals import GoalsApi, GoalQuery, GoalStatus
    >>> goals = GoalsApi(ApiClient())
    >>> page = goals.list_goals(GoalQuery(status=[GoalStatus.ACTIVE]))
    >>> goals.update_goal_progress(page.data[0]["id"], 75)
"""

import logging
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

from goalwire._client import ApiClient, default_client
from goalwire.goals._models import GoalQuery, GoalStatus, Page

logger = logging.getLogger(__name__)

GOALS_PATH = "/goals"
GOALS_CACHE_PATTERN = r"^GET:/goals"


class GoalsApi:
    """
    Thin consumer of the `/goals` endpoints.

    Goals are returned as the JSON dicts sent by the server.

    Args:
        client: The client used for every call. Defaults to the
            process-wide `default_client()`.
    """

    def __init__(self, client: ApiClient | None = None):
        self.client = client or default_client()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_goals(self, query: GoalQuery | None = None, **options: Any) -> Page[dict[str, Any]]:
        """Return one page of goals matching `query`."""
        query = query or GoalQuery()
        response = self.client.get(GOALS_PATH, params=query.to_params(), **options)
        return Page.from_dict(response.data)

    def get_goal(self, goal_id: str, **options: Any) -> dict[str, Any]:
        """
        Return a single goal.

        Raises:
            HttpError: 404 if the goal does not exist, 410 if it was deleted.
        """
        return self.client.get(_goal_path(goal_id), **options).data

    def search_goals(self, text: str, limit: int = 20, **options: Any) -> list[dict[str, Any]]:
        """Return up to `limit` goals whose text matches `text`."""
        assert text, "Search text cannot be empty."
        return self.list_goals(GoalQuery(search=text, limit=limit), **options).data

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create_goal(self, goal: dict[str, Any], **options: Any) -> dict[str, Any]:
        created = self.client.post(GOALS_PATH, body=goal, **options).data
        self._invalidate()
        return created

    def update_goal(self, goal_id: str, updates: dict[str, Any], **options: Any) -> dict[str, Any]:
        """Apply a partial update and return the updated goal."""
        updated = self.client.patch(_goal_path(goal_id), body=updates, **options).data
        self._invalidate()
        return updated

    def update_goal_status(self, goal_id: str, status: GoalStatus, **options: Any) -> dict[str, Any]:
        return self.update_goal(goal_id, {"status": str(GoalStatus(status))}, **options)

    def update_goal_progress(self, goal_id: str, progress: float, **options: Any) -> dict[str, Any]:
        """
        Set the progress percentage of a goal.

        Raises:
            ValueError: If `progress` is outside 0..100.
        """
        if not 0 <= progress <= 100:
            raise ValueError(f"Progress must be between 0 and 100, got {progress}")
        return self.update_goal(goal_id, {"progress": progress}, **options)

    def delete_goal(self, goal_id: str, permanent: bool = False, **options: Any) -> None:
        """Soft-delete a goal, or remove it for good when `permanent` is True."""
        params = {"permanent": True} if permanent else None
        self.client.delete(_goal_path(goal_id), params=params, **options)
        self._invalidate()

    def restore_goal(self, goal_id: str, **options: Any) -> dict[str, Any]:
        """Undo a soft delete."""
        return self.update_goal(goal_id, {"isDeleted": False, "deletedAt": None}, **options)

    def archive_goal(self, goal_id: str, reason: str | None = None, **options: Any) -> dict[str, Any]:
        updates: dict[str, Any] = {
            "isArchived": True,
            "archivedAt": datetime.now(UTC).isoformat(),
        }
        if reason:
            updates["archiveReason"] = reason
        return self.update_goal(goal_id, updates, **options)

    def _invalidate(self) -> None:
        removed = self.client.clear_cache(GOALS_CACHE_PATTERN)
        logger.debug(f"Invalidated {removed} cached goals responses")


def _goal_path(goal_id: str) -> str:
    assert goal_id, "Goal id cannot be empty."
    return f"{GOALS_PATH}/{quote(str(goal_id), safe='')}"
