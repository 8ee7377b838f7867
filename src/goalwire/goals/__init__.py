"""
Goals resource client.

Example:
    >>> from goalwire.goals import GoalsApi, GoalQuery, GoalStatus
    >>> page = GoalsApi().list_goals(GoalQuery(status=[GoalStatus.ACTIVE]))
"""

from goalwire.goals._api import GoalsApi
from goalwire.goals._models import GoalPriority, GoalQuery, GoalStatus, Page, SortDirection

__all__ = [
    "GoalsApi",
    "GoalQuery",
    "GoalStatus",
    "GoalPriority",
    "SortDirection",
    "Page",
]
