"""
Value objects for the goals resource.

Goals themselves travel as plain JSON dicts: this module only models what the
client needs to build queries and read paginated listings.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Generic, Self, TypeVar

T = TypeVar("T")


class GoalStatus(enum.StrEnum):
    DRAFT = "draft"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    OVERDUE = "overdue"


class GoalPriority(enum.StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SortDirection(enum.StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class GoalQuery:
    """
    Filters, sorting and pagination for listing goals.

    Attributes:
        status: Only goals in any of these statuses.
        priority: Only goals with any of these priorities.
        search: Free-text search over titles and descriptions.
        page: One-based page number.
        limit: Page size (the server caps it at 100).
        sort_field: Field to sort by (e.g. "updatedAt").
        sort_direction: Sort direction.

    Example:
        >>> GoalQuery(status=[GoalStatus.ACTIVE, GoalStatus.ON_HOLD], page=2).to_params()
        {'status': 'active,on_hold', 'page': 2, 'limit': 10}
    """

    status: list[GoalStatus] = field(default_factory=list)
    priority: list[GoalPriority] = field(default_factory=list)
    search: str | None = None
    page: int = 1
    limit: int = 10
    sort_field: str | None = None
    sort_direction: SortDirection | None = None

    def __post_init__(self) -> None:
        assert self.page >= 1, "Page must be >= 1."
        assert 1 <= self.limit <= 100, "Limit must be between 1 and 100."

    def to_params(self) -> dict[str, Any]:
        """Return the query-string parameters understood by the goals API."""
        params: dict[str, Any] = {}
        if self.status:
            params["status"] = ",".join(str(s) for s in self.status)
        if self.priority:
            params["priority"] = ",".join(str(p) for p in self.priority)
        if self.search:
            params["search"] = self.search
        params["page"] = self.page
        params["limit"] = self.limit
        if self.sort_field:
            params["sortField"] = self.sort_field
        if self.sort_direction:
            params["sortDirection"] = str(self.sort_direction)
        return params


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a paginated listing."""

    data: list[T]
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Self:
        """
        Build a page from the API's paginated payload.

        Raises:
            ValueError: If the payload is not a paginated response.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise ValueError(f"Not a paginated response: {payload!r}")

        return cls(
            data=payload["data"],
            page=int(payload.get("page", 1)),
            limit=int(payload.get("limit", len(payload["data"]))),
            total=int(payload.get("total", len(payload["data"]))),
            total_pages=int(payload.get("totalPages", 1)),
            has_next=bool(payload.get("hasNext", False)),
            has_prev=bool(payload.get("hasPrev", False)),
        )
