"""
Page-based pagination for listing endpoints.

Usage:
    from rest_api.routers._common.pagination import Pagination, get_pagination

    @router.get("/documents")
    def list_documents(pagination: Pagination = Depends(get_pagination)):
        items = pagination.slice(all_items)
        return {"documents": items, **pagination.to_dict(total=len(all_items))}
"""

import math
from dataclasses import dataclass
from typing import Any, Sequence

from fastapi import Query

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass
class Pagination:
    """
    Pagination parameters.

    Attributes:
        page: 1-indexed page number
        limit: Items per page (1 to max_limit)
        max_limit: Maximum allowed limit
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    max_limit: int = MAX_PAGE_SIZE

    def __post_init__(self):
        """Validate and normalize values."""
        self.page = max(1, self.page)
        self.limit = min(max(1, self.limit), self.max_limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def slice(self, items: Sequence[Any]) -> list[Any]:
        """Items on the current page."""
        return list(items[self.offset : self.offset + self.limit])

    def to_dict(self, total: int) -> dict[str, Any]:
        """Pagination metadata for the response body."""
        return {
            "total": total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": math.ceil(total / self.limit),
        }


def get_pagination(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(
        default=DEFAULT_PAGE_SIZE,
        ge=1,
        le=MAX_PAGE_SIZE,
        description="Maximum number of items per page",
    ),
) -> Pagination:
    """FastAPI dependency for page/limit query parameters."""
    return Pagination(page=page, limit=limit)
