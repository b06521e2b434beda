"""
Helpers shared across routers.
"""

from rest_api.routers._common.pagination import Pagination, get_pagination

__all__ = ["Pagination", "get_pagination"]
