"""
Utilities module: Exceptions.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
]
