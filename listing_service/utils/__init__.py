"""
Utility modules for the Property Listing Service.
"""

from .exceptions import (
    APIException,
    NotFoundError,
    InternalServerError,
    PropertyNotFoundError,
    UserNotFoundError,
    QuotaExceededError,
    DeleteFailedError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    "APIException",
    "NotFoundError",
    "InternalServerError",
    "PropertyNotFoundError",
    "UserNotFoundError",
    "QuotaExceededError",
    "DeleteFailedError",
]
