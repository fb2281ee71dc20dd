"""
Custom exception classes for the Property Listing Service.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

    def __str__(self) -> str:
        return self.detail


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class InternalServerError(APIException):
    """Internal server error exception."""

    def __init__(self, detail: str = "Internal server error", error_code: str = "INTERNAL_SERVER_ERROR"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code
        )


# Property specific exceptions
class PropertyNotFoundError(NotFoundError):
    """Property not found exception."""

    def __init__(self, property_id: str):
        super().__init__("Property", property_id)


class UserNotFoundError(NotFoundError):
    """Listing owner not found exception."""

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class QuotaExceededError(APIException):
    """Raised when a private seller has no listings left."""

    def __init__(self, detail: str = "Listings limit reached"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="QUOTA_EXCEEDED"
        )


class DeleteFailedError(InternalServerError):
    """Wraps a store failure raised while deleting a property."""

    def __init__(self, reason: str):
        super().__init__(
            detail=f"Failed to delete property: {reason}",
            error_code="DELETE_FAILED"
        )
        self.reason = reason
