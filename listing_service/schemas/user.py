"""
Pydantic schemas for user projections exposed with listings.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional


class OwnerSummary(BaseModel):
    """
    Redacted owner projection attached to a listing.
    All fields are empty strings when the owner row is missing; callers treat
    that as an unknown owner.
    """

    id: str = Field("", description="Owner user ID")
    email: str = Field("", description="Owner email address")
    username: str = Field("", description="Owner display name")
    role: str = Field("", description="Owner role")

    @classmethod
    def from_columns(
        cls,
        owner_id: Optional[Any],
        email: Optional[str],
        username: Optional[str],
        role: Optional[Any]
    ) -> "OwnerSummary":
        """Build the projection from outer-joined owner columns."""
        return cls(
            id=str(owner_id) if owner_id is not None else "",
            email=email or "",
            username=username or "",
            role=getattr(role, "value", role) or "",
        )
