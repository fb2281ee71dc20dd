"""
Pydantic schemas for property images, views and price history entries.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
import uuid


class PropertyImageInput(BaseModel):
    """Image supplied when creating or updating a property."""

    image_url: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Public URL of the image"
    )

    is_primary: bool = Field(
        False,
        description="Whether this is the primary image for the property"
    )

    @field_validator('image_url')
    @classmethod
    def validate_image_url(cls, v):
        """Validate and clean image URL."""
        if not v.strip():
            raise ValueError("Image URL cannot be empty")
        return v.strip()


class PropertyImageResponse(BaseModel):
    """Schema for property image response."""

    id: uuid.UUID
    property_id: uuid.UUID
    image_url: str
    is_primary: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PropertyViewResponse(BaseModel):
    """Schema for a recorded listing view."""

    id: uuid.UUID
    property_id: uuid.UUID
    viewer_id: Optional[uuid.UUID] = None
    viewed_at: datetime

    class Config:
        from_attributes = True


class PricingHistoryResponse(BaseModel):
    """Schema for a price timeline entry."""

    id: uuid.UUID
    property_id: uuid.UUID
    price: Decimal
    currency: str
    effective_date: datetime

    class Config:
        from_attributes = True
