"""
Pydantic schemas for property requests and responses.
Handles listing creation, partial updates and the assembled listing aggregate.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

from listing_service.models.property import PropertyStatus
from listing_service.schemas.image import (
    PropertyImageInput,
    PropertyImageResponse,
    PropertyViewResponse,
    PricingHistoryResponse
)
from listing_service.schemas.user import OwnerSummary


def _clean_currency(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().upper()
    if len(v) != 3 or not v.isalpha():
        raise ValueError("Currency must be a three letter ISO code")
    return v


class PropertyCreate(BaseModel):
    """Schema for creating a new property."""

    owner_id: uuid.UUID = Field(..., description="ID of the user who owns the listing")

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Property listing title"
    )

    description: Optional[str] = Field(None, description="Detailed property description")
    facilities: Optional[str] = Field(None, description="Free-form list of facilities")
    property_type: Optional[str] = Field(None, max_length=50, description="Kind of property")
    transaction_type: Optional[str] = Field(None, max_length=50, description="Sale or rent")

    price: Decimal = Field(..., ge=0, description="Asking price")

    currency: Optional[str] = Field(None, description="ISO currency code, USD when omitted")

    size: Optional[Decimal] = Field(None, ge=0, description="Size in square meters")
    rooms: Optional[int] = Field(None, ge=0, description="Number of rooms")
    address: Optional[str] = Field(None, max_length=255, description="Street address")

    status: Optional[PropertyStatus] = Field(None, description="Listing status, active when omitted")

    document_url: Optional[str] = Field(None, max_length=500)
    verification_comments: Optional[str] = None

    images: Optional[List[PropertyImageInput]] = Field(
        None,
        description="Images to attach to the new listing"
    )

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Validate and clean title."""
        if not v or not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v):
        return _clean_currency(v)


class PropertyUpdate(BaseModel):
    """
    Schema for partially updating a property.
    Only fields explicitly set on the instance are applied.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    facilities: Optional[str] = None
    property_type: Optional[str] = Field(None, max_length=50)
    transaction_type: Optional[str] = Field(None, max_length=50)
    price: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = None
    size: Optional[Decimal] = Field(None, ge=0)
    rooms: Optional[int] = Field(None, ge=0)
    address: Optional[str] = Field(None, max_length=255)
    status: Optional[PropertyStatus] = None
    document_url: Optional[str] = Field(None, max_length=500)
    verification_comments: Optional[str] = None
    is_verified: Optional[bool] = None

    images: Optional[List[PropertyImageInput]] = Field(
        None,
        description="Full replacement image set"
    )

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None:
            if not v.strip():
                raise ValueError("Title cannot be empty")
            return v.strip()
        return v

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v):
        return _clean_currency(v)

    def changed_fields(self) -> dict:
        """Column values explicitly supplied by the caller, images excluded."""
        return self.model_dump(exclude_unset=True, exclude={"images"})

    @property
    def has_images(self) -> bool:
        return "images" in self.model_fields_set and self.images is not None


class PropertyResponse(BaseModel):
    """Schema for a property row."""

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: Optional[str] = None
    facilities: Optional[str] = None
    property_type: Optional[str] = None
    transaction_type: Optional[str] = None
    price: Decimal
    currency: str = "USD"
    size: Optional[Decimal] = None
    rooms: Optional[int] = None
    address: Optional[str] = None
    status: PropertyStatus = PropertyStatus.ACTIVE
    document_url: Optional[str] = None
    verification_comments: Optional[str] = None
    is_verified: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PropertyDetails(PropertyResponse):
    """Property with its images, views and price history."""

    images: List[PropertyImageResponse] = Field(default_factory=list)
    views: List[PropertyViewResponse] = Field(default_factory=list)
    pricing_history: List[PricingHistoryResponse] = Field(default_factory=list)


class PropertyWithRelations(PropertyDetails):
    """Full listing aggregate including owner projection and the viewer's wish flag."""

    owner: OwnerSummary = Field(default_factory=OwnerSummary)
    is_wished: bool = False


class PriceChangeDetails(BaseModel):
    """Payload of a price change notification."""

    name: str
    address: str
    old_price: Decimal
    new_price: Decimal
