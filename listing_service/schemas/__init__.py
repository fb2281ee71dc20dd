"""
Pydantic schemas for request/response validation.
"""

from .image import (
    PropertyImageInput,
    PropertyImageResponse,
    PropertyViewResponse,
    PricingHistoryResponse
)

from .user import OwnerSummary

from .property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyDetails,
    PropertyWithRelations,
    PriceChangeDetails
)

__all__ = [
    # Image and activity entries
    "PropertyImageInput",
    "PropertyImageResponse",
    "PropertyViewResponse",
    "PricingHistoryResponse",

    # User
    "OwnerSummary",

    # Property
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertyDetails",
    "PropertyWithRelations",
    "PriceChangeDetails"
]
