"""
Repository layer for data access operations.
"""

from listing_service.repositories.base import BaseRepository
from listing_service.repositories.property import PropertyRepository, ListingFilter
from listing_service.repositories.user import UserRepository
from listing_service.repositories.image import ImageRepository
from listing_service.repositories.activity import (
    ViewRepository,
    PricingHistoryRepository,
    WishlistRepository
)
from listing_service.repositories.conversation import ConversationRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "ListingFilter",
    "UserRepository",
    "ImageRepository",
    "ViewRepository",
    "PricingHistoryRepository",
    "WishlistRepository",
    "ConversationRepository"
]
