"""
Database models for the Property Listing Service.
"""

from listing_service.models.user import User, UserRole
from listing_service.models.property import Property, PropertyStatus
from listing_service.models.image import PropertyImage
from listing_service.models.activity import PropertyView, PricingHistory, WishlistEntry
from listing_service.models.conversation import Conversation, Message, MessageSender, SystemPrompt

__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyStatus",
    "PropertyImage",
    "PropertyView",
    "PricingHistory",
    "WishlistEntry",
    "Conversation",
    "Message",
    "MessageSender",
    "SystemPrompt",
]
