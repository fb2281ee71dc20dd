"""
Service layer for business logic implementation.
"""

from .listing import ListingService, build_property_summary
from .assistant import ChatSessionRegistry, GeminiChatClient
from .notification import EmailService
from .error_handler import ErrorHandlerService

__all__ = [
    "ListingService",
    "build_property_summary",
    "ChatSessionRegistry",
    "GeminiChatClient",
    "EmailService",
    "ErrorHandlerService"
]
