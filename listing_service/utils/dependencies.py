"""
FastAPI dependency injection utilities.
Provides the listing service wired to the request's database session and the
process-wide collaborators stored on the application state.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from listing_service.database import get_db
from listing_service.services.assistant import ChatSessionRegistry
from listing_service.services.listing import ListingService


def get_chat_sessions(request: Request) -> ChatSessionRegistry:
    """
    Get the chat session registry created at application startup.

    Args:
        request: Incoming request

    Returns:
        Process-wide ChatSessionRegistry
    """
    return request.app.state.chat_sessions


async def get_listing_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
    chat_sessions: ChatSessionRegistry = Depends(get_chat_sessions)
) -> ListingService:
    """
    Get listing service instance.

    Args:
        request: Incoming request
        db: Database session
        chat_sessions: Live assistant sessions

    Returns:
        ListingService instance
    """
    return ListingService(
        db,
        notifier=request.app.state.notifier,
        chat_sessions=chat_sessions,
        chat_client=getattr(request.app.state, "chat_client", None)
    )
