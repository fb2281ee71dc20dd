"""
Test configuration and fixtures for the property listing service.
Provides database fixtures, test data factories, and stand-ins for the email and AI providers.
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, List, Optional
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from listing_service.main import app
from listing_service.database import Base
from listing_service.models.user import User, UserRole
from listing_service.models.property import Property, PropertyStatus
from listing_service.models.conversation import Conversation, Message, MessageSender, SystemPrompt
from listing_service.repositories.user import UserRepository
from listing_service.repositories.property import PropertyRepository
from listing_service.repositories.image import ImageRepository
from listing_service.repositories.activity import (
    ViewRepository,
    PricingHistoryRepository,
    WishlistRepository
)
from listing_service.repositories.conversation import ConversationRepository
from listing_service.services.assistant import ChatSessionRegistry
from listing_service.services.listing import ListingService
from listing_service.utils.dependencies import get_listing_service


# Test database configuration
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
async def test_engine():
    """Create a fresh schema for every test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False} if "sqlite" in TEST_DATABASE_URL else {}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def image_repository(db_session: AsyncSession) -> ImageRepository:
    return ImageRepository(db_session)


@pytest.fixture
def view_repository(db_session: AsyncSession) -> ViewRepository:
    return ViewRepository(db_session)


@pytest.fixture
def pricing_repository(db_session: AsyncSession) -> PricingHistoryRepository:
    return PricingHistoryRepository(db_session)


@pytest.fixture
def wishlist_repository(db_session: AsyncSession) -> WishlistRepository:
    return WishlistRepository(db_session)


@pytest.fixture
def conversation_repository(db_session: AsyncSession) -> ConversationRepository:
    return ConversationRepository(db_session)


# External provider stand-ins
@pytest.fixture
def notifier() -> AsyncMock:
    """Price change notifier that records calls instead of sending email."""
    mock = AsyncMock()
    mock.send_price_change_notification.return_value = True
    return mock


@pytest.fixture
def chat_client() -> MagicMock:
    """Chat model client that hands out a sentinel session."""
    mock = MagicMock()
    mock.start_chat.return_value = MagicMock(name="rebuilt_session")
    return mock


@pytest.fixture
def chat_sessions() -> ChatSessionRegistry:
    return ChatSessionRegistry()


# Service fixtures
@pytest.fixture
def listing_service(
    db_session: AsyncSession,
    notifier: AsyncMock,
    chat_sessions: ChatSessionRegistry,
    chat_client: MagicMock
) -> ListingService:
    """Create a listing service wired to the test doubles."""
    return ListingService(
        db_session,
        notifier=notifier,
        chat_sessions=chat_sessions,
        chat_client=chat_client
    )


@pytest.fixture
async def async_client(listing_service: ListingService) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client that serves requests with the test listing service."""
    app.dependency_overrides[get_listing_service] = lambda: listing_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        username: str = "Test User",
        role: UserRole = UserRole.BUYER,
        listing_limit: Optional[int] = None
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "username": username,
            "role": role,
            "listing_limit": listing_limit
        }

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: str = None,
        username: str = "Test User",
        role: UserRole = UserRole.BUYER,
        listing_limit: Optional[int] = None
    ) -> User:
        """Create a test user in the database."""
        user_data = UserFactory.create_user_data(
            email=email,
            username=username,
            role=role,
            listing_limit=listing_limit
        )
        return await user_repo.create_user(user_data)


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        owner_id: uuid.UUID,
        title: str = "Test Property",
        description: str = "A bright test apartment",
        price: Decimal = Decimal("1000.00"),
        currency: str = "USD",
        status: PropertyStatus = PropertyStatus.ACTIVE,
        is_verified: bool = True,
        address: Optional[str] = "1 Test Street",
        rooms: Optional[int] = 3,
        **overrides
    ) -> dict:
        """Create property data dictionary."""
        return {
            "owner_id": owner_id,
            "title": title,
            "description": description,
            "price": price,
            "currency": currency,
            "status": status,
            "is_verified": is_verified,
            "address": address,
            "rooms": rooms,
            **overrides
        }

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        owner_id: uuid.UUID,
        **kwargs
    ) -> Property:
        """Create a test property in the database."""
        property_data = PropertyFactory.create_property_data(owner_id=owner_id, **kwargs)
        return await property_repo.create_property(property_data)


class ConversationFactory:
    """Factory for assistant conversations and their messages."""

    @staticmethod
    async def create_prompt(db_session: AsyncSession, content: str = "You are a property assistant.") -> SystemPrompt:
        prompt = SystemPrompt(name="default", content=content)
        db_session.add(prompt)
        await db_session.commit()
        await db_session.refresh(prompt)
        return prompt

    @staticmethod
    async def create_conversation(
        db_session: AsyncSession,
        system_prompt_id: Optional[uuid.UUID] = None,
        is_active: bool = True,
        user_id: Optional[uuid.UUID] = None
    ) -> Conversation:
        conversation = Conversation(
            user_id=user_id,
            system_prompt_id=system_prompt_id,
            is_active=is_active
        )
        db_session.add(conversation)
        await db_session.commit()
        await db_session.refresh(conversation)
        return conversation

    @staticmethod
    async def add_messages(
        db_session: AsyncSession,
        conversation_id: uuid.UUID,
        messages: List[tuple]
    ) -> List[Message]:
        """Insert (sender, content, is_visible) tuples one second apart."""
        start = datetime.now(timezone.utc) - timedelta(hours=1)
        created = []
        for offset, (sender, content, is_visible) in enumerate(messages):
            message = Message(
                conversation_id=conversation_id,
                sender=sender,
                content=content,
                is_visible=is_visible,
                created_at=start + timedelta(seconds=offset)
            )
            db_session.add(message)
            created.append(message)
        await db_session.commit()
        for message in created:
            await db_session.refresh(message)
        return created


# User fixtures
@pytest.fixture
async def test_seller(user_repository: UserRepository) -> User:
    """Private seller with three listings left."""
    return await UserFactory.create_user(
        user_repository,
        email="seller@example.com",
        username="Sam Seller",
        role=UserRole.PRIVATE_SELLER,
        listing_limit=3
    )


@pytest.fixture
async def test_agency(user_repository: UserRepository) -> User:
    """Agency without a listing quota."""
    return await UserFactory.create_user(
        user_repository,
        email="agency@example.com",
        username="Acme Realty",
        role=UserRole.AGENCY
    )


@pytest.fixture
async def test_buyer(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="buyer@example.com",
        username="Bea Buyer"
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_agency: User) -> Property:
    """Verified active listing owned by the agency."""
    return await PropertyFactory.create_property(
        property_repository,
        test_agency.id,
        title="Harbour View Loft",
        address="12 Quay Street",
        price=Decimal("250000.00")
    )
