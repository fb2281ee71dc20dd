"""
User repository for owner lookups and listing quota bookkeeping.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from listing_service.repositories.base import BaseRepository
from listing_service.models.user import User, UserRole
from typing import Optional, List, Dict, Any, Sequence, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for users as listing owners and wishlist recipients."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation.

        Args:
            user_data: Dictionary containing user information
                      Must include: email, username
                      Optional: role, listing_limit, is_email_verified, paypal_credentials

        Returns:
            Created user instance

        Raises:
            ValueError: If the email is invalid or already taken
        """
        try:
            email = User.validate_email_format(user_data["email"])

            existing = await self.db.execute(select(User.id).where(User.email == email))
            if existing.scalar_one_or_none():
                raise ValueError(f"User with email {email} already exists")

            create_data = {
                **user_data,
                "email": email,
                "role": user_data.get("role", UserRole.BUYER),
            }

            created_user = await self.create(create_data)
            logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
            return created_user
        except ValueError as e:
            logger.error(f"User validation failed: {e}")
            raise

    async def get_quota(self, user_id: uuid.UUID) -> Optional[Tuple[UserRole, Optional[int]]]:
        """
        Get the role and remaining listing limit of a user.

        Returns:
            (role, listing_limit) or None if the user does not exist
        """
        result = await self.db.execute(
            select(User.role, User.listing_limit).where(User.id == user_id).limit(1)
        )
        row = result.first()
        if row is None:
            logger.debug(f"User {user_id} not found for quota lookup")
            return None
        return row.role, row.listing_limit

    async def set_listing_limit(self, user_id: uuid.UUID, listing_limit: int) -> None:
        """Store a new listing limit for a user."""
        try:
            await self.db.execute(
                update(User).where(User.id == user_id).values(listing_limit=listing_limit)
            )
            await self.db.commit()
            logger.debug(f"Listing limit of user {user_id} set to {listing_limit}")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update listing limit of user {user_id}: {e}")
            raise

    async def get_emails(self, user_ids: Sequence[uuid.UUID]) -> List[Tuple[uuid.UUID, Optional[str]]]:
        """Resolve (id, email) pairs for the given users."""
        if not user_ids:
            return []

        result = await self.db.execute(
            select(User.id, User.email).where(User.id.in_(list(user_ids)))
        )
        return [(row.id, row.email) for row in result.all()]
