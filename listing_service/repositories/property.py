"""
Property repository for listing queries with owner projection and wish state.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, false, desc
from sqlalchemy.engine import Row
from listing_service.repositories.base import BaseRepository
from listing_service.models.property import Property, PropertyStatus
from listing_service.models.user import User
from listing_service.models.activity import WishlistEntry
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingFilter:
    """Accepted values of the listing status filter."""
    ACTIVE = "active"
    SOLD_RENTED = "sold_rented"
    INACTIVE = "inactive"


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings.
    Reads return the property together with a left-joined owner projection.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    def _owner_columns(self):
        return (
            User.id.label("owner_ref"),
            User.email.label("owner_email"),
            User.username.label("owner_username"),
            User.role.label("owner_role"),
        )

    def _build_filter_conditions(self, filter_param: Optional[str]) -> List:
        """
        Build status/verification conditions for a listing filter.
        Unknown filters (including None) produce no conditions at all.
        """
        if filter_param == ListingFilter.ACTIVE:
            return [Property.status == PropertyStatus.ACTIVE, Property.is_verified.is_(True)]
        if filter_param == ListingFilter.SOLD_RENTED:
            return [
                Property.status.in_([PropertyStatus.SOLD, PropertyStatus.RENTED]),
                Property.is_verified.is_(True),
            ]
        if filter_param == ListingFilter.INACTIVE:
            return [Property.status == PropertyStatus.INACTIVE, Property.is_verified.is_(True)]
        return []

    async def list_with_owner(self, filter_param: Optional[str]) -> List[Row]:
        """
        Get properties matching a listing filter with their owners.

        Args:
            filter_param: "active", "sold_rented", "inactive" or anything else for all

        Returns:
            Rows of (Property, owner_ref, owner_email, owner_username, owner_role)
        """
        try:
            query = (
                select(Property, *self._owner_columns())
                .outerjoin(User, Property.owner_id == User.id)
                .order_by(desc(Property.created_at))
            )

            conditions = self._build_filter_conditions(filter_param)
            if conditions:
                query = query.where(and_(*conditions))

            result = await self.db.execute(query)
            rows = list(result.all())

            logger.debug(f"Listing filter {filter_param!r} matched {len(rows)} properties")
            return rows
        except Exception as e:
            logger.error(f"Failed to list properties for filter {filter_param!r}: {e}")
            raise

    async def get_with_owner(self, property_id: uuid.UUID, viewer_id: Optional[uuid.UUID] = None) -> Optional[Row]:
        """
        Get one property with its owner and the viewer's wish flag.

        Args:
            property_id: UUID of the property
            viewer_id: Optional user whose wishlist is checked

        Returns:
            Row of (Property, owner columns..., is_wished) or None if not found
        """
        try:
            if viewer_id:
                is_wished = (
                    select(WishlistEntry.id)
                    .where(
                        WishlistEntry.property_id == Property.id,
                        WishlistEntry.user_id == viewer_id
                    )
                    .exists()
                )
            else:
                is_wished = false()

            query = (
                select(Property, *self._owner_columns(), is_wished.label("is_wished"))
                .outerjoin(User, Property.owner_id == User.id)
                .where(Property.id == property_id)
            )

            result = await self.db.execute(query)
            row = result.first()

            if row is None:
                logger.debug(f"Property {property_id} not found")
            return row
        except Exception as e:
            logger.error(f"Failed to get property with owner {property_id}: {e}")
            raise

    async def create_property(self, property_data: dict) -> Property:
        """Create a property listing."""
        created_property = await self.create(property_data)
        logger.info(f"Created property: {created_property.title} (ID: {created_property.id})")
        return created_property
