"""
Repositories for listing activity: views, price history and wishlists.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from listing_service.repositories.base import BaseRepository
from listing_service.models.activity import PropertyView, PricingHistory, WishlistEntry
from typing import List, Optional, Sequence, Set
from datetime import datetime, timezone
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)


class ViewRepository(BaseRepository[PropertyView]):
    """Read access to the view log."""

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyView, db)

    async def get_for_properties(self, property_ids: Sequence[uuid.UUID]) -> List[PropertyView]:
        return await self.get_by_field_values("property_id", property_ids, order_by="viewed_at")


class PricingHistoryRepository(BaseRepository[PricingHistory]):
    """Append-only access to the price timeline."""

    def __init__(self, db: AsyncSession):
        super().__init__(PricingHistory, db)

    async def get_for_properties(self, property_ids: Sequence[uuid.UUID]) -> List[PricingHistory]:
        return await self.get_by_field_values("property_id", property_ids, order_by="effective_date")

    async def append(
        self,
        property_id: uuid.UUID,
        price: Decimal,
        currency: str,
        effective_date: Optional[datetime] = None
    ) -> PricingHistory:
        """
        Record a price point for a property.

        Args:
            property_id: ID of the property
            price: Price effective from now on
            currency: Currency of the price
            effective_date: Defaults to the current UTC time

        Returns:
            Created history row
        """
        record = await self.create({
            "property_id": property_id,
            "price": price,
            "currency": currency,
            "effective_date": effective_date or datetime.now(timezone.utc),
        })
        logger.debug(f"Recorded price {price} {currency} for property {property_id}")
        return record


class WishlistRepository(BaseRepository[WishlistEntry]):
    """Wishlist membership queries."""

    def __init__(self, db: AsyncSession):
        super().__init__(WishlistEntry, db)

    async def get_wished_property_ids(
        self,
        user_id: Optional[uuid.UUID],
        property_ids: Sequence[uuid.UUID]
    ) -> Set[uuid.UUID]:
        """
        Batched existence check of (user, property) pairs.

        Returns:
            The subset of property_ids the user has wishlisted, empty without a user
        """
        if not user_id or not property_ids:
            return set()

        result = await self.db.execute(
            select(WishlistEntry.property_id).where(
                WishlistEntry.user_id == user_id,
                WishlistEntry.property_id.in_(list(property_ids))
            )
        )
        return set(result.scalars().all())

    async def get_user_ids(self, property_id: uuid.UUID) -> List[uuid.UUID]:
        """Users that wishlisted a property."""
        result = await self.db.execute(
            select(WishlistEntry.user_id).where(WishlistEntry.property_id == property_id)
        )
        return list(result.scalars().all())
