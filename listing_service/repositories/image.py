"""
Repository for PropertyImage model operations.
Handles database queries and operations for property images.
"""

import uuid
from typing import List, Sequence, TYPE_CHECKING
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from listing_service.models.image import PropertyImage
from listing_service.repositories.base import BaseRepository

if TYPE_CHECKING:
    from listing_service.schemas.image import PropertyImageInput

logger = logging.getLogger(__name__)


class ImageRepository(BaseRepository[PropertyImage]):
    """Repository for PropertyImage database operations."""

    def __init__(self, db_session: AsyncSession):
        super().__init__(PropertyImage, db_session)

    async def get_for_properties(self, property_ids: Sequence[uuid.UUID]) -> List[PropertyImage]:
        """Get the images of all given properties in one query."""
        return await self.get_by_field_values("property_id", property_ids, order_by="created_at")

    async def add_images(
        self,
        property_id: uuid.UUID,
        images: Sequence["PropertyImageInput"]
    ) -> List[PropertyImage]:
        """
        Insert images for a property.

        Args:
            property_id: ID of the property
            images: Image URLs with their primary flag

        Returns:
            Created images
        """
        return await self.bulk_create([
            {
                "property_id": property_id,
                "image_url": image.image_url,
                "is_primary": image.is_primary,
            }
            for image in images
        ])

    async def replace_images(
        self,
        property_id: uuid.UUID,
        images: Sequence["PropertyImageInput"]
    ) -> List[PropertyImage]:
        """
        Replace the whole image set of a property.
        Existing rows are deleted and the given set is inserted, even when both are equal.

        Args:
            property_id: ID of the property
            images: New image set, may be empty

        Returns:
            Images now attached to the property
        """
        try:
            result = await self.db.execute(
                delete(PropertyImage).where(PropertyImage.property_id == property_id)
            )
            await self.db.commit()
            logger.debug(f"Removed {result.rowcount} images of property {property_id}")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to remove images of property {property_id}: {e}")
            raise

        return await self.add_images(property_id, images)
