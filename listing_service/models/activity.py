"""
Listing activity records: view events, price timeline and wishlists.
"""

from sqlalchemy import String, Numeric, DateTime, ForeignKey, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from decimal import Decimal
import uuid
from typing import Optional

from listing_service.database import Base


class PropertyView(Base):
    """Append-only log of listing views. Written by the tracking layer."""

    __tablename__ = "property_views"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    viewer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Viewing user, NULL for anonymous visitors"
    )

    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )


class PricingHistory(Base):
    """
    Price timeline of a property.
    Rows are only ever inserted; the latest effective_date is the current price.
    """

    __tablename__ = "pricing_history"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="USD"
    )

    effective_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        return f"<PricingHistory(property_id={self.property_id}, price={self.price} {self.currency})>"


class WishlistEntry(Base):
    """A user's favourite marking on a property."""

    __tablename__ = "wishlist"
    __table_args__ = (
        UniqueConstraint("user_id", "property_id", name="uq_wishlist_user_property"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
