"""
Property model for sale and rental listings.
Handles listing data, pricing, status and verification state.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, Enum as SQLEnum, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from decimal import Decimal
import enum
import uuid
from typing import Optional

from listing_service.database import Base


class PropertyStatus(str, enum.Enum):
    """Listing lifecycle status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SOLD = "sold"
    RENTED = "rented"


class Property(Base):
    """
    Property model for managing sale and rental listings.
    Every property is owned by exactly one user.
    """

    __tablename__ = "properties"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who owns this listing"
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Property listing title"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Detailed property description"
    )

    facilities: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free-form list of facilities"
    )

    property_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment="Kind of property, e.g. apartment or house"
    )

    transaction_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Sale or rent"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Current asking price"
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="USD",
        comment="ISO currency code of the price"
    )

    size: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=True,
        comment="Property size in square meters"
    )

    rooms: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Number of rooms"
    )

    address: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Street address"
    )

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PropertyStatus.ACTIVE,
        index=True,
        comment="Listing status"
    )

    document_url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Ownership document submitted for verification"
    )

    verification_comments: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Reviewer notes from the verification process"
    )

    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Whether the listing passed verification"
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title[:30]}..., price={self.price})>"


# Listing queries filter on status and verification together
status_verified_index = Index(
    "idx_properties_status_verified",
    Property.status,
    Property.is_verified
)
