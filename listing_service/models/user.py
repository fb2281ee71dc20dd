"""
User model with role and listing quota management.
Handles accounts of buyers, private sellers, agencies and administrators.
"""

from sqlalchemy import String, Boolean, Integer, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from email_validator import validate_email, EmailNotValidError
import enum
from typing import Optional

from listing_service.database import Base


class UserRole(str, enum.Enum):
    """User role enumeration."""
    BUYER = "buyer"
    PRIVATE_SELLER = "private_seller"
    AGENCY = "agency"
    ADMIN = "admin"


class User(Base):
    """
    User model.
    Owners of listings are users; private sellers carry a listing quota.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique and valid"
    )

    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Public display name"
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.BUYER,
        index=True,
        comment="User role"
    )

    # NULL means no quota is tracked for this user
    listing_limit: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Remaining listings a private seller may publish"
    )

    is_email_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether the email address has been confirmed"
    )

    paypal_credentials: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="PayPal account reference used for listing payments"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")
