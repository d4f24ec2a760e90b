"""
User model for brokers and managers.
"""

from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from byit.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from byit.models.deal import Deal


class UserRole(str, Enum):
    """User roles."""
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    BROKER = "BROKER"


class User(Base, TimestampMixin):
    """
    Platform user.

    - admin/manager: edit rates, review commissions
    - broker: owns deals and earns commissions
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    first_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    last_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    role: Mapped[UserRole] = mapped_column(
        SQLAlchemyEnum(
            UserRole,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=UserRole.BROKER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Relationships
    deals: Mapped[List["Deal"]] = relationship(
        "Deal",
        back_populates="broker",
    )

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
