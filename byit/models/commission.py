"""
Commission model - one per deal.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from byit.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from byit.models.deal import Deal
    from byit.models.user import User


class CommissionStatus(str, Enum):
    """Commission lifecycle. PAID and CANCELLED are terminal."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class Commission(Base, TimestampMixin):
    """
    Commission earned by a broker on a deal.

    rate and amount are frozen when the deal is created. They change
    only through an explicit manager override, never because upstream
    hierarchy rates changed.
    """

    __tablename__ = "commissions"

    id: Mapped[int] = mapped_column(primary_key=True)
    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id"),
        unique=True,
        nullable=False,
    )
    broker_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        comment="Effective rate resolved at deal creation, in percent",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        comment="sale_price * rate / 100, rounded half-up to cents",
    )
    is_rate_overridden: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Rate or amount was edited by a manager after creation",
    )

    status: Mapped[CommissionStatus] = mapped_column(
        SQLAlchemyEnum(
            CommissionStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=CommissionStatus.PENDING,
        nullable=False,
        index=True,
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    reviewed_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        comment="Manager who performed the last status change",
    )

    # Relationships
    deal: Mapped["Deal"] = relationship(
        "Deal",
        back_populates="commission",
    )
    broker: Mapped["User"] = relationship(
        "User",
        foreign_keys=[broker_id],
    )

    def __repr__(self) -> str:
        return (
            f"<Commission(id={self.id}, deal_id={self.deal_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
