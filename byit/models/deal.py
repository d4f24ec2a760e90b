"""
Deal model for a single real-estate sale.
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from byit.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from byit.models.commission import Commission
    from byit.models.project import Project, ProjectCategory, ProjectCategoryUnitType
    from byit.models.user import User


class DealStatus(str, Enum):
    """Status of the deal."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Deal(Base, TimestampMixin):
    """
    One sale closed by a broker.

    The developer is implied by the project. Category and unit type are
    optional; when present they point at the project's own configuration
    rows, not the shared catalog.
    """

    __tablename__ = "deals"

    id: Mapped[int] = mapped_column(primary_key=True)
    broker_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id"),
        nullable=False,
        index=True,
    )
    project_category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("project_categories.id"),
        nullable=True,
        index=True,
    )
    project_unit_type_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("project_category_unit_types.id"),
        nullable=True,
        index=True,
    )

    client_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    sale_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
    )
    status: Mapped[DealStatus] = mapped_column(
        SQLAlchemyEnum(
            DealStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=DealStatus.PENDING,
        nullable=False,
        index=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Relationships
    broker: Mapped["User"] = relationship(
        "User",
        back_populates="deals",
    )
    project: Mapped["Project"] = relationship("Project")
    project_category: Mapped[Optional["ProjectCategory"]] = relationship("ProjectCategory")
    project_unit_type: Mapped[Optional["ProjectCategoryUnitType"]] = relationship(
        "ProjectCategoryUnitType",
    )
    commission: Mapped[Optional["Commission"]] = relationship(
        "Commission",
        back_populates="deal",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<Deal(id={self.id}, project_id={self.project_id}, sale_price={self.sale_price})>"
