"""
Developer model - top of the commission hierarchy.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from byit.models.base import Base, RateOverrideMixin, TimestampMixin

if TYPE_CHECKING:
    from byit.models.project import Project


class Developer(Base, TimestampMixin, RateOverrideMixin):
    """
    A real-estate developer.

    Its rate fields are the defaults every project, category and
    unit type inherits unless overridden further down.
    """

    __tablename__ = "developers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    headquarters: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Relationships
    projects: Mapped[List["Project"]] = relationship(
        "Project",
        back_populates="developer",
    )

    def __repr__(self) -> str:
        return f"<Developer(id={self.id}, name='{self.name}')>"
