"""
Shared catalog of category and unit type names.

These carry no rates themselves; rates live on the per-project join rows
(ProjectCategory, ProjectCategoryUnitType).
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from byit.models.base import Base, TimestampMixin


class Category(Base, TimestampMixin):
    """A named grouping of units, e.g. "Villas"."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"


class UnitType(Base, TimestampMixin):
    """A named unit shape, e.g. "Studio"."""

    __tablename__ = "unit_types"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<UnitType(id={self.id}, name='{self.name}')>"
