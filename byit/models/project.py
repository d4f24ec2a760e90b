"""
Project model and its per-project category / unit type configuration.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from byit.models.base import Base, RateOverrideMixin, TimestampMixin

if TYPE_CHECKING:
    from byit.models.catalog import Category, UnitType
    from byit.models.developer import Developer


class Project(Base, TimestampMixin, RateOverrideMixin):
    """
    A development project. Belongs to exactly one developer.

    NULL rate fields inherit from the developer.
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    developer_id: Mapped[int] = mapped_column(
        ForeignKey("developers.id"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    location: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Relationships
    developer: Mapped["Developer"] = relationship(
        "Developer",
        back_populates="projects",
    )
    categories: Mapped[List["ProjectCategory"]] = relationship(
        "ProjectCategory",
        back_populates="project",
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}', developer_id={self.developer_id})>"


class ProjectCategory(Base, TimestampMixin, RateOverrideMixin):
    """
    A category enabled on one project.

    NULL rate fields inherit from the project. Disabling a category
    hides it (and its unit types) from new deals but keeps its rates.
    """

    __tablename__ = "project_categories"
    __table_args__ = (
        UniqueConstraint("project_id", "category_id", name="uq_project_category"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id"),
        nullable=False,
        index=True,
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    is_enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Relationships
    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="categories",
    )
    category: Mapped["Category"] = relationship("Category")
    unit_types: Mapped[List["ProjectCategoryUnitType"]] = relationship(
        "ProjectCategoryUnitType",
        back_populates="project_category",
    )

    def __repr__(self) -> str:
        return (
            f"<ProjectCategory(id={self.id}, project_id={self.project_id}, "
            f"category_id={self.category_id})>"
        )


class ProjectCategoryUnitType(Base, TimestampMixin, RateOverrideMixin):
    """
    A unit type offered within one project category.

    NULL rate fields inherit from the project category.
    """

    __tablename__ = "project_category_unit_types"
    __table_args__ = (
        UniqueConstraint(
            "project_category_id", "unit_type_id", name="uq_project_category_unit_type"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    project_category_id: Mapped[int] = mapped_column(
        ForeignKey("project_categories.id"),
        nullable=False,
        index=True,
    )
    unit_type_id: Mapped[int] = mapped_column(
        ForeignKey("unit_types.id"),
        nullable=False,
        index=True,
    )
    is_enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(14, 2),
        nullable=True,
        comment="List price of the unit type in this project",
    )

    # Relationships
    project_category: Mapped["ProjectCategory"] = relationship(
        "ProjectCategory",
        back_populates="unit_types",
    )
    unit_type: Mapped["UnitType"] = relationship("UnitType")

    def __repr__(self) -> str:
        return (
            f"<ProjectCategoryUnitType(id={self.id}, "
            f"project_category_id={self.project_category_id}, unit_type_id={self.unit_type_id})>"
        )
