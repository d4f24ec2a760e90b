"""
Database models for Byit.

All models are exported here for convenient imports:
    from byit.models import Developer, Project, Deal, Commission, etc.
"""

from byit.models.audit import AuditAction, AuditLog
from byit.models.base import Base, RateOverrideMixin, TimestampMixin
from byit.models.catalog import Category, UnitType
from byit.models.commission import Commission, CommissionStatus
from byit.models.deal import Deal, DealStatus
from byit.models.developer import Developer
from byit.models.project import Project, ProjectCategory, ProjectCategoryUnitType
from byit.models.user import User, UserRole

__all__ = [
    # Base
    "Base",
    "RateOverrideMixin",
    "TimestampMixin",
    # User
    "User",
    "UserRole",
    # Hierarchy
    "Developer",
    "Project",
    "ProjectCategory",
    "ProjectCategoryUnitType",
    "Category",
    "UnitType",
    # Deal
    "Deal",
    "DealStatus",
    # Commission
    "Commission",
    "CommissionStatus",
    # Audit
    "AuditLog",
    "AuditAction",
]
