"""
AuditLog model for tracking manager actions.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from byit.models.base import Base


class AuditAction(str, Enum):
    """Types of auditable actions."""
    CREATE_DEAL = "create_deal"
    APPROVE_COMMISSION = "approve_commission"
    REJECT_COMMISSION = "reject_commission"
    PAY_COMMISSION = "pay_commission"
    OVERRIDE_COMMISSION_RATE = "override_commission_rate"
    BULK_RATE_OVERRIDE = "bulk_rate_override"
    TOGGLE_CATEGORY = "toggle_category"
    TOGGLE_ACTIVE = "toggle_active"
    DELETE_ENTITY = "delete_entity"


class AuditLog(Base):
    """Audit trail of rate edits and commission reviews."""

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
        comment="Acting user; NULL for system actions",
    )
    action: Mapped[AuditAction] = mapped_column(
        SQLAlchemyEnum(
            AuditAction,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    target_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Type of entity affected (commission, developer, project, etc)",
    )
    target_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="ID of the affected entity",
    )
    action_metadata: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Additional context about the action",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, user_id={self.user_id}, action={self.action})>"
