"""
Audit logging utilities.

Rate edits and commission reviews are recorded for later review.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from byit.models.audit import AuditAction, AuditLog


def log_action(
    db: AsyncSession,
    user_id: Optional[int],
    action: AuditAction,
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    action_metadata: Optional[dict[str, Any]] = None,
) -> AuditLog:
    """
    Log an auditable action.

    Args:
        db: Database session
        user_id: ID of the user performing the action (None for system)
        action: Type of action being performed
        target_type: Type of entity affected (e.g., "commission", "project")
        target_id: ID of the affected entity
        action_metadata: Additional context about the action

    Returns:
        Created AuditLog entry
    """
    log_entry = AuditLog(
        user_id=user_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        action_metadata=action_metadata,
    )
    db.add(log_entry)
    # Note: commit should happen in the calling context
    return log_entry
