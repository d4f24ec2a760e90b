"""
Commission review workflow.

Status changes and manual rate overrides are written with a
compare-and-set on the status the service observed:

    UPDATE commissions SET ... WHERE id = :id AND status = :observed

If another request changed the row in between, zero rows match and the
caller gets ConcurrentModification instead of a silent double write.

Every function here commits its own unit of work and rolls the session
back before re-raising on failure.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from byit.errors import ConcurrentModification, InvalidInput, InvalidTransition, NotFoundError, ValidationError
from byit.models import AuditAction, Commission, CommissionStatus, Deal
from byit.services.commission import calculate_commission, round_money
from byit.services.rates import RateValue, to_decimal, validate_rate
from byit.services.state_machine import CommissionStateMachine
from byit.utils.audit import log_action

logger = logging.getLogger(__name__)

_AUDIT_ACTIONS = {
    CommissionStatus.APPROVED: AuditAction.APPROVE_COMMISSION,
    CommissionStatus.CANCELLED: AuditAction.REJECT_COMMISSION,
    CommissionStatus.PAID: AuditAction.PAY_COMMISSION,
}


async def get_commission(db: AsyncSession, commission_id: int) -> Commission:
    commission = await db.get(Commission, commission_id)
    if commission is None:
        raise NotFoundError("Commission", commission_id)
    return commission


async def _compare_and_set(
    db: AsyncSession,
    commission_id: int,
    observed: CommissionStatus,
    values: dict[str, Any],
) -> None:
    """Write `values` only if the stored status is still `observed`."""
    result = await db.execute(
        update(Commission)
        .where(Commission.id == commission_id, Commission.status == observed)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        actual = await db.scalar(
            select(Commission.status).where(Commission.id == commission_id)
        )
        logger.warning(
            f"Commission {commission_id}: stale write rejected "
            f"(expected {observed.value}, found {actual.value if actual else None})"
        )
        raise ConcurrentModification(commission_id, observed, actual)


async def transition_commission(
    db: AsyncSession,
    commission_id: int,
    target: CommissionStatus,
    *,
    actor_id: Optional[int] = None,
    reason: Optional[str] = None,
    expected_status: Optional[CommissionStatus] = None,
) -> Commission:
    """
    Move a commission to a new status.

    Args:
        db: Database session
        commission_id: Commission to update
        target: Requested status
        actor_id: Manager performing the change
        reason: Rejection reason, required when cancelling
        expected_status: Status the caller last saw. When given, the
            change is refused if the commission has moved on since.

    Returns:
        The refreshed commission

    Raises:
        NotFoundError: unknown commission
        InvalidTransition: target not reachable from the current status
        ValidationError: cancelling without a reason
        ConcurrentModification: another request changed the status first
    """
    try:
        commission = await get_commission(db, commission_id)
        observed = commission.status

        if expected_status is not None and observed != expected_status:
            raise ConcurrentModification(commission_id, expected_status, observed)

        CommissionStateMachine.validate_transition(observed, target)

        now = datetime.now(timezone.utc)
        values: dict[str, Any] = {"status": target, "reviewed_by_id": actor_id}

        if CommissionStateMachine.requires_reason(target):
            reason = (reason or "").strip()
            if not reason:
                raise ValidationError("A rejection reason is required to cancel a commission")
            values["rejection_reason"] = reason
        if target == CommissionStatus.APPROVED:
            values["approved_at"] = now
        elif target == CommissionStatus.PAID:
            values["paid_at"] = now

        await _compare_and_set(db, commission_id, observed, values)

        log_action(
            db,
            user_id=actor_id,
            action=_AUDIT_ACTIONS[target],
            target_type="commission",
            target_id=commission_id,
            action_metadata={
                "from": observed.value,
                "to": target.value,
                "reason": reason,
            },
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(commission)
    logger.info(f"Commission {commission_id}: {observed.value} → {target.value}")
    return commission


async def approve_commission(
    db: AsyncSession,
    commission_id: int,
    *,
    actor_id: Optional[int] = None,
    expected_status: Optional[CommissionStatus] = None,
) -> Commission:
    """PENDING → APPROVED."""
    return await transition_commission(
        db,
        commission_id,
        CommissionStatus.APPROVED,
        actor_id=actor_id,
        expected_status=expected_status,
    )


async def reject_commission(
    db: AsyncSession,
    commission_id: int,
    reason: Optional[str],
    *,
    actor_id: Optional[int] = None,
    expected_status: Optional[CommissionStatus] = None,
) -> Commission:
    """Cancel a pending commission or reverse an approval."""
    return await transition_commission(
        db,
        commission_id,
        CommissionStatus.CANCELLED,
        actor_id=actor_id,
        reason=reason,
        expected_status=expected_status,
    )


async def mark_commission_paid(
    db: AsyncSession,
    commission_id: int,
    *,
    actor_id: Optional[int] = None,
    expected_status: Optional[CommissionStatus] = None,
) -> Commission:
    """APPROVED → PAID."""
    return await transition_commission(
        db,
        commission_id,
        CommissionStatus.PAID,
        actor_id=actor_id,
        expected_status=expected_status,
    )


def _override_values(
    sale_price: Decimal,
    rate: Decimal,
    amount: Optional[RateValue],
) -> dict[str, Any]:
    if amount is None:
        new_amount = calculate_commission(sale_price, rate)
    else:
        new_amount = to_decimal(amount)
        if new_amount < 0:
            raise InvalidInput(f"Commission amount cannot be negative, got {new_amount}")
        new_amount = round_money(new_amount)
    return {"rate": rate, "amount": new_amount, "is_rate_overridden": True}


def _ensure_editable(commission: Commission) -> None:
    if CommissionStateMachine.is_terminal(commission.status):
        raise InvalidTransition(
            commission.status,
            commission.status,
            "rates of a settled commission cannot be changed",
        )


async def override_commission_rate(
    db: AsyncSession,
    commission_id: int,
    rate: RateValue,
    *,
    amount: Optional[RateValue] = None,
    actor_id: Optional[int] = None,
) -> Commission:
    """
    Manually replace a commission's frozen rate.

    The amount is recomputed from the deal's sale price unless an explicit
    amount is given. Status is not touched. Only PENDING and APPROVED
    commissions can be edited.
    """
    new_rate = validate_rate(rate)
    if new_rate is None:
        raise InvalidInput("A commission rate is required")

    try:
        commission = await get_commission(db, commission_id)
        _ensure_editable(commission)
        observed = commission.status
        previous = {"rate": str(commission.rate), "amount": str(commission.amount)}

        sale_price = await db.scalar(select(Deal.sale_price).where(Deal.id == commission.deal_id))
        values = _override_values(sale_price, new_rate, amount)
        await _compare_and_set(db, commission_id, observed, values)

        log_action(
            db,
            user_id=actor_id,
            action=AuditAction.OVERRIDE_COMMISSION_RATE,
            target_type="commission",
            target_id=commission_id,
            action_metadata={
                "previous": previous,
                "rate": str(values["rate"]),
                "amount": str(values["amount"]),
            },
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(commission)
    logger.info(
        f"Commission {commission_id}: rate overridden to {commission.rate}% "
        f"(amount {commission.amount})"
    )
    return commission


async def bulk_override_commission_rates(
    db: AsyncSession,
    commission_ids: Iterable[int],
    rate: RateValue,
    *,
    actor_id: Optional[int] = None,
) -> int:
    """
    Apply the same manual rate to many commissions at once.

    All-or-nothing: an unknown id, a settled commission or a concurrent
    change aborts the whole batch.

    Returns:
        Number of commissions updated
    """
    ids = sorted(set(commission_ids))
    if not ids:
        raise ValidationError("No commissions selected")
    new_rate = validate_rate(rate)
    if new_rate is None:
        raise InvalidInput("A commission rate is required")

    try:
        result = await db.execute(
            select(Commission.id, Commission.status, Deal.sale_price)
            .join(Deal, Deal.id == Commission.deal_id)
            .where(Commission.id.in_(ids))
            .order_by(Commission.id)
        )
        rows = result.all()

        found = {row.id for row in rows}
        missing = [commission_id for commission_id in ids if commission_id not in found]
        if missing:
            raise NotFoundError("Commission", missing[0])

        for row in rows:
            if CommissionStateMachine.is_terminal(row.status):
                raise InvalidTransition(
                    row.status, row.status, "rates of a settled commission cannot be changed"
                )
            values = _override_values(row.sale_price, new_rate, None)
            await _compare_and_set(db, row.id, row.status, values)

        log_action(
            db,
            user_id=actor_id,
            action=AuditAction.OVERRIDE_COMMISSION_RATE,
            target_type="commission",
            action_metadata={"commission_ids": ids, "rate": str(new_rate)},
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Overrode rate to {new_rate}% on {len(rows)} commissions")
    return len(rows)
