"""
Commission reporting.

Reads persisted rate/amount/status only. Historical commissions are never
re-resolved against today's hierarchy rates.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from byit.models import Commission, CommissionStatus
from byit.schemas.reporting import CommissionSummary, StatusTotals


async def commission_summary(
    db: AsyncSession,
    broker_id: Optional[int] = None,
) -> CommissionSummary:
    """Count and total commissions per status, optionally for one broker."""
    query = select(
        Commission.status,
        func.count().label("count"),
        func.coalesce(func.sum(Commission.amount), Decimal("0")).label("amount"),
    ).group_by(Commission.status)

    if broker_id is not None:
        query = query.where(Commission.broker_id == broker_id)

    result = await db.execute(query)

    by_status = {status: StatusTotals() for status in CommissionStatus}
    for row in result.all():
        by_status[row.status] = StatusTotals(count=row.count, amount=Decimal(str(row.amount)))

    def _amount(*statuses: CommissionStatus) -> Decimal:
        return sum((by_status[s].amount for s in statuses), Decimal("0"))

    return CommissionSummary(
        broker_id=broker_id,
        by_status=by_status,
        total_count=sum(t.count for t in by_status.values()),
        total_amount=_amount(*CommissionStatus),
        outstanding_amount=_amount(CommissionStatus.PENDING, CommissionStatus.APPROVED),
        paid_amount=_amount(CommissionStatus.PAID),
    )
