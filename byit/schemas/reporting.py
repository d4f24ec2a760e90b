"""Commission reporting schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from byit.models.commission import CommissionStatus


class StatusTotals(BaseModel):
    count: int = 0
    amount: Decimal = Decimal("0")


class CommissionSummary(BaseModel):
    """Totals read from persisted commission rows."""

    broker_id: Optional[int] = None
    by_status: dict[CommissionStatus, StatusTotals]
    total_count: int
    total_amount: Decimal
    outstanding_amount: Decimal  # PENDING + APPROVED
    paid_amount: Decimal
