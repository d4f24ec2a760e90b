"""
Tests for commission reporting.

Totals are read from persisted commission rows; later rate edits must not
change them.
"""

from decimal import Decimal

import pytest

from byit.models import CommissionStatus, User, UserRole
from byit.schemas.rates import RateSet
from byit.services.commission_workflow import (
    approve_commission,
    mark_commission_paid,
    reject_commission,
)
from byit.services.deals import create_deal
from byit.services.rate_override import RateScope, apply_rate_override
from byit.services.rates import HierarchyLevel
from byit.services.reporting import commission_summary


async def _deal(db, h, sale_price, broker_id=None):
    deal = await create_deal(
        db,
        broker_id=broker_id or h.broker.id,
        project_id=h.project.id,
        sale_price=sale_price,
        client_name="Client",
    )
    return deal.commission.id


class TestCommissionSummary:
    @pytest.mark.asyncio
    async def test_empty(self, db_session, hierarchy):
        summary = await commission_summary(db_session)

        assert summary.total_count == 0
        assert summary.total_amount == Decimal("0")
        assert set(summary.by_status) == set(CommissionStatus)
        assert all(t.count == 0 for t in summary.by_status.values())

    @pytest.mark.asyncio
    async def test_totals_by_status(self, db_session, hierarchy):
        hierarchy.developer.broker_commission_rate = Decimal("2")
        await _deal(db_session, hierarchy, 1000000)                # 20,000
        approved = await _deal(db_session, hierarchy, 2000000)     # 40,000
        paid = await _deal(db_session, hierarchy, 500000)          # 10,000
        cancelled = await _deal(db_session, hierarchy, 250000)     # 5,000

        await approve_commission(db_session, approved)
        await approve_commission(db_session, paid)
        await mark_commission_paid(db_session, paid)
        await reject_commission(db_session, cancelled, "Duplicate")

        summary = await commission_summary(db_session)

        assert summary.total_count == 4
        assert summary.by_status[CommissionStatus.PENDING].amount == Decimal("20000.00")
        assert summary.by_status[CommissionStatus.APPROVED].amount == Decimal("40000.00")
        assert summary.by_status[CommissionStatus.PAID].count == 1
        assert summary.outstanding_amount == Decimal("60000.00")
        assert summary.paid_amount == Decimal("10000.00")
        assert summary.total_amount == Decimal("75000.00")

    @pytest.mark.asyncio
    async def test_filter_by_broker(self, db_session, hierarchy):
        hierarchy.developer.broker_commission_rate = Decimal("1")
        other = User(email="other@byit.test", first_name="Nour", role=UserRole.BROKER)
        db_session.add(other)
        await db_session.commit()

        await _deal(db_session, hierarchy, 1000000)
        await _deal(db_session, hierarchy, 3000000, broker_id=other.id)

        summary = await commission_summary(db_session, broker_id=other.id)

        assert summary.broker_id == other.id
        assert summary.total_count == 1
        assert summary.outstanding_amount == Decimal("30000.00")

    @pytest.mark.asyncio
    async def test_unaffected_by_later_rate_changes(self, db_session, hierarchy):
        hierarchy.developer.broker_commission_rate = Decimal("2.5")
        await _deal(db_session, hierarchy, 2000000)

        await apply_rate_override(
            db_session,
            RateScope(HierarchyLevel.DEVELOPER, hierarchy.developer.id),
            RateSet(broker_commission_rate=Decimal("10")),
        )
        summary = await commission_summary(db_session)

        assert summary.total_amount == Decimal("50000.00")
