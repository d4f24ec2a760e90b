"""
Deal creation with commission resolution.

A deal and its commission are written together: the effective rate is
resolved once from the current hierarchy, the amount is calculated, and
both are frozen onto the new Commission row. Later rate changes upstream
never touch existing commissions.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from byit.config import settings
from byit.errors import InvalidInput, NotFoundError
from byit.models import (
    AuditAction,
    Commission,
    CommissionStatus,
    Deal,
    DealStatus,
    Developer,
    Project,
    ProjectCategory,
    ProjectCategoryUnitType,
    User,
)
from byit.services.commission import (
    GrossProfit,
    calculate_commission,
    calculate_gross_profit,
    validate_sale_price,
)
from byit.services.rates import (
    RateField,
    RateLevels,
    RateValue,
    ResolvedRates,
    resolve_rates,
    validate_rate,
)
from byit.utils.audit import log_action

logger = logging.getLogger(__name__)


@dataclass
class RateChain:
    """The four hierarchy nodes a deal's rates are resolved from."""

    developer: Developer
    project: Project
    category: Optional[ProjectCategory] = None
    unit_type: Optional[ProjectCategoryUnitType] = None

    def levels(self, field: RateField) -> RateLevels:
        return RateLevels.from_nodes(
            field, self.developer, self.project, self.category, self.unit_type
        )

    def resolve(self) -> ResolvedRates:
        return resolve_rates(self.developer, self.project, self.category, self.unit_type)

    def ensure_selectable(self) -> None:
        """Refuse selections that can no longer be sold.

        Covers inactive developers and projects as well as disabled
        categories and unit types.
        """
        if not self.developer.is_active:
            raise InvalidInput(f"Developer {self.developer.id} is inactive")
        if not self.project.is_active:
            raise InvalidInput(f"Project {self.project.id} is inactive")
        if self.category is not None and not self.category.is_enabled:
            raise InvalidInput(f"Category {self.category.id} is disabled for this project")
        if self.unit_type is not None and not self.unit_type.is_enabled:
            raise InvalidInput(f"Unit type {self.unit_type.id} is disabled for this project")


async def load_rate_chain(
    db: AsyncSession,
    project_id: int,
    project_category_id: Optional[int] = None,
    unit_type_id: Optional[int] = None,
) -> RateChain:
    """
    Load the hierarchy above a (project, category, unit type) selection.

    unit_type_id refers to a ProjectCategoryUnitType row. When it is given
    without a category, the category is taken from the unit type.

    Raises:
        NotFoundError: unknown project, category or unit type
        InvalidInput: category/unit type belongs to another project
    """
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    developer = await db.get(Developer, project.developer_id)
    if developer is None:
        raise NotFoundError("Developer", project.developer_id)

    unit_type = None
    if unit_type_id is not None:
        unit_type = await db.get(ProjectCategoryUnitType, unit_type_id)
        if unit_type is None:
            raise NotFoundError("Unit type", unit_type_id)
        if project_category_id is None:
            project_category_id = unit_type.project_category_id
        elif unit_type.project_category_id != project_category_id:
            raise InvalidInput(
                f"Unit type {unit_type_id} does not belong to category {project_category_id}"
            )

    category = None
    if project_category_id is not None:
        category = await db.get(ProjectCategory, project_category_id)
        if category is None:
            raise NotFoundError("Category", project_category_id)
        if category.project_id != project.id:
            raise InvalidInput(
                f"Category {project_category_id} does not belong to project {project_id}"
            )

    return RateChain(developer=developer, project=project, category=category, unit_type=unit_type)


def _commission_field(rate_field: Optional[RateField]) -> RateField:
    return rate_field or RateField(settings.commission_rate_field)


@dataclass(frozen=True)
class CommissionQuote:
    """What a deal would earn, computed without writing anything."""

    rate_field: RateField
    rates: ResolvedRates
    rate: Decimal
    amount: Decimal
    gross_profit: GrossProfit


async def preview_commission(
    db: AsyncSession,
    project_id: int,
    sale_price: RateValue,
    project_category_id: Optional[int] = None,
    unit_type_id: Optional[int] = None,
    rate_field: Optional[RateField] = None,
) -> CommissionQuote:
    """Quote the commission for a prospective deal (calculator preview)."""
    price = validate_sale_price(sale_price)
    chain = await load_rate_chain(db, project_id, project_category_id, unit_type_id)
    chain.ensure_selectable()

    field = _commission_field(rate_field)
    rates = chain.resolve()
    rate = validate_rate(rates.get(field).rate, field)
    return CommissionQuote(
        rate_field=field,
        rates=rates,
        rate=rate,
        amount=calculate_commission(price, rate),
        gross_profit=calculate_gross_profit(price, rates),
    )


async def create_deal(
    db: AsyncSession,
    *,
    broker_id: int,
    project_id: int,
    sale_price: RateValue,
    client_name: str,
    project_category_id: Optional[int] = None,
    unit_type_id: Optional[int] = None,
    notes: Optional[str] = None,
    rate_field: Optional[RateField] = None,
) -> Deal:
    """
    Create a deal together with its PENDING commission.

    Args:
        db: Database session
        broker_id: Broker who closed the deal
        project_id: Project sold in
        sale_price: Deal value, must be > 0
        client_name: Buyer name
        project_category_id: Optional ProjectCategory id
        unit_type_id: Optional ProjectCategoryUnitType id
        notes: Free-form notes
        rate_field: Rate field to freeze onto the commission
            (defaults to settings.commission_rate_field)

    Returns:
        The new deal, with `deal.commission` populated

    Raises:
        InvalidInput: bad sale price or a disabled/mismatched selection
        NotFoundError: unknown broker, project, category or unit type
    """
    price = validate_sale_price(sale_price)
    if not client_name or not client_name.strip():
        raise InvalidInput("Client name is required")

    try:
        broker = await db.get(User, broker_id)
        if broker is None:
            raise NotFoundError("Broker", broker_id)

        chain = await load_rate_chain(db, project_id, project_category_id, unit_type_id)
        chain.ensure_selectable()

        field = _commission_field(rate_field)
        levels = chain.levels(field)
        # the frozen rate is the one the amount is computed from
        rate = validate_rate(levels.effective(), field)
        amount = calculate_commission(price, rate)

        deal = Deal(
            broker_id=broker_id,
            project_id=chain.project.id,
            project_category_id=chain.category.id if chain.category else None,
            project_unit_type_id=chain.unit_type.id if chain.unit_type else None,
            client_name=client_name.strip(),
            sale_price=price,
            status=DealStatus.PENDING,
            notes=notes,
        )
        Commission(
            deal=deal,
            broker_id=broker_id,
            rate=rate,
            amount=amount,
            status=CommissionStatus.PENDING,
        )
        db.add(deal)
        await db.flush()

        source = levels.source()
        log_action(
            db,
            user_id=broker_id,
            action=AuditAction.CREATE_DEAL,
            target_type="deal",
            target_id=deal.id,
            action_metadata={
                "rate_field": field.value,
                "rate": str(rate),
                "rate_source": source.value if source else None,
                "amount": str(amount),
            },
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        f"Deal {deal.id} created for broker {broker_id}: "
        f"sale {price} at {rate}% → commission {amount}"
    )
    return deal
