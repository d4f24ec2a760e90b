"""
Seed demo data for the Byit commission engine.

Usage:
    python scripts/seed_demo_data.py

Or with custom DATABASE_URL:
    DATABASE_URL="postgresql://..." python scripts/seed_demo_data.py

This script creates:
- A manager and a broker (if not exists)
- Developer → project → category → unit type tree with rate overrides
- A few deals through create_deal, in various commission statuses
"""

import argparse
import asyncio
import logging
import os
import sys
from decimal import Decimal

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from byit.config import settings
from byit.db import engine, get_db_context
from byit.models import (
    Category,
    Developer,
    Project,
    ProjectCategory,
    ProjectCategoryUnitType,
    UnitType,
    User,
    UserRole,
)
from byit.services.catalog import commission_hierarchy
from byit.services.commission_workflow import approve_commission, mark_commission_paid
from byit.services.deals import create_deal
from byit.services.reporting import commission_summary

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ===== DEMO DATA =====

DEVELOPER = {
    "name": "Emaar Misr",
    "headquarters": "Cairo",
    "actual_commission_rate": Decimal("5"),
    "broker_commission_rate": Decimal("2.5"),
    "communicated_commission": Decimal("3"),
}

# project name → {category name → {unit type name → broker rate override}}
PROJECTS = {
    "Marassi": {
        "Apartments": {"Studio": None, "Two Bedroom": Decimal("2")},
        "Villas": {"Twin House": Decimal("3"), "Standalone": Decimal("0")},
    },
    "Mivida": {
        "Apartments": {"Studio": None},
    },
}

DEALS = [
    ("Marassi", "Apartments", "Studio", Decimal("2000000"), "Mona Adel"),
    ("Marassi", "Villas", "Twin House", Decimal("8500000"), "Karim Nabil"),
    ("Marassi", "Villas", "Standalone", Decimal("15000000"), "Hany Samir"),
    ("Mivida", "Apartments", "Studio", Decimal("1333333"), "Nour Ali"),
]


async def get_or_create_user(db: AsyncSession, email: str, first_name: str, role: UserRole) -> User:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if not user:
        user = User(email=email, first_name=first_name, role=role)
        db.add(user)
        await db.flush()
        logger.info(f"Created {role.value.lower()} {email}")
    return user


async def get_or_create_named(db: AsyncSession, model, name: str):
    result = await db.execute(select(model).where(model.name == name))
    row = result.scalar_one_or_none()
    if not row:
        row = model(name=name)
        db.add(row)
        await db.flush()
    return row


async def create_hierarchy(db: AsyncSession) -> dict[tuple[str, str, str], tuple[int, int]]:
    """
    Create the developer tree.

    Returns:
        {(project, category, unit type): (project_id, project_unit_type_id)}
    """
    developer = Developer(**DEVELOPER)
    db.add(developer)
    await db.flush()

    selections = {}
    for project_name, categories in PROJECTS.items():
        project = Project(developer_id=developer.id, name=project_name)
        db.add(project)
        await db.flush()

        for category_name, unit_types in categories.items():
            category = await get_or_create_named(db, Category, category_name)
            project_category = ProjectCategory(project_id=project.id, category_id=category.id)
            db.add(project_category)
            await db.flush()

            for unit_name, broker_rate in unit_types.items():
                unit_type = await get_or_create_named(db, UnitType, unit_name)
                project_unit = ProjectCategoryUnitType(
                    project_category_id=project_category.id,
                    unit_type_id=unit_type.id,
                    broker_commission_rate=broker_rate,
                )
                db.add(project_unit)
                await db.flush()
                selections[(project_name, category_name, unit_name)] = (project.id, project_unit.id)

    await db.commit()
    logger.info(f"Created developer #{developer.id} with {len(PROJECTS)} projects")
    return selections


async def seed_all(approve: bool = True) -> None:
    """Seed all demo data."""
    async with get_db_context() as db:
        existing = await db.scalar(select(Developer.id).where(Developer.name == DEVELOPER["name"]))
        if existing:
            logger.warning(f"Developer {DEVELOPER['name']} already exists (id={existing}), skipping")
            return

        manager = await get_or_create_user(db, "manager@byit.example", "Sara", UserRole.MANAGER)
        broker = await get_or_create_user(db, "broker@byit.example", "Omar", UserRole.BROKER)
        await db.commit()

        selections = await create_hierarchy(db)

        commission_ids = []
        for project_name, category_name, unit_name, price, client in DEALS:
            project_id, unit_type_id = selections[(project_name, category_name, unit_name)]
            deal = await create_deal(
                db,
                broker_id=broker.id,
                project_id=project_id,
                unit_type_id=unit_type_id,
                sale_price=price,
                client_name=client,
            )
            commission_ids.append(deal.commission.id)

        if approve:
            await approve_commission(db, commission_ids[0], actor_id=manager.id)
            await mark_commission_paid(db, commission_ids[0], actor_id=manager.id)
            await approve_commission(db, commission_ids[1], actor_id=manager.id)

        tree = await commission_hierarchy(db, selections[DEALS[0][:3]][0])
        print(tree.model_dump_json(indent=2))

        summary = await commission_summary(db)
        print("\n" + "=" * 50)
        print("DEMO DATA CREATED SUCCESSFULLY!")
        print("=" * 50)
        print(f"Commissions: {summary.total_count}")
        print(f"Outstanding: {summary.outstanding_amount}")
        print(f"Paid:        {summary.paid_amount}")

    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo data for Byit")
    parser.add_argument(
        "--no-approve",
        action="store_true",
        help="Leave every commission PENDING",
    )
    args = parser.parse_args()

    asyncio.run(seed_all(approve=not args.no_approve))
