"""
Tests for catalog administration.

Covers:
- Enable/disable of project categories and unit types
- Activation of developers and projects
- The resolved commission hierarchy view
- Delete guards
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from byit.errors import EntityInUse, NotFoundError
from byit.models import (
    AuditAction,
    AuditLog,
    Category,
    Developer,
    Project,
    ProjectCategory,
    ProjectCategoryUnitType,
    UnitType,
)
from byit.services.catalog import (
    commission_hierarchy,
    delete_category,
    delete_developer,
    delete_project,
    delete_unit_type,
    remove_project_category,
    set_category_enabled,
    set_developer_active,
    set_project_active,
    set_unit_type_enabled,
)
from byit.services.deals import create_deal
from byit.services.rates import HierarchyLevel


async def _count(db, model):
    return await db.scalar(select(func.count()).select_from(model))


# ── Enable / disable ──────────────────────────────────────


class TestEnableDisable:
    @pytest.mark.asyncio
    async def test_disable_category_cascades_to_unit_types(self, db_session, hierarchy):
        hierarchy.unit_type.broker_commission_rate = Decimal("1.5")
        await db_session.commit()

        touched = await set_category_enabled(db_session, hierarchy.category.id, False)

        assert touched == 2
        assert hierarchy.category.is_enabled is False
        assert hierarchy.unit_type.is_enabled is False
        assert hierarchy.unit_type.broker_commission_rate == Decimal("1.5")

    @pytest.mark.asyncio
    async def test_enable_does_not_reenable_unit_types(self, db_session, hierarchy):
        await set_category_enabled(db_session, hierarchy.category.id, False)

        touched = await set_category_enabled(db_session, hierarchy.category.id, True)

        assert touched == 1
        assert hierarchy.category.is_enabled is True
        assert hierarchy.unit_type.is_enabled is False

    @pytest.mark.asyncio
    async def test_toggle_is_audited(self, db_session, hierarchy):
        await set_category_enabled(
            db_session, hierarchy.category.id, False, actor_id=hierarchy.manager.id
        )

        entry = await db_session.scalar(select(AuditLog))
        assert entry.action == AuditAction.TOGGLE_CATEGORY
        assert entry.action_metadata == {"is_enabled": False, "updated_count": 2}

    @pytest.mark.asyncio
    async def test_unit_type_toggle(self, db_session, hierarchy):
        unit_type = await set_unit_type_enabled(db_session, hierarchy.unit_type.id, False)
        assert unit_type.is_enabled is False
        assert hierarchy.category.is_enabled is True

        unit_type = await set_unit_type_enabled(db_session, hierarchy.unit_type.id, True)
        assert unit_type.is_enabled is True

    @pytest.mark.asyncio
    async def test_unknown_category(self, db_session, hierarchy):
        with pytest.raises(NotFoundError):
            await set_category_enabled(db_session, 999, False)


# ── Active flags ──────────────────────────────────────────


class TestActiveFlags:
    @pytest.mark.asyncio
    async def test_deactivate_developer_is_audited(self, db_session, hierarchy):
        developer = await set_developer_active(
            db_session, hierarchy.developer.id, False, actor_id=hierarchy.manager.id
        )

        assert developer.is_active is False
        assert hierarchy.project.is_active is True
        entry = await db_session.scalar(select(AuditLog))
        assert entry.action == AuditAction.TOGGLE_ACTIVE
        assert entry.target_type == "developers"
        assert entry.target_id == hierarchy.developer.id
        assert entry.action_metadata == {"is_active": False}

    @pytest.mark.asyncio
    async def test_project_deactivated_and_reactivated(self, db_session, hierarchy):
        project = await set_project_active(db_session, hierarchy.project.id, False)
        assert project.is_active is False

        project = await set_project_active(db_session, hierarchy.project.id, True)
        assert project.is_active is True
        assert hierarchy.developer.is_active is True

    @pytest.mark.asyncio
    async def test_unknown_developer(self, db_session, hierarchy):
        with pytest.raises(NotFoundError, match="Developer"):
            await set_developer_active(db_session, 999, False)

        assert await db_session.scalar(select(AuditLog.id)) is None


# ── Hierarchy view ────────────────────────────────────────


class TestCommissionHierarchy:
    @pytest.mark.asyncio
    async def test_effective_rates_and_inherited_flags(self, db_session, hierarchy):
        hierarchy.developer.broker_commission_rate = Decimal("2.5")
        hierarchy.developer.actual_commission_rate = Decimal("5")
        hierarchy.category.broker_commission_rate = Decimal("0")
        hierarchy.unit_type.actual_commission_rate = Decimal("4")
        await db_session.commit()

        tree = await commission_hierarchy(db_session, hierarchy.project.id)

        assert tree.developer.level == HierarchyLevel.DEVELOPER
        assert tree.developer.name == "Emaar Misr"
        assert tree.developer.inherited == {}
        assert tree.developer.commissions["broker_commission_rate"] == Decimal("2.5")

        assert tree.project.commissions["broker_commission_rate"] == Decimal("2.5")
        assert tree.project.inherited["broker_commission_rate"] is True

        [category] = tree.categories
        assert category.name == "Apartments"
        assert category.is_enabled is True
        assert category.commissions["broker_commission_rate"] == Decimal("0")
        assert category.inherited["broker_commission_rate"] is False
        assert category.commissions["actual_commission_rate"] == Decimal("5")
        assert category.inherited["actual_commission_rate"] is True

        [unit] = category.children
        assert unit.name == "Studio"
        assert unit.level == HierarchyLevel.UNIT_TYPE
        assert unit.commissions == {
            "actual_commission_rate": Decimal("4"),
            "broker_commission_rate": Decimal("0"),
            "communicated_commission": Decimal("0"),
        }
        assert unit.inherited == {
            "actual_commission_rate": False,
            "broker_commission_rate": True,
            "communicated_commission": True,
        }

    @pytest.mark.asyncio
    async def test_disabled_nodes_are_listed(self, db_session, hierarchy):
        await set_category_enabled(db_session, hierarchy.category.id, False)

        tree = await commission_hierarchy(db_session, hierarchy.project.id)

        assert tree.categories[0].is_enabled is False
        assert tree.categories[0].children[0].is_enabled is False

    @pytest.mark.asyncio
    async def test_unknown_project(self, db_session, hierarchy):
        with pytest.raises(NotFoundError):
            await commission_hierarchy(db_session, 999)


# ── Delete guards ─────────────────────────────────────────


class TestDeleteGuards:
    @pytest.mark.asyncio
    async def test_developer_with_projects(self, db_session, hierarchy):
        developer_id = hierarchy.developer.id

        with pytest.raises(EntityInUse) as exc_info:
            await delete_developer(db_session, developer_id)

        assert exc_info.value.count == 1
        assert await _count(db_session, Developer) == 1

    @pytest.mark.asyncio
    async def test_empty_developer_deleted(self, db_session, hierarchy):
        developer = Developer(name="SODIC")
        db_session.add(developer)
        await db_session.commit()

        await delete_developer(db_session, developer.id, actor_id=hierarchy.manager.id)

        assert await _count(db_session, Developer) == 1
        entry = await db_session.scalar(select(AuditLog))
        assert entry.action == AuditAction.DELETE_ENTITY
        assert entry.target_type == "developers"

    @pytest.mark.asyncio
    async def test_project_with_categories(self, db_session, hierarchy):
        project_id = hierarchy.project.id

        with pytest.raises(EntityInUse, match="project categories"):
            await delete_project(db_session, project_id)

    @pytest.mark.asyncio
    async def test_project_with_deals(self, db_session, hierarchy):
        await create_deal(
            db_session,
            broker_id=hierarchy.broker.id,
            project_id=hierarchy.project.id,
            sale_price=100000,
            client_name="Karim",
        )
        project_id = hierarchy.project.id

        with pytest.raises(EntityInUse, match="deals"):
            await delete_project(db_session, project_id)

    @pytest.mark.asyncio
    async def test_empty_project_deleted(self, db_session, hierarchy):
        project = Project(developer_id=hierarchy.developer.id, name="Mivida")
        db_session.add(project)
        await db_session.commit()

        await delete_project(db_session, project.id)

        assert await _count(db_session, Project) == 1

    @pytest.mark.asyncio
    async def test_category_in_use(self, db_session, hierarchy):
        category_id = hierarchy.catalog_category.id

        with pytest.raises(EntityInUse):
            await delete_category(db_session, category_id)

    @pytest.mark.asyncio
    async def test_unused_category_and_unit_type_deleted(self, db_session, hierarchy):
        penthouse = UnitType(name="Penthouse")
        offices = Category(name="Offices")
        db_session.add_all([penthouse, offices])
        await db_session.commit()

        await delete_category(db_session, offices.id)
        await delete_unit_type(db_session, penthouse.id)

        assert await _count(db_session, Category) == 1
        assert await _count(db_session, UnitType) == 1

    @pytest.mark.asyncio
    async def test_unit_type_in_use(self, db_session, hierarchy):
        unit_type_id = hierarchy.catalog_unit_type.id

        with pytest.raises(EntityInUse):
            await delete_unit_type(db_session, unit_type_id)

    @pytest.mark.asyncio
    async def test_unknown_entity(self, db_session, hierarchy):
        with pytest.raises(NotFoundError):
            await delete_category(db_session, 999)

    @pytest.mark.asyncio
    async def test_remove_project_category_with_unit_types(self, db_session, hierarchy):
        removed = await remove_project_category(db_session, hierarchy.category.id)

        assert removed == 2
        assert await _count(db_session, ProjectCategory) == 0
        assert await _count(db_session, ProjectCategoryUnitType) == 0

    @pytest.mark.asyncio
    async def test_remove_project_category_with_deals(self, db_session, hierarchy):
        await create_deal(
            db_session,
            broker_id=hierarchy.broker.id,
            project_id=hierarchy.project.id,
            sale_price=100000,
            client_name="Karim",
            project_category_id=hierarchy.category.id,
        )
        category_id = hierarchy.category.id

        with pytest.raises(EntityInUse):
            await remove_project_category(db_session, category_id)

        assert await _count(db_session, ProjectCategoryUnitType) == 1
