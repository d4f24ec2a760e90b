"""
Catalog administration around the commission hierarchy.

- Activating/deactivating developers and projects and enabling/disabling
  project categories and unit types. Switching something off only hides
  it from new deals; rate overrides and existing deals are left alone.
- The resolved commission hierarchy of a project.
- Delete guards: nothing is deleted while other records reference it.
"""

import logging
from collections import defaultdict
from typing import Any, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from byit.errors import EntityInUse, NotFoundError
from byit.models import (
    AuditAction,
    Category,
    Deal,
    Developer,
    Project,
    ProjectCategory,
    ProjectCategoryUnitType,
    UnitType,
)
from byit.schemas.hierarchy import CommissionHierarchy, HierarchyNode
from byit.services.rates import HierarchyLevel, RateField, resolve_rates
from byit.utils.audit import log_action

logger = logging.getLogger(__name__)


# ── Enable / disable ──────────────────────────────────────


async def set_category_enabled(
    db: AsyncSession,
    project_category_id: int,
    enabled: bool,
    *,
    actor_id: Optional[int] = None,
) -> int:
    """
    Enable or disable a category on a project.

    Disabling cascades to every unit type of the category. Enabling does
    not re-enable unit types; they are switched on individually.

    Returns:
        Number of rows updated (the category plus cascaded unit types)
    """
    try:
        category = await db.get(ProjectCategory, project_category_id)
        if category is None:
            raise NotFoundError("Category", project_category_id)

        category.is_enabled = enabled
        touched = 1

        if not enabled:
            result = await db.execute(
                update(ProjectCategoryUnitType)
                .where(
                    ProjectCategoryUnitType.project_category_id == project_category_id,
                    ProjectCategoryUnitType.is_enabled.is_(True),
                )
                .values(is_enabled=False)
                .execution_options(synchronize_session="fetch")
            )
            touched += result.rowcount

        log_action(
            db,
            user_id=actor_id,
            action=AuditAction.TOGGLE_CATEGORY,
            target_type="project_category",
            target_id=project_category_id,
            action_metadata={"is_enabled": enabled, "updated_count": touched},
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        f"Category {project_category_id} {'enabled' if enabled else 'disabled'} "
        f"({touched} records)"
    )
    return touched


async def set_unit_type_enabled(
    db: AsyncSession,
    unit_type_id: int,
    enabled: bool,
) -> ProjectCategoryUnitType:
    """Enable or disable a single unit type within a project category."""
    try:
        unit_type = await db.get(ProjectCategoryUnitType, unit_type_id)
        if unit_type is None:
            raise NotFoundError("Unit type", unit_type_id)
        unit_type.is_enabled = enabled
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return unit_type


async def _set_active(
    db: AsyncSession,
    model: Any,
    label: str,
    entity_id: int,
    active: bool,
    actor_id: Optional[int],
) -> Any:
    try:
        entity = await db.get(model, entity_id)
        if entity is None:
            raise NotFoundError(label, entity_id)

        entity.is_active = active
        log_action(
            db,
            user_id=actor_id,
            action=AuditAction.TOGGLE_ACTIVE,
            target_type=model.__tablename__,
            target_id=entity_id,
            action_metadata={"is_active": active},
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"{label} {entity_id} {'activated' if active else 'deactivated'}")
    return entity


async def set_developer_active(
    db: AsyncSession,
    developer_id: int,
    active: bool,
    *,
    actor_id: Optional[int] = None,
) -> Developer:
    """
    Activate or deactivate a developer.

    An inactive developer keeps its projects, rates and deals, but none of
    its projects can be chosen for a new deal.
    """
    return await _set_active(db, Developer, "Developer", developer_id, active, actor_id)


async def set_project_active(
    db: AsyncSession,
    project_id: int,
    active: bool,
    *,
    actor_id: Optional[int] = None,
) -> Project:
    """Activate or deactivate a project for new deals."""
    return await _set_active(db, Project, "Project", project_id, active, actor_id)


# ── Hierarchy view ────────────────────────────────────────


def _node(
    node: Any,
    name: str,
    level: HierarchyLevel,
    chain: list[Any],
    is_enabled: Optional[bool] = None,
) -> HierarchyNode:
    rates = resolve_rates(*chain)
    inherited = {}
    if level != HierarchyLevel.DEVELOPER:
        inherited = {field.value: getattr(node, field.value) is None for field in RateField}
    return HierarchyNode(
        id=node.id,
        name=name,
        level=level,
        is_enabled=is_enabled,
        commissions=rates.as_dict(),
        inherited=inherited,
    )


async def commission_hierarchy(db: AsyncSession, project_id: int) -> CommissionHierarchy:
    """Effective rates at every level of a project's tree."""
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    developer = await db.get(Developer, project.developer_id)

    category_rows = (
        await db.execute(
            select(ProjectCategory, Category.name)
            .join(Category, Category.id == ProjectCategory.category_id)
            .where(ProjectCategory.project_id == project_id)
            .order_by(ProjectCategory.id)
        )
    ).all()
    unit_rows = (
        await db.execute(
            select(ProjectCategoryUnitType, UnitType.name)
            .join(UnitType, UnitType.id == ProjectCategoryUnitType.unit_type_id)
            .join(ProjectCategory, ProjectCategory.id == ProjectCategoryUnitType.project_category_id)
            .where(ProjectCategory.project_id == project_id)
            .order_by(ProjectCategoryUnitType.id)
        )
    ).all()

    units_by_category = defaultdict(list)
    for unit, name in unit_rows:
        units_by_category[unit.project_category_id].append((unit, name))

    categories = []
    for category, category_name in category_rows:
        node = _node(
            category,
            category_name,
            HierarchyLevel.CATEGORY,
            [developer, project, category],
            is_enabled=category.is_enabled,
        )
        node.children = [
            _node(
                unit,
                unit_name,
                HierarchyLevel.UNIT_TYPE,
                [developer, project, category, unit],
                is_enabled=unit.is_enabled,
            )
            for unit, unit_name in units_by_category[category.id]
        ]
        categories.append(node)

    return CommissionHierarchy(
        developer=_node(developer, developer.name, HierarchyLevel.DEVELOPER, [developer]),
        project=_node(project, project.name, HierarchyLevel.PROJECT, [developer, project]),
        categories=categories,
    )


# ── Delete guards ─────────────────────────────────────────


async def _ensure_unreferenced(
    db: AsyncSession,
    count_query,
    entity: str,
    entity_id: int,
    dependents: str,
) -> None:
    count = await db.scalar(count_query)
    if count:
        logger.warning(f"Refusing to delete {entity} {entity_id}: {count} {dependents}")
        raise EntityInUse(entity, entity_id, count, dependents)


async def _delete_entity(
    db: AsyncSession,
    model: Any,
    entity_id: int,
    entity: str,
    guards: list[tuple[Any, str]],
    actor_id: Optional[int],
) -> None:
    try:
        if await db.get(model, entity_id) is None:
            raise NotFoundError(entity, entity_id)
        for count_query, dependents in guards:
            await _ensure_unreferenced(db, count_query, entity, entity_id, dependents)

        await db.execute(delete(model).where(model.id == entity_id))
        log_action(
            db,
            user_id=actor_id,
            action=AuditAction.DELETE_ENTITY,
            target_type=model.__tablename__,
            target_id=entity_id,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info(f"{entity} {entity_id} deleted")


async def delete_developer(
    db: AsyncSession, developer_id: int, *, actor_id: Optional[int] = None
) -> None:
    """Delete a developer that has no projects."""
    await _delete_entity(
        db,
        Developer,
        developer_id,
        "Developer",
        [
            (
                select(func.count()).select_from(Project).where(Project.developer_id == developer_id),
                "projects",
            ),
        ],
        actor_id,
    )


async def delete_project(
    db: AsyncSession, project_id: int, *, actor_id: Optional[int] = None
) -> None:
    """Delete a project that has no deals and no categories."""
    await _delete_entity(
        db,
        Project,
        project_id,
        "Project",
        [
            (select(func.count()).select_from(Deal).where(Deal.project_id == project_id), "deals"),
            (
                select(func.count())
                .select_from(ProjectCategory)
                .where(ProjectCategory.project_id == project_id),
                "project categories",
            ),
        ],
        actor_id,
    )


async def delete_category(
    db: AsyncSession, category_id: int, *, actor_id: Optional[int] = None
) -> None:
    """Delete a catalog category that no project uses."""
    await _delete_entity(
        db,
        Category,
        category_id,
        "Category",
        [
            (
                select(func.count())
                .select_from(ProjectCategory)
                .where(ProjectCategory.category_id == category_id),
                "projects",
            ),
        ],
        actor_id,
    )


async def delete_unit_type(
    db: AsyncSession, unit_type_id: int, *, actor_id: Optional[int] = None
) -> None:
    """Delete a catalog unit type that no project category uses."""
    await _delete_entity(
        db,
        UnitType,
        unit_type_id,
        "Unit type",
        [
            (
                select(func.count())
                .select_from(ProjectCategoryUnitType)
                .where(ProjectCategoryUnitType.unit_type_id == unit_type_id),
                "project categories",
            ),
        ],
        actor_id,
    )


async def remove_project_category(
    db: AsyncSession, project_category_id: int, *, actor_id: Optional[int] = None
) -> int:
    """
    Remove a category from its project along with its unit types.

    Refused while any deal references the category.

    Returns:
        Number of rows removed (unit types plus the category)
    """
    try:
        if await db.get(ProjectCategory, project_category_id) is None:
            raise NotFoundError("Category", project_category_id)
        await _ensure_unreferenced(
            db,
            select(func.count()).select_from(Deal).where(Deal.project_category_id == project_category_id),
            "Category",
            project_category_id,
            "deals",
        )

        result = await db.execute(
            delete(ProjectCategoryUnitType).where(
                ProjectCategoryUnitType.project_category_id == project_category_id
            )
        )
        removed = result.rowcount
        await db.execute(delete(ProjectCategory).where(ProjectCategory.id == project_category_id))
        removed += 1

        log_action(
            db,
            user_id=actor_id,
            action=AuditAction.DELETE_ENTITY,
            target_type="project_category",
            target_id=project_category_id,
            action_metadata={"removed": removed},
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Category {project_category_id} removed ({removed} records)")
    return removed
