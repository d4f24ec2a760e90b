"""
Bulk commission rate override.

Writes new rate values onto one hierarchy node and, optionally, copies
the same values down onto every descendant at the requested levels.
This is a literal overwrite, not inheritance: after a cascade the
descendants hold equal values of their own until someone edits them.

The whole operation is one transaction. Any failure rolls back the
target node and every descendant written so far.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from byit.errors import InvalidInput, NotFoundError, ValidationError
from byit.models import (
    AuditAction,
    Developer,
    Project,
    ProjectCategory,
    ProjectCategoryUnitType,
)
from byit.schemas.rates import CascadeOptions, RateSet
from byit.services.rates import HierarchyLevel, validate_rate
from byit.utils.audit import log_action

logger = logging.getLogger(__name__)

_MODELS = {
    HierarchyLevel.DEVELOPER: Developer,
    HierarchyLevel.PROJECT: Project,
    HierarchyLevel.CATEGORY: ProjectCategory,
    HierarchyLevel.UNIT_TYPE: ProjectCategoryUnitType,
}


@dataclass(frozen=True)
class RateScope:
    """The node a rate override targets."""

    level: HierarchyLevel
    id: int


def _coerce_rates(rates: Union[RateSet, Mapping[str, Any]]) -> RateSet:
    if isinstance(rates, RateSet):
        return rates
    try:
        return RateSet.model_validate(rates)
    except PydanticValidationError as e:
        raise InvalidInput(f"Invalid rate payload: {e}") from e


def _validated_values(rates: RateSet) -> dict[str, Any]:
    provided = rates.provided()
    if not provided:
        raise ValidationError("At least one rate field must be provided")
    return {field.value: validate_rate(value, field) for field, value in provided.items()}


def _check_cascade(scope: RateScope, cascade: CascadeOptions) -> list[HierarchyLevel]:
    levels = cascade.levels()
    for level in levels:
        if level.depth <= scope.level.depth:
            raise InvalidInput(
                f"Cannot cascade to {level.value} from a {scope.level.value} scope"
            )
    return levels


def _descendants_query(scope: RateScope, level: HierarchyLevel):
    """SELECT for every node at `level` below the scope node, ordered by id."""
    if level == HierarchyLevel.PROJECT:
        query = select(Project).where(Project.developer_id == scope.id)
        return query.order_by(Project.id)

    if level == HierarchyLevel.CATEGORY:
        query = select(ProjectCategory)
        if scope.level == HierarchyLevel.DEVELOPER:
            query = query.join(Project, Project.id == ProjectCategory.project_id).where(
                Project.developer_id == scope.id
            )
        else:
            query = query.where(ProjectCategory.project_id == scope.id)
        return query.order_by(ProjectCategory.id)

    query = select(ProjectCategoryUnitType)
    if scope.level == HierarchyLevel.CATEGORY:
        query = query.where(ProjectCategoryUnitType.project_category_id == scope.id)
    else:
        query = query.join(
            ProjectCategory,
            ProjectCategory.id == ProjectCategoryUnitType.project_category_id,
        )
        if scope.level == HierarchyLevel.PROJECT:
            query = query.where(ProjectCategory.project_id == scope.id)
        else:
            query = query.join(Project, Project.id == ProjectCategory.project_id).where(
                Project.developer_id == scope.id
            )
    return query.order_by(ProjectCategoryUnitType.id)


def _assign(node: Any, values: Mapping[str, Any]) -> None:
    for name, value in values.items():
        setattr(node, name, value)


async def apply_rate_override(
    db: AsyncSession,
    scope: RateScope,
    rates: Union[RateSet, Mapping[str, Any]],
    cascade: Optional[CascadeOptions] = None,
    *,
    actor_id: Optional[int] = None,
) -> int:
    """
    Set rate overrides on a node and optionally cascade them down.

    Args:
        db: Database session
        scope: Target node (developer, project, category or unit type)
        rates: Partial set of rate fields; omitted fields are untouched
        cascade: Descendant levels to overwrite with the same values
        actor_id: Manager performing the change

    Returns:
        Number of records updated (the target plus every descendant)

    Raises:
        ValidationError: no rate field provided
        InvalidInput: rate outside [0, 100], or a cascade level that is
            not below the scope
        NotFoundError: unknown target node
    """
    rate_set = _coerce_rates(rates)
    values = _validated_values(rate_set)
    cascade_levels = _check_cascade(scope, cascade or CascadeOptions())

    per_level: dict[str, int] = {}
    try:
        target = await db.get(_MODELS[scope.level], scope.id)
        if target is None:
            raise NotFoundError(scope.level.value.replace("_", " ").capitalize(), scope.id)
        _assign(target, values)
        touched = 1

        for level in cascade_levels:
            result = await db.execute(_descendants_query(scope, level))
            nodes: Sequence[Any] = result.scalars().all()
            for node in nodes:
                _assign(node, values)
            per_level[level.value] = len(nodes)
            touched += len(nodes)

        await db.flush()

        log_action(
            db,
            user_id=actor_id,
            action=AuditAction.BULK_RATE_OVERRIDE,
            target_type=scope.level.value,
            target_id=scope.id,
            action_metadata={
                "rates": {name: str(value) if value is not None else None for name, value in values.items()},
                "cascaded": per_level,
                "updated_count": touched,
            },
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        f"Rate override on {scope.level.value} {scope.id}: "
        f"updated {touched} records ({', '.join(values)})"
    )
    return touched
