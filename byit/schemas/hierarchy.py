"""Resolved commission hierarchy of a project."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from byit.services.rates import HierarchyLevel


class HierarchyNode(BaseModel):
    """
    One node of the tree with its effective rates.

    inherited[field] is True when the node has no value of its own and
    the effective rate comes from an ancestor.
    """

    id: int
    name: str
    level: HierarchyLevel
    is_enabled: Optional[bool] = None
    commissions: dict[str, Decimal]
    inherited: dict[str, bool] = Field(default_factory=dict)
    children: List["HierarchyNode"] = Field(default_factory=list)


class CommissionHierarchy(BaseModel):
    """Developer → project → categories → unit types."""

    developer: HierarchyNode
    project: HierarchyNode
    categories: List[HierarchyNode]
