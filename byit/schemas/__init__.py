"""Pydantic schemas."""

from byit.schemas.hierarchy import CommissionHierarchy, HierarchyNode
from byit.schemas.rates import CascadeOptions, RateSet
from byit.schemas.reporting import CommissionSummary, StatusTotals

__all__ = [
    "CascadeOptions",
    "CommissionHierarchy",
    "CommissionSummary",
    "HierarchyNode",
    "RateSet",
    "StatusTotals",
]
