"""
Rate override schemas.

Field aliases follow the admin UI's camelCase payloads
(actualCommissionRate, brokerCommissionRate, communicatedCommission).
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from byit.services.rates import HierarchyLevel, RateField


class RateSet(BaseModel):
    """
    A partial set of rate values.

    Only fields that were explicitly provided are written. An explicit
    None clears the override so the node inherits again; an omitted
    field is left untouched.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    actual_commission_rate: Optional[Decimal] = None
    broker_commission_rate: Optional[Decimal] = None
    communicated_commission: Optional[Decimal] = None

    def provided(self) -> dict[RateField, Optional[Decimal]]:
        """Fields explicitly set by the caller, in RateField order."""
        return {
            field: getattr(self, field.value)
            for field in RateField
            if field.value in self.model_fields_set
        }


class CascadeOptions(BaseModel):
    """Which descendant levels a rate override is copied down to."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    to_projects: bool = False
    to_categories: bool = False
    to_unit_types: bool = False

    def levels(self) -> list[HierarchyLevel]:
        """Requested levels, least specific first."""
        requested = []
        if self.to_projects:
            requested.append(HierarchyLevel.PROJECT)
        if self.to_categories:
            requested.append(HierarchyLevel.CATEGORY)
        if self.to_unit_types:
            requested.append(HierarchyLevel.UNIT_TYPE)
        return requested
