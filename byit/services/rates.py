"""
Commission rate inheritance.

Every node of the hierarchy (developer → project → category → unit type)
may carry its own value for each of the three rate fields. The effective
rate is the most specific value that is not NULL; when nothing is
configured anywhere the rate is zero.

Zero is a real override ("this unit type earns nothing") and must never be
treated as missing, so all checks here are explicit `is not None` checks.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union

from byit.errors import InvalidInput

RateValue = Union[Decimal, int, float, str]

ZERO = Decimal("0")
MAX_RATE = Decimal("100")
RATE_PRECISION = Decimal("0.01")


class RateField(str, Enum):
    """The three rate fields carried by each hierarchy node."""
    ACTUAL = "actual_commission_rate"
    BROKER = "broker_commission_rate"
    COMMUNICATED = "communicated_commission"


class HierarchyLevel(str, Enum):
    """Hierarchy levels, least specific first."""
    DEVELOPER = "developer"
    PROJECT = "project"
    CATEGORY = "category"
    UNIT_TYPE = "unit_type"

    @property
    def depth(self) -> int:
        return _DEPTH[self]


_DEPTH = {
    HierarchyLevel.DEVELOPER: 0,
    HierarchyLevel.PROJECT: 1,
    HierarchyLevel.CATEGORY: 2,
    HierarchyLevel.UNIT_TYPE: 3,
}


def to_decimal(value: RateValue) -> Decimal:
    """Convert a numeric input to Decimal (floats go through str)."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidInput(f"Expected a number, got {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInput(f"Expected a number, got {value!r}") from None
    if not result.is_finite():
        raise InvalidInput(f"Expected a finite number, got {value!r}")
    return result


def validate_rate(
    value: Optional[RateValue],
    field: Optional[RateField] = None,
) -> Optional[Decimal]:
    """
    Coerce a rate to Decimal and check it is a percentage.

    None passes through unchanged: it means "inherit". Accepted rates are
    rounded half-up to the two places the rate columns store, so the value
    a caller computes with is the value that gets persisted.

    Raises:
        InvalidInput: value is not a number or lies outside [0, 100]
    """
    if value is None:
        return None
    rate = to_decimal(value)
    if rate < ZERO or rate > MAX_RATE:
        name = field.value if field else "rate"
        raise InvalidInput(f"{name} must be between 0 and 100, got {rate}")
    return rate.quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)


def resolve_effective_rate(
    developer_rate: Optional[RateValue],
    project_rate: Optional[RateValue],
    category_rate: Optional[RateValue],
    unit_type_rate: Optional[RateValue],
) -> Decimal:
    """
    Return the most specific configured rate.

    Arguments are ordered least to most specific; the scan runs the other
    way. Returns Decimal("0") when every level is None.
    """
    for candidate in (unit_type_rate, category_rate, project_rate, developer_rate):
        if candidate is not None:
            return to_decimal(candidate)
    return ZERO


@dataclass(frozen=True)
class RateLevels:
    """Override values for one rate field at each of the four levels."""

    developer: Optional[Decimal] = None
    project: Optional[Decimal] = None
    category: Optional[Decimal] = None
    unit_type: Optional[Decimal] = None

    @classmethod
    def from_nodes(
        cls,
        field: RateField,
        developer: Any = None,
        project: Any = None,
        category: Any = None,
        unit_type: Any = None,
    ) -> "RateLevels":
        """Read `field` off each node; a missing node contributes None."""
        def _read(node: Any) -> Optional[Decimal]:
            if node is None:
                return None
            value = getattr(node, field.value, None)
            return to_decimal(value) if value is not None else None

        return cls(
            developer=_read(developer),
            project=_read(project),
            category=_read(category),
            unit_type=_read(unit_type),
        )

    def effective(self) -> Decimal:
        return resolve_effective_rate(
            self.developer, self.project, self.category, self.unit_type
        )

    def source(self) -> Optional[HierarchyLevel]:
        """Level the effective rate comes from, or None if nothing is set."""
        for level, value in (
            (HierarchyLevel.UNIT_TYPE, self.unit_type),
            (HierarchyLevel.CATEGORY, self.category),
            (HierarchyLevel.PROJECT, self.project),
            (HierarchyLevel.DEVELOPER, self.developer),
        ):
            if value is not None:
                return level
        return None


@dataclass(frozen=True)
class ResolvedRate:
    rate: Decimal
    source: Optional[HierarchyLevel]


@dataclass(frozen=True)
class ResolvedRates:
    """Effective value of every rate field for one position in the tree."""

    actual: ResolvedRate
    broker: ResolvedRate
    communicated: ResolvedRate

    def get(self, field: RateField) -> ResolvedRate:
        return {
            RateField.ACTUAL: self.actual,
            RateField.BROKER: self.broker,
            RateField.COMMUNICATED: self.communicated,
        }[field]

    def as_dict(self) -> dict[str, Decimal]:
        return {field.value: self.get(field).rate for field in RateField}


def resolve_rates(
    developer: Any = None,
    project: Any = None,
    category: Any = None,
    unit_type: Any = None,
) -> ResolvedRates:
    """Resolve all three rate fields for the given hierarchy nodes."""
    resolved = {}
    for field in RateField:
        levels = RateLevels.from_nodes(field, developer, project, category, unit_type)
        resolved[field] = ResolvedRate(rate=levels.effective(), source=levels.source())
    return ResolvedRates(
        actual=resolved[RateField.ACTUAL],
        broker=resolved[RateField.BROKER],
        communicated=resolved[RateField.COMMUNICATED],
    )
