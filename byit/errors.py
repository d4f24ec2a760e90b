"""
Commission engine errors.

Every error here is deterministic and scoped to the operation that raised
it. The engine never retries or swallows them; the calling layer turns
them into user-facing messages.
"""

from typing import Any, Optional


class CommissionEngineError(Exception):
    """Base class for all engine errors."""


class InvalidInput(CommissionEngineError):
    """Malformed or out-of-range input (sale price, rate, selection)."""


class InvalidTransition(CommissionEngineError):
    """Requested status change is not reachable from the current status."""

    def __init__(self, current: Any, requested: Any, detail: Optional[str] = None):
        self.current = current
        self.requested = requested
        message = (
            f"Cannot move commission from {_label(current)} to {_label(requested)}"
        )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ValidationError(CommissionEngineError):
    """Required accompanying data is missing (e.g. a rejection reason)."""


class ConcurrentModification(CommissionEngineError):
    """Compare-and-set on a commission status lost to another writer."""

    def __init__(self, commission_id: int, expected: Any, actual: Any):
        self.commission_id = commission_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Commission {commission_id} changed concurrently: "
            f"expected {_label(expected)}, found {_label(actual)}"
        )


class NotFoundError(CommissionEngineError):
    """Referenced record does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class EntityInUse(CommissionEngineError):
    """Delete rejected because other records still reference the entity."""

    def __init__(self, entity: str, entity_id: Any, count: int, dependents: str):
        self.entity = entity
        self.entity_id = entity_id
        self.count = count
        super().__init__(
            f"Cannot delete {entity} {entity_id}: {count} {dependents} still reference it"
        )


def _label(status: Any) -> str:
    return getattr(status, "value", None) or str(status)
