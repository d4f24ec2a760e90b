"""Commission state machine: enforces valid lifecycle transitions.

Commission lifecycle:
    PENDING → APPROVED → PAID
    PENDING → CANCELLED      (manager rejects)
    APPROVED → CANCELLED     (manager reverses approval)

PAID and CANCELLED are terminal. Moving to the current state is not a
no-op, it is rejected like any other transition outside the table.

Pure computation: side effects (timestamps, persistence, audit) belong to
the workflow service.
"""

from byit.errors import InvalidTransition
from byit.models.commission import CommissionStatus

# Valid transitions: {from_state: {allowed_to_states}}
_TRANSITIONS: dict[CommissionStatus, set[CommissionStatus]] = {
    CommissionStatus.PENDING: {
        CommissionStatus.APPROVED,
        CommissionStatus.CANCELLED,
    },
    CommissionStatus.APPROVED: {
        CommissionStatus.PAID,
        CommissionStatus.CANCELLED,
    },
    # Terminal states: no outgoing transitions
    CommissionStatus.PAID: set(),
    CommissionStatus.CANCELLED: set(),
}


class CommissionStateMachine:
    """Validates commission status transitions."""

    @staticmethod
    def validate_transition(
        current: CommissionStatus,
        target: CommissionStatus,
    ) -> None:
        """Raise InvalidTransition unless current → target is allowed."""
        if current == target:
            raise InvalidTransition(current, target, "commission is already in that state")
        if CommissionStateMachine.is_terminal(current):
            raise InvalidTransition(current, target, f"{current.value} is terminal")

        allowed = _TRANSITIONS.get(current, set())
        if target not in allowed:
            allowed_str = ", ".join(s.value for s in sorted(allowed, key=lambda x: x.value))
            raise InvalidTransition(
                current, target, f"allowed from {current.value}: [{allowed_str}]"
            )

    @staticmethod
    def can_transition(current: CommissionStatus, target: CommissionStatus) -> bool:
        return target in _TRANSITIONS.get(current, set())

    @staticmethod
    def is_terminal(status: CommissionStatus) -> bool:
        """Check if a state is terminal (no further transitions)."""
        return status in (CommissionStatus.PAID, CommissionStatus.CANCELLED)

    @staticmethod
    def valid_transitions(status: CommissionStatus) -> set[CommissionStatus]:
        """Return the set of valid target states from the given state."""
        return set(_TRANSITIONS.get(status, set()))

    @staticmethod
    def requires_reason(target: CommissionStatus) -> bool:
        """Cancelling always needs a written reason."""
        return target == CommissionStatus.CANCELLED
