"""Payment lifecycle state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from linkpay.errors import InvariantViolation


class PaymentState(str, Enum):
    """Lifecycle states of one dispatch."""

    DUE = "due"
    ALLOWANCE_CHECKED = "allowance_checked"
    LOCAL_SETTLED = "local_settled"
    ESCROWED = "escrowed"
    BRIDGE_SUBMITTED = "bridge_submitted"
    SCHEDULE_DEFERRED = "schedule_deferred"
    BRIDGE_FAILED = "bridge_failed"


class InvalidTransitionError(InvariantViolation):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: str, to_state: str, reason: str | None = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason
        msg = f"Invalid transition from '{from_state}' to '{to_state}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PaymentStateMachine:
    """State machine for payment dispatch.

    Allowed transitions:
    - due → allowance_checked
    - due → schedule_deferred
    - allowance_checked → local_settled
    - allowance_checked → escrowed
    - allowance_checked → schedule_deferred
    - escrowed → bridge_submitted
    - escrowed → bridge_failed
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PaymentState.DUE: [PaymentState.ALLOWANCE_CHECKED, PaymentState.SCHEDULE_DEFERRED],
        PaymentState.ALLOWANCE_CHECKED: [
            PaymentState.LOCAL_SETTLED,
            PaymentState.ESCROWED,
            PaymentState.SCHEDULE_DEFERRED,
        ],
        PaymentState.ESCROWED: [PaymentState.BRIDGE_SUBMITTED, PaymentState.BRIDGE_FAILED],
        PaymentState.LOCAL_SETTLED: [],
        PaymentState.BRIDGE_SUBMITTED: [],
        PaymentState.SCHEDULE_DEFERRED: [],
        PaymentState.BRIDGE_FAILED: [],
    }

    # States in which next_pay_date has advanced
    SCHEDULE_ADVANCED = {
        PaymentState.LOCAL_SETTLED,
        PaymentState.BRIDGE_SUBMITTED,
    }

    # States in which funds sit in escrow
    FUNDS_IN_ESCROW = {
        PaymentState.ESCROWED,
        PaymentState.BRIDGE_FAILED,
    }

    @classmethod
    def can_transition(cls, from_state: str, to_state: str) -> bool:
        """Check if a transition is valid."""
        return to_state in cls.VALID_TRANSITIONS.get(from_state, [])

    @classmethod
    def validate_transition(cls, from_state: str, to_state: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_state, to_state):
            raise InvalidTransitionError(from_state, to_state)

    @classmethod
    def is_terminal(cls, state: str) -> bool:
        return not cls.VALID_TRANSITIONS.get(state, [])

    @classmethod
    def advances_schedule(cls, state: str) -> bool:
        return state in cls.SCHEDULE_ADVANCED

    @classmethod
    def get_next_states(cls, current_state: str) -> list[str]:
        return cls.VALID_TRANSITIONS.get(current_state, [])


class PaymentIntent:
    """Tracks the state of one dispatch in progress."""

    def __init__(self) -> None:
        self.state = PaymentState.DUE
        self.history: list[PaymentState] = [PaymentState.DUE]

    def to(self, new_state: PaymentState) -> None:
        PaymentStateMachine.validate_transition(self.state, new_state)
        self.state = new_state
        self.history.append(new_state)
