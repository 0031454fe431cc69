"""Domain event types for orchestrator operations.

All events are:
- Immutable (frozen dataclasses)
- Typed with explicit payloads
- Traceable via metadata
- Serializable for the append-only outbox

Payment events carry company id, employee id, amount, destination and payout
address; bridge events additionally carry the tracking handle. Together they
form the audit trail the payment history consumes.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class EventCategory(str, Enum):
    """Event categories for routing and filtering."""

    COMPANY = "company"
    EMPLOYEE = "employee"
    PAYMENT = "payment"
    ADMIN = "admin"


@dataclass(frozen=True)
class EventMetadata:
    """Metadata attached to every domain event."""

    event_id: UUID
    timestamp: datetime
    correlation_id: UUID  # Links events of one invocation
    causation_id: UUID | None
    actor: str | None  # Caller identity, None for the scheduler
    actor_type: str  # 'owner', 'admin', 'scheduler'
    source_service: str
    version: int = 1

    @classmethod
    def create(
        cls,
        correlation_id: UUID | None = None,
        causation_id: UUID | None = None,
        actor: str | None = None,
        actor_type: str = "scheduler",
        source_service: str = "linkpay",
    ) -> EventMetadata:
        """Create metadata with auto-generated fields."""
        return cls(
            event_id=uuid4(),
            timestamp=datetime.now(timezone.utc),
            correlation_id=correlation_id or uuid4(),
            causation_id=causation_id,
            actor=actor,
            actor_type=actor_type,
            source_service=source_service,
        )


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    metadata: EventMetadata

    @property
    def event_type(self) -> str:
        """Event type name for routing."""
        return self.__class__.__name__

    @property
    def category(self) -> EventCategory:
        """Event category for filtering."""
        raise NotImplementedError("Subclasses must define category")

    def to_dict(self) -> dict[str, Any]:
        """Serialize event to dictionary."""
        return _serialize_dict(asdict(self))

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(self.to_dict(), default=str)


def _serialize_dict(obj: Any) -> Any:
    """Recursively serialize objects for JSON compatibility."""
    if isinstance(obj, dict):
        return {k: _serialize_dict(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_serialize_dict(v) for v in obj]
    elif isinstance(obj, UUID):
        return str(obj)
    elif isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, Enum):
        return obj.value
    return obj


# =============================================================================
# Company Events
# =============================================================================


@dataclass(frozen=True)
class CompanyRegistered(DomainEvent):
    """A company was registered after its fee was collected."""

    company_id: int
    owner_identity: str
    name: str
    fee_paid: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.COMPANY


@dataclass(frozen=True)
class CompanyActivated(DomainEvent):
    company_id: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.COMPANY


@dataclass(frozen=True)
class CompanyDeactivated(DomainEvent):
    company_id: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.COMPANY


@dataclass(frozen=True)
class CompanyDeleted(DomainEvent):
    """Admin deleted a company, its employees, and freed the owner slot."""

    company_id: int
    owner_identity: str
    removed_employee_ids: tuple[int, ...]

    @property
    def category(self) -> EventCategory:
        return EventCategory.COMPANY


# =============================================================================
# Employee Events
# =============================================================================


@dataclass(frozen=True)
class EmployeeAdded(DomainEvent):
    company_id: int
    employee_id: int
    name: str
    payout_address: str
    salary: int
    destination: int
    next_pay_date: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.EMPLOYEE


@dataclass(frozen=True)
class EmployeeUpdated(DomainEvent):
    company_id: int
    employee_id: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.EMPLOYEE


@dataclass(frozen=True)
class EmployeeDeactivated(DomainEvent):
    company_id: int
    employee_id: int
    by_admin: bool = False

    @property
    def category(self) -> EventCategory:
        return EventCategory.EMPLOYEE


# =============================================================================
# Payment Events
# =============================================================================


@dataclass(frozen=True)
class PaymentEvent(DomainEvent):
    """Fields shared by every payment lifecycle event."""

    company_id: int
    employee_id: int
    payout_address: str
    amount: int
    destination: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.PAYMENT


@dataclass(frozen=True)
class PaymentScheduled(PaymentEvent):
    """Dispatch deferred; next_pay_date unchanged, retried on a later scan.

    `amount` is 0 when the allowance gate failed.
    """

    reason: str


@dataclass(frozen=True)
class LocalSettled(PaymentEvent):
    """Salary moved payer -> employee on the same network."""

    next_pay_date: int


@dataclass(frozen=True)
class BridgeSubmitted(PaymentEvent):
    """Salary escrowed and handed to the bridge."""

    tracking_handle: str
    adapter_name: str
    next_pay_date: int


@dataclass(frozen=True)
class BridgeSubmitFailed(PaymentEvent):
    """Bridge rejected a transfer after escrow; funds remain in escrow."""

    adapter_name: str
    stranded_amount: int
    error: str


# =============================================================================
# Admin Events
# =============================================================================


@dataclass(frozen=True)
class IntervalUpdated(DomainEvent):
    interval_seconds: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.ADMIN


@dataclass(frozen=True)
class RegistrationFeeUpdated(DomainEvent):
    registration_fee: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.ADMIN


@dataclass(frozen=True)
class DestinationAllowed(DomainEvent):
    destination: int
    allowed: bool

    @property
    def category(self) -> EventCategory:
        return EventCategory.ADMIN


@dataclass(frozen=True)
class OwnershipTransferred(DomainEvent):
    previous_admin: str
    new_admin: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.ADMIN


@dataclass(frozen=True)
class EscrowWithdrawn(DomainEvent):
    beneficiary: str
    amount: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.ADMIN


PAYMENT_EVENT_TYPES = frozenset(
    {
        PaymentScheduled.__name__,
        LocalSettled.__name__,
        BridgeSubmitted.__name__,
        BridgeSubmitFailed.__name__,
    }
)
