"""Domain events package.

This package provides:
- Typed domain events for registry, scheduling and admin operations
- Event emitter publishing committed events to in-process subscribers
- Append-only event store (outbox) for the payment history
"""

from linkpay.events.types import (
    # Base
    DomainEvent,
    EventMetadata,
    EventCategory,
    PAYMENT_EVENT_TYPES,
    # Company Events
    CompanyRegistered,
    CompanyActivated,
    CompanyDeactivated,
    CompanyDeleted,
    # Employee Events
    EmployeeAdded,
    EmployeeUpdated,
    EmployeeDeactivated,
    # Payment Events
    PaymentEvent,
    PaymentScheduled,
    LocalSettled,
    BridgeSubmitted,
    BridgeSubmitFailed,
    # Admin Events
    IntervalUpdated,
    RegistrationFeeUpdated,
    DestinationAllowed,
    OwnershipTransferred,
    EscrowWithdrawn,
)
from linkpay.events.emitter import EventBatch, EventEmitter, EventHandler
from linkpay.events.store import EventRecorder, EventStore, StoredEvent

__all__ = [
    # Base
    "DomainEvent",
    "EventMetadata",
    "EventCategory",
    "PAYMENT_EVENT_TYPES",
    # Company Events
    "CompanyRegistered",
    "CompanyActivated",
    "CompanyDeactivated",
    "CompanyDeleted",
    # Employee Events
    "EmployeeAdded",
    "EmployeeUpdated",
    "EmployeeDeactivated",
    # Payment Events
    "PaymentEvent",
    "PaymentScheduled",
    "LocalSettled",
    "BridgeSubmitted",
    "BridgeSubmitFailed",
    # Admin Events
    "IntervalUpdated",
    "RegistrationFeeUpdated",
    "DestinationAllowed",
    "OwnershipTransferred",
    "EscrowWithdrawn",
    # Emitter
    "EventEmitter",
    "EventBatch",
    "EventHandler",
    # Store
    "EventStore",
    "StoredEvent",
    "EventRecorder",
]
