"""Append-only event store (outbox).

The store provides:
- Persistent storage of domain events in the invocation's transaction
- Idempotent writes (via event_id)
- Ordered reads by sequence for the history collaborator
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from linkpay.events.emitter import EventEmitter
from linkpay.events.types import PAYMENT_EVENT_TYPES, DomainEvent, EventMetadata
from linkpay.models import PayrollEventRecord


@dataclass(frozen=True)
class StoredEvent:
    """A persisted event record."""

    sequence: int
    event_id: str
    event_type: str
    category: str
    company_id: int | None
    employee_id: int | None
    correlation_id: str
    actor: str | None
    occurred_at: datetime
    payload: dict[str, Any]

    @classmethod
    def from_record(cls, row: PayrollEventRecord) -> StoredEvent:
        return cls(
            sequence=row.sequence,
            event_id=row.event_id,
            event_type=row.event_type,
            category=row.category,
            company_id=row.company_id,
            employee_id=row.employee_id,
            correlation_id=row.correlation_id,
            actor=row.actor,
            occurred_at=row.occurred_at,
            payload=row.payload,
        )


class EventStore:
    """Event store backed by the payroll_event table.

    Usage:
        store = EventStore(session)
        store.append(event)

        for stored in store.iter_events(company_id=3, event_types={"LocalSettled"}):
            ...
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, event: DomainEvent) -> bool:
        """Append event to store.

        Returns True if event was stored, False if duplicate (idempotent).
        """
        event_id = str(event.metadata.event_id)
        exists = self._session.scalar(
            select(PayrollEventRecord.sequence).where(PayrollEventRecord.event_id == event_id)
        )
        if exists is not None:
            return False

        self._session.add(
            PayrollEventRecord(
                event_id=event_id,
                event_type=event.event_type,
                category=event.category.value,
                company_id=getattr(event, "company_id", None),
                employee_id=getattr(event, "employee_id", None),
                correlation_id=str(event.metadata.correlation_id),
                actor=event.metadata.actor,
                occurred_at=event.metadata.timestamp,
                payload=event.to_dict(),
                version=event.metadata.version,
            )
        )
        self._session.flush()
        return True

    def append_batch(self, events: Iterable[DomainEvent]) -> int:
        """Append events; returns count of newly stored events."""
        return sum(1 for event in events if self.append(event))

    def get_by_id(self, event_id: str) -> StoredEvent | None:
        row = self._session.scalar(
            select(PayrollEventRecord).where(PayrollEventRecord.event_id == event_id)
        )
        return StoredEvent.from_record(row) if row else None

    def iter_events(
        self,
        *,
        company_id: int | None = None,
        employee_id: int | None = None,
        event_types: set[str] | frozenset[str] | None = None,
        after_sequence: int = 0,
        limit: int = 1000,
        newest_first: bool = False,
    ) -> Iterator[StoredEvent]:
        """Iterate stored events in append order (or reverse)."""
        query = select(PayrollEventRecord).where(PayrollEventRecord.sequence > after_sequence)
        if company_id is not None:
            query = query.where(PayrollEventRecord.company_id == company_id)
        if employee_id is not None:
            query = query.where(PayrollEventRecord.employee_id == employee_id)
        if event_types:
            query = query.where(PayrollEventRecord.event_type.in_(sorted(event_types)))

        order = PayrollEventRecord.sequence.desc() if newest_first else PayrollEventRecord.sequence
        query = query.order_by(order).limit(limit)

        for row in self._session.scalars(query):
            yield StoredEvent.from_record(row)

    def payment_events(self, company_id: int | None = None, limit: int = 500) -> list[StoredEvent]:
        """Payment lifecycle events, newest first."""
        return list(
            self.iter_events(
                company_id=company_id,
                event_types=PAYMENT_EVENT_TYPES,
                limit=limit,
                newest_first=True,
            )
        )


class EventRecorder:
    """Writes events for one invocation: outbox first, then the emitter.

    Holds the invocation's correlation id and caller so every event of one
    call shares the same metadata context.
    """

    def __init__(
        self,
        store: EventStore,
        emitter: EventEmitter | None = None,
        *,
        actor: str | None = None,
        actor_type: str = "scheduler",
        correlation_id: UUID | None = None,
    ) -> None:
        self.store = store
        self.emitter = emitter
        self.actor = actor
        self.actor_type = actor_type
        self.correlation_id = correlation_id or uuid4()
        self.recorded: list[DomainEvent] = []

    def metadata(self) -> EventMetadata:
        return EventMetadata.create(
            correlation_id=self.correlation_id,
            actor=self.actor,
            actor_type=self.actor_type,
        )

    def record(self, event: DomainEvent) -> DomainEvent:
        if self.store.append(event):
            self.recorded.append(event)
            if self.emitter is not None:
                self.emitter.emit(event)
        return event
