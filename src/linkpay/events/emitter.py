"""In-process publisher for committed domain events.

Events are first appended to the outbox inside the invocation's transaction.
The emitter holds them in a batch and only hands them to subscribers once the
transaction committed; a rolled-back invocation publishes nothing.

Batches are per thread, so invocations served concurrently from a threadpool
never see each other's pending events.

Subscriber failures are logged and isolated, they never fail the invocation.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from linkpay.events.types import DomainEvent, EventCategory

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DomainEvent)

EventHandler = Callable[[DomainEvent], None]


@dataclass
class Subscription:
    handler: EventHandler
    event_types: set[str] | None  # None = all events
    categories: set[EventCategory] | None  # None = all categories

    def matches(self, event: DomainEvent) -> bool:
        if self.event_types and event.event_type not in self.event_types:
            return False
        if self.categories and event.category not in self.categories:
            return False
        return True


class EventEmitter:
    """Synchronous event emitter.

    Usage:
        emitter = EventEmitter()
        emitter.on(LocalSettled, notify_employee)
        emitter.on_category(EventCategory.PAYMENT, log_payment)

        with emitter.batch() as batch:
            batch.add(event)
        # published when the block exits without an exception
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._local = threading.local()

    @property
    def _pending(self) -> list[DomainEvent] | None:
        # Open batch of the calling thread; concurrent invocations never share one
        return getattr(self._local, "pending", None)

    @_pending.setter
    def _pending(self, value: list[DomainEvent] | None) -> None:
        self._local.pending = value

    def on(self, event_type: type[T] | list[type[T]], handler: EventHandler) -> None:
        """Subscribe to specific event type(s)."""
        types = event_type if isinstance(event_type, list) else [event_type]
        self._subscriptions.append(
            Subscription(handler, {t.__name__ for t in types}, None)
        )

    def on_category(
        self,
        category: EventCategory | list[EventCategory],
        handler: EventHandler,
    ) -> None:
        """Subscribe to event category(ies)."""
        cats = set(category) if isinstance(category, list) else {category}
        self._subscriptions.append(Subscription(handler, None, cats))

    def on_all(self, handler: EventHandler) -> None:
        self._subscriptions.append(Subscription(handler, None, None))

    def off(self, handler: EventHandler) -> None:
        self._subscriptions = [s for s in self._subscriptions if s.handler is not handler]

    def emit(self, event: DomainEvent) -> list[Exception]:
        """Publish an event, or hold it if a batch is open.

        Returns exceptions raised by subscribers.
        """
        if self._pending is not None:
            self._pending.append(event)
            return []
        return self._publish(event)

    def _publish(self, event: DomainEvent) -> list[Exception]:
        errors: list[Exception] = []
        for sub in self._subscriptions:
            if not sub.matches(event):
                continue
            try:
                sub.handler(event)
            except Exception as e:
                logger.exception(
                    "Handler %s failed for event %s",
                    sub.handler,
                    event.event_type,
                )
                errors.append(e)
        return errors

    def batch(self) -> EventBatch:
        """Hold events until the block exits; discard them on exception."""
        return EventBatch(self)


class EventBatch:
    """Context manager for batching events."""

    def __init__(self, emitter: EventEmitter) -> None:
        self._emitter = emitter
        self._outer: list[DomainEvent] | None = None
        self.errors: list[Exception] = []

    def __enter__(self) -> EventBatch:
        # Nested batches join the outer one
        self._outer = self._emitter._pending
        if self._outer is None:
            self._emitter._pending = []
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._outer is not None:
            return
        events = self._emitter._pending or []
        self._emitter._pending = None
        if exc_type is not None:
            return
        for event in events:
            self.errors.extend(self._emitter._publish(event))

    def add(self, event: DomainEvent) -> None:
        self._emitter.emit(event)
