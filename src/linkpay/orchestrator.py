"""Orchestrator facade - single integration path for LinkPay operations.

Every public call is one atomic invocation:
- a fresh session and unit of work (commit on success, rollback on error)
- an event batch, published to subscribers only after commit
- an event recorder carrying the caller and correlation id

Usage:
    orchestrator = PayrollOrchestrator(session_factory, config, token, bridge)
    orchestrator.bootstrap()

    company = orchestrator.register_company("0xowner", "Acme")
    orchestrator.add_employee("0xowner", "Ada", "0xada", 10004, 1_000_000)

    # Scheduler loop
    outcome = orchestrator.run_once()
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from linkpay.bridges import create_bridge
from linkpay.bridges.base import BridgeAdapter
from linkpay.config import OrchestratorConfig, Settings, get_settings, network_name
from linkpay.database import create_schema, create_session_factory, get_engine, unit_of_work
from linkpay.events import (
    BridgeSubmitFailed,
    BridgeSubmitted,
    EventEmitter,
    EventRecorder,
    EventStore,
    LocalSettled,
    PaymentScheduled,
)
from linkpay.models import Company, Employee
from linkpay.services.admin import AdminService
from linkpay.services.dispatcher import DispatchOutcome, PaymentDispatcher
from linkpay.services.registry import CompanyRegistry
from linkpay.services.scanner import DispatchToken, DueScanner
from linkpay.services.state import (
    Clock,
    allowed_destinations,
    bootstrap_state,
    load_state,
    system_clock,
)
from linkpay.tokens.base import SettlementToken
from linkpay.tokens.memory import InMemoryToken

logger = logging.getLogger(__name__)

# Payment event type -> history status
HISTORY_STATUS = {
    LocalSettled.__name__: "completed",
    BridgeSubmitted.__name__: "completed",
    PaymentScheduled.__name__: "scheduled",
    BridgeSubmitFailed.__name__: "failed",
}


@dataclass(frozen=True)
class OrchestratorSettings:
    """Snapshot of the persisted runtime parameters."""

    admin_identity: str
    interval_seconds: int
    registration_fee: int
    same_chain_destination: int
    allowed_destinations: list[int]
    last_company_index: int
    last_employee_index: int
    orchestrator_address: str
    escrow_address: str
    bridge: str


@dataclass(frozen=True)
class PaymentRecord:
    """One row of the payment history."""

    sequence: int
    event_id: str
    event_type: str
    status: str  # completed, scheduled, failed
    company_id: int
    employee_id: int
    employee_name: str
    payout_address: str
    amount: int
    destination: int
    network: str
    tracking_handle: str | None
    reason: str | None
    occurred_at: datetime


@dataclass
class _Invocation:
    session: Session
    recorder: EventRecorder
    registry: CompanyRegistry
    admin: AdminService
    dispatcher: PaymentDispatcher
    scanner: DueScanner


class PayrollOrchestrator:
    """Synchronous orchestrator facade.

    Holds no mutable state of its own; all state lives in the database
    behind `session_factory`. Token and bridge are external collaborators.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        config: OrchestratorConfig,
        token: SettlementToken,
        bridge: BridgeAdapter,
        emitter: EventEmitter | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self._session_factory = session_factory
        self._config = config
        self._token = token
        self._bridge = bridge
        self._emitter = emitter or EventEmitter()
        self._clock = clock

    @property
    def session_factory(self) -> sessionmaker[Session]:
        return self._session_factory

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    @property
    def emitter(self) -> EventEmitter:
        return self._emitter

    @property
    def token(self) -> SettlementToken:
        return self._token

    @property
    def bridge(self) -> BridgeAdapter:
        return self._bridge

    @contextmanager
    def _invocation(
        self, actor: str | None = None, actor_type: str = "owner"
    ) -> Iterator[_Invocation]:
        # Batch wraps the unit of work so events publish only after commit
        with self._emitter.batch():
            with unit_of_work(self._session_factory) as session:
                recorder = EventRecorder(
                    EventStore(session),
                    self._emitter,
                    actor=actor,
                    actor_type=actor_type,
                )
                yield _Invocation(
                    session=session,
                    recorder=recorder,
                    registry=CompanyRegistry(
                        session, self._config, self._token, self._clock, recorder
                    ),
                    admin=AdminService(session, self._config, self._token, recorder),
                    dispatcher=PaymentDispatcher(
                        session, self._config, self._token, self._bridge, self._clock, recorder
                    ),
                    scanner=DueScanner(session, self._clock, self._config.same_chain_destination),
                )

    def bootstrap(self) -> None:
        """Seed the persisted state from configuration (idempotent)."""
        with unit_of_work(self._session_factory) as session:
            bootstrap_state(session, self._config)

    # -------------------------------------------------------------------------
    # Scheduler triggers
    # -------------------------------------------------------------------------

    def scan(self) -> DispatchToken | None:
        """Find at most one due payment. Read-only."""
        with unit_of_work(self._session_factory) as session:
            return DueScanner(session, self._clock, self._config.same_chain_destination).scan()

    def dispatch(self, token: DispatchToken) -> DispatchOutcome:
        """Settle the payment a scan found."""
        with self._invocation(actor_type="scheduler") as inv:
            return inv.dispatcher.dispatch(token)

    def run_once(self) -> DispatchOutcome | None:
        """Scan and dispatch in one invocation; None when nothing is due."""
        with self._invocation(actor_type="scheduler") as inv:
            token = inv.scanner.scan()
            if token is None:
                return None
            return inv.dispatcher.dispatch(token)

    def pay_now(self, caller: str, employee_id: int, fee_paid: int = 0) -> DispatchOutcome:
        """Owner-triggered payment, regardless of due date."""
        with self._invocation(actor=caller) as inv:
            return inv.dispatcher.pay_now(caller, employee_id, fee_paid)

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def register_company(self, caller: str, name: str) -> Company:
        with self._invocation(actor=caller) as inv:
            return inv.registry.register_company(caller, name)

    def add_employee(
        self,
        caller: str,
        name: str,
        payout_address: str,
        destination: int,
        salary: int,
    ) -> Employee:
        with self._invocation(actor=caller) as inv:
            return inv.registry.add_employee(caller, name, payout_address, destination, salary)

    def update_employee(self, caller: str, employee_id: int, **changes: Any) -> Employee:
        with self._invocation(actor=caller) as inv:
            return inv.registry.update_employee(caller, employee_id, **changes)

    def deactivate_employee(self, caller: str, employee_id: int) -> Employee:
        with self._invocation(actor=caller) as inv:
            return inv.registry.deactivate_employee(caller, employee_id)

    # -------------------------------------------------------------------------
    # Admin
    # -------------------------------------------------------------------------

    def deactivate_company(self, caller: str, company_id: int) -> Company:
        with self._invocation(actor=caller, actor_type="admin") as inv:
            return inv.registry.deactivate_company(caller, company_id)

    def activate_company(self, caller: str, company_id: int) -> Company:
        with self._invocation(actor=caller, actor_type="admin") as inv:
            return inv.registry.activate_company(caller, company_id)

    def admin_deactivate_employee(
        self, caller: str, company_id: int, employee_id: int
    ) -> Employee:
        with self._invocation(actor=caller, actor_type="admin") as inv:
            return inv.registry.admin_deactivate_employee(caller, company_id, employee_id)

    def delete_company(self, caller: str, company_id: int) -> list[int]:
        with self._invocation(actor=caller, actor_type="admin") as inv:
            return inv.registry.delete_company(caller, company_id)

    def transfer_ownership(self, caller: str, new_admin: str) -> str:
        with self._invocation(actor=caller, actor_type="admin") as inv:
            return inv.admin.transfer_ownership(caller, new_admin)

    def set_interval(self, caller: str, interval_seconds: int) -> int:
        with self._invocation(actor=caller, actor_type="admin") as inv:
            return inv.admin.set_interval(caller, interval_seconds)

    def set_registration_fee(self, caller: str, registration_fee: int) -> int:
        with self._invocation(actor=caller, actor_type="admin") as inv:
            return inv.admin.set_registration_fee(caller, registration_fee)

    def set_allowed_destination(self, caller: str, destination: int, allowed: bool) -> bool:
        with self._invocation(actor=caller, actor_type="admin") as inv:
            return inv.admin.set_allowed_destination(caller, destination, allowed)

    def withdraw_escrow(self, caller: str, beneficiary: str, amount: int) -> int:
        with self._invocation(actor=caller, actor_type="admin") as inv:
            return inv.admin.withdraw_escrow(caller, beneficiary, amount)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_companies(self) -> list[Company]:
        with self._invocation() as inv:
            return inv.registry.list_companies()

    def get_company(self, company_id: int) -> Company:
        with self._invocation() as inv:
            return inv.registry.get_company(company_id)

    def get_company_by_owner(self, owner_identity: str) -> Company:
        with self._invocation() as inv:
            return inv.registry.get_company_by_owner(owner_identity)

    def list_employees(self, company_id: int) -> list[Employee]:
        with self._invocation() as inv:
            return inv.registry.list_employees(company_id)

    def get_employee(self, employee_id: int) -> Employee:
        with self._invocation() as inv:
            return inv.registry.get_employee(employee_id)

    def allowed_destinations(self) -> list[int]:
        """Allowed destinations, the same-chain sentinel included."""
        with unit_of_work(self._session_factory) as session:
            allowed = allowed_destinations(session)
        return sorted(allowed | {self._config.same_chain_destination})

    def settings(self) -> OrchestratorSettings:
        with unit_of_work(self._session_factory) as session:
            state = load_state(session)
            return OrchestratorSettings(
                admin_identity=state.admin_identity,
                interval_seconds=state.interval_seconds,
                registration_fee=state.registration_fee,
                same_chain_destination=self._config.same_chain_destination,
                allowed_destinations=sorted(allowed_destinations(session)),
                last_company_index=state.last_company_index,
                last_employee_index=state.last_employee_index,
                orchestrator_address=self._config.orchestrator_address,
                escrow_address=self._config.escrow_address,
                bridge=self._bridge.adapter_name,
            )

    def escrow_balance(self) -> int:
        """Funds currently held in escrow (stranded by failed submissions)."""
        return self._token.balance_of(self._config.escrow_address)

    def payment_history(
        self, company_id: int | None = None, limit: int = 500
    ) -> list[PaymentRecord]:
        """Payment lifecycle events, newest first."""
        with unit_of_work(self._session_factory) as session:
            events = EventStore(session).payment_events(company_id=company_id, limit=limit)
            names: dict[int, str] = {}
            records = []
            for event in events:
                payload = event.payload
                employee_id = payload["employee_id"]
                if employee_id not in names:
                    employee = session.get(Employee, employee_id)
                    names[employee_id] = employee.name if employee else "Unknown"
                records.append(
                    PaymentRecord(
                        sequence=event.sequence,
                        event_id=event.event_id,
                        event_type=event.event_type,
                        status=HISTORY_STATUS[event.event_type],
                        company_id=payload["company_id"],
                        employee_id=employee_id,
                        employee_name=names[employee_id],
                        payout_address=payload["payout_address"],
                        amount=payload["amount"],
                        destination=payload["destination"],
                        network=network_name(payload["destination"]),
                        tracking_handle=payload.get("tracking_handle"),
                        reason=payload.get("reason") or payload.get("error"),
                        occurred_at=event.occurred_at,
                    )
                )
        return records


def build_orchestrator(
    settings: Settings | None = None,
    *,
    emitter: EventEmitter | None = None,
) -> PayrollOrchestrator:
    """Wire an orchestrator from process settings.

    Uses the in-memory token and the configured stub bridge; swap both for
    on-chain clients in production.
    """
    settings = settings or get_settings()
    engine = get_engine(settings.database_url)
    create_schema(engine)

    token = InMemoryToken()
    orchestrator = PayrollOrchestrator(
        create_session_factory(engine),
        settings.orchestrator_config(),
        token,
        create_bridge(settings.bridge, token, settings.bridge_fee),
        emitter=emitter,
    )
    orchestrator.bootstrap()
    logger.info(
        "Orchestrator ready",
        extra={"bridge": settings.bridge, "database_url": engine.url.render_as_string()},
    )
    return orchestrator
