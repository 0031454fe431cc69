"""Payment dispatcher - the only writer of next_pay_date.

Dispatch flow:
1. Re-validate company, employee and destination against current state
2. Allowance gate (failure defers, nothing moves)
3. Claim the pay period with a compare-and-set on next_pay_date
4. Same network: payer -> employee
   Cross network: payer -> escrow, approve bridge, bridge.submit
5. Record the outcome event; a failed settlement releases the claim

Funds only move after the claim succeeded, so a lost race raises
ScheduleConflict before any balance-moving call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session

from linkpay.bridges.base import BridgeAdapter, BridgeTransfer
from linkpay.config import OrchestratorConfig
from linkpay.errors import (
    BridgeSubmitError,
    ChainNotAllowed,
    CompanyInactive,
    EmployeeInactive,
    InsufficientBridgeFee,
    InvariantViolation,
    PaymentNotDue,
    ScheduleConflict,
    TokenTransferError,
)
from linkpay.events import (
    BridgeSubmitFailed,
    BridgeSubmitted,
    EventRecorder,
    LocalSettled,
    PaymentScheduled,
)
from linkpay.models import Company, Employee
from linkpay.services.allowance_gate import AllowanceGate
from linkpay.services.registry import CompanyRegistry
from linkpay.services.scanner import DispatchToken
from linkpay.services.state import Clock, is_destination_allowed, load_state
from linkpay.services.state_machine import PaymentIntent, PaymentState
from linkpay.tokens.base import SettlementToken

logger = logging.getLogger(__name__)

TRIGGER_SCHEDULED = "scheduled"
TRIGGER_MANUAL = "manual"

REASON_INSUFFICIENT_ALLOWANCE = "insufficient_allowance"
REASON_TRANSFER_FAILED = "transfer_failed"
REASON_BRIDGE_FEE_REQUIRED = "bridge_fee_required"


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one dispatch."""

    state: PaymentState
    trigger: str
    company_id: int
    employee_id: int
    amount: int
    destination: int
    next_pay_date: int
    tracking_handle: str | None = None
    reason: str | None = None
    stranded_amount: int = 0

    @property
    def advanced(self) -> bool:
        return self.state in (PaymentState.LOCAL_SETTLED, PaymentState.BRIDGE_SUBMITTED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "trigger": self.trigger,
            "company_id": self.company_id,
            "employee_id": self.employee_id,
            "amount": self.amount,
            "destination": self.destination,
            "next_pay_date": self.next_pay_date,
            "tracking_handle": self.tracking_handle,
            "reason": self.reason,
            "stranded_amount": self.stranded_amount,
        }


class PaymentDispatcher:
    """Executes one salary payment for a scanned or manually chosen employee."""

    def __init__(
        self,
        session: Session,
        config: OrchestratorConfig,
        token: SettlementToken,
        bridge: BridgeAdapter,
        clock: Clock,
        recorder: EventRecorder,
    ):
        self.session = session
        self.config = config
        self.token = token
        self.bridge = bridge
        self.clock = clock
        self.recorder = recorder
        self.gate = AllowanceGate(token, config.orchestrator_address)

    # -------------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------------

    def dispatch(self, token: DispatchToken) -> DispatchOutcome:
        """Automatic trigger: settle the pair a scan found.

        Persists the proposed cursors whatever the outcome.

        Raises:
            InvariantViolation: token does not describe the current registry
            PaymentNotDue: employee was paid or rescheduled since the scan
        """
        company, employee = self._resolve_token(token)

        state = load_state(self.session)
        state.last_company_index = token.next_company_index
        state.last_employee_index = token.next_employee_index

        self._revalidate(company, employee)
        if employee.next_pay_date != token.next_pay_date or employee.next_pay_date > self.clock():
            raise PaymentNotDue(f"Employee {employee.employee_id} is no longer due")

        return self._settle(company, employee, fee_paid=0, trigger=TRIGGER_SCHEDULED)

    def pay_now(self, caller: str, employee_id: int, fee_paid: int = 0) -> DispatchOutcome:
        """Manual trigger by the company owner; no due-ness check."""
        registry = CompanyRegistry(self.session, self.config, self.token, self.clock, self.recorder)
        company, employee = registry.owned_employee(caller, employee_id)
        self._revalidate(company, employee)
        return self._settle(company, employee, fee_paid=fee_paid, trigger=TRIGGER_MANUAL)

    # -------------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------------

    def _settle(
        self,
        company: Company,
        employee: Employee,
        *,
        fee_paid: int,
        trigger: str,
    ) -> DispatchOutcome:
        intent = PaymentIntent()
        payer = company.owner_identity

        gate = self.gate.check(payer, employee.salary)
        if not gate.passed:
            return self._defer(
                intent, company, employee, trigger, REASON_INSUFFICIENT_ALLOWANCE, amount=0
            )
        intent.to(PaymentState.ALLOWANCE_CHECKED)

        if employee.destination == self.config.same_chain_destination:
            return self._settle_local(intent, company, employee, trigger)
        return self._settle_bridge(intent, company, employee, fee_paid, trigger)

    def _settle_local(
        self,
        intent: PaymentIntent,
        company: Company,
        employee: Employee,
        trigger: str,
    ) -> DispatchOutcome:
        observed = employee.next_pay_date
        advanced_to = self._claim_period(employee, observed)

        try:
            self.token.transfer_from(
                self.config.orchestrator_address,
                company.owner_identity,
                employee.payout_address,
                employee.salary,
            )
        except TokenTransferError as exc:
            self._release_period(employee, observed)
            logger.warning(
                "Local transfer failed: %s",
                exc,
                extra={"company_id": company.company_id, "employee_id": employee.employee_id},
            )
            return self._defer(intent, company, employee, trigger, REASON_TRANSFER_FAILED)

        intent.to(PaymentState.LOCAL_SETTLED)
        self.recorder.record(
            LocalSettled(
                metadata=self.recorder.metadata(),
                company_id=company.company_id,
                employee_id=employee.employee_id,
                payout_address=employee.payout_address,
                amount=employee.salary,
                destination=employee.destination,
                next_pay_date=advanced_to,
            )
        )
        logger.info(
            "Salary settled locally",
            extra={
                "company_id": company.company_id,
                "employee_id": employee.employee_id,
                "amount": employee.salary,
                "trigger": trigger,
            },
        )
        return self._outcome(intent, company, employee, trigger)

    def _settle_bridge(
        self,
        intent: PaymentIntent,
        company: Company,
        employee: Employee,
        fee_paid: int,
        trigger: str,
    ) -> DispatchOutcome:
        """Escrow the salary, then hand it to the bridge.

        A failed submit leaves the salary in escrow and the employee due, so
        every later scan strands another salary until the bridge recovers.
        """
        required_fee = self.bridge.quote_fee(employee.destination)
        if required_fee > fee_paid:
            if trigger == TRIGGER_MANUAL:
                raise InsufficientBridgeFee(
                    f"Bridge fee {required_fee} required, {fee_paid} supplied"
                )
            return self._defer(intent, company, employee, trigger, REASON_BRIDGE_FEE_REQUIRED)

        observed = employee.next_pay_date
        advanced_to = self._claim_period(employee, observed)
        escrow = self.config.escrow_address

        try:
            self.token.transfer_from(
                self.config.orchestrator_address,
                company.owner_identity,
                escrow,
                employee.salary,
            )
        except TokenTransferError as exc:
            self._release_period(employee, observed)
            logger.warning(
                "Escrow transfer failed: %s",
                exc,
                extra={"company_id": company.company_id, "employee_id": employee.employee_id},
            )
            return self._defer(intent, company, employee, trigger, REASON_TRANSFER_FAILED)
        intent.to(PaymentState.ESCROWED)

        self.token.approve(escrow, self.bridge.address, employee.salary)
        transfer = BridgeTransfer(
            token=self.token.symbol,
            amount=employee.salary,
            destination=employee.destination,
            recipient=employee.payout_address,
            source=escrow,
            payload={"company_id": company.company_id, "employee_id": employee.employee_id},
        )

        try:
            receipt = self.bridge.submit(transfer, fee_paid)
        except BridgeSubmitError as exc:
            self._release_period(employee, observed)
            intent.to(PaymentState.BRIDGE_FAILED)
            self.recorder.record(
                BridgeSubmitFailed(
                    metadata=self.recorder.metadata(),
                    company_id=company.company_id,
                    employee_id=employee.employee_id,
                    payout_address=employee.payout_address,
                    amount=employee.salary,
                    destination=employee.destination,
                    adapter_name=self.bridge.adapter_name,
                    stranded_amount=employee.salary,
                    error=exc.message,
                )
            )
            logger.error(
                "Bridge submission failed, funds remain in escrow: %s",
                exc,
                extra={
                    "company_id": company.company_id,
                    "employee_id": employee.employee_id,
                    "stranded_amount": employee.salary,
                    "adapter": self.bridge.adapter_name,
                },
            )
            return self._outcome(
                intent, company, employee, trigger, stranded_amount=employee.salary
            )

        intent.to(PaymentState.BRIDGE_SUBMITTED)
        self.recorder.record(
            BridgeSubmitted(
                metadata=self.recorder.metadata(),
                company_id=company.company_id,
                employee_id=employee.employee_id,
                payout_address=employee.payout_address,
                amount=employee.salary,
                destination=employee.destination,
                tracking_handle=receipt.tracking_handle,
                adapter_name=receipt.adapter_name,
                next_pay_date=advanced_to,
            )
        )
        logger.info(
            "Salary submitted to bridge",
            extra={
                "company_id": company.company_id,
                "employee_id": employee.employee_id,
                "amount": employee.salary,
                "destination": employee.destination,
                "tracking_handle": receipt.tracking_handle,
                "trigger": trigger,
            },
        )
        return self._outcome(
            intent, company, employee, trigger, tracking_handle=receipt.tracking_handle
        )

    # -------------------------------------------------------------------------
    # Schedule
    # -------------------------------------------------------------------------

    def _claim_period(self, employee: Employee, observed: int) -> int:
        """Advance next_pay_date by one interval iff it still equals `observed`."""
        interval = load_state(self.session).interval_seconds
        advanced_to = observed + interval
        result = self.session.execute(
            update(Employee)
            .where(
                Employee.employee_id == employee.employee_id,
                Employee.next_pay_date == observed,
            )
            .values(next_pay_date=advanced_to)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ScheduleConflict(
                f"Employee {employee.employee_id} schedule changed concurrently"
            )
        employee.next_pay_date = advanced_to
        return advanced_to

    def _release_period(self, employee: Employee, observed: int) -> None:
        self.session.execute(
            update(Employee)
            .where(Employee.employee_id == employee.employee_id)
            .values(next_pay_date=observed)
            .execution_options(synchronize_session=False)
        )
        employee.next_pay_date = observed

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _resolve_token(self, token: DispatchToken) -> tuple[Company, Employee]:
        """Check the token against the current registry layout."""
        if token.company_index < 0 or token.employee_index < 0:
            raise InvariantViolation("Dispatch token carries negative cursors")

        company = self.session.get(Company, token.company_id)
        if company is None:
            raise InvariantViolation(f"Dispatch token names unknown company {token.company_id}")
        employee = self.session.get(Employee, token.employee_id)
        if employee is None or employee.company_id != company.company_id:
            raise InvariantViolation(
                f"Employee {token.employee_id} is not part of company {token.company_id}"
            )
        if token.next_company_index != token.company_index + 1:
            raise InvariantViolation("Dispatch token cursors are inconsistent")
        if token.next_employee_index != token.employee_index + 1:
            raise InvariantViolation("Dispatch token cursors are inconsistent")
        return company, employee

    def _revalidate(self, company: Company, employee: Employee) -> None:
        if not company.active:
            raise CompanyInactive(f"Company {company.company_id} is inactive")
        if not employee.active:
            raise EmployeeInactive(f"Employee {employee.employee_id} is inactive")
        if not is_destination_allowed(
            self.session, employee.destination, self.config.same_chain_destination
        ):
            raise ChainNotAllowed(f"Destination {employee.destination} is not allowed")

    def _defer(
        self,
        intent: PaymentIntent,
        company: Company,
        employee: Employee,
        trigger: str,
        reason: str,
        *,
        amount: int | None = None,
    ) -> DispatchOutcome:
        intent.to(PaymentState.SCHEDULE_DEFERRED)
        amount = employee.salary if amount is None else amount
        self.recorder.record(
            PaymentScheduled(
                metadata=self.recorder.metadata(),
                company_id=company.company_id,
                employee_id=employee.employee_id,
                payout_address=employee.payout_address,
                amount=amount,
                destination=employee.destination,
                reason=reason,
            )
        )
        logger.info(
            "Payment deferred",
            extra={
                "company_id": company.company_id,
                "employee_id": employee.employee_id,
                "reason": reason,
                "trigger": trigger,
            },
        )
        return self._outcome(intent, company, employee, trigger, reason=reason, amount=amount)

    def _outcome(
        self,
        intent: PaymentIntent,
        company: Company,
        employee: Employee,
        trigger: str,
        *,
        tracking_handle: str | None = None,
        reason: str | None = None,
        amount: int | None = None,
        stranded_amount: int = 0,
    ) -> DispatchOutcome:
        return DispatchOutcome(
            state=intent.state,
            trigger=trigger,
            company_id=company.company_id,
            employee_id=employee.employee_id,
            amount=employee.salary if amount is None else amount,
            destination=employee.destination,
            next_pay_date=employee.next_pay_date,
            tracking_handle=tracking_handle,
            reason=reason,
            stranded_amount=stranded_amount,
        )
