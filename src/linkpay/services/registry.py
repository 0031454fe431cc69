"""Registry service - companies and employees.

Caller identity is an explicit parameter on every mutating call. All
mutations run inside the session owned by the caller (the orchestrator
facade), so a rejected call leaves no partial state behind.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from linkpay.config import ZERO_ADDRESS, OrchestratorConfig
from linkpay.errors import (
    ChainNotAllowed,
    CompanyInactive,
    CompanyNotFound,
    DuplicateOwner,
    EmployeeNotFound,
    InsufficientAuthorization,
    InvalidAmount,
    InvalidName,
    NotCompanyOwner,
    NotOwner,
    OwnershipMismatch,
    ZeroAddress,
)
from linkpay.events import (
    CompanyActivated,
    CompanyDeactivated,
    CompanyDeleted,
    CompanyRegistered,
    EmployeeAdded,
    EmployeeDeactivated,
    EmployeeUpdated,
    EventRecorder,
)
from linkpay.models import Company, Employee
from linkpay.services.allowance_gate import AllowanceGate
from linkpay.services.state import Clock, is_destination_allowed, load_state
from linkpay.tokens.base import SettlementToken

logger = logging.getLogger(__name__)


def require_address(address: str | None) -> str:
    """Reject empty and all-zero addresses."""
    if address is None:
        raise ZeroAddress()
    address = address.strip()
    if not address or address.lower() == ZERO_ADDRESS:
        raise ZeroAddress()
    return address


def require_admin(session: Session, caller: str) -> None:
    if caller != load_state(session).admin_identity:
        raise NotOwner()


class CompanyRegistry:
    """Company and employee records.

    Usage:
        registry = CompanyRegistry(session, config, token, clock, recorder)
        company = registry.register_company("0xowner", "Acme")
        employee = registry.add_employee("0xowner", "Ada", "0xada", 10004, 1_000_000)
    """

    def __init__(
        self,
        session: Session,
        config: OrchestratorConfig,
        token: SettlementToken,
        clock: Clock,
        recorder: EventRecorder,
    ):
        self.session = session
        self.config = config
        self.token = token
        self.clock = clock
        self.recorder = recorder
        self.gate = AllowanceGate(token, config.orchestrator_address)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_company(self, company_id: int) -> Company:
        company = self.session.get(Company, company_id)
        if company is None:
            raise CompanyNotFound(f"Company {company_id} not found")
        return company

    def find_company_by_owner(self, owner_identity: str) -> Company | None:
        return self.session.scalar(
            select(Company).where(Company.owner_identity == owner_identity)
        )

    def get_company_by_owner(self, owner_identity: str) -> Company:
        company = self.find_company_by_owner(owner_identity)
        if company is None:
            raise CompanyNotFound(f"No company owned by {owner_identity}")
        return company

    def list_companies(self) -> list[Company]:
        return list(self.session.scalars(select(Company).order_by(Company.company_id)))

    def get_employee(self, employee_id: int) -> Employee:
        employee = self.session.get(Employee, employee_id)
        if employee is None:
            raise EmployeeNotFound(f"Employee {employee_id} not found")
        return employee

    def list_employees(self, company_id: int) -> list[Employee]:
        return list(self.get_company(company_id).employees)

    def owned_employee(self, caller: str, employee_id: int) -> tuple[Company, Employee]:
        """Resolve an employee the caller's company owns.

        Raises:
            NotCompanyOwner: caller owns no company
            EmployeeNotFound: unknown employee id
            OwnershipMismatch: employee belongs to another company
        """
        company = self.find_company_by_owner(caller)
        if company is None:
            raise NotCompanyOwner()
        employee = self.get_employee(employee_id)
        if employee.company_id != company.company_id:
            raise OwnershipMismatch(
                f"Employee {employee_id} does not belong to company {company.company_id}"
            )
        return company, employee

    # -------------------------------------------------------------------------
    # Owner operations
    # -------------------------------------------------------------------------

    def register_company(self, caller: str, name: str) -> Company:
        """Register a company for `caller`, collecting the registration fee."""
        caller = require_address(caller)
        if self.find_company_by_owner(caller) is not None:
            raise DuplicateOwner()
        name = (name or "").strip()
        if not name:
            raise InvalidName()

        fee = load_state(self.session).registration_fee
        if fee > 0:
            gate = self.gate.check(caller, fee, purpose="registration_fee")
            if not gate.passed:
                raise InsufficientAuthorization(gate.reasons[0]["message"])

        company = Company(
            owner_identity=caller,
            name=name,
            active=True,
            registered_at=self.clock(),
            employees=[],
        )
        # Claim the owner row before the fee moves
        self.session.add(company)
        self.session.flush()

        if fee > 0:
            self.token.transfer_from(
                self.config.orchestrator_address, caller, self.config.fee_wallet, fee
            )

        self.recorder.record(
            CompanyRegistered(
                metadata=self.recorder.metadata(),
                company_id=company.company_id,
                owner_identity=caller,
                name=name,
                fee_paid=fee,
            )
        )
        logger.info(
            "Company registered",
            extra={"company_id": company.company_id, "fee_paid": fee},
        )
        return company

    def add_employee(
        self,
        caller: str,
        name: str,
        payout_address: str,
        destination: int,
        salary: int,
    ) -> Employee:
        """Add an employee to the caller's company, first payment one interval out."""
        company = self.find_company_by_owner(caller)
        if company is None:
            raise NotCompanyOwner()
        if not company.active:
            raise CompanyInactive()

        name, payout_address = self._validate_employee(name, payout_address, destination, salary)

        state = load_state(self.session)
        employee = Employee(
            name=name,
            payout_address=payout_address,
            destination=destination,
            salary=salary,
            next_pay_date=self.clock() + state.interval_seconds,
            active=True,
        )
        company.employees.append(employee)
        self.session.flush()

        self.recorder.record(
            EmployeeAdded(
                metadata=self.recorder.metadata(),
                company_id=company.company_id,
                employee_id=employee.employee_id,
                name=name,
                payout_address=payout_address,
                salary=salary,
                destination=destination,
                next_pay_date=employee.next_pay_date,
            )
        )
        return employee

    def update_employee(
        self,
        caller: str,
        employee_id: int,
        *,
        name: str | None = None,
        payout_address: str | None = None,
        destination: int | None = None,
        salary: int | None = None,
        next_pay_date: int | None = None,
        active: bool | None = None,
    ) -> Employee:
        """Update employee fields; omitted fields keep their current value."""
        company, employee = self.owned_employee(caller, employee_id)

        # An unchanged destination stays valid after the admin disallows it;
        # dispatch revalidates it
        name, payout_address = self._validate_employee(
            employee.name if name is None else name,
            employee.payout_address if payout_address is None else payout_address,
            employee.destination if destination is None else destination,
            employee.salary if salary is None else salary,
            check_destination=destination is not None,
        )
        if next_pay_date is not None and next_pay_date <= 0:
            raise InvalidAmount("next_pay_date must be positive")

        employee.name = name
        employee.payout_address = payout_address
        if destination is not None:
            employee.destination = destination
        if salary is not None:
            employee.salary = salary
        if next_pay_date is not None:
            employee.next_pay_date = next_pay_date
        if active is not None:
            employee.active = active
        self.session.flush()

        self.recorder.record(
            EmployeeUpdated(
                metadata=self.recorder.metadata(),
                company_id=company.company_id,
                employee_id=employee.employee_id,
            )
        )
        return employee

    def deactivate_employee(self, caller: str, employee_id: int) -> Employee:
        company, employee = self.owned_employee(caller, employee_id)
        return self._deactivate(company, employee, by_admin=False)

    # -------------------------------------------------------------------------
    # Admin operations
    # -------------------------------------------------------------------------

    def deactivate_company(self, caller: str, company_id: int) -> Company:
        require_admin(self.session, caller)
        company = self.get_company(company_id)
        company.active = False
        self.recorder.record(
            CompanyDeactivated(metadata=self.recorder.metadata(), company_id=company_id)
        )
        logger.info("Company deactivated", extra={"company_id": company_id})
        return company

    def activate_company(self, caller: str, company_id: int) -> Company:
        require_admin(self.session, caller)
        company = self.get_company(company_id)
        company.active = True
        self.recorder.record(
            CompanyActivated(metadata=self.recorder.metadata(), company_id=company_id)
        )
        return company

    def admin_deactivate_employee(self, caller: str, company_id: int, employee_id: int) -> Employee:
        require_admin(self.session, caller)
        company = self.get_company(company_id)
        employee = self.get_employee(employee_id)
        if employee.company_id != company.company_id:
            raise OwnershipMismatch(
                f"Employee {employee_id} does not belong to company {company_id}"
            )
        return self._deactivate(company, employee, by_admin=True)

    def delete_company(self, caller: str, company_id: int) -> list[int]:
        """Delete a company with its employees and free the owner slot.

        Returns the removed employee ids. Ids are never reused.
        """
        require_admin(self.session, caller)
        company = self.get_company(company_id)
        removed = company.employee_ids
        owner = company.owner_identity

        self.session.delete(company)
        self.session.flush()

        self.recorder.record(
            CompanyDeleted(
                metadata=self.recorder.metadata(),
                company_id=company_id,
                owner_identity=owner,
                removed_employee_ids=tuple(removed),
            )
        )
        logger.warning(
            "Company deleted",
            extra={"company_id": company_id, "removed_employees": len(removed)},
        )
        return removed

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _validate_employee(
        self,
        name: str,
        payout_address: str,
        destination: int,
        salary: int,
        *,
        check_destination: bool = True,
    ) -> tuple[str, str]:
        name = (name or "").strip()
        if not name:
            raise InvalidName()
        payout_address = require_address(payout_address)
        if salary is None or salary <= 0:
            raise InvalidAmount("Salary must be positive")
        if check_destination and not is_destination_allowed(
            self.session, destination, self.config.same_chain_destination
        ):
            raise ChainNotAllowed(f"Destination {destination} is not allowed")
        return name, payout_address

    def _deactivate(self, company: Company, employee: Employee, *, by_admin: bool) -> Employee:
        employee.active = False
        self.recorder.record(
            EmployeeDeactivated(
                metadata=self.recorder.metadata(),
                company_id=company.company_id,
                employee_id=employee.employee_id,
                by_admin=by_admin,
            )
        )
        return employee
