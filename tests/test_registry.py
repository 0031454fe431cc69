"""Tests for the company/employee registry and admin operations.

Tests verify:
1. Registration collects the fee and enforces one company per owner
2. Employee validation (address, salary, destination, ownership)
3. Admin-only operations reject other callers
4. Rejected calls leave no state and publish no events
"""

import pytest
from sqlalchemy.exc import IntegrityError

from linkpay.errors import (
    ChainNotAllowed,
    CompanyInactive,
    CompanyNotFound,
    DuplicateOwner,
    EmployeeNotFound,
    InsufficientAuthorization,
    InvalidAmount,
    InvalidChain,
    InvalidName,
    NotCompanyOwner,
    NotOwner,
    OwnershipMismatch,
    ZeroAddress,
)
from linkpay.config import ZERO_ADDRESS
from linkpay.events import (
    CompanyRegistered,
    EmployeeAdded,
    EmployeeDeactivated,
    EventRecorder,
    EventStore,
)
from linkpay.models import Company
from linkpay.services.registry import CompanyRegistry
from tests.conftest import (
    ADMIN,
    ARBITRUM,
    BASE,
    ESCROW,
    FEE_WALLET,
    INTERVAL,
    OWNER_A,
    OWNER_B,
    SALARY,
    START,
)

PAYOUT = "0xeeee000000000000000000000000000000000001"


class TestRegisterCompany:
    def test_register_company(self, orchestrator, published):
        company = orchestrator.register_company(OWNER_A, "Acme")

        assert company.company_id == 1
        assert company.owner_identity == OWNER_A
        assert company.active is True
        assert company.registered_at == START
        assert company.employee_ids == []
        assert [type(e) for e in published] == [CompanyRegistered]

    def test_registration_fee_collected(self, orchestrator, token, fund):
        orchestrator.set_registration_fee(ADMIN, 100)
        fund(OWNER_A, 150)

        orchestrator.register_company(OWNER_A, "Acme")

        assert token.balance_of(FEE_WALLET) == 100
        assert token.balance_of(OWNER_A) == 50

    def test_zero_fee_skips_collection(self, orchestrator, token):
        orchestrator.register_company(OWNER_A, "Acme")
        assert token.transfers == []

    def test_insufficient_fee_allowance_rejected(self, orchestrator, token, fund, published):
        orchestrator.set_registration_fee(ADMIN, 100)
        published.clear()
        fund(OWNER_A, 150, allowance=99)

        with pytest.raises(InsufficientAuthorization):
            orchestrator.register_company(OWNER_A, "Acme")

        assert token.transfers == []
        assert orchestrator.list_companies() == []
        assert published == []

    def test_duplicate_owner_rejected(self, orchestrator):
        orchestrator.register_company(OWNER_A, "Acme")
        with pytest.raises(DuplicateOwner):
            orchestrator.register_company(OWNER_A, "Acme Again")

    def test_lost_owner_race_keeps_fee(
        self, orchestrator, session, config, token, clock, fund
    ):
        orchestrator.set_registration_fee(ADMIN, 100)
        fund(OWNER_A, 150)
        registry = CompanyRegistry(
            session, config, token, clock, EventRecorder(EventStore(session))
        )
        # A concurrent registration for the same owner, not yet visible to queries
        session.add(
            Company(owner_identity=OWNER_A, name="Acme", active=True, registered_at=START)
        )

        with pytest.raises(IntegrityError):
            registry.register_company(OWNER_A, "Acme Again")

        assert token.transfers == []
        assert token.balance_of(FEE_WALLET) == 0
        assert token.balance_of(OWNER_A) == 150

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_rejected(self, orchestrator, name):
        with pytest.raises(InvalidName):
            orchestrator.register_company(OWNER_A, name)

    def test_company_lookup(self, orchestrator):
        company = orchestrator.register_company(OWNER_A, "Acme")

        assert orchestrator.get_company(company.company_id).name == "Acme"
        assert orchestrator.get_company_by_owner(OWNER_A).company_id == company.company_id
        with pytest.raises(CompanyNotFound):
            orchestrator.get_company(99)
        with pytest.raises(CompanyNotFound):
            orchestrator.get_company_by_owner(OWNER_B)


class TestAddEmployee:
    def test_add_employee(self, orchestrator, published):
        company = orchestrator.register_company(OWNER_A, "Acme")
        employee = orchestrator.add_employee(OWNER_A, "Ada", PAYOUT, BASE, SALARY)

        assert employee.company_id == company.company_id
        assert employee.next_pay_date == START + INTERVAL
        assert employee.active is True
        assert orchestrator.get_company(company.company_id).employee_ids == [employee.employee_id]
        assert isinstance(published[-1], EmployeeAdded)
        assert published[-1].salary == SALARY

    def test_employee_ids_are_global(self, orchestrator):
        orchestrator.register_company(OWNER_A, "Acme")
        orchestrator.register_company(OWNER_B, "Beta")

        first = orchestrator.add_employee(OWNER_A, "Ada", PAYOUT, BASE, SALARY)
        second = orchestrator.add_employee(OWNER_B, "Bob", PAYOUT, BASE, SALARY)
        third = orchestrator.add_employee(OWNER_A, "Cy", PAYOUT, BASE, SALARY)

        assert [first.employee_id, second.employee_id, third.employee_id] == [1, 2, 3]

    def test_caller_without_company_rejected(self, orchestrator):
        with pytest.raises(NotCompanyOwner):
            orchestrator.add_employee(OWNER_A, "Ada", PAYOUT, BASE, SALARY)

    def test_inactive_company_rejected(self, orchestrator):
        company = orchestrator.register_company(OWNER_A, "Acme")
        orchestrator.deactivate_company(ADMIN, company.company_id)

        with pytest.raises(CompanyInactive):
            orchestrator.add_employee(OWNER_A, "Ada", PAYOUT, BASE, SALARY)

    @pytest.mark.parametrize("address", ["", ZERO_ADDRESS])
    def test_zero_address_rejected(self, orchestrator, address):
        orchestrator.register_company(OWNER_A, "Acme")
        with pytest.raises(ZeroAddress):
            orchestrator.add_employee(OWNER_A, "Ada", address, BASE, SALARY)

    @pytest.mark.parametrize("salary", [0, -5])
    def test_non_positive_salary_rejected(self, orchestrator, salary):
        orchestrator.register_company(OWNER_A, "Acme")
        with pytest.raises(InvalidAmount):
            orchestrator.add_employee(OWNER_A, "Ada", PAYOUT, BASE, salary)

    def test_destination_must_be_allowed(self, orchestrator):
        orchestrator.register_company(OWNER_A, "Acme")
        with pytest.raises(ChainNotAllowed):
            orchestrator.add_employee(OWNER_A, "Ada", PAYOUT, 10005, SALARY)

        employee = orchestrator.add_employee(OWNER_A, "Ada", PAYOUT, ARBITRUM, SALARY)
        assert employee.destination == ARBITRUM


class TestUpdateEmployee:
    def test_update_fields(self, orchestrator, make_company):
        _, [employee] = make_company()

        updated = orchestrator.update_employee(
            OWNER_A,
            employee.employee_id,
            salary=2 * SALARY,
            destination=ARBITRUM,
            next_pay_date=START + 5,
        )

        assert updated.salary == 2 * SALARY
        assert updated.destination == ARBITRUM
        assert updated.next_pay_date == START + 5
        assert updated.name == employee.name

    def test_other_company_cannot_update(self, orchestrator, make_company):
        _, [employee] = make_company(OWNER_A)
        make_company(OWNER_B)

        with pytest.raises(OwnershipMismatch):
            orchestrator.update_employee(OWNER_B, employee.employee_id, salary=1)

    def test_caller_without_company_cannot_update(self, orchestrator, make_company):
        _, [employee] = make_company()
        with pytest.raises(NotCompanyOwner):
            orchestrator.update_employee(OWNER_B, employee.employee_id, salary=1)

    def test_update_validates_like_add(self, orchestrator, make_company):
        _, [employee] = make_company()
        with pytest.raises(InvalidAmount):
            orchestrator.update_employee(OWNER_A, employee.employee_id, salary=0)
        with pytest.raises(ChainNotAllowed):
            orchestrator.update_employee(OWNER_A, employee.employee_id, destination=10005)

        assert orchestrator.get_employee(employee.employee_id).salary == SALARY

    def test_update_after_destination_disallowed(self, orchestrator, make_company):
        _, [employee] = make_company(destinations=[ARBITRUM])
        orchestrator.set_allowed_destination(ADMIN, ARBITRUM, False)

        updated = orchestrator.update_employee(OWNER_A, employee.employee_id, salary=200)

        assert updated.salary == 200
        assert updated.destination == ARBITRUM
        # Naming the disallowed destination explicitly is still rejected
        with pytest.raises(ChainNotAllowed):
            orchestrator.update_employee(OWNER_A, employee.employee_id, destination=ARBITRUM)

    def test_unknown_employee(self, orchestrator, make_company):
        make_company()
        with pytest.raises(EmployeeNotFound):
            orchestrator.update_employee(OWNER_A, 42, salary=1)

    def test_deactivate_employee(self, orchestrator, make_company, published):
        _, [employee] = make_company()

        result = orchestrator.deactivate_employee(OWNER_A, employee.employee_id)

        assert result.active is False
        assert isinstance(published[-1], EmployeeDeactivated)
        assert published[-1].by_admin is False


class TestAdminOperations:
    def test_non_admin_rejected(self, orchestrator, make_company):
        company, [employee] = make_company()

        with pytest.raises(NotOwner):
            orchestrator.deactivate_company(OWNER_A, company.company_id)
        with pytest.raises(NotOwner):
            orchestrator.set_interval(OWNER_A, 60)
        with pytest.raises(NotOwner):
            orchestrator.set_allowed_destination(OWNER_A, 10005, True)
        with pytest.raises(NotOwner):
            orchestrator.delete_company(OWNER_A, company.company_id)
        with pytest.raises(NotOwner):
            orchestrator.admin_deactivate_employee(
                OWNER_A, company.company_id, employee.employee_id
            )

    def test_deactivate_and_activate_company(self, orchestrator, make_company):
        company, _ = make_company()

        assert orchestrator.deactivate_company(ADMIN, company.company_id).active is False
        assert orchestrator.activate_company(ADMIN, company.company_id).active is True

    def test_admin_deactivate_employee_checks_company(self, orchestrator, make_company):
        company_a, [employee_a] = make_company(OWNER_A)
        company_b, _ = make_company(OWNER_B)

        with pytest.raises(OwnershipMismatch):
            orchestrator.admin_deactivate_employee(
                ADMIN, company_b.company_id, employee_a.employee_id
            )

        employee = orchestrator.admin_deactivate_employee(
            ADMIN, company_a.company_id, employee_a.employee_id
        )
        assert employee.active is False

    def test_delete_company_cascades_and_frees_owner(self, orchestrator, make_company):
        company, employees = make_company(destinations=[BASE, ARBITRUM])

        removed = orchestrator.delete_company(ADMIN, company.company_id)

        assert removed == [e.employee_id for e in employees]
        with pytest.raises(EmployeeNotFound):
            orchestrator.get_employee(employees[0].employee_id)

        # Owner may register again; ids are not reused
        again = orchestrator.register_company(OWNER_A, "Acme II")
        assert again.company_id > company.company_id
        employee = orchestrator.add_employee(OWNER_A, "Ada", PAYOUT, BASE, SALARY)
        assert employee.employee_id > employees[-1].employee_id

    def test_transfer_ownership(self, orchestrator):
        orchestrator.transfer_ownership(ADMIN, "0xnewadmin")

        assert orchestrator.settings().admin_identity == "0xnewadmin"
        with pytest.raises(NotOwner):
            orchestrator.set_interval(ADMIN, 60)
        assert orchestrator.set_interval("0xnewadmin", 60) == 60

    def test_transfer_ownership_rejects_zero_address(self, orchestrator):
        with pytest.raises(ZeroAddress):
            orchestrator.transfer_ownership(ADMIN, ZERO_ADDRESS)

    def test_set_interval_must_be_positive(self, orchestrator):
        with pytest.raises(InvalidAmount):
            orchestrator.set_interval(ADMIN, 0)
        assert orchestrator.settings().interval_seconds == INTERVAL

    def test_allowed_destinations(self, orchestrator):
        assert orchestrator.allowed_destinations() == sorted({BASE, ARBITRUM, 6})

        orchestrator.set_allowed_destination(ADMIN, 10005, True)
        orchestrator.set_allowed_destination(ADMIN, ARBITRUM, False)

        assert orchestrator.allowed_destinations() == sorted({BASE, 6, 10005})

    def test_same_chain_sentinel_cannot_be_configured(self, orchestrator):
        with pytest.raises(InvalidChain):
            orchestrator.set_allowed_destination(ADMIN, BASE, False)
        assert BASE in orchestrator.allowed_destinations()

    def test_withdraw_escrow(self, orchestrator, token):
        token.mint(ESCROW, 500)

        orchestrator.withdraw_escrow(ADMIN, OWNER_A, 300)

        assert token.balance_of(OWNER_A) == 300
        assert orchestrator.escrow_balance() == 200

    def test_withdraw_escrow_bounded_by_balance(self, orchestrator, token):
        token.mint(ESCROW, 500)
        with pytest.raises(InvalidAmount):
            orchestrator.withdraw_escrow(ADMIN, OWNER_A, 501)
        with pytest.raises(InvalidAmount):
            orchestrator.withdraw_escrow(ADMIN, OWNER_A, 0)
        with pytest.raises(NotOwner):
            orchestrator.withdraw_escrow(OWNER_A, OWNER_A, 1)
