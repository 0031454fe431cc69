"""Due-payment scanner.

Finds at most one due (company, employee) pair per call with a rotating scan
over two persisted cursors. Scanning is read-only: the proposed cursors are
carried in the returned DispatchToken and persisted by the dispatcher, so two
scans without an intervening dispatch return the same pair.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from linkpay.models import Company
from linkpay.services.state import Clock, allowed_destinations, load_state


@dataclass(frozen=True)
class DispatchToken:
    """Opaque scan result consumed by dispatch."""

    company_id: int
    employee_id: int
    company_index: int
    employee_index: int
    next_pay_date: int
    next_company_index: int
    next_employee_index: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DispatchToken:
        return cls(**{name: int(data[name]) for name in cls.__dataclass_fields__})


class DueScanner:
    """Fair rotating scan.

    Order of visit:
    1. Companies by id, starting at last_company_index mod count, wrapping.
    2. Inside the first visited company, employees start at
       last_employee_index mod employee count; later companies start at 0.
    3. First active employee with next_pay_date <= now on an allowed
       destination wins.
    """

    def __init__(self, session: Session, clock: Clock, same_chain_destination: int):
        self.session = session
        self.clock = clock
        self.same_chain_destination = same_chain_destination

    def scan(self) -> DispatchToken | None:
        companies = list(self.session.scalars(select(Company).order_by(Company.company_id)))
        if not companies:
            return None

        state = load_state(self.session)
        now = self.clock()
        allowed = allowed_destinations(self.session) | {self.same_chain_destination}

        count = len(companies)
        start = state.last_company_index % count
        employee_cursor = state.last_employee_index

        for offset in range(count):
            company_index = (start + offset) % count
            company = companies[company_index]
            employees = company.employees

            if company.active and employees:
                m = len(employees)
                first = employee_cursor % m
                for step in range(m):
                    employee_index = (first + step) % m
                    employee = employees[employee_index]
                    if (
                        employee.active
                        and employee.next_pay_date <= now
                        and employee.destination in allowed
                    ):
                        return DispatchToken(
                            company_id=company.company_id,
                            employee_id=employee.employee_id,
                            company_index=company_index,
                            employee_index=employee_index,
                            next_pay_date=employee.next_pay_date,
                            next_company_index=company_index + 1,
                            next_employee_index=employee_index + 1,
                        )

            # Next company starts at its first employee
            employee_cursor = 0

        return None
