"""Company and employee models."""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from linkpay.models.base import Base, TimestampMixin


class Company(Base, TimestampMixin):
    """Employer registered by a single owner identity.

    Ids are allocated monotonically and never reused, even after an admin
    delete frees the owner slot.
    """

    __tablename__ = "company"

    company_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_identity: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    registered_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = ({"sqlite_autoincrement": True},)

    # Insertion order
    employees: Mapped[list[Employee]] = relationship(
        back_populates="company",
        order_by="Employee.employee_id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def employee_ids(self) -> list[int]:
        return [e.employee_id for e in self.employees]


class Employee(Base, TimestampMixin):
    """Salaried payee of a company.

    `destination` is an opaque network id: the configured same-chain sentinel
    or a remote id that must be allowed at dispatch time.
    """

    __tablename__ = "employee"

    employee_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    payout_address: Mapped[str] = mapped_column(String(128), nullable=False)
    destination: Mapped[int] = mapped_column(Integer, nullable=False)
    salary: Mapped[int] = mapped_column(BigInteger, nullable=False)
    next_pay_date: Mapped[int] = mapped_column(BigInteger, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("salary > 0", name="employee_salary_positive"),
        Index("employee_by_company", "company_id", "employee_id"),
        {"sqlite_autoincrement": True},
    )

    company: Mapped[Company] = relationship(back_populates="employees")
