"""Persisted orchestrator state: admin parameters, scan cursors, allow-set."""

from __future__ import annotations

from sqlalchemy import BigInteger, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from linkpay.models.base import Base, TimestampMixin

STATE_ROW_ID = 1


class OrchestratorState(Base):
    """Single-row table holding admin-mutable parameters and scan cursors."""

    __tablename__ = "orchestrator_state"

    state_id: Mapped[int] = mapped_column(Integer, primary_key=True, default=STATE_ROW_ID)
    admin_identity: Mapped[str] = mapped_column(String(128), nullable=False)
    interval_seconds: Mapped[int] = mapped_column(BigInteger, nullable=False)
    registration_fee: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_company_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_employee_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("state_id = 1", name="orchestrator_state_single_row"),
        CheckConstraint("interval_seconds > 0", name="orchestrator_state_interval_positive"),
        CheckConstraint("registration_fee >= 0", name="orchestrator_state_fee_nonnegative"),
    )


class AllowedDestination(Base, TimestampMixin):
    """Remote destination currently allowed for payouts."""

    __tablename__ = "allowed_destination"

    destination: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
