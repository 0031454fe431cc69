"""SQLAlchemy ORM models."""

from linkpay.models.base import Base, TimestampMixin
from linkpay.models.company import Company, Employee
from linkpay.models.event import PayrollEventRecord
from linkpay.models.orchestrator import STATE_ROW_ID, AllowedDestination, OrchestratorState

__all__ = [
    "Base",
    "TimestampMixin",
    "Company",
    "Employee",
    "PayrollEventRecord",
    "OrchestratorState",
    "AllowedDestination",
    "STATE_ROW_ID",
]
