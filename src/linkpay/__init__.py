"""LinkPay - automated cross-network payroll orchestrator.

Companies register, add salaried employees with a payout address and a
destination network, and pre-authorize the orchestrator to pull salaries.
A scheduler repeatedly scans for one due payment and dispatches it, either
as a same-network transfer or through escrow and a cross-chain bridge.
"""

from linkpay.config import OrchestratorConfig, Settings, get_settings
from linkpay.errors import InvariantViolation, PayrollError
from linkpay.orchestrator import PayrollOrchestrator, build_orchestrator

__version__ = "0.1.0"

__all__ = [
    "InvariantViolation",
    "OrchestratorConfig",
    "PayrollError",
    "PayrollOrchestrator",
    "Settings",
    "build_orchestrator",
    "get_settings",
]
