"""Orchestrator services."""

from linkpay.services.admin import AdminService
from linkpay.services.allowance_gate import AllowanceGate, GateResult
from linkpay.services.dispatcher import DispatchOutcome, PaymentDispatcher
from linkpay.services.registry import CompanyRegistry
from linkpay.services.scanner import DispatchToken, DueScanner
from linkpay.services.state import Clock, system_clock
from linkpay.services.state_machine import (
    InvalidTransitionError,
    PaymentIntent,
    PaymentState,
    PaymentStateMachine,
)

__all__ = [
    "AdminService",
    "AllowanceGate",
    "Clock",
    "CompanyRegistry",
    "DispatchOutcome",
    "DispatchToken",
    "DueScanner",
    "GateResult",
    "InvalidTransitionError",
    "PaymentDispatcher",
    "PaymentIntent",
    "PaymentState",
    "PaymentStateMachine",
    "system_clock",
]
