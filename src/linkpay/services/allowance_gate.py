"""Allowance gate - preflight check before any balance-moving call.

Evaluates whether a payer has pre-authorized the orchestrator to pull at
least the required amount. A failed gate never moves funds; the dispatcher
defers the payment and the next scan retries it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from linkpay.tokens.base import SettlementToken


@dataclass(frozen=True)
class GateResult:
    """Result of an allowance gate evaluation."""

    outcome: str  # pass, fail
    required_amount: int
    available_amount: int
    reasons: list[dict[str, Any]] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """Whether the gate passed."""
        return self.outcome == "pass"

    @property
    def shortfall(self) -> int:
        """Amount of shortfall (0 if no shortfall)."""
        return max(self.required_amount - self.available_amount, 0)


class AllowanceGate:
    """Allowance gate evaluation.

    Reads the token allowance granted by the payer to the orchestrator's
    spender identity. Performs no writes.
    """

    def __init__(self, token: SettlementToken, spender: str):
        self.token = token
        self.spender = spender

    def check(self, payer: str, amount: int, *, purpose: str = "salary") -> GateResult:
        """Evaluate the gate for `payer` covering `amount`.

        Args:
            payer: Identity whose funds would be pulled
            amount: Required amount in smallest units
            purpose: What the funds are for (salary, registration_fee)

        Returns:
            GateResult with outcome and details
        """
        available = self.token.allowance(payer, self.spender)
        reasons: list[dict[str, Any]] = []

        if available < amount:
            reasons.append({
                "code": "INSUFFICIENT_ALLOWANCE",
                "message": (
                    f"Approve more {self.token.symbol} for {purpose}. "
                    f"Required {amount}, approved {available}."
                ),
                "shortfall": amount - available,
            })

        return GateResult(
            outcome="pass" if not reasons else "fail",
            required_amount=amount,
            available_amount=available,
            reasons=reasons,
        )
