"""Admin-only orchestrator settings and escrow recovery."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from linkpay.config import OrchestratorConfig
from linkpay.errors import InvalidAmount, InvalidChain
from linkpay.events import (
    DestinationAllowed,
    EscrowWithdrawn,
    EventRecorder,
    IntervalUpdated,
    OwnershipTransferred,
    RegistrationFeeUpdated,
)
from linkpay.models import AllowedDestination
from linkpay.services.registry import require_address, require_admin
from linkpay.services.state import load_state
from linkpay.tokens.base import SettlementToken

logger = logging.getLogger(__name__)


class AdminService:
    """Runtime parameters only the admin identity may change."""

    def __init__(
        self,
        session: Session,
        config: OrchestratorConfig,
        token: SettlementToken,
        recorder: EventRecorder,
    ):
        self.session = session
        self.config = config
        self.token = token
        self.recorder = recorder

    def transfer_ownership(self, caller: str, new_admin: str) -> str:
        require_admin(self.session, caller)
        new_admin = require_address(new_admin)
        state = load_state(self.session)
        previous = state.admin_identity
        state.admin_identity = new_admin
        self.recorder.record(
            OwnershipTransferred(
                metadata=self.recorder.metadata(),
                previous_admin=previous,
                new_admin=new_admin,
            )
        )
        logger.warning("Admin ownership transferred", extra={"new_admin": new_admin})
        return new_admin

    def set_interval(self, caller: str, interval_seconds: int) -> int:
        require_admin(self.session, caller)
        if interval_seconds <= 0:
            raise InvalidAmount("Interval must be positive")
        load_state(self.session).interval_seconds = interval_seconds
        self.recorder.record(
            IntervalUpdated(metadata=self.recorder.metadata(), interval_seconds=interval_seconds)
        )
        return interval_seconds

    def set_registration_fee(self, caller: str, registration_fee: int) -> int:
        require_admin(self.session, caller)
        if registration_fee < 0:
            raise InvalidAmount("Registration fee cannot be negative")
        load_state(self.session).registration_fee = registration_fee
        self.recorder.record(
            RegistrationFeeUpdated(
                metadata=self.recorder.metadata(), registration_fee=registration_fee
            )
        )
        return registration_fee

    def set_allowed_destination(self, caller: str, destination: int, allowed: bool) -> bool:
        """Allow or disallow a remote destination.

        The same-chain sentinel is always allowed and cannot be configured.
        Existing employees on a disallowed destination are not paid until it
        is allowed again.
        """
        require_admin(self.session, caller)
        if destination == self.config.same_chain_destination or destination < 0:
            raise InvalidChain(f"Destination {destination} cannot be configured")

        row = self.session.get(AllowedDestination, destination)
        if allowed and row is None:
            self.session.add(AllowedDestination(destination=destination))
        elif not allowed and row is not None:
            self.session.delete(row)
        self.session.flush()

        self.recorder.record(
            DestinationAllowed(
                metadata=self.recorder.metadata(), destination=destination, allowed=allowed
            )
        )
        return allowed

    def withdraw_escrow(self, caller: str, beneficiary: str, amount: int) -> int:
        """Move stranded escrow funds to `beneficiary`."""
        require_admin(self.session, caller)
        beneficiary = require_address(beneficiary)
        balance = self.token.balance_of(self.config.escrow_address)
        if amount <= 0 or amount > balance:
            raise InvalidAmount(f"Amount must be between 1 and the escrow balance {balance}")

        # Escrow is controlled by the orchestrator spender identity
        self.token.approve(self.config.escrow_address, self.config.orchestrator_address, amount)
        self.token.transfer_from(
            self.config.orchestrator_address, self.config.escrow_address, beneficiary, amount
        )
        self.recorder.record(
            EscrowWithdrawn(
                metadata=self.recorder.metadata(), beneficiary=beneficiary, amount=amount
            )
        )
        logger.warning(
            "Escrow withdrawn",
            extra={"beneficiary": beneficiary, "amount": amount},
        )
        return amount
