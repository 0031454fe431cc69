"""CCIP stub adapter for local development and testing.

Lock-and-mint: funds are locked in the adapter's pool; the destination
network releases or mints after the off-system commit/execute phases.
"""

from __future__ import annotations

import hashlib
from typing import Any

from linkpay.bridges.base import BridgeReceipt, BridgeStatus, BridgeTransfer
from linkpay.errors import BridgeSubmitError, TokenTransferError
from linkpay.tokens.memory import InMemoryToken


class CcipStub:
    """Stub CCIP router.

    The tracking handle is a message id derived from the transfer and a
    per-adapter nonce, as the router returns from ccipSend.
    """

    adapter_name = "ccip"

    def __init__(
        self,
        token: InMemoryToken,
        address: str = "ccip-router",
        fee: int = 0,
        supported_destinations: set[int] | None = None,
    ):
        self.token = token
        self.address = address
        self.fee = fee
        self.supported_destinations = supported_destinations
        self._nonce = 0
        self._fail_next = 0
        self._submitted: dict[str, dict[str, Any]] = {}

    def quote_fee(self, destination: int) -> int:
        return self.fee

    def submit(self, transfer: BridgeTransfer, fee_paid: int) -> BridgeReceipt:
        if self._fail_next > 0:
            self._fail_next -= 1
            raise BridgeSubmitError("CCIP stub rejected message")
        if (
            self.supported_destinations is not None
            and transfer.destination not in self.supported_destinations
        ):
            raise BridgeSubmitError(f"Unsupported destination {transfer.destination}")
        if fee_paid < self.fee:
            raise BridgeSubmitError(f"Fee {fee_paid} below required {self.fee}")

        try:
            self.token.transfer_from(self.address, transfer.source, self.address, transfer.amount)
        except TokenTransferError as exc:
            raise BridgeSubmitError(f"Router could not pull funds: {exc}") from exc

        self._nonce += 1
        seed = f"{self._nonce}:{transfer.destination}:{transfer.recipient}:{transfer.amount}"
        message_id = "0x" + hashlib.sha256(seed.encode()).hexdigest()
        self._submitted[message_id] = {
            "transfer": transfer,
            "status": "submitted",
        }

        return BridgeReceipt(
            tracking_handle=message_id,
            adapter_name=self.adapter_name,
            fee_charged=self.fee,
            message="CCIP stub accepted",
        )

    def get_status(self, tracking_handle: str) -> BridgeStatus:
        record = self._submitted.get(tracking_handle)
        if record is None:
            return BridgeStatus(status="unknown", message=f"Message {tracking_handle} not found")
        return BridgeStatus(
            status=record["status"],
            message="CCIP stub status",
            destination=record["transfer"].destination,
        )

    def simulate_failure(self, count: int = 1) -> None:
        """Reject the next `count` submissions (for testing)."""
        self._fail_next = count

    def simulate_execution(self, tracking_handle: str) -> None:
        """Mark a message as executed on the destination network (for testing)."""
        if tracking_handle in self._submitted:
            self._submitted[tracking_handle]["status"] = "completed"
