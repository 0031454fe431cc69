"""Wormhole CCTP stub adapter for local development and testing.

Burn-and-mint: the adapter pulls funds from escrow and burns them; the
destination network mints after guardian attestation (not modelled).
"""

from __future__ import annotations

from typing import Any

from linkpay.bridges.base import BridgeReceipt, BridgeStatus, BridgeTransfer
from linkpay.errors import BridgeSubmitError, TokenTransferError
from linkpay.tokens.memory import InMemoryToken

# 0.01 ETH relayer fee
DEFAULT_RELAYER_FEE = 10**16


class WormholeCctpStub:
    """Stub Wormhole Circle-integration bridge.

    In production, this would:
    - Call transferTokensWithPayload on the Circle integration contract
    - Return the emitted Wormhole sequence as tracking handle
    - Poll the guardian network for the signed VAA
    """

    adapter_name = "wormhole_cctp"

    def __init__(
        self,
        token: InMemoryToken,
        address: str = "wormhole-circle-bridge",
        relayer_fee: int = DEFAULT_RELAYER_FEE,
    ):
        """Initialize stub adapter.

        Args:
            token: Token the adapter pulls from escrow and burns.
            address: Spender identity escrow approves.
            relayer_fee: Native fee required per transfer.
        """
        self.token = token
        self.address = address
        self.relayer_fee = relayer_fee
        self._sequence = 0
        self._fail_next = 0
        # In-memory tracking for stub
        self._submitted: dict[str, dict[str, Any]] = {}

    def quote_fee(self, destination: int) -> int:
        return self.relayer_fee

    def submit(self, transfer: BridgeTransfer, fee_paid: int) -> BridgeReceipt:
        """Submit burn-and-mint transfer (stub implementation)."""
        if self._fail_next > 0:
            self._fail_next -= 1
            raise BridgeSubmitError("Wormhole stub rejected transfer")
        if fee_paid < self.relayer_fee:
            raise BridgeSubmitError(
                f"Relayer fee {fee_paid} below required {self.relayer_fee}"
            )

        try:
            self.token.transfer_from(self.address, transfer.source, self.address, transfer.amount)
        except TokenTransferError as exc:
            raise BridgeSubmitError(f"Bridge could not pull funds: {exc}") from exc
        self.token.burn(self.address, transfer.amount)

        self._sequence += 1
        tracking_handle = str(self._sequence)
        self._submitted[tracking_handle] = {
            "transfer": transfer,
            "fee_paid": fee_paid,
            "status": "submitted",
        }

        return BridgeReceipt(
            tracking_handle=tracking_handle,
            adapter_name=self.adapter_name,
            fee_charged=self.relayer_fee,
            message="Wormhole stub accepted",
        )

    def get_status(self, tracking_handle: str) -> BridgeStatus:
        if tracking_handle not in self._submitted:
            return BridgeStatus(
                status="unknown",
                message=f"Sequence {tracking_handle} not found",
            )

        record = self._submitted[tracking_handle]
        return BridgeStatus(
            status=record["status"],
            message="Wormhole stub status",
            destination=record["transfer"].destination,
        )

    def simulate_failure(self, count: int = 1) -> None:
        """Reject the next `count` submissions (for testing)."""
        self._fail_next = count

    def simulate_redeem(self, tracking_handle: str) -> None:
        """Mark a transfer as minted on the destination network (for testing)."""
        if tracking_handle in self._submitted:
            self._submitted[tracking_handle]["status"] = "completed"
