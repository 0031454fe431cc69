"""Base protocol and types for cross-chain bridge adapters.

All bridge adapters must implement the BridgeAdapter protocol. The dispatcher
only knows this narrow interface; guardian attestation, relaying and minting
on the destination network happen off-system.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class BridgeTransfer:
    """Parameters of one cross-chain transfer."""

    token: str
    amount: int
    destination: int
    recipient: str
    source: str  # escrow account the adapter pulls from
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BridgeReceipt:
    """Result of a successful submission."""

    tracking_handle: str
    adapter_name: str
    fee_charged: int = 0
    message: str = ""


@dataclass(frozen=True)
class BridgeStatus:
    """Status of a submitted transfer as reported by the bridge."""

    status: str  # submitted/attested/completed/unknown
    message: str = ""
    destination: int | None = None


class BridgeAdapter(Protocol):
    """Protocol for cross-chain settlement adapters.

    Each bridge backend (burn-and-mint, lock-and-mint) has its own adapter.
    Submissions are NOT idempotent: every call is a new transfer attempt.
    """

    adapter_name: str
    address: str  # spender identity the escrow approves

    def quote_fee(self, destination: int) -> int:
        """Fee (native units) the caller must supply to reach `destination`."""
        ...

    def submit(self, transfer: BridgeTransfer, fee_paid: int) -> BridgeReceipt:
        """Submit a transfer.

        The adapter pulls `transfer.amount` from `transfer.source` using the
        allowance granted to `address`.

        Args:
            transfer: Transfer parameters.
            fee_paid: Fee resource supplied by the caller.

        Returns:
            BridgeReceipt with the tracking handle.

        Raises:
            BridgeSubmitError: the bridge rejected the transfer synchronously.
        """
        ...

    def get_status(self, tracking_handle: str) -> BridgeStatus:
        """Status of a previously submitted transfer."""
        ...
