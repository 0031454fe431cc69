"""Protocol for the settlement token the orchestrator moves.

The token is an external collaborator (an ERC-20-like ledger). The core only
needs allowance reads, approvals and spender-initiated transfers.
"""

from __future__ import annotations

from typing import Protocol


class SettlementToken(Protocol):
    """Token ledger consumed by the orchestrator.

    Amounts are integers in the token's smallest unit.
    """

    symbol: str

    def balance_of(self, account: str) -> int:
        """Balance held by `account`."""
        ...

    def allowance(self, owner: str, spender: str) -> int:
        """Amount `spender` may still pull from `owner`."""
        ...

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Set the allowance of `spender` over `owner`'s funds."""
        ...

    def transfer_from(self, spender: str, source: str, destination: str, amount: int) -> None:
        """Move `amount` from `source` to `destination` using `spender`'s allowance.

        Raises:
            TokenTransferError: allowance or balance is insufficient, or the
                token rejected the transfer.
        """
        ...
