"""In-memory settlement token for local development and testing.

Replace with an on-chain token client for production.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

from linkpay.errors import InvalidAmount, TokenTransferError


@dataclass(frozen=True)
class TransferRecord:
    """One executed token movement."""

    spender: str
    source: str
    destination: str
    amount: int


class InMemoryToken:
    """Stub token with balances, allowances and failure injection.

    Every successful `transfer_from` is appended to `transfers` so tests can
    assert that no balance-moving call happened.
    """

    def __init__(self, symbol: str = "USDC", decimals: int = 6):
        self.symbol = symbol
        self.decimals = decimals
        self._balances: dict[str, int] = defaultdict(int)
        self._allowances: dict[tuple[str, str], int] = defaultdict(int)
        self._failing_sources: set[str] = set()
        self.transfers: list[TransferRecord] = []

    def balance_of(self, account: str) -> int:
        return self._balances[account]

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances[(owner, spender)]

    def approve(self, owner: str, spender: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount("Allowance cannot be negative")
        self._allowances[(owner, spender)] = amount

    def transfer_from(self, spender: str, source: str, destination: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidAmount()
        if source in self._failing_sources:
            raise TokenTransferError(f"Token rejected transfer from {source}")

        allowed = self._allowances[(source, spender)]
        if allowed < amount:
            raise TokenTransferError(
                f"Allowance {allowed} of {spender} over {source} is below {amount}"
            )
        if self._balances[source] < amount:
            raise TokenTransferError(
                f"Balance {self._balances[source]} of {source} is below {amount}"
            )

        self._allowances[(source, spender)] = allowed - amount
        self._balances[source] -= amount
        self._balances[destination] += amount
        self.transfers.append(TransferRecord(spender, source, destination, amount))

    def mint(self, account: str, amount: int) -> None:
        """Credit `account` (for testing)."""
        if amount <= 0:
            raise InvalidAmount()
        self._balances[account] += amount

    def burn(self, account: str, amount: int) -> None:
        """Debit `account` without a destination (burn-and-mint bridges)."""
        if self._balances[account] < amount:
            raise TokenTransferError(f"Cannot burn {amount} from {account}")
        self._balances[account] -= amount

    def simulate_failure(self, source: str, failing: bool = True) -> None:
        """Make every transfer out of `source` fail (for testing)."""
        if failing:
            self._failing_sources.add(source)
        else:
            self._failing_sources.discard(source)
