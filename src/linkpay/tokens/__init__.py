"""Settlement token interface and development stub."""

from linkpay.tokens.base import SettlementToken
from linkpay.tokens.memory import InMemoryToken, TransferRecord

__all__ = [
    "SettlementToken",
    "InMemoryToken",
    "TransferRecord",
]
