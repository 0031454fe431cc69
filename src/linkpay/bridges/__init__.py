"""Cross-chain bridge adapters."""

from __future__ import annotations

from linkpay.bridges.base import (
    BridgeAdapter,
    BridgeReceipt,
    BridgeStatus,
    BridgeTransfer,
)
from linkpay.bridges.ccip_stub import CcipStub
from linkpay.bridges.wormhole_stub import WormholeCctpStub
from linkpay.tokens.memory import InMemoryToken

__all__ = [
    "BridgeAdapter",
    "BridgeReceipt",
    "BridgeStatus",
    "BridgeTransfer",
    "CcipStub",
    "WormholeCctpStub",
    "create_bridge",
]


def create_bridge(kind: str, token: InMemoryToken, fee: int) -> BridgeAdapter:
    """Build the configured development adapter ("wormhole" or "ccip")."""
    if kind == "wormhole":
        return WormholeCctpStub(token, relayer_fee=fee)
    if kind == "ccip":
        return CcipStub(token, fee=fee)
    raise ValueError(f"Unknown bridge: {kind}")
