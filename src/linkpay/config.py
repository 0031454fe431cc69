"""Configuration management for the LinkPay orchestrator.

Two layers:
- Settings: process settings loaded from environment (.env supported)
- OrchestratorConfig: explicit, immutable configuration for one orchestrator

OrchestratorConfig only seeds the persisted orchestrator state. Values that
the admin can change at runtime (interval, registration fee, allowed
destinations, admin identity) live in the database after bootstrap.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Wormhole chain ids of the supported test networks
NETWORK_NAMES: dict[int, str] = {
    10004: "Base Sepolia",
    10003: "Arbitrum Sepolia",
    6: "Avalanche Fuji",
    10005: "Optimism Sepolia",
    10002: "Ethereum Sepolia",
}

DEFAULT_INTERVAL_SECONDS = 30 * 24 * 60 * 60


def network_name(destination: int) -> str:
    """Display name for a destination id."""
    return NETWORK_NAMES.get(destination, "Unknown")


@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Orchestrator configuration.

    Attributes:
        admin_identity: Identity allowed to run admin operations.
        orchestrator_address: Spender identity payers grant allowance to.
        escrow_address: Account holding funds between payer debit and bridge.
        fee_wallet: Account receiving registration fees.
        registration_fee: Fee collected on company registration (smallest unit).
        interval_seconds: Pay interval added to next_pay_date on success.
        same_chain_destination: Sentinel destination meaning "same network".
        allowed_destinations: Remote destinations allowed at bootstrap.
    """

    admin_identity: str
    orchestrator_address: str
    escrow_address: str
    fee_wallet: str
    registration_fee: int = 0
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    same_chain_destination: int = 10004
    allowed_destinations: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Validate configuration."""
        for name in ("admin_identity", "orchestrator_address", "escrow_address", "fee_wallet"):
            value = getattr(self, name)
            if not value or value == ZERO_ADDRESS:
                raise ValueError(f"{name} is required")
        if self.registration_fee < 0:
            raise ValueError("registration_fee cannot be negative")
        if self.interval_seconds < 1:
            raise ValueError("interval_seconds must be at least 1")
        if self.same_chain_destination < 0:
            raise ValueError("same_chain_destination cannot be negative")


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    host: str
    port: int
    debug: bool
    log_level: str
    log_json: bool
    admin_identity: str
    orchestrator_address: str
    escrow_address: str
    fee_wallet: str
    registration_fee: int
    interval_seconds: int
    same_chain_destination: int
    allowed_destinations: frozenset[int]
    bridge: str
    bridge_fee: int

    @property
    def HOST(self) -> str:
        """Alias for host."""
        return self.host

    @property
    def PORT(self) -> int:
        """Alias for port."""
        return self.port

    @property
    def DEBUG(self) -> bool:
        """Alias for debug."""
        return self.debug

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./linkpay.db"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=os.getenv("LOG_JSON", "true").lower() == "true",
            admin_identity=os.getenv("ADMIN_IDENTITY", "admin"),
            orchestrator_address=os.getenv("ORCHESTRATOR_ADDRESS", "linkpay-orchestrator"),
            escrow_address=os.getenv("ESCROW_ADDRESS", "linkpay-escrow"),
            fee_wallet=os.getenv("FEE_WALLET", "linkpay-fees"),
            registration_fee=int(os.getenv("REGISTRATION_FEE", "100000000")),
            interval_seconds=int(
                os.getenv("PAY_INTERVAL_SECONDS", str(DEFAULT_INTERVAL_SECONDS))
            ),
            same_chain_destination=int(os.getenv("SAME_CHAIN_DESTINATION", "10004")),
            allowed_destinations=_parse_destinations(
                os.getenv("ALLOWED_DESTINATIONS", "10003,6,10005,10002")
            ),
            bridge=os.getenv("BRIDGE", "wormhole").lower(),
            bridge_fee=int(os.getenv("BRIDGE_FEE", "0")),
        )

    def orchestrator_config(self) -> OrchestratorConfig:
        """Build the immutable orchestrator configuration."""
        return OrchestratorConfig(
            admin_identity=self.admin_identity,
            orchestrator_address=self.orchestrator_address,
            escrow_address=self.escrow_address,
            fee_wallet=self.fee_wallet,
            registration_fee=self.registration_fee,
            interval_seconds=self.interval_seconds,
            same_chain_destination=self.same_chain_destination,
            allowed_destinations=self.allowed_destinations,
        )


def _parse_destinations(raw: str) -> frozenset[int]:
    return frozenset(int(part) for part in raw.split(",") if part.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
