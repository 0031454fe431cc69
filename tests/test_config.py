"""Tests for settings and orchestrator configuration."""

import pytest

from linkpay.config import (
    DEFAULT_INTERVAL_SECONDS,
    ZERO_ADDRESS,
    OrchestratorConfig,
    Settings,
    network_name,
)


@pytest.fixture
def clean_env(monkeypatch):
    # No .env file is read into the test environment
    monkeypatch.setattr("linkpay.config.load_dotenv", lambda: None)
    for name in (
        "DATABASE_URL",
        "PORT",
        "LOG_JSON",
        "REGISTRATION_FEE",
        "PAY_INTERVAL_SECONDS",
        "ALLOWED_DESTINATIONS",
        "BRIDGE",
        "BRIDGE_FEE",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings.from_env()

        assert settings.database_url == "sqlite:///./linkpay.db"
        assert settings.port == 8000
        assert settings.log_json is True
        assert settings.interval_seconds == DEFAULT_INTERVAL_SECONDS
        assert settings.allowed_destinations == frozenset({10003, 6, 10005, 10002})
        assert settings.bridge == "wormhole"
        assert settings.bridge_fee == 0

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("PORT", "9100")
        clean_env.setenv("PAY_INTERVAL_SECONDS", "60")
        clean_env.setenv("ALLOWED_DESTINATIONS", "6, 10003,")
        clean_env.setenv("BRIDGE", "CCIP")

        settings = Settings.from_env()

        assert settings.PORT == 9100
        assert settings.interval_seconds == 60
        assert settings.allowed_destinations == frozenset({6, 10003})
        assert settings.bridge == "ccip"

    def test_orchestrator_config(self, clean_env):
        clean_env.setenv("REGISTRATION_FEE", "5")

        config = Settings.from_env().orchestrator_config()

        assert config.registration_fee == 5
        assert config.same_chain_destination == 10004


class TestOrchestratorConfig:
    def test_valid(self):
        config = OrchestratorConfig("admin", "orch", "escrow", "fees")
        assert config.interval_seconds == DEFAULT_INTERVAL_SECONDS
        assert config.allowed_destinations == frozenset()

    @pytest.mark.parametrize("admin", ["", ZERO_ADDRESS])
    def test_identities_required(self, admin):
        with pytest.raises(ValueError):
            OrchestratorConfig(admin, "orch", "escrow", "fees")

    def test_rejects_negative_fee(self):
        with pytest.raises(ValueError):
            OrchestratorConfig("admin", "orch", "escrow", "fees", registration_fee=-1)

    def test_rejects_zero_interval(self):
        with pytest.raises(ValueError):
            OrchestratorConfig("admin", "orch", "escrow", "fees", interval_seconds=0)


def test_network_names():
    assert network_name(10004) == "Base Sepolia"
    assert network_name(6) == "Avalanche Fuji"
    assert network_name(4242) == "Unknown"
