"""Pytest fixtures for LinkPay tests."""

from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from linkpay.bridges import CcipStub, WormholeCctpStub
from linkpay.config import OrchestratorConfig
from linkpay.database import create_schema, create_session_factory, get_engine
from linkpay.events import DomainEvent, EventEmitter
from linkpay.models import Company, Employee
from linkpay.orchestrator import PayrollOrchestrator
from linkpay.tokens.memory import InMemoryToken

# In-memory SQLite shared across connections via StaticPool
TEST_DATABASE_URL = "sqlite://"

ADMIN = "0xadmin"
ORCHESTRATOR = "linkpay-orchestrator"
ESCROW = "linkpay-escrow"
FEE_WALLET = "linkpay-fees"

OWNER_A = "0xaaaa000000000000000000000000000000000001"
OWNER_B = "0xbbbb000000000000000000000000000000000002"

BASE = 10004  # same-chain sentinel
ARBITRUM = 10003
AVALANCHE = 6

INTERVAL = 30 * 24 * 60 * 60
START = 1_700_000_000
SALARY = 1_000_000_000  # 1000 USDC


class FixedClock:
    """Controllable clock returning epoch seconds."""

    def __init__(self, now: int = START):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database per test."""
    engine = get_engine(TEST_DATABASE_URL)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Session for direct service-level tests."""
    with session_factory() as session:
        yield session
        session.rollback()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def token() -> InMemoryToken:
    return InMemoryToken()


@pytest.fixture
def ccip(token: InMemoryToken) -> CcipStub:
    return CcipStub(token, fee=0)


@pytest.fixture
def wormhole(token: InMemoryToken) -> WormholeCctpStub:
    return WormholeCctpStub(token, relayer_fee=10**16)


@pytest.fixture
def config() -> OrchestratorConfig:
    return OrchestratorConfig(
        admin_identity=ADMIN,
        orchestrator_address=ORCHESTRATOR,
        escrow_address=ESCROW,
        fee_wallet=FEE_WALLET,
        registration_fee=0,
        interval_seconds=INTERVAL,
        same_chain_destination=BASE,
        allowed_destinations=frozenset({ARBITRUM, AVALANCHE}),
    )


@pytest.fixture
def emitter() -> EventEmitter:
    return EventEmitter()


@pytest.fixture
def published(emitter: EventEmitter) -> list[DomainEvent]:
    """Events delivered to subscribers (only after commit)."""
    events: list[DomainEvent] = []
    emitter.on_all(events.append)
    return events


@pytest.fixture
def orchestrator(
    session_factory: sessionmaker[Session],
    config: OrchestratorConfig,
    token: InMemoryToken,
    ccip: CcipStub,
    emitter: EventEmitter,
    clock: FixedClock,
) -> PayrollOrchestrator:
    """Orchestrator on the CCIP stub (no bridge fee)."""
    orchestrator = PayrollOrchestrator(
        session_factory, config, token, ccip, emitter=emitter, clock=clock
    )
    orchestrator.bootstrap()
    return orchestrator


@pytest.fixture
def wormhole_orchestrator(
    session_factory: sessionmaker[Session],
    config: OrchestratorConfig,
    token: InMemoryToken,
    wormhole: WormholeCctpStub,
    emitter: EventEmitter,
    clock: FixedClock,
) -> PayrollOrchestrator:
    """Orchestrator on the Wormhole stub (relayer fee required)."""
    orchestrator = PayrollOrchestrator(
        session_factory, config, token, wormhole, emitter=emitter, clock=clock
    )
    orchestrator.bootstrap()
    return orchestrator


@pytest.fixture
def fund(token: InMemoryToken) -> Callable[..., None]:
    """Mint to a payer and approve the orchestrator."""

    def _fund(owner: str, balance: int, allowance: int | None = None) -> None:
        if balance > 0:
            token.mint(owner, balance)
        token.approve(owner, ORCHESTRATOR, balance if allowance is None else allowance)

    return _fund


@pytest.fixture
def make_company(
    orchestrator: PayrollOrchestrator,
) -> Callable[..., tuple[Company, list[Employee]]]:
    """Register a company and add employees, one per destination given."""

    def _make(
        owner: str = OWNER_A,
        destinations: list[int] | None = None,
        salary: int = SALARY,
    ) -> tuple[Company, list[Employee]]:
        company = orchestrator.register_company(owner, f"Company {owner[-4:]}")
        employees = [
            orchestrator.add_employee(
                owner,
                f"Employee {i}",
                f"0x{owner[2:6]}{i:036d}",
                destination,
                salary,
            )
            for i, destination in enumerate(destinations or [BASE])
        ]
        return company, employees

    return _make
