"""Access to the persisted orchestrator state and the allowed-destination set."""

from __future__ import annotations

import time
from typing import Callable

from sqlalchemy import select
from sqlalchemy.orm import Session

from linkpay.config import OrchestratorConfig
from linkpay.errors import InvariantViolation
from linkpay.models import STATE_ROW_ID, AllowedDestination, OrchestratorState

Clock = Callable[[], int]


def system_clock() -> int:
    """Current time in epoch seconds."""
    return int(time.time())


def bootstrap_state(session: Session, config: OrchestratorConfig) -> OrchestratorState:
    """Seed orchestrator state from configuration if not yet present."""
    state = session.get(OrchestratorState, STATE_ROW_ID)
    if state is not None:
        return state

    state = OrchestratorState(
        state_id=STATE_ROW_ID,
        admin_identity=config.admin_identity,
        interval_seconds=config.interval_seconds,
        registration_fee=config.registration_fee,
        last_company_index=0,
        last_employee_index=0,
    )
    session.add(state)
    for destination in sorted(config.allowed_destinations):
        if destination != config.same_chain_destination:
            session.add(AllowedDestination(destination=destination))
    session.flush()
    return state


def load_state(session: Session, *, for_update: bool = False) -> OrchestratorState:
    """Load the single state row; missing state is a bootstrap bug."""
    query = select(OrchestratorState).where(OrchestratorState.state_id == STATE_ROW_ID)
    if for_update:
        query = query.with_for_update()
    state = session.scalar(query)
    if state is None:
        raise InvariantViolation("Orchestrator state is not bootstrapped")
    return state


def allowed_destinations(session: Session) -> set[int]:
    """Remote destinations currently allowed (excludes the same-chain sentinel)."""
    return set(session.scalars(select(AllowedDestination.destination)))


def is_destination_allowed(session: Session, destination: int, same_chain: int) -> bool:
    if destination == same_chain:
        return True
    return session.get(AllowedDestination, destination) is not None
