"""Scheduler trigger endpoints for the automation service."""

from fastapi import APIRouter

from linkpay.api.dependencies import Orchestrator
from linkpay.api.schemas import (
    DispatchOutcomeResponse,
    DispatchTokenSchema,
    ErrorResponse,
    RunOnceResponse,
    ScanResponse,
)
from linkpay.services.scanner import DispatchToken

router = APIRouter(prefix="/scheduler", tags=["scheduler"])


@router.get("/scan", response_model=ScanResponse)
def scan(orchestrator: Orchestrator) -> ScanResponse:
    """Find at most one due payment without changing any state."""
    token = orchestrator.scan()
    if token is None:
        return ScanResponse(due=False)
    return ScanResponse(due=True, token=DispatchTokenSchema.model_validate(token))


@router.post(
    "/dispatch",
    response_model=DispatchOutcomeResponse,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def dispatch(orchestrator: Orchestrator, payload: DispatchTokenSchema) -> DispatchOutcomeResponse:
    """Settle the payment described by a token from /scan."""
    outcome = orchestrator.dispatch(DispatchToken.from_dict(payload.model_dump()))
    return DispatchOutcomeResponse(**outcome.to_dict())


@router.post("/run-once", response_model=RunOnceResponse)
def run_once(orchestrator: Orchestrator) -> RunOnceResponse:
    """Scan and dispatch in a single invocation."""
    outcome = orchestrator.run_once()
    if outcome is None:
        return RunOnceResponse(dispatched=False)
    return RunOnceResponse(
        dispatched=True,
        outcome=DispatchOutcomeResponse(**outcome.to_dict()),
    )
