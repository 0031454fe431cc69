"""Payment history endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from linkpay.api.dependencies import Orchestrator
from linkpay.api.schemas import EscrowResponse, PaymentHistoryResponse, PaymentRecordResponse

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("/history", response_model=PaymentHistoryResponse)
def payment_history(
    orchestrator: Orchestrator,
    company_id: int | None = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 500,
) -> PaymentHistoryResponse:
    """Payment events, newest first."""
    records = orchestrator.payment_history(company_id=company_id, limit=limit)
    return PaymentHistoryResponse(
        items=[PaymentRecordResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.get("/escrow", response_model=EscrowResponse)
def escrow_balance(orchestrator: Orchestrator) -> EscrowResponse:
    """Funds held in escrow by failed bridge submissions."""
    return EscrowResponse(
        address=orchestrator.config.escrow_address,
        balance=orchestrator.escrow_balance(),
    )
