"""Company API endpoints."""

from fastapi import APIRouter, status

from linkpay.api.dependencies import Caller, Orchestrator
from linkpay.api.schemas import (
    CompanyCreate,
    CompanyResponse,
    EmployeeResponse,
    ErrorResponse,
)

router = APIRouter(prefix="/companies", tags=["companies"])


@router.post(
    "",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def register_company(
    orchestrator: Orchestrator,
    caller: Caller,
    payload: CompanyCreate,
) -> CompanyResponse:
    """Register a company owned by the caller, collecting the registration fee."""
    company = orchestrator.register_company(caller, payload.name)
    return CompanyResponse.model_validate(company)


@router.get("", response_model=list[CompanyResponse])
def list_companies(orchestrator: Orchestrator) -> list[CompanyResponse]:
    return [CompanyResponse.model_validate(c) for c in orchestrator.list_companies()]


@router.get(
    "/me",
    response_model=CompanyResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_own_company(orchestrator: Orchestrator, caller: Caller) -> CompanyResponse:
    """Company owned by the caller."""
    return CompanyResponse.model_validate(orchestrator.get_company_by_owner(caller))


@router.get(
    "/{company_id}",
    response_model=CompanyResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_company(orchestrator: Orchestrator, company_id: int) -> CompanyResponse:
    return CompanyResponse.model_validate(orchestrator.get_company(company_id))


@router.get(
    "/{company_id}/employees",
    response_model=list[EmployeeResponse],
    responses={404: {"model": ErrorResponse}},
)
def list_company_employees(orchestrator: Orchestrator, company_id: int) -> list[EmployeeResponse]:
    return [EmployeeResponse.model_validate(e) for e in orchestrator.list_employees(company_id)]
