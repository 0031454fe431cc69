"""Admin endpoints. Every mutating call requires the admin caller identity."""

from fastapi import APIRouter

from linkpay.api.dependencies import Caller, Orchestrator
from linkpay.api.schemas import (
    CompanyDeletedResponse,
    CompanyResponse,
    DestinationsResponse,
    DestinationUpdate,
    EmployeeResponse,
    ErrorResponse,
    EscrowResponse,
    EscrowWithdrawal,
    IntervalUpdate,
    OwnershipTransfer,
    RegistrationFeeUpdate,
    SettingsResponse,
)
from linkpay.config import network_name

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={403: {"model": ErrorResponse}},
)


@router.get("/settings", response_model=SettingsResponse)
def get_settings(orchestrator: Orchestrator) -> SettingsResponse:
    return SettingsResponse.model_validate(orchestrator.settings())


@router.get("/destinations", response_model=DestinationsResponse)
def list_destinations(orchestrator: Orchestrator) -> DestinationsResponse:
    destinations = orchestrator.allowed_destinations()
    return DestinationsResponse(
        destinations=destinations,
        networks={d: network_name(d) for d in destinations},
    )


@router.put("/destinations/{destination}", response_model=DestinationsResponse)
def set_destination(
    orchestrator: Orchestrator,
    caller: Caller,
    destination: int,
    payload: DestinationUpdate,
) -> DestinationsResponse:
    orchestrator.set_allowed_destination(caller, destination, payload.allowed)
    return list_destinations(orchestrator)


@router.put("/interval", response_model=SettingsResponse)
def set_interval(
    orchestrator: Orchestrator, caller: Caller, payload: IntervalUpdate
) -> SettingsResponse:
    orchestrator.set_interval(caller, payload.interval_seconds)
    return get_settings(orchestrator)


@router.put("/registration-fee", response_model=SettingsResponse)
def set_registration_fee(
    orchestrator: Orchestrator, caller: Caller, payload: RegistrationFeeUpdate
) -> SettingsResponse:
    orchestrator.set_registration_fee(caller, payload.registration_fee)
    return get_settings(orchestrator)


@router.post("/ownership", response_model=SettingsResponse)
def transfer_ownership(
    orchestrator: Orchestrator, caller: Caller, payload: OwnershipTransfer
) -> SettingsResponse:
    orchestrator.transfer_ownership(caller, payload.new_admin)
    return get_settings(orchestrator)


@router.post("/companies/{company_id}/deactivate", response_model=CompanyResponse)
def deactivate_company(
    orchestrator: Orchestrator, caller: Caller, company_id: int
) -> CompanyResponse:
    return CompanyResponse.model_validate(orchestrator.deactivate_company(caller, company_id))


@router.post("/companies/{company_id}/activate", response_model=CompanyResponse)
def activate_company(
    orchestrator: Orchestrator, caller: Caller, company_id: int
) -> CompanyResponse:
    return CompanyResponse.model_validate(orchestrator.activate_company(caller, company_id))


@router.delete("/companies/{company_id}", response_model=CompanyDeletedResponse)
def delete_company(
    orchestrator: Orchestrator, caller: Caller, company_id: int
) -> CompanyDeletedResponse:
    removed = orchestrator.delete_company(caller, company_id)
    return CompanyDeletedResponse(company_id=company_id, removed_employee_ids=removed)


@router.post(
    "/companies/{company_id}/employees/{employee_id}/deactivate",
    response_model=EmployeeResponse,
)
def admin_deactivate_employee(
    orchestrator: Orchestrator, caller: Caller, company_id: int, employee_id: int
) -> EmployeeResponse:
    employee = orchestrator.admin_deactivate_employee(caller, company_id, employee_id)
    return EmployeeResponse.model_validate(employee)


@router.post("/escrow/withdraw", response_model=EscrowResponse)
def withdraw_escrow(
    orchestrator: Orchestrator, caller: Caller, payload: EscrowWithdrawal
) -> EscrowResponse:
    """Move stranded escrow funds to a beneficiary."""
    orchestrator.withdraw_escrow(caller, payload.beneficiary, payload.amount)
    return EscrowResponse(
        address=orchestrator.config.escrow_address,
        balance=orchestrator.escrow_balance(),
    )
