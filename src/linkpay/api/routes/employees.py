"""Employee API endpoints."""

from fastapi import APIRouter, status

from linkpay.api.dependencies import Caller, Orchestrator
from linkpay.api.schemas import (
    DispatchOutcomeResponse,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ErrorResponse,
    PayNowRequest,
)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def add_employee(
    orchestrator: Orchestrator,
    caller: Caller,
    payload: EmployeeCreate,
) -> EmployeeResponse:
    """Add an employee to the caller's company."""
    employee = orchestrator.add_employee(
        caller,
        payload.name,
        payload.payout_address,
        payload.destination,
        payload.salary,
    )
    return EmployeeResponse.model_validate(employee)


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_employee(orchestrator: Orchestrator, employee_id: int) -> EmployeeResponse:
    return EmployeeResponse.model_validate(orchestrator.get_employee(employee_id))


@router.patch(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_employee(
    orchestrator: Orchestrator,
    caller: Caller,
    employee_id: int,
    payload: EmployeeUpdate,
) -> EmployeeResponse:
    """Update fields of an employee of the caller's company."""
    employee = orchestrator.update_employee(
        caller, employee_id, **payload.model_dump(exclude_unset=True)
    )
    return EmployeeResponse.model_validate(employee)


@router.post(
    "/{employee_id}/deactivate",
    response_model=EmployeeResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def deactivate_employee(
    orchestrator: Orchestrator,
    caller: Caller,
    employee_id: int,
) -> EmployeeResponse:
    return EmployeeResponse.model_validate(
        orchestrator.deactivate_employee(caller, employee_id)
    )


@router.post(
    "/{employee_id}/pay-now",
    response_model=DispatchOutcomeResponse,
    responses={
        403: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def pay_now(
    orchestrator: Orchestrator,
    caller: Caller,
    employee_id: int,
    payload: PayNowRequest | None = None,
) -> DispatchOutcomeResponse:
    """Pay an employee immediately, regardless of the due date.

    Deferred payments return 200 with state `schedule_deferred` and a reason.
    """
    fee_paid = payload.fee_paid if payload else 0
    outcome = orchestrator.pay_now(caller, employee_id, fee_paid)
    return DispatchOutcomeResponse(**outcome.to_dict())
