"""Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from linkpay.config import network_name


# ============================================================================
# Companies and employees
# ============================================================================


class CompanyCreate(BaseModel):
    """Schema for registering a company."""

    name: str


class CompanyResponse(BaseModel):
    """Schema for company response."""

    model_config = ConfigDict(from_attributes=True)

    company_id: int
    owner_identity: str
    name: str
    active: bool
    registered_at: int
    employee_ids: list[int]


class EmployeeCreate(BaseModel):
    """Schema for adding an employee to the caller's company."""

    name: str
    payout_address: str
    destination: int
    salary: int


class EmployeeUpdate(BaseModel):
    """Schema for updating an employee; omitted fields are unchanged."""

    name: str | None = None
    payout_address: str | None = None
    destination: int | None = None
    salary: int | None = None
    next_pay_date: int | None = None
    active: bool | None = None


class EmployeeResponse(BaseModel):
    """Schema for employee response."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    company_id: int
    name: str
    payout_address: str
    destination: int
    salary: int
    next_pay_date: int
    active: bool

    @computed_field  # type: ignore[prop-decorator]
    @property
    def network(self) -> str:
        return network_name(self.destination)


# ============================================================================
# Scheduler
# ============================================================================


class DispatchTokenSchema(BaseModel):
    """Scan result handed back to dispatch unchanged."""

    model_config = ConfigDict(from_attributes=True)

    company_id: int
    employee_id: int
    company_index: int = Field(ge=0)
    employee_index: int = Field(ge=0)
    next_pay_date: int
    next_company_index: int
    next_employee_index: int


class ScanResponse(BaseModel):
    due: bool
    token: DispatchTokenSchema | None = None


class DispatchOutcomeResponse(BaseModel):
    """Schema for one dispatch outcome."""

    state: str
    trigger: str
    company_id: int
    employee_id: int
    amount: int
    destination: int
    next_pay_date: int
    tracking_handle: str | None = None
    reason: str | None = None
    stranded_amount: int = 0


class RunOnceResponse(BaseModel):
    dispatched: bool
    outcome: DispatchOutcomeResponse | None = None


class PayNowRequest(BaseModel):
    fee_paid: int = Field(default=0, ge=0)


# ============================================================================
# Payments
# ============================================================================


class PaymentRecordResponse(BaseModel):
    """Schema for one payment history entry."""

    model_config = ConfigDict(from_attributes=True)

    sequence: int
    event_id: str
    event_type: str
    status: str
    company_id: int
    employee_id: int
    employee_name: str
    payout_address: str
    amount: int
    destination: int
    network: str
    tracking_handle: str | None = None
    reason: str | None = None
    occurred_at: datetime


class PaymentHistoryResponse(BaseModel):
    items: list[PaymentRecordResponse]
    total: int


class EscrowResponse(BaseModel):
    address: str
    balance: int


# ============================================================================
# Admin
# ============================================================================


class IntervalUpdate(BaseModel):
    interval_seconds: int


class RegistrationFeeUpdate(BaseModel):
    registration_fee: int


class DestinationUpdate(BaseModel):
    allowed: bool


class OwnershipTransfer(BaseModel):
    new_admin: str


class EscrowWithdrawal(BaseModel):
    beneficiary: str
    amount: int


class SettingsResponse(BaseModel):
    """Schema for the orchestrator settings snapshot."""

    model_config = ConfigDict(from_attributes=True)

    admin_identity: str
    interval_seconds: int
    registration_fee: int
    same_chain_destination: int
    allowed_destinations: list[int]
    last_company_index: int
    last_employee_index: int
    orchestrator_address: str
    escrow_address: str
    bridge: str


class DestinationsResponse(BaseModel):
    destinations: list[int]
    networks: dict[int, str]


class CompanyDeletedResponse(BaseModel):
    company_id: int
    removed_employee_ids: list[int]


# ============================================================================
# Errors
# ============================================================================


class ErrorDetail(BaseModel):
    code: str
    message: str
    request_id: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail
