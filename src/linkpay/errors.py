"""Error taxonomy for the payroll orchestrator.

Every rejected call raises a specific error kind so that callers can map it
to an actionable message ("approve more funds" vs "not your company").

Groups:
- AuthorizationError: caller is not allowed to perform the call
- ValidationError: inputs or current state reject the call
- NotFoundError: referenced record does not exist
- ResourceError: funds or allowance are missing (dispatch defers on these)
- ExternalDependencyError: bridge or other collaborator failed
- ScheduleConflict: a concurrent invocation already advanced the schedule

InvariantViolation is deliberately NOT a PayrollError: it signals a bug and
is never handled by the core.
"""

from __future__ import annotations


class PayrollError(Exception):
    """Base class for all expected domain errors."""

    code: str = "PAYROLL_ERROR"

    def __init__(self, message: str | None = None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


# =============================================================================
# Authorization
# =============================================================================


class AuthorizationError(PayrollError):
    """Caller is not authorized."""

    code = "UNAUTHORIZED"


class NotOwner(AuthorizationError):
    """Caller is not the orchestrator admin."""

    code = "NOT_OWNER"


class NotCompanyOwner(AuthorizationError):
    """Caller does not own a company."""

    code = "NOT_COMPANY_OWNER"


class OwnershipMismatch(AuthorizationError):
    """Employee does not belong to the caller's company."""

    code = "OWNERSHIP_MISMATCH"


# =============================================================================
# Validation
# =============================================================================


class ValidationError(PayrollError):
    """Request rejected by validation."""

    code = "VALIDATION_ERROR"


class ZeroAddress(ValidationError):
    """Address must not be empty or the zero address."""

    code = "ZERO_ADDRESS"


class InvalidAmount(ValidationError):
    """Amount must be a positive integer."""

    code = "INVALID_AMOUNT"


class InvalidName(ValidationError):
    """Name must not be empty."""

    code = "INVALID_NAME"


class ChainNotAllowed(ValidationError):
    """Destination is not in the allowed set."""

    code = "CHAIN_NOT_ALLOWED"


class InvalidChain(ValidationError):
    """Destination cannot be configured this way."""

    code = "INVALID_CHAIN"


class CompanyInactive(ValidationError):
    """Company is inactive."""

    code = "COMPANY_INACTIVE"


class EmployeeInactive(ValidationError):
    """Employee is inactive."""

    code = "EMPLOYEE_INACTIVE"


class DuplicateOwner(ValidationError):
    """Caller already owns a company."""

    code = "DUPLICATE_OWNER"


class InsufficientAuthorization(ValidationError):
    """Pre-authorized fee allowance is insufficient."""

    code = "INSUFFICIENT_AUTHORIZATION"


class PaymentNotDue(ValidationError):
    """Payment is no longer due."""

    code = "PAYMENT_NOT_DUE"


class InsufficientBridgeFee(ValidationError):
    """Supplied bridge fee does not cover the quoted fee."""

    code = "INSUFFICIENT_BRIDGE_FEE"


# =============================================================================
# Not found
# =============================================================================


class NotFoundError(PayrollError):
    """Referenced record does not exist."""

    code = "NOT_FOUND"


class CompanyNotFound(NotFoundError):
    """Company not found."""

    code = "COMPANY_NOT_FOUND"


class EmployeeNotFound(NotFoundError):
    """Employee not found."""

    code = "EMPLOYEE_NOT_FOUND"


# =============================================================================
# Resources and external dependencies
# =============================================================================


class ResourceError(PayrollError):
    """Funds or allowance are missing."""

    code = "RESOURCE_ERROR"


class InsufficientAllowance(ResourceError):
    """Payer allowance is below the required amount."""

    code = "INSUFFICIENT_ALLOWANCE"


class TokenTransferError(ResourceError):
    """Token transfer failed."""

    code = "TRANSFER_FAILED"


class ExternalDependencyError(PayrollError):
    """An external collaborator failed."""

    code = "EXTERNAL_DEPENDENCY_ERROR"


class BridgeSubmitError(ExternalDependencyError):
    """Bridge rejected the transfer."""

    code = "BRIDGE_SUBMIT_FAILED"


class ScheduleConflict(PayrollError):
    """Schedule was advanced by a concurrent invocation."""

    code = "SCHEDULE_CONFLICT"


# =============================================================================
# Invariant violations (fatal)
# =============================================================================


class InvariantViolation(RuntimeError):
    """Raised when internal state contradicts a core invariant.

    Indicates a bug (malformed scheduler input, cursor out of range,
    illegal lifecycle transition). Never handled by the core.
    """
