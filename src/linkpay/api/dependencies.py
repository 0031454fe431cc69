"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from linkpay.orchestrator import PayrollOrchestrator


def get_orchestrator(request: Request) -> PayrollOrchestrator:
    """Orchestrator attached to the application at startup."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Orchestrator is not initialized",
        )
    return orchestrator


def get_caller(
    request: Request,
    x_caller_identity: Annotated[str | None, Header()] = None,
) -> str:
    """Extract caller identity from header."""
    if not x_caller_identity or not x_caller_identity.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Caller-Identity header is required",
        )
    caller = x_caller_identity.strip()
    request.state.actor = caller
    return caller


# Type aliases for cleaner dependency injection
Orchestrator = Annotated[PayrollOrchestrator, Depends(get_orchestrator)]
Caller = Annotated[str, Depends(get_caller)]
