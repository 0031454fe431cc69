"""FastAPI application factory."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from linkpay.api.errors import error_response, get_request_id, status_for
from linkpay.api.routes import (
    admin_router,
    companies_router,
    employees_router,
    health_router,
    payments_router,
    scheduler_router,
)
from linkpay.config import get_settings
from linkpay.errors import PayrollError
from linkpay.logging_utils import setup_logging
from linkpay.orchestrator import PayrollOrchestrator, build_orchestrator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    if getattr(app.state, "orchestrator", None) is None:
        settings = get_settings()
        setup_logging(settings.log_level, json_output=settings.log_json)
        app.state.orchestrator = build_orchestrator(settings)
    yield


def create_app(orchestrator: PayrollOrchestrator | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        orchestrator: Pre-built orchestrator; built from settings on startup
            when omitted.
    """
    app = FastAPI(
        title="LinkPay Orchestrator API",
        description="Automated cross-network payroll",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-Id"] = request_id
            return response
        finally:
            logger.info(
                "request_complete",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": status_code,
                    "latency_ms": round((time.perf_counter() - start) * 1000, 2),
                    "actor": getattr(request.state, "actor", None),
                },
            )

    # Exception handlers
    @app.exception_handler(PayrollError)
    async def payroll_error_handler(request: Request, exc: PayrollError) -> JSONResponse:
        status_code = status_for(exc)
        logger.info(
            "request_rejected",
            extra={
                "request_id": get_request_id(request),
                "code": exc.code,
                "status_code": status_code,
            },
        )
        return error_response(
            request,
            status_code=status_code,
            code=exc.code,
            message=exc.message,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        code_map = {
            401: "MISSING_CALLER",
            404: "NOT_FOUND",
            503: "UNAVAILABLE",
        }
        return error_response(
            request,
            status_code=exc.status_code,
            code=code_map.get(exc.status_code, "HTTP_ERROR"),
            message=str(exc.detail) if exc.detail else "Request failed.",
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(
            request,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="VALIDATION_ERROR",
            message=str(exc.errors()),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_error",
            extra={
                "request_id": get_request_id(request),
                "path": request.url.path,
                "method": request.method,
            },
        )
        return error_response(
            request,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="INTERNAL_ERROR",
            message="An unexpected error occurred",
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(companies_router, prefix="/api/v1")
    app.include_router(employees_router, prefix="/api/v1")
    app.include_router(scheduler_router, prefix="/api/v1")
    app.include_router(payments_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    return app
