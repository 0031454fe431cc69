"""API routes."""

from linkpay.api.routes.admin import router as admin_router
from linkpay.api.routes.companies import router as companies_router
from linkpay.api.routes.employees import router as employees_router
from linkpay.api.routes.health import router as health_router
from linkpay.api.routes.payments import router as payments_router
from linkpay.api.routes.scheduler import router as scheduler_router

__all__ = [
    "admin_router",
    "companies_router",
    "employees_router",
    "health_router",
    "payments_router",
    "scheduler_router",
]
