"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from linkpay.api.dependencies import Orchestrator
from linkpay.database import unit_of_work

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str
    bridge: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
def health_check(orchestrator: Orchestrator) -> HealthResponse:
    """Check API and database health."""
    db_status = "unhealthy"
    try:
        with unit_of_work(orchestrator.session_factory) as session:
            session.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        logger.exception("Database health check failed")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        bridge=orchestrator.bridge.adapter_name,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
def readiness_check(orchestrator: Orchestrator) -> dict[str, str]:
    """Readiness check for container orchestration."""
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
