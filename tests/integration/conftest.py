"""Integration test fixtures: the HTTP API over an in-memory database."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from linkpay.api.app import create_app
from linkpay.orchestrator import PayrollOrchestrator
from tests.conftest import ADMIN, OWNER_A

ADMIN_HEADERS = {"X-Caller-Identity": ADMIN}
OWNER_HEADERS = {"X-Caller-Identity": OWNER_A}


@pytest_asyncio.fixture
async def app(orchestrator: PayrollOrchestrator) -> FastAPI:
    """Application bound to the test orchestrator."""
    return create_app(orchestrator)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
