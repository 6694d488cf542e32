"""API test fixtures — FastAPI test client wired to in-memory services.

Invariants:
    - get_session / get_orchestrator overridden per test; the lifespan never runs,
      so no real HTTP client is built
    - The orchestrator is disposed after each test (no reset timer outlives the loop)

Design Decisions:
    - dependency_overrides over app.state mutation: cleared in one call on teardown
    - Short display window (0.2s) keeps the status visible across two requests
"""

import pytest
from httpx import ASGITransport, AsyncClient

from schoolpay.api.dependencies import get_orchestrator, get_session
from schoolpay.main import app
from schoolpay.services.transaction_orchestrator import TransactionOrchestrator


@pytest.fixture
def orchestrator(ready_session, payment_gateway):
    orch = TransactionOrchestrator(
        payment_gateway, ready_session, display_window_seconds=0.2,
    )
    yield orch
    orch.dispose()


@pytest.fixture
def use_services():
    """Point the dependencies at the given session/orchestrator."""

    def _use(session, orch=None):
        app.dependency_overrides[get_session] = lambda: session
        if orch is not None:
            app.dependency_overrides[get_orchestrator] = lambda: orch

    yield _use
    app.dependency_overrides.clear()


@pytest.fixture
async def client(ready_session, orchestrator, use_services):
    """FastAPI test client over the ready session and its orchestrator."""
    use_services(ready_session, orchestrator)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
