"""Payment routes — accept, reject, and report the status panel.

Invariants:
    - Accepted payment answers 202 with the PROCESSING status
    - A second payment while a status is on screen answers 409 with no extra charge
    - Body validation rejects non-integer and non-positive amounts with 400
"""

import pytest
from httpx import ASGITransport, AsyncClient

from schoolpay.core.domain_types import TransactionState
from schoolpay.main import app
from schoolpay.services.session_bootstrapper import SessionBootstrapper
from schoolpay.services.transaction_orchestrator import TransactionOrchestrator


async def test_submit_returns_processing(client, payment_gateway, orchestrator, wait_for_state):
    resp = await client.post("/api/v1/payments", json={"amount": 85000})

    assert resp.status_code == 202
    data = resp.json()
    assert data["state"] == "processing"
    assert data["message"] == "Processing payment..."
    assert data["transaction"]["requester_id"] == "anon-1"

    await wait_for_state(orchestrator, TransactionState.SUCCEEDED)
    status = (await client.get("/api/v1/payments/status")).json()
    assert status["state"] == "succeeded"
    assert status["transaction"]["reference"] == "TXN-1"
    assert payment_gateway.calls == [{"amount": 85000, "userId": "anon-1"}]


async def test_second_submit_conflicts(client, payment_gateway):
    payment_gateway.hold()
    first = await client.post("/api/v1/payments", json={"amount": 1000})
    second = await client.post("/api/v1/payments", json={"amount": 2000})

    assert first.status_code == 202
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "TRANSACTION_IN_PROGRESS"
    assert second.json()["error"]["context"]["transaction_state"] == "processing"
    assert len(payment_gateway.calls) <= 1
    payment_gateway.gate.set()


@pytest.mark.parametrize("amount", [0, -100, 12.5, "1000", True])
async def test_invalid_amount_is_400(client, payment_gateway, amount):
    resp = await client.post("/api/v1/payments", json={"amount": amount})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert payment_gateway.calls == []


async def test_pay_one_off_charge(client, orchestrator, payment_gateway, wait_for_state):
    resp = await client.post("/api/v1/payments/charges/admission_form")
    assert resp.status_code == 202
    assert resp.json()["transaction"]["amount"] == 500

    await wait_for_state(orchestrator, TransactionState.SUCCEEDED)
    assert payment_gateway.calls[0]["amount"] == 500


async def test_unknown_charge_is_400(client):
    resp = await client.post("/api/v1/payments/charges/library_fine")
    assert resp.status_code == 400


async def test_status_idle_initially(client):
    resp = await client.get("/api/v1/payments/status")
    assert resp.json() == {"state": "idle", "message": None, "transaction": None}


async def test_submit_waits_for_pending_session(
    make_provider, payment_gateway, use_services,
):
    session = SessionBootstrapper(make_provider())
    orch = TransactionOrchestrator(payment_gateway, session, display_window_seconds=0.2)
    use_services(session, orch)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        resp = await c.post("/api/v1/payments", json={"amount": 1000})

    assert resp.status_code == 202
    assert resp.json()["transaction"]["requester_id"] == "anon-1"
    orch.dispose()


async def test_disposed_orchestrator_is_503(client, orchestrator):
    orchestrator.dispose()
    resp = await client.post("/api/v1/payments", json={"amount": 1000})
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "ORCHESTRATOR_DISPOSED"
