"""Payment Routes — submit a payment and watch the status panel.

Invariants:
    - POST waits for session bootstrap (block, never reject, on a pending session)
    - POST returns 202 with the PROCESSING status; the charge continues in the background
    - A second POST while a status is on screen → 409 TRANSACTION_IN_PROGRESS
    - Stream emits the current status first, then every change in commit order

Design Decisions:
    - No request waits for the remote payment call: the UI polls or streams status,
      exactly as the status panel did
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from schoolpay.api.dependencies import get_orchestrator, get_session
from schoolpay.api.routes.stream_helpers import SSE_HEADERS, stream_snapshots
from schoolpay.core.domain_types import OneOffCharge
from schoolpay.core.transaction import TransactionStatus
from schoolpay.schemas.payment import PaymentCreate, TransactionStatusResponse
from schoolpay.services.session_bootstrapper import SessionBootstrapper
from schoolpay.services.transaction_orchestrator import TransactionOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post(
    "", response_model=TransactionStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_payment(
    body: PaymentCreate,
    session: SessionBootstrapper = Depends(get_session),
    orchestrator: TransactionOrchestrator = Depends(get_orchestrator),
):
    """Start a payment for an arbitrary amount."""
    await session.bootstrap()
    orchestrator.submit(body.amount)
    return TransactionStatusResponse.from_status(orchestrator.status)


@router.post(
    "/charges/{charge}", response_model=TransactionStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def pay_charge(
    charge: OneOffCharge,
    session: SessionBootstrapper = Depends(get_session),
    orchestrator: TransactionOrchestrator = Depends(get_orchestrator),
):
    """Start a payment for a one-off charge (admission form, entrance exam)."""
    await session.bootstrap()
    orchestrator.pay_charge(charge)
    return TransactionStatusResponse.from_status(orchestrator.status)


@router.get("/status", response_model=TransactionStatusResponse)
async def get_payment_status(
    orchestrator: TransactionOrchestrator = Depends(get_orchestrator),
):
    return TransactionStatusResponse.from_status(orchestrator.status)


def status_event(value: TransactionStatus) -> dict:
    return {
        "type": "payment_status",
        "data": TransactionStatusResponse.from_status(value).model_dump(mode="json"),
    }


@router.get("/stream")
async def stream_payment_status(
    orchestrator: TransactionOrchestrator = Depends(get_orchestrator),
):
    """SSE stream of status panel changes."""
    return StreamingResponse(
        stream_snapshots(orchestrator.subscribe, lambda: orchestrator.status, status_event),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
