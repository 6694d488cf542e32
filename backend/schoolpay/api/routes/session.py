"""Session Routes — current identity and its transition stream.

Invariants:
    - GET never blocks on bootstrap: a pending session is reported as pending
    - FAILED sessions include the IdentityResolutionExhausted envelope under "error"
    - Stream emits the current snapshot first, then every transition in order
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from schoolpay.api.dependencies import get_session
from schoolpay.api.routes.stream_helpers import SSE_HEADERS, stream_snapshots
from schoolpay.core.identity import SessionSnapshot
from schoolpay.schemas.session import SessionResponse
from schoolpay.services.session_bootstrapper import SessionBootstrapper

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/session", tags=["session"])


def _session_response(
    session: SessionBootstrapper, snapshot: SessionSnapshot,
) -> SessionResponse:
    error = session.failure.to_response() if session.failure else None
    return SessionResponse.from_snapshot(snapshot, session.app_id, error)


@router.get("", response_model=SessionResponse)
async def get_current_session(
    session: SessionBootstrapper = Depends(get_session),
):
    """Current bootstrap phase and identity."""
    return _session_response(session, session.snapshot())


def session_event(session: SessionBootstrapper, snapshot: SessionSnapshot) -> dict:
    return {
        "type": "session",
        "data": _session_response(session, snapshot).model_dump(mode="json"),
    }


@router.get("/stream")
async def stream_session(
    until_ready: bool = Query(False),
    session: SessionBootstrapper = Depends(get_session),
):
    """SSE stream of session snapshots. until_ready closes it at the first terminal phase."""
    stop_when = (lambda s: s.phase.is_terminal) if until_ready else None
    return StreamingResponse(
        stream_snapshots(
            session.subscribe,
            session.snapshot,
            lambda s: session_event(session, s),
            stop_when,
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
