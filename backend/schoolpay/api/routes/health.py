"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 until session bootstrap reaches a terminal phase
    - A FAILED session is still "ready": the site works with the sentinel identity

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from schoolpay.api.dependencies import get_session
from schoolpay.services.session_bootstrapper import SessionBootstrapper

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "schoolpay-api",
        "version": "0.1.0",
    }


@router.get("/ready")
async def readiness_check(session: SessionBootstrapper = Depends(get_session)):
    """Readiness probe — session identity resolved (or definitively failed)."""
    phase = session.phase
    if not phase.is_terminal:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "session_pending", "phase": phase.value},
        )
    return {"status": "ready", "checks": {"session": phase.value}}
