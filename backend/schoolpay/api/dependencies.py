"""API Dependencies — hand the process-wide session and orchestrator to routes.

Invariants:
    - Instances are created by the lifespan in main.py and stored on app.state
    - Routes never construct services themselves

Design Decisions:
    - app.state over module globals: tests swap in fakes per test without patching imports
"""

from fastapi import Request

from schoolpay.services.session_bootstrapper import SessionBootstrapper
from schoolpay.services.transaction_orchestrator import TransactionOrchestrator


def get_session(request: Request) -> SessionBootstrapper:
    """FastAPI dependency for the session bootstrapper."""
    return request.app.state.session


def get_orchestrator(request: Request) -> TransactionOrchestrator:
    """FastAPI dependency for the transaction orchestrator."""
    return request.app.state.orchestrator
