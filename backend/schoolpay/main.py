"""SchoolPay API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SchoolPayError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Session bootstrap is started exactly once, on startup, without blocking it
    - Shutdown disposes the orchestrator before its HTTP clients are closed

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Missing firebase apiKey is not a startup error: the session runs the
      no-provider path and ends FAILED with the sentinel identity
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from schoolpay.api.error_handlers import register_error_handlers
from schoolpay.api.routes import fees, health, payments, session
from schoolpay.config import Settings, get_settings
from schoolpay.core.errors import ConfigurationAbsentError
from schoolpay.infrastructure.firebase_auth_client import FirebaseAuthClient
from schoolpay.infrastructure.observability import setup_logging
from schoolpay.infrastructure.payment_client import PaymentGatewayClient
from schoolpay.services.session_bootstrapper import SessionBootstrapper
from schoolpay.services.transaction_orchestrator import TransactionOrchestrator

logger = logging.getLogger(__name__)


def build_credential_provider(settings: Settings) -> FirebaseAuthClient | None:
    """Firebase client, or None when no apiKey is configured."""
    try:
        return FirebaseAuthClient(
            settings.firebase_api_key,
            base_url=settings.identity_toolkit_url,
            timeout_seconds=settings.auth_timeout_seconds,
        )
    except ConfigurationAbsentError as e:
        logger.info(
            f"Credential provider disabled: {e.message}",
            extra={"error_code": e.code},
        )
        return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    provider = build_credential_provider(settings)
    gateway = PaymentGatewayClient(
        settings.payment_url, timeout_seconds=settings.payment_timeout_seconds,
    )
    session_bootstrapper = SessionBootstrapper(
        provider, settings.initial_auth_token, app_id=settings.app_id,
    )
    orchestrator = TransactionOrchestrator(
        gateway, session_bootstrapper,
        display_window_seconds=settings.status_display_seconds,
    )
    app.state.session = session_bootstrapper
    app.state.orchestrator = orchestrator

    session_bootstrapper.start()
    logger.info("SchoolPay API started", extra={"app_id": settings.app_id})
    yield
    logger.info("SchoolPay API shutting down")
    orchestrator.dispose()
    session_bootstrapper.close()
    await gateway.aclose()
    if provider is not None:
        await provider.aclose()


app = FastAPI(
    title="SchoolPay API", version="0.1.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(session.router)
app.include_router(fees.router)
app.include_router(payments.router)

register_error_handlers(app)
