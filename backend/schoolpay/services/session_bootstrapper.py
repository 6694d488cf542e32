"""Session Bootstrapper — resolves the process identity once, via a fallback chain.

Invariants:
    - One resolution per instance: start()/bootstrap() reuse the same task (single-flight)
    - Chain order is fixed: existing session -> start-up token -> anonymous sign-in
    - RESOLVING_TOKEN is entered only when a token was configured
    - Token exchange failure of any kind falls back to anonymous (no finer retry policy)
    - Anonymous failure ends in FAILED with FAILED_IDENTITY; callers are never left PENDING
    - Every committed transition is published to subscribers, in commit order
    - The resolution task is shielded from caller cancellation and logs, never raises,
      when nobody awaits it

Design Decisions:
    - One coroutine per resolving phase, dispatched by a driver loop on the current
      phase: the chain reads as the transition table in core/identity.py
    - Provider identity-change notifications are ignored until the chain reaches a
      terminal phase; after that a different principal replaces the identity
    - Identity owned by this instance and read by reference (frozen value), not a
      module-level global
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from schoolpay.core.collaborator_protocols import CredentialProvider
from schoolpay.core.domain_types import BootstrapPhase, IdentityOrigin
from schoolpay.core.errors import ErrorContext, IdentityResolutionExhaustedError
from schoolpay.core.identity import (
    FAILED_IDENTITY, Identity, Principal, SessionSnapshot,
    assert_session_transition,
)
from schoolpay.services.notifier import Notifier

logger = logging.getLogger(__name__)


class SessionBootstrapper:
    """Owns the current Identity and the state machine that produces it."""

    def __init__(
        self,
        provider: CredentialProvider | None,
        initial_token: str | None = None,
        app_id: str = "default-app-id",
    ):
        self._provider = provider
        self._token = initial_token or None
        self.app_id = app_id
        self._phase = BootstrapPhase.PENDING
        self._identity: Identity | None = None
        self.failure: IdentityResolutionExhaustedError | None = None
        self._task: asyncio.Task[Identity] | None = None
        self._feed: Notifier[SessionSnapshot] = Notifier("session")
        self._unsubscribe_provider: Callable[[], None] | None = None
        self._steps: dict[BootstrapPhase, Callable[[], Awaitable[None]]] = {
            BootstrapPhase.RESOLVING_EXISTING: self._resolve_existing,
            BootstrapPhase.RESOLVING_TOKEN: self._resolve_token,
            BootstrapPhase.RESOLVING_ANONYMOUS: self._resolve_anonymous,
        }

    # ─── Read side ──────────────────────────────────────────────

    @property
    def phase(self) -> BootstrapPhase:
        return self._phase

    @property
    def current_identity(self) -> Identity | None:
        """Resolved identity, FAILED_IDENTITY after exhaustion, None while pending."""
        return self._identity

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(self._phase, self._identity)

    def subscribe(
        self, listener: Callable[[SessionSnapshot], None],
    ) -> Callable[[], None]:
        return self._feed.subscribe(listener)

    # ─── Lifecycle ──────────────────────────────────────────────

    def start(self) -> asyncio.Task[Identity]:
        """Schedule the resolution (once) and return its task without awaiting."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(
                self._run(), name="session-bootstrap",
            )
            self._task.add_done_callback(self._on_resolution_done)
        return self._task

    async def bootstrap(self) -> Identity:
        """Resolve the identity, or join the resolution already in flight."""
        return await asyncio.shield(self.start())

    def close(self) -> None:
        """Stop listening to the provider. The current identity stays readable."""
        if self._unsubscribe_provider is not None:
            self._unsubscribe_provider()
            self._unsubscribe_provider = None

    # ─── Resolution chain ───────────────────────────────────────

    async def _run(self) -> Identity:
        logger.info(
            "Session bootstrap started",
            extra={"app_id": self.app_id, "token_configured": self._token is not None},
        )
        if self._provider is None:
            self._fail("credential provider not configured")
            return self._identity

        self._unsubscribe_provider = self._provider.on_identity_change(
            self._on_provider_change,
        )
        self._commit(BootstrapPhase.RESOLVING_EXISTING)
        while not self._phase.is_terminal:
            await self._steps[self._phase]()
        return self._identity

    async def _resolve_existing(self) -> None:
        try:
            principal = await self._provider.resolve_existing()
        except Exception as e:
            logger.warning(
                f"Existing session lookup failed, continuing sign-in chain: {e}",
                extra={"error_code": getattr(e, "code", None)},
            )
            principal = None

        if principal is not None:
            self._ready(principal, IdentityOrigin.EXISTING)
        elif self._token:
            self._commit(BootstrapPhase.RESOLVING_TOKEN)
        else:
            self._commit(BootstrapPhase.RESOLVING_ANONYMOUS)

    async def _resolve_token(self) -> None:
        try:
            principal = await self._provider.exchange_token(self._token)
        except Exception as e:
            logger.warning(
                f"Token exchange failed, falling back to anonymous sign-in: {e}",
                extra={"error_code": getattr(e, "code", None)},
            )
            self._commit(BootstrapPhase.RESOLVING_ANONYMOUS)
            return
        self._ready(principal, IdentityOrigin.TOKEN_EXCHANGED)

    async def _resolve_anonymous(self) -> None:
        try:
            principal = await self._provider.resolve_anonymous()
        except Exception as e:
            logger.error(
                f"Anonymous sign-in failed: {e}",
                extra={"error_code": getattr(e, "code", None)},
                exc_info=True,
            )
            self._fail(str(e))
            return
        self._ready(principal, IdentityOrigin.ANONYMOUS)

    # ─── Transitions ────────────────────────────────────────────

    def _ready(self, principal: Principal, origin: IdentityOrigin) -> None:
        self._commit(
            BootstrapPhase.READY, Identity.from_principal(principal, origin),
        )

    def _fail(self, cause: str) -> None:
        self.failure = IdentityResolutionExhaustedError(
            cause, ErrorContext(phase=self._phase.value),
        )
        self._commit(BootstrapPhase.FAILED, FAILED_IDENTITY)

    def _commit(
        self, phase: BootstrapPhase, identity: Identity | None = None,
    ) -> None:
        assert_session_transition(self._phase, phase)
        self._phase = phase
        if identity is not None:
            self._identity = identity
        logger.info(
            f"Session phase -> {phase.value}",
            extra={
                "phase": phase.value,
                "requester_id": identity.id if identity else None,
                "identity_origin": identity.origin.value if identity else None,
            },
        )
        self._feed.publish(self.snapshot())

    def _on_provider_change(self, principal: Principal | None) -> None:
        if not self._phase.is_terminal:
            return
        if principal is None:
            logger.info("Provider reported sign-out, keeping current identity")
            return
        if self._identity is not None and principal.uid == self._identity.id:
            return
        self.failure = None
        self._ready(principal, IdentityOrigin.EXISTING)

    def _on_resolution_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            logger.warning("Session bootstrap cancelled before completion")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Session bootstrap crashed: {exc}", exc_info=exc)
