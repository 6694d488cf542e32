"""Root conftest — shared test configuration and in-memory collaborators.

Invariants:
    - Tests never reach the network: credential and payment collaborators are fakes
    - Every fake records its calls so tests can count outbound requests

Design Decisions:
    - Fakes are flat classes exposed through fixtures (no inheritance from the real
      clients): Protocols are structural, so they satisfy the services directly
    - `gate` is an asyncio.Event a test can hold to freeze a call mid-flight
"""

import asyncio
import os

import pytest

from schoolpay.core.collaborator_protocols import PaymentReceipt
from schoolpay.core.domain_types import TransactionState
from schoolpay.core.identity import Principal
from schoolpay.services.session_bootstrapper import SessionBootstrapper

# Ensure tests don't pick up a developer's real credentials
os.environ.pop("SCHOOLPAY_INITIAL_AUTH_TOKEN", None)
os.environ.pop("SCHOOLPAY_FIREBASE_CONFIG", None)
os.environ.setdefault("SCHOOLPAY_LOG_FORMAT", "text")


class FakeCredentialProvider:
    """In-memory credential provider with scripted outcomes."""

    def __init__(
        self,
        existing: Principal | None = None,
        token_principal: Principal | None = None,
        anonymous_principal: Principal | None = None,
        existing_error: Exception | None = None,
        token_error: Exception | None = None,
        anonymous_error: Exception | None = None,
    ):
        self.existing = existing
        self.token_principal = token_principal or Principal(uid="token-user")
        self.anonymous_principal = anonymous_principal or Principal(uid="anon-1")
        self.existing_error = existing_error
        self.token_error = token_error
        self.anonymous_error = anonymous_error
        self.calls: list[tuple] = []
        self.listeners: list = []
        self.gate: asyncio.Event | None = None

    def hold(self) -> asyncio.Event:
        self.gate = asyncio.Event()
        return self.gate

    def on_identity_change(self, listener):
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def emit(self, principal: Principal | None) -> None:
        for listener in list(self.listeners):
            listener(principal)

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()

    async def resolve_existing(self):
        self.calls.append(("existing",))
        await self._wait()
        if self.existing_error:
            raise self.existing_error
        return self.existing

    async def exchange_token(self, token):
        self.calls.append(("token", token))
        await self._wait()
        if self.token_error:
            raise self.token_error
        return self.token_principal

    async def resolve_anonymous(self):
        self.calls.append(("anonymous",))
        await self._wait()
        if self.anonymous_error:
            raise self.anonymous_error
        return self.anonymous_principal


class FakePaymentGateway:
    """In-memory payment endpoint. Records every charge payload."""

    def __init__(
        self,
        receipt: PaymentReceipt | None = None,
        error: Exception | None = None,
    ):
        self.receipt = receipt or PaymentReceipt(transaction_id="TXN-1")
        self.error = error
        self.calls: list[dict] = []
        self.gate: asyncio.Event | None = None

    def hold(self) -> asyncio.Event:
        self.gate = asyncio.Event()
        return self.gate

    async def charge(self, amount, user_id):
        self.calls.append({"amount": amount, "userId": user_id})
        if self.gate is not None:
            await self.gate.wait()
        if self.error:
            raise self.error
        return self.receipt


@pytest.fixture
def credential_provider():
    return FakeCredentialProvider()


@pytest.fixture
def make_provider():
    """Factory for providers with scripted outcomes."""
    return FakeCredentialProvider


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def make_gateway():
    return FakePaymentGateway


@pytest.fixture
async def ready_session(credential_provider):
    """Session already bootstrapped to an anonymous identity (uid anon-1)."""
    session = SessionBootstrapper(credential_provider)
    await session.bootstrap()
    return session


@pytest.fixture
def wait_for_state():
    """Poll an orchestrator until it reaches a state (fails after timeout)."""

    async def _wait(orchestrator, state: TransactionState, timeout: float = 1.0):
        async def _poll():
            while orchestrator.status.state is not state:
                await asyncio.sleep(0.005)

        await asyncio.wait_for(_poll(), timeout)
        return orchestrator.status

    return _wait
