"""Boundary Protocols — contracts between core services and external collaborators.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - Credential and payment calls are async and fallible; implementations raise
      SchoolPayError subclasses, never raw transport exceptions
    - Implementations provided by the host (main.py) via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Identity-change listeners are plain sync callables: providers invoke them
      right after they commit a sign-in, so ordering matches provider state
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from schoolpay.core.identity import Principal


IdentityListener = Callable[[Principal | None], None]


@dataclass(frozen=True)
class PaymentReceipt:
    """Successful payment response. transaction_id may be omitted by the remote."""
    transaction_id: str | None = None


class CredentialProvider(Protocol):
    """Contract for the identity service — implemented by infrastructure."""
    def on_identity_change(
        self, listener: IdentityListener,
    ) -> Callable[[], None]: ...
    async def resolve_existing(self) -> Principal | None: ...
    async def exchange_token(self, token: str) -> Principal: ...
    async def resolve_anonymous(self) -> Principal: ...


class PaymentGateway(Protocol):
    """Contract for the payment endpoint — implemented by infrastructure."""
    async def charge(self, amount: int, user_id: str) -> PaymentReceipt: ...
