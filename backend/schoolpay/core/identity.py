"""Identity — resolved principal values and the session bootstrap transition table.

Invariants:
    - Identity is frozen: a new sign-in produces a new value, never an in-place edit
    - FAILED_IDENTITY is the only Identity with origin FAILED
    - SESSION_TRANSITIONS lists every legal edge; anything else is a programming error
    - Terminal phases (READY, FAILED) only move to READY (provider reports a new principal)

Design Decisions:
    - Transition table as a dict of sets: every state and its successors are enumerable
      and testable without running the async driver
    - Principal kept separate from Identity: the provider does not know which strategy
      in the chain produced it, the bootstrapper does
"""

from dataclasses import dataclass

from schoolpay.core.domain_types import BootstrapPhase, IdentityOrigin, UserId
from schoolpay.core.errors import InvalidTransitionError


@dataclass(frozen=True)
class Principal:
    """What the credential provider hands back after a successful sign-in."""
    uid: str
    id_token: str | None = None


@dataclass(frozen=True)
class Identity:
    """The resolved user principal, tagged with the strategy that produced it."""
    id: UserId
    origin: IdentityOrigin

    @classmethod
    def from_principal(cls, principal: Principal, origin: IdentityOrigin) -> "Identity":
        return cls(id=UserId(principal.uid), origin=origin)

    @property
    def is_failed(self) -> bool:
        return self.origin is IdentityOrigin.FAILED


# Shown in place of a user id when every sign-in strategy failed
FAILED_IDENTITY = Identity(
    id=UserId("anonymous-user-failed"), origin=IdentityOrigin.FAILED,
)


@dataclass(frozen=True)
class SessionSnapshot:
    """One committed bootstrap state, as delivered to subscribers."""
    phase: BootstrapPhase
    identity: Identity | None = None


SESSION_TRANSITIONS: dict[BootstrapPhase, frozenset[BootstrapPhase]] = {
    BootstrapPhase.PENDING: frozenset({
        BootstrapPhase.RESOLVING_EXISTING,
        BootstrapPhase.FAILED,          # no credential provider configured
    }),
    BootstrapPhase.RESOLVING_EXISTING: frozenset({
        BootstrapPhase.READY,
        BootstrapPhase.RESOLVING_TOKEN,
        BootstrapPhase.RESOLVING_ANONYMOUS,
    }),
    BootstrapPhase.RESOLVING_TOKEN: frozenset({
        BootstrapPhase.READY,
        BootstrapPhase.RESOLVING_ANONYMOUS,
    }),
    BootstrapPhase.RESOLVING_ANONYMOUS: frozenset({
        BootstrapPhase.READY,
        BootstrapPhase.FAILED,
    }),
    BootstrapPhase.READY: frozenset({BootstrapPhase.READY}),
    BootstrapPhase.FAILED: frozenset({BootstrapPhase.READY}),
}


def assert_session_transition(
    current: BootstrapPhase, target: BootstrapPhase,
) -> None:
    """Raise InvalidTransitionError unless current -> target is a legal edge."""
    if target not in SESSION_TRANSITIONS[current]:
        raise InvalidTransitionError("session", current.value, target.value)
