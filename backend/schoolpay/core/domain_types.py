"""Domain Types — enums and NewTypes shared by the session, pricing and payment code.

Invariants:
    - UserId wraps the opaque principal id — never compare against raw provider payloads
    - Amount is an integer in minor units (NPR has no minor unit in use, so 1 == 1 rupee)
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (SSE payloads and API responses)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)


# ─── Value Types ─────────────────────────────────────────────────

Amount = NewType("Amount", int)   # minor units, > 0


# ─── Enums ───────────────────────────────────────────────────────

class GradeBand(str, Enum):
    """Grade bands offered by the annual fee calculator."""
    PRIMARY = "1-5"
    MIDDLE = "6-8"
    SECONDARY = "9-10"


class IdentityOrigin(str, Enum):
    """Which strategy in the sign-in chain produced the identity."""
    EXISTING = "existing"
    TOKEN_EXCHANGED = "token-exchanged"
    ANONYMOUS = "anonymous"
    FAILED = "failed"


class BootstrapPhase(str, Enum):
    """Session bootstrap lifecycle."""
    PENDING = "pending"
    RESOLVING_EXISTING = "resolving_existing"
    RESOLVING_TOKEN = "resolving_token"
    RESOLVING_ANONYMOUS = "resolving_anonymous"
    READY = "ready"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (BootstrapPhase.READY, BootstrapPhase.FAILED)


class TransactionState(str, Enum):
    """Payment lifecycle as shown to the user."""
    IDLE = "idle"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionState.SUCCEEDED, TransactionState.FAILED)


class OneOffCharge(str, Enum):
    """Non-refundable one-off charges payable online."""
    ADMISSION_FORM = "admission_form"
    ENTRANCE_EXAM = "entrance_exam"
