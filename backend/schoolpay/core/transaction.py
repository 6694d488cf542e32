"""Transaction — payment attempt values, status messages and the lifecycle table.

Invariants:
    - Transaction and TransactionStatus are frozen; every transition builds a new value
    - reference is set only on SUCCEEDED; ended_at only on SUCCEEDED/FAILED
    - IDLE carries neither a transaction nor a message (the status panel is closed)
    - amount is a positive int (bool rejected even though it subclasses int)

Design Decisions:
    - Pure transition functions take `now` as a parameter: deterministic in tests,
      the orchestrator passes its clock
    - User-facing messages live here, not in the orchestrator: the UI text is part
      of the status value observers receive
"""

from dataclasses import dataclass, replace
from datetime import datetime

from schoolpay.core.domain_types import Amount, TransactionState, UserId
from schoolpay.core.errors import InvalidAmountError, InvalidTransitionError


PROCESSING_MESSAGE = "Processing payment..."
REJECTED_MESSAGE = "Payment failed. Please try again."
NETWORK_FAILURE_MESSAGE = "Payment failed due to network error."
PLACEHOLDER_REFERENCE = "MOCK_TXN_123"


def success_message(reference: str) -> str:
    return f"Payment successful! Transaction ID: {reference}"


TRANSACTION_TRANSITIONS: dict[TransactionState, frozenset[TransactionState]] = {
    TransactionState.IDLE: frozenset({TransactionState.PROCESSING}),
    TransactionState.PROCESSING: frozenset({
        TransactionState.SUCCEEDED, TransactionState.FAILED,
    }),
    TransactionState.SUCCEEDED: frozenset({TransactionState.IDLE}),
    TransactionState.FAILED: frozenset({TransactionState.IDLE}),
}


def assert_transaction_transition(
    current: TransactionState, target: TransactionState,
) -> None:
    if target not in TRANSACTION_TRANSITIONS[current]:
        raise InvalidTransitionError("transaction", current.value, target.value)


def validate_amount(amount: object) -> Amount:
    """Return amount as Amount or raise InvalidAmountError."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError(amount)
    return Amount(amount)


@dataclass(frozen=True)
class Transaction:
    """One payment attempt."""
    amount: Amount
    requester_id: UserId
    state: TransactionState
    started_at: datetime
    ended_at: datetime | None = None
    reference: str | None = None


@dataclass(frozen=True)
class TransactionStatus:
    """What the status panel shows: state, message, and the attempt behind it."""
    state: TransactionState = TransactionState.IDLE
    message: str | None = None
    transaction: Transaction | None = None

    def to_dict(self) -> dict:
        tx = self.transaction
        return {
            "state": self.state.value,
            "message": self.message,
            "transaction": None if tx is None else {
                "amount": tx.amount,
                "requester_id": tx.requester_id,
                "reference": tx.reference,
                "started_at": tx.started_at.isoformat(),
                "ended_at": tx.ended_at.isoformat() if tx.ended_at else None,
            },
        }


IDLE_STATUS = TransactionStatus()


def begin_transaction(
    status: TransactionStatus, amount: Amount, requester_id: UserId, now: datetime,
) -> TransactionStatus:
    """IDLE -> PROCESSING."""
    assert_transaction_transition(status.state, TransactionState.PROCESSING)
    tx = Transaction(
        amount=amount, requester_id=requester_id,
        state=TransactionState.PROCESSING, started_at=now,
    )
    return TransactionStatus(TransactionState.PROCESSING, PROCESSING_MESSAGE, tx)


def complete_transaction(
    status: TransactionStatus, reference: str | None, now: datetime,
) -> TransactionStatus:
    """PROCESSING -> SUCCEEDED. Missing reference falls back to the placeholder."""
    assert_transaction_transition(status.state, TransactionState.SUCCEEDED)
    ref = reference or PLACEHOLDER_REFERENCE
    tx = replace(
        status.transaction,
        state=TransactionState.SUCCEEDED, ended_at=now, reference=ref,
    )
    return TransactionStatus(TransactionState.SUCCEEDED, success_message(ref), tx)


def fail_transaction(
    status: TransactionStatus, message: str, now: datetime,
) -> TransactionStatus:
    """PROCESSING -> FAILED with a user-visible message."""
    assert_transaction_transition(status.state, TransactionState.FAILED)
    tx = replace(status.transaction, state=TransactionState.FAILED, ended_at=now)
    return TransactionStatus(TransactionState.FAILED, message, tx)


def return_to_idle(status: TransactionStatus) -> TransactionStatus:
    """SUCCEEDED/FAILED -> IDLE. The finished attempt is dropped."""
    assert_transaction_transition(status.state, TransactionState.IDLE)
    return IDLE_STATUS
