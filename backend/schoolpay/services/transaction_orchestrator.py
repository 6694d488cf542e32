"""Transaction Orchestrator — single-flight payment with a self-dismissing status panel.

Invariants:
    - At most one transaction outside IDLE; submit() while busy raises
      TransactionInProgressError and leaves the current status untouched
    - Exactly one outbound charge per accepted submit(); no retry, no idempotency key
    - requester_id is read from the session once, at submit time
    - Every terminal status schedules a return to IDLE after the display window
    - After dispose(): the reset timer is cancelled and no status is committed again,
      even if the in-flight charge completes later
    - Status changes are published synchronously at commit, in commit order

Design Decisions:
    - submit() is synchronous and returns the asyncio.Task driving the charge: rejection
      is immediate, the caller may await the handle or just watch the status feed
    - Reset timer is a loop.call_later handle owned by the instance, so dispose() can
      cancel it
    - Any non-rejection failure (transport, unreadable body, unexpected error) shows the
      network failure message, matching what the status panel has always shown
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from schoolpay.core.collaborator_protocols import PaymentGateway
from schoolpay.core.domain_types import Amount, OneOffCharge, TransactionState, UserId
from schoolpay.core.errors import (
    ErrorContext,
    OrchestratorDisposedError,
    PaymentNetworkError,
    PaymentRejectedError,
    SessionNotReadyError,
    TransactionInProgressError,
)
from schoolpay.core.pricing import charge_amount
from schoolpay.core.transaction import (
    IDLE_STATUS,
    NETWORK_FAILURE_MESSAGE,
    REJECTED_MESSAGE,
    TransactionStatus,
    begin_transaction,
    complete_transaction,
    fail_transaction,
    return_to_idle,
    validate_amount,
)
from schoolpay.services.notifier import Notifier
from schoolpay.services.session_bootstrapper import SessionBootstrapper

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionOrchestrator:
    """Drives one payment at a time through IDLE -> PROCESSING -> terminal -> IDLE."""

    DISPLAY_WINDOW_SECONDS = 3.0

    def __init__(
        self,
        gateway: PaymentGateway,
        session: SessionBootstrapper,
        display_window_seconds: float = DISPLAY_WINDOW_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._gateway = gateway
        self._session = session
        self._display_window = display_window_seconds
        self._clock = clock
        self._status: TransactionStatus = IDLE_STATUS
        self._feed: Notifier[TransactionStatus] = Notifier("transaction")
        self._inflight: asyncio.Task[TransactionStatus] | None = None
        self._reset_handle: asyncio.TimerHandle | None = None
        self._disposed = False

    @property
    def status(self) -> TransactionStatus:
        return self._status

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(
        self, listener: Callable[[TransactionStatus], None],
    ) -> Callable[[], None]:
        return self._feed.subscribe(listener)

    # ─── Commands ───────────────────────────────────────────────

    def submit(self, amount: int) -> asyncio.Task[TransactionStatus]:
        """Accept a payment request or reject it synchronously."""
        if self._disposed:
            raise OrchestratorDisposedError()
        value = validate_amount(amount)
        if self._status.state is not TransactionState.IDLE:
            tx = self._status.transaction
            raise TransactionInProgressError(ErrorContext(
                transaction_state=self._status.state.value,
                requester_id=tx.requester_id if tx else None,
            ))
        identity = self._session.current_identity
        if identity is None:
            raise SessionNotReadyError(
                ErrorContext(phase=self._session.phase.value),
            )

        loop = asyncio.get_running_loop()
        self._commit(
            begin_transaction(self._status, value, identity.id, self._clock()),
        )
        self._inflight = loop.create_task(
            self._drive(value, identity.id), name="payment",
        )
        return self._inflight

    def pay_charge(self, charge: OneOffCharge) -> asyncio.Task[TransactionStatus]:
        return self.submit(charge_amount(charge))

    def dispose(self) -> None:
        """Host is going away: cancel the reset timer and freeze the status."""
        if self._disposed:
            return
        self._disposed = True
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
        logger.info(
            "Transaction orchestrator disposed",
            extra={"transaction_state": self._status.state.value},
        )

    # ─── Charge ─────────────────────────────────────────────────

    async def _drive(
        self, amount: Amount, requester_id: UserId,
    ) -> TransactionStatus:
        extra = {"amount": amount, "requester_id": requester_id}
        try:
            receipt = await self._gateway.charge(amount, requester_id)
        except PaymentRejectedError as e:
            logger.warning(
                f"Payment rejected: {e.message}",
                extra={**extra, "error_code": e.code},
            )
            outcome = fail_transaction(
                self._status, REJECTED_MESSAGE, self._clock(),
            )
        except PaymentNetworkError as e:
            logger.error(
                f"Payment error: {e.message}",
                extra={**extra, "error_code": e.code},
            )
            outcome = fail_transaction(
                self._status, NETWORK_FAILURE_MESSAGE, self._clock(),
            )
        except Exception as e:
            logger.error(
                f"Unexpected payment error: {e}", extra=extra, exc_info=True,
            )
            outcome = fail_transaction(
                self._status, NETWORK_FAILURE_MESSAGE, self._clock(),
            )
        else:
            outcome = complete_transaction(
                self._status, receipt.transaction_id, self._clock(),
            )

        if self._disposed:
            logger.info(
                "Payment finished after dispose, status not updated",
                extra={**extra, "transaction_state": outcome.state.value},
            )
            return outcome
        self._commit(outcome)
        self._reset_handle = asyncio.get_running_loop().call_later(
            self._display_window, self._return_to_idle,
        )
        return outcome

    def _return_to_idle(self) -> None:
        self._reset_handle = None
        if self._disposed:
            return
        self._commit(return_to_idle(self._status))

    def _commit(self, status: TransactionStatus) -> None:
        self._status = status
        tx = status.transaction
        logger.info(
            f"Transaction state -> {status.state.value}",
            extra={
                "transaction_state": status.state.value,
                "amount": tx.amount if tx else None,
                "requester_id": tx.requester_id if tx else None,
            },
        )
        self._feed.publish(status)
