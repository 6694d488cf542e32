"""Payment Client — PaymentGateway that POSTs the charge to the payment endpoint.

Invariants:
    - One POST per charge() call; body is {"amount": int, "userId": str}
    - No retry and no idempotency key: at-most-once from our side, no dedup on the wire
    - 2xx with a JSON body -> PaymentReceipt (transactionId optional)
    - Non-2xx -> PaymentRejectedError; transport error or unreadable body -> PaymentNetworkError

Design Decisions:
    - Wrapper over raw httpx client: error mapping stays out of the orchestrator
    - No explicit deadline beyond the transport timeout configured at construction
"""

import logging

import httpx

from schoolpay.core.collaborator_protocols import PaymentReceipt
from schoolpay.core.errors import PaymentNetworkError, PaymentRejectedError

logger = logging.getLogger(__name__)


class PaymentGatewayClient:
    """Sends charges to the (stand-in) payment endpoint."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.client = httpx.AsyncClient(timeout=timeout_seconds, transport=transport)

    async def charge(self, amount: int, user_id: str) -> PaymentReceipt:
        try:
            response = await self.client.post(
                self.url, json={"amount": amount, "userId": user_id},
            )
        except httpx.HTTPError as e:
            raise PaymentNetworkError(f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise PaymentRejectedError(response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise PaymentNetworkError("response body is not JSON") from e

        transaction_id = body.get("transactionId") if isinstance(body, dict) else None
        logger.info(
            "Payment accepted by remote",
            extra={"amount": amount, "requester_id": user_id},
        )
        return PaymentReceipt(
            transaction_id=str(transaction_id) if transaction_id else None,
        )

    async def aclose(self) -> None:
        await self.client.aclose()
