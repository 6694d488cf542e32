"""Payment Schemas — submission body and status panel responses.

Invariants:
    - PaymentCreate.amount: strict positive integer (no floats, no numeric strings)
    - TransactionStatusResponse mirrors core TransactionStatus.to_dict()
"""

from datetime import datetime

from pydantic import BaseModel, Field, StrictInt

from schoolpay.core.domain_types import TransactionState
from schoolpay.core.transaction import TransactionStatus


class PaymentCreate(BaseModel):
    amount: StrictInt = Field(gt=0)


class TransactionInfo(BaseModel):
    amount: int
    requester_id: str
    reference: str | None = None
    started_at: datetime
    ended_at: datetime | None = None


class TransactionStatusResponse(BaseModel):
    state: TransactionState
    message: str | None = None
    transaction: TransactionInfo | None = None

    @classmethod
    def from_status(cls, status: TransactionStatus) -> "TransactionStatusResponse":
        return cls.model_validate(status.to_dict())
