"""Fee Schemas — calculator input and fee structure output.

Invariants:
    - FeeEstimateRequest.tier is a plain string: the closed band table in core/pricing.py
      decides validity so the API and the calculator fail with the same typed error

Design Decisions:
    - Amounts are whole NPR integers, currency stated explicitly in every response
"""

from pydantic import BaseModel, Field

from schoolpay.core.domain_types import GradeBand, OneOffCharge


class FeeEstimateRequest(BaseModel):
    """Calculator selection."""
    tier: str = Field(min_length=1, max_length=16)
    hostel_included: bool = False


class FeeEstimateResponse(BaseModel):
    tier: GradeBand
    hostel_included: bool
    amount: int
    currency: str = "NPR"


class FeeStructureRowResponse(BaseModel):
    grade_level: str
    annual_tuition: int
    other_charges: int
    total: int


class OneOffChargeResponse(BaseModel):
    charge: OneOffCharge
    amount: int


class FeeStructureResponse(BaseModel):
    """Published annual fees plus one-off charges."""
    rows: list[FeeStructureRowResponse]
    hostel_surcharge: int
    one_off_charges: list[OneOffChargeResponse]
    currency: str = "NPR"
