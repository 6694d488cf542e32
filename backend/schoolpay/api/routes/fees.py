"""Fee Routes — annual fee calculator and published fee structure."""

from fastapi import APIRouter

from schoolpay.core.domain_types import OneOffCharge
from schoolpay.core.pricing import (
    HOSTEL_SURCHARGE, PricingSelection, charge_amount, estimate, fee_structure,
)
from schoolpay.schemas.fees import (
    FeeEstimateRequest,
    FeeEstimateResponse,
    FeeStructureResponse,
    FeeStructureRowResponse,
    OneOffChargeResponse,
)

router = APIRouter(prefix="/api/v1/fees", tags=["fees"])


@router.post("/estimate", response_model=FeeEstimateResponse)
async def estimate_fee(body: FeeEstimateRequest):
    """Annual fee for a grade band, optionally with hostel. Unknown band → 400."""
    selection = PricingSelection(body.tier, body.hostel_included)
    return FeeEstimateResponse(
        tier=selection.tier,
        hostel_included=selection.hostel_included,
        amount=estimate(selection),
    )


@router.get("/structure", response_model=FeeStructureResponse)
async def get_fee_structure():
    return FeeStructureResponse(
        rows=[
            FeeStructureRowResponse(
                grade_level=row.grade_level,
                annual_tuition=row.annual_tuition,
                other_charges=row.other_charges,
                total=row.total,
            )
            for row in fee_structure()
        ],
        hostel_surcharge=HOSTEL_SURCHARGE,
        one_off_charges=[
            OneOffChargeResponse(charge=charge, amount=charge_amount(charge))
            for charge in OneOffCharge
        ],
    )
