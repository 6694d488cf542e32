"""Pricing Engine — exact fee table, closed tier domain, recompute-on-change cell.

Tests cover:
    - Every band x hostel combination returns the literal table amount
    - Unknown tiers raise UnknownGradeBandError (never a zero fee)
    - FeeEstimateCell recomputes synchronously and notifies on change only
    - One-off charges and the published fee structure
"""

import pytest

from schoolpay.core.domain_types import GradeBand, OneOffCharge
from schoolpay.core.errors import UnknownGradeBandError
from schoolpay.core.pricing import (
    HOSTEL_SURCHARGE,
    FeeEstimateCell,
    PricingSelection,
    charge_amount,
    estimate,
    fee_structure,
)


@pytest.mark.parametrize(
    "tier, hostel, expected",
    [
        (GradeBand.PRIMARY, False, 85_000),
        (GradeBand.PRIMARY, True, 160_000),
        (GradeBand.MIDDLE, False, 110_000),
        (GradeBand.MIDDLE, True, 185_000),
        (GradeBand.SECONDARY, False, 135_000),
        (GradeBand.SECONDARY, True, 210_000),
    ],
)
def test_estimate_matches_fee_table(tier, hostel, expected):
    assert estimate(PricingSelection(tier, hostel)) == expected


def test_hostel_adds_flat_surcharge():
    for tier in GradeBand:
        without = estimate(PricingSelection(tier, False))
        with_hostel = estimate(PricingSelection(tier, True))
        assert with_hostel - without == HOSTEL_SURCHARGE == 75_000


def test_estimate_is_deterministic():
    selection = PricingSelection(GradeBand.MIDDLE, True)
    assert {estimate(selection) for _ in range(5)} == {185_000}


def test_raw_tier_string_is_coerced():
    selection = PricingSelection("9-10", False)
    assert selection.tier is GradeBand.SECONDARY
    assert estimate(selection) == 135_000


def test_unknown_tier_string_raises_typed_error():
    with pytest.raises(UnknownGradeBandError) as exc_info:
        PricingSelection("11-12", False)
    assert exc_info.value.code == "UNKNOWN_GRADE_BAND"
    assert exc_info.value.http_status == 400


def test_estimate_rejects_tier_outside_table():
    selection = PricingSelection(GradeBand.PRIMARY)
    object.__setattr__(selection, "tier", "nursery")
    with pytest.raises(UnknownGradeBandError):
        estimate(selection)


def test_cell_starts_at_primary_without_hostel():
    cell = FeeEstimateCell()
    assert cell.value == 85_000
    assert cell.tier is GradeBand.PRIMARY
    assert cell.hostel_included is False


def test_cell_recomputes_immediately_on_each_change():
    cell = FeeEstimateCell()
    cell.hostel_included = True
    assert cell.value == 160_000
    cell.tier = "9-10"
    assert cell.value == 210_000
    cell.hostel_included = False
    assert cell.value == 135_000


def test_cell_notifies_only_when_value_changes():
    cell = FeeEstimateCell(GradeBand.MIDDLE)
    seen = []
    cell.on_change(seen.append)

    cell.tier = GradeBand.MIDDLE
    cell.hostel_included = True
    cell.hostel_included = True

    assert seen == [185_000]


def test_cell_unsubscribe_stops_notifications():
    cell = FeeEstimateCell()
    seen = []
    unsubscribe = cell.on_change(seen.append)
    unsubscribe()
    cell.hostel_included = True
    assert seen == []


def test_cell_keeps_previous_state_on_unknown_tier():
    cell = FeeEstimateCell(GradeBand.MIDDLE, True)
    with pytest.raises(UnknownGradeBandError):
        cell.tier = "13"
    assert cell.tier is GradeBand.MIDDLE
    assert cell.value == 185_000


def test_one_off_charges():
    assert charge_amount(OneOffCharge.ADMISSION_FORM) == 500
    assert charge_amount(OneOffCharge.ENTRANCE_EXAM) == 1_000


def test_published_fee_structure_totals():
    totals = [row.total for row in fee_structure()]
    assert totals == [85_000, 110_000, 135_000, 155_000]
