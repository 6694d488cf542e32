"""Pricing Engine — annual fee estimate for a grade band and hostel option.

Invariants:
    - estimate() is total over GradeBand and pure: same selection, same amount
    - The base table is closed: a tier outside GradeBand raises UnknownGradeBandError
    - Hostel adds a flat HOSTEL_SURCHARGE, nothing else is optional here
    - FeeEstimateCell.value is recomputed inside the setter, never lazily

Design Decisions:
    - Calculator table (85k/110k/135k) is what the admissions calculator charges;
      PUBLISHED_FEE_STRUCTURE is the informational table printed beside it and is
      not used for estimates
    - Raw tier strings are coerced in PricingSelection so API input and enum input
      fail the same way
"""

from collections.abc import Callable
from dataclasses import dataclass

from schoolpay.core.domain_types import Amount, GradeBand, OneOffCharge
from schoolpay.core.errors import UnknownGradeBandError


BASE_FEES: dict[GradeBand, int] = {
    GradeBand.PRIMARY: 85_000,
    GradeBand.MIDDLE: 110_000,
    GradeBand.SECONDARY: 135_000,
}

HOSTEL_SURCHARGE = 75_000

ONE_OFF_CHARGES: dict[OneOffCharge, int] = {
    OneOffCharge.ADMISSION_FORM: 500,
    OneOffCharge.ENTRANCE_EXAM: 1_000,
}


@dataclass(frozen=True)
class FeeStructureRow:
    """One row of the published annual fee structure (NPR)."""
    grade_level: str
    annual_tuition: int
    other_charges: int

    @property
    def total(self) -> int:
        return self.annual_tuition + self.other_charges


PUBLISHED_FEE_STRUCTURE: tuple[FeeStructureRow, ...] = (
    FeeStructureRow("Nursery-LKG", 75_000, 10_000),
    FeeStructureRow("UKG-Grade 5", 95_000, 15_000),
    FeeStructureRow("Grade 6-8", 115_000, 20_000),
    FeeStructureRow("Grade 9-10", 130_000, 25_000),
)


def coerce_grade_band(tier: GradeBand | str) -> GradeBand:
    """Map a tier value onto GradeBand, failing loudly for anything else."""
    if isinstance(tier, GradeBand):
        return tier
    try:
        return GradeBand(tier)
    except ValueError:
        raise UnknownGradeBandError(tier) from None


@dataclass(frozen=True)
class PricingSelection:
    """Calculator input: grade band plus hostel option."""
    tier: GradeBand
    hostel_included: bool = False

    def __post_init__(self):
        object.__setattr__(self, "tier", coerce_grade_band(self.tier))


def estimate(selection: PricingSelection) -> Amount:
    """Annual fee for the selection. Pure."""
    try:
        base = BASE_FEES[selection.tier]
    except KeyError:
        raise UnknownGradeBandError(selection.tier) from None
    if selection.hostel_included:
        return Amount(base + HOSTEL_SURCHARGE)
    return Amount(base)


def charge_amount(charge: OneOffCharge) -> Amount:
    return Amount(ONE_OFF_CHARGES[charge])


def fee_structure() -> tuple[FeeStructureRow, ...]:
    return PUBLISHED_FEE_STRUCTURE


class FeeEstimateCell:
    """Recompute-on-change cell backing the fee calculator widget.

    Setting tier or hostel_included recomputes value before the setter returns.
    Listeners fire only when the amount actually changes.
    """

    def __init__(
        self,
        tier: GradeBand | str = GradeBand.PRIMARY,
        hostel_included: bool = False,
    ):
        self._selection = PricingSelection(tier, hostel_included)
        self._value = estimate(self._selection)
        self._listeners: list[Callable[[int], None]] = []

    @property
    def value(self) -> Amount:
        return self._value

    @property
    def selection(self) -> PricingSelection:
        return self._selection

    @property
    def tier(self) -> GradeBand:
        return self._selection.tier

    @tier.setter
    def tier(self, tier: GradeBand | str) -> None:
        self._update(PricingSelection(tier, self._selection.hostel_included))

    @property
    def hostel_included(self) -> bool:
        return self._selection.hostel_included

    @hostel_included.setter
    def hostel_included(self, included: bool) -> None:
        self._update(PricingSelection(self._selection.tier, included))

    def on_change(self, listener: Callable[[int], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _update(self, selection: PricingSelection) -> None:
        # estimate() raises before anything is assigned, so a bad tier leaves the cell intact
        value = estimate(selection)
        self._selection = selection
        if value == self._value:
            return
        self._value = value
        for listener in list(self._listeners):
            listener(value)
