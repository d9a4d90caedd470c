"""Confidence scoring of bill payments against billing cycle totals."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from cardrecon.domain.entities import BillPayment, Confidence, PotentialMatch
from cardrecon.domain.matching_config import MatchingConfig, bound_for

PERCENT_QUANTUM = Decimal("0.01")


def amount_difference(cycle_total: Decimal, bill_amount: Decimal) -> Decimal:
    """Return the signed difference between cycle and bill magnitudes.

    Positive when the purchases exceed the bill, negative when the bill is
    larger (cycle 1000.00 against bill 1015.00 gives -15.00).
    """
    return abs(cycle_total) - abs(bill_amount)


def difference_percent(cycle_total: Decimal, difference: Decimal) -> Decimal:
    """Return |difference| as a percentage of the cycle total, rounded to cents."""
    if cycle_total == 0:
        return Decimal("0.00") if difference == 0 else Decimal("100.00")
    percent = abs(difference) / abs(cycle_total) * Decimal("100")
    return percent.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def score_confidence(cycle_total: Decimal, bill_amount: Decimal, config: MatchingConfig) -> Optional[Confidence]:
    """Classify how well a bill amount matches a cycle total.

    Each tier's bound is max(ratio * |bill_amount|, floor); the first tier
    whose bound is >= the absolute difference wins. Bounds are inclusive.

    Returns:
        Confidence tier, or None when the difference exceeds the overall tolerance
    """
    diff = abs(amount_difference(cycle_total, bill_amount))
    for confidence, ratio, floor in config.confidence_tiers():
        if diff <= bound_for(bill_amount, ratio, floor):
            return confidence
    return None


def build_potential_match(
    cycle_total: Decimal, bill: BillPayment, config: MatchingConfig
) -> Optional[PotentialMatch]:
    """Score one bill against a cycle total. Returns None when excluded."""
    confidence = score_confidence(cycle_total, bill.amount, config)
    if confidence is None:
        return None
    difference = amount_difference(cycle_total, bill.amount)
    return PotentialMatch(
        bill_id=bill.id,
        date=bill.date,
        description=bill.description,
        amount=bill.amount,
        amount_difference=difference,
        difference_percent=difference_percent(cycle_total, difference),
        confidence=confidence,
    )


def rank_matches(matches: list[PotentialMatch]) -> list[PotentialMatch]:
    """Order matches best first: smallest absolute difference, then earliest date."""
    return sorted(matches, key=lambda m: (abs(m.amount_difference), m.date, m.bill_id))
