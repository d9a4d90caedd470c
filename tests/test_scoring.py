"""Tests for confidence scoring."""

import pytest
from datetime import date
from decimal import Decimal

from cardrecon.domain.entities import BillPayment, Confidence, PotentialMatch
from cardrecon.domain.matching_config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from cardrecon.domain.scoring import (
    amount_difference,
    build_potential_match,
    difference_percent,
    rank_matches,
    score_confidence,
)


def _bill(bill_id, amount, txn_date=date(2024, 12, 10)):
    return BillPayment(
        id=bill_id,
        user_id=1,
        date=txn_date,
        description="Pagamento de fatura",
        amount=Decimal(amount),
        original_amount=None,
        expanded_at=None,
    )


def test_exact_match_is_high():
    """Test an exact amount match."""
    assert score_confidence(Decimal("-1000.00"), Decimal("-1000.00"), DEFAULT_MATCHING_CONFIG) == Confidence.HIGH


def test_close_match_is_medium():
    """Test a 1.5% difference on a 1015.00 bill."""
    assert score_confidence(Decimal("-1000.00"), Decimal("-1015.00"), DEFAULT_MATCHING_CONFIG) == Confidence.MEDIUM


def test_within_tolerance_is_low():
    """Test a difference past the medium tier but inside the tolerance."""
    assert score_confidence(Decimal("-1000.00"), Decimal("-1040.00"), DEFAULT_MATCHING_CONFIG) == Confidence.LOW


def test_outside_tolerance_is_excluded():
    """Test that a difference above tolerance yields no confidence."""
    assert score_confidence(Decimal("-1000.00"), Decimal("-500.00"), DEFAULT_MATCHING_CONFIG) is None


@pytest.mark.parametrize(
    "cycle_total,expected",
    [
        ("-105.00", Confidence.HIGH),
        ("-105.01", Confidence.MEDIUM),
        ("-120.00", Confidence.MEDIUM),
        ("-120.01", Confidence.LOW),
        ("-150.00", Confidence.LOW),
        ("-150.01", None),
    ],
)
def test_bounds_are_inclusive(cycle_total, expected):
    """Test each tier boundary on a 100.00 bill where floors apply."""
    assert score_confidence(Decimal(cycle_total), Decimal("-100.00"), DEFAULT_MATCHING_CONFIG) == expected


def test_score_is_symmetric_in_difference_sign():
    """Test that a bill larger or smaller than the cycle scores the same."""
    config = DEFAULT_MATCHING_CONFIG
    assert score_confidence(Decimal("-1015.00"), Decimal("-1000.00"), config) == Confidence.MEDIUM
    assert score_confidence(Decimal("-985.00"), Decimal("-1000.00"), config) == Confidence.MEDIUM


def test_confidence_never_improves_with_larger_difference():
    """Test monotonicity of the tiers as the difference grows."""
    rank = {Confidence.HIGH: 0, Confidence.MEDIUM: 1, Confidence.LOW: 2, None: 3}
    bill = Decimal("-1000.00")
    previous = 0
    for cents in range(0, 8000, 25):
        cycle_total = bill - Decimal(cents) / 100
        current = rank[score_confidence(cycle_total, bill, DEFAULT_MATCHING_CONFIG)]
        assert current >= previous
        previous = current


def test_custom_config_changes_tiers():
    """Test that a stricter config demotes a match."""
    strict = MatchingConfig(
        high_confidence_floor=Decimal("0"),
        high_confidence_ratio=Decimal("0"),
    )
    assert score_confidence(Decimal("-1000.00"), Decimal("-1001.00"), strict) == Confidence.MEDIUM


def test_amount_difference_compares_magnitudes():
    """Test that the difference is cycle magnitude minus bill magnitude."""
    assert amount_difference(Decimal("-1000.00"), Decimal("-1015.00")) == Decimal("-15.00")
    assert amount_difference(Decimal("-1000.00"), Decimal("-500.00")) == Decimal("500.00")


def test_difference_percent():
    """Test the percentage relative to the cycle total."""
    assert difference_percent(Decimal("-1000.00"), Decimal("-15.00")) == Decimal("1.50")
    assert difference_percent(Decimal("-3.00"), Decimal("1.00")) == Decimal("33.33")


def test_difference_percent_zero_total():
    """Test the percentage of an empty or fully refunded cycle."""
    assert difference_percent(Decimal("0"), Decimal("0")) == Decimal("0.00")
    assert difference_percent(Decimal("0"), Decimal("-10.00")) == Decimal("100.00")


def test_build_potential_match():
    """Test building a scored match from a bill."""
    match = build_potential_match(Decimal("-1000.00"), _bill(7, "-1015.00"), DEFAULT_MATCHING_CONFIG)
    assert isinstance(match, PotentialMatch)
    assert match.bill_id == 7
    assert match.amount == Decimal("-1015.00")
    assert match.amount_difference == Decimal("-15.00")
    assert match.difference_percent == Decimal("1.50")
    assert match.confidence == Confidence.MEDIUM


def test_build_potential_match_excluded():
    """Test that a bill outside tolerance produces no match."""
    assert build_potential_match(Decimal("-1000.00"), _bill(7, "-500.00"), DEFAULT_MATCHING_CONFIG) is None


def test_rank_matches_orders_by_difference_then_date():
    """Test ranking by absolute difference, then earliest date."""
    config = DEFAULT_MATCHING_CONFIG
    far = build_potential_match(Decimal("-1000.00"), _bill(1, "-1010.00"), config)
    late = build_potential_match(Decimal("-1000.00"), _bill(2, "-1000.00", date(2024, 12, 12)), config)
    early = build_potential_match(Decimal("-1000.00"), _bill(3, "-1000.00", date(2024, 12, 5)), config)

    ranked = rank_matches([far, late, early])
    assert [m.bill_id for m in ranked] == [3, 2, 1]
