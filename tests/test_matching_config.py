"""Tests for the matching configuration."""

import pytest
from decimal import Decimal

from cardrecon.domain.entities import Confidence
from cardrecon.domain.errors import ValidationError
from cardrecon.domain.matching_config import MatchingConfig, DEFAULT_MATCHING_CONFIG, bound_for


def test_defaults():
    """Test the default thresholds."""
    config = MatchingConfig()
    assert config.amount_tolerance_ratio == Decimal("0.05")
    assert config.amount_tolerance_floor == Decimal("50.00")
    assert config.date_tolerance_days == 15
    assert config.high_confidence_ratio == Decimal("0.005")
    assert config.high_confidence_floor == Decimal("5.00")
    assert config.medium_confidence_ratio == Decimal("0.02")
    assert config.medium_confidence_floor == Decimal("20.00")
    assert DEFAULT_MATCHING_CONFIG == config


def test_amount_tolerance_uses_floor_for_small_bills():
    """Test that the absolute floor wins for small bills."""
    assert DEFAULT_MATCHING_CONFIG.amount_tolerance(Decimal("-100.00")) == Decimal("50.00")


def test_amount_tolerance_uses_ratio_for_large_bills():
    """Test that the ratio wins for large bills."""
    assert DEFAULT_MATCHING_CONFIG.amount_tolerance(Decimal("-2000.00")) == Decimal("100.00")


def test_bound_for_ignores_sign():
    """Test that bounds depend on the bill magnitude only."""
    assert bound_for(Decimal("-1000"), Decimal("0.02"), Decimal("5")) == Decimal("20.00")
    assert bound_for(Decimal("1000"), Decimal("0.02"), Decimal("5")) == Decimal("20.00")


def test_confidence_tiers_order():
    """Test tiers run from strictest to the overall tolerance."""
    tiers = DEFAULT_MATCHING_CONFIG.confidence_tiers()
    assert [t[0] for t in tiers] == [Confidence.HIGH, Confidence.MEDIUM, Confidence.LOW]
    assert tiers[-1][1:] == (Decimal("0.05"), Decimal("50.00"))


def test_numbers_are_coerced_to_decimal():
    """Test that int and str thresholds become Decimals."""
    config = MatchingConfig(amount_tolerance_floor=60, medium_confidence_floor="25.5")
    assert config.amount_tolerance_floor == Decimal("60")
    assert config.medium_confidence_floor == Decimal("25.5")


def test_date_tolerance_is_coerced_to_int():
    """Test that a numeric string date tolerance becomes an int."""
    config = MatchingConfig(date_tolerance_days="10")
    assert config.date_tolerance_days == 10
    assert config.confidence_tiers()[0][0] == Confidence.HIGH


@pytest.mark.parametrize(
    "kwargs",
    [
        {"date_tolerance_days": "two weeks"},
        {"date_tolerance_days": "1.5"},
        {"amount_tolerance_floor": "fifty"},
    ],
)
def test_non_numeric_values_rejected(kwargs):
    """Test that non-numeric values raise ValidationError."""
    with pytest.raises(ValidationError, match="must be"):
        MatchingConfig(**kwargs)


def test_negative_threshold_rejected():
    """Test that negative thresholds are rejected."""
    with pytest.raises(ValidationError, match="must not be negative"):
        MatchingConfig(high_confidence_floor=Decimal("-1"))


def test_negative_date_tolerance_rejected():
    """Test that a negative date tolerance is rejected."""
    with pytest.raises(ValidationError):
        MatchingConfig(date_tolerance_days=-1)


def test_tiers_must_be_nested():
    """Test that the high tier may not be looser than the medium tier."""
    with pytest.raises(ValidationError, match="high <= medium <= tolerance"):
        MatchingConfig(high_confidence_ratio=Decimal("0.03"))

    with pytest.raises(ValidationError):
        MatchingConfig(medium_confidence_floor=Decimal("60.00"))


def test_from_environment_overrides():
    """Test reading overrides from CARDRECON_* variables."""
    config = MatchingConfig.from_environment(
        {
            "CARDRECON_AMOUNT_TOLERANCE_FLOOR": "80",
            "CARDRECON_DATE_TOLERANCE_DAYS": "10",
            "CARDRECON_HIGH_CONFIDENCE_FLOOR": "",
            "UNRELATED": "x",
        }
    )
    assert config.amount_tolerance_floor == Decimal("80")
    assert config.date_tolerance_days == 10
    assert config.high_confidence_floor == Decimal("5.00")


def test_from_environment_empty_gives_defaults():
    """Test that no variables means default config."""
    assert MatchingConfig.from_environment({}) == DEFAULT_MATCHING_CONFIG


def test_from_environment_invalid_values():
    """Test that unparseable variables raise ValidationError."""
    with pytest.raises(ValidationError, match="must be a number"):
        MatchingConfig.from_environment({"CARDRECON_AMOUNT_TOLERANCE_RATIO": "five"})

    with pytest.raises(ValidationError, match="must be an integer"):
        MatchingConfig.from_environment({"CARDRECON_DATE_TOLERANCE_DAYS": "1.5"})
