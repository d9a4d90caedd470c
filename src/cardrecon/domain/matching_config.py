"""Matching policy for credit-card reconciliation."""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from cardrecon.domain.entities import Confidence
from cardrecon.domain.errors import ValidationError

ENV_PREFIX = "CARDRECON_"


@dataclass(frozen=True)
class MatchingConfig:
    """Tolerance and confidence thresholds.

    Every bound is the greater of a ratio of the bill amount and an absolute
    currency floor. Ratios are fractions (0.05 means 5%).
    """

    amount_tolerance_ratio: Decimal = Decimal("0.05")
    amount_tolerance_floor: Decimal = Decimal("50.00")
    date_tolerance_days: int = 15
    high_confidence_ratio: Decimal = Decimal("0.005")
    high_confidence_floor: Decimal = Decimal("5.00")
    medium_confidence_ratio: Decimal = Decimal("0.02")
    medium_confidence_floor: Decimal = Decimal("20.00")

    def __post_init__(self):
        for name in (
            "amount_tolerance_ratio",
            "amount_tolerance_floor",
            "high_confidence_ratio",
            "high_confidence_floor",
            "medium_confidence_ratio",
            "medium_confidence_floor",
        ):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                # Frozen dataclass: coerce through object.__setattr__
                try:
                    object.__setattr__(self, name, Decimal(str(value).strip()))
                except InvalidOperation:
                    raise ValidationError(f"{name} must be a number, got '{value}'")
                value = getattr(self, name)
            if value < 0:
                raise ValidationError(f"{name} must not be negative")

        if isinstance(self.date_tolerance_days, bool) or not isinstance(self.date_tolerance_days, int):
            try:
                object.__setattr__(self, "date_tolerance_days", int(str(self.date_tolerance_days).strip()))
            except ValueError:
                raise ValidationError(f"date_tolerance_days must be an integer, got '{self.date_tolerance_days}'")
        if self.date_tolerance_days < 0:
            raise ValidationError("date_tolerance_days must not be negative")

        if not (self.high_confidence_ratio <= self.medium_confidence_ratio <= self.amount_tolerance_ratio):
            raise ValidationError("Confidence ratios must satisfy high <= medium <= tolerance")
        if not (self.high_confidence_floor <= self.medium_confidence_floor <= self.amount_tolerance_floor):
            raise ValidationError("Confidence floors must satisfy high <= medium <= tolerance")

    def confidence_tiers(self) -> list[tuple[Confidence, Decimal, Decimal]]:
        """Return (confidence, ratio, floor) tiers from strictest to loosest.

        The last tier is the overall amount tolerance.
        """
        return [
            (Confidence.HIGH, self.high_confidence_ratio, self.high_confidence_floor),
            (Confidence.MEDIUM, self.medium_confidence_ratio, self.medium_confidence_floor),
            (Confidence.LOW, self.amount_tolerance_ratio, self.amount_tolerance_floor),
        ]

    def amount_tolerance(self, bill_amount: Decimal) -> Decimal:
        """Return the overall tolerance bound for a bill amount."""
        return bound_for(bill_amount, self.amount_tolerance_ratio, self.amount_tolerance_floor)

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "MatchingConfig":
        """Create a config from CARDRECON_* environment variables.

        Unset variables keep their defaults.
        """
        if environ is None:
            environ = os.environ

        overrides: dict = {}
        decimal_fields = {
            "AMOUNT_TOLERANCE_RATIO": "amount_tolerance_ratio",
            "AMOUNT_TOLERANCE_FLOOR": "amount_tolerance_floor",
            "HIGH_CONFIDENCE_RATIO": "high_confidence_ratio",
            "HIGH_CONFIDENCE_FLOOR": "high_confidence_floor",
            "MEDIUM_CONFIDENCE_RATIO": "medium_confidence_ratio",
            "MEDIUM_CONFIDENCE_FLOOR": "medium_confidence_floor",
        }
        for env_name, field_name in decimal_fields.items():
            raw = environ.get(ENV_PREFIX + env_name)
            if raw is None or raw.strip() == "":
                continue
            try:
                overrides[field_name] = Decimal(raw.strip())
            except InvalidOperation:
                raise ValidationError(f"{ENV_PREFIX}{env_name} must be a number, got '{raw}'")

        raw_days = environ.get(ENV_PREFIX + "DATE_TOLERANCE_DAYS")
        if raw_days is not None and raw_days.strip() != "":
            try:
                overrides["date_tolerance_days"] = int(raw_days.strip())
            except ValueError:
                raise ValidationError(f"{ENV_PREFIX}DATE_TOLERANCE_DAYS must be an integer, got '{raw_days}'")

        return cls(**overrides)


def bound_for(bill_amount: Decimal, ratio: Decimal, floor: Decimal) -> Decimal:
    """Return max(ratio * |bill_amount|, floor)."""
    return max(ratio * abs(bill_amount), floor)


DEFAULT_MATCHING_CONFIG = MatchingConfig()
