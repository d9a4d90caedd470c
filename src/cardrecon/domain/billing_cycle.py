"""Billing cycle keys, date windows and the pending-cycle aggregator."""

import re
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from cardrecon.database.base import Database
from cardrecon.domain.entities import BillingCycle
from cardrecon.domain.errors import InvalidBillingCycleError

BILLING_CYCLE_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def parse_billing_cycle(billing_cycle: str) -> tuple[int, int]:
    """Parse a YYYY-MM billing cycle key.

    Args:
        billing_cycle: Cycle key (e.g., "2024-11")

    Returns:
        (year, month) tuple

    Raises:
        InvalidBillingCycleError: If the key is malformed
    """
    if not isinstance(billing_cycle, str):
        raise InvalidBillingCycleError(str(billing_cycle))
    match = BILLING_CYCLE_PATTERN.match(billing_cycle.strip())
    if match is None:
        raise InvalidBillingCycleError(billing_cycle)
    return int(match.group(1)), int(match.group(2))


def normalize_billing_cycle(billing_cycle: str) -> str:
    """Validate a cycle key and return it stripped of whitespace."""
    year, month = parse_billing_cycle(billing_cycle)
    return f"{year:04d}-{month:02d}"


def billing_cycle_for_date(txn_date: date) -> str:
    """Return the billing cycle key a date falls into."""
    return f"{txn_date.year:04d}-{txn_date.month:02d}"


def cycle_month_range(billing_cycle: str) -> tuple[date, date]:
    """Return the first and last day of the cycle's calendar month."""
    year, month = parse_billing_cycle(billing_cycle)
    first_day = date(year, month, 1)
    last_day = first_day + relativedelta(months=1) - timedelta(days=1)
    return first_day, last_day


def cycle_date_window(billing_cycle: str, tolerance_days: int) -> tuple[date, date]:
    """Return the inclusive window in which a cycle's bill payment may fall.

    The window spans the cycle month widened by tolerance_days on both sides,
    e.g. "2024-11" with 15 days gives 2024-10-17 .. 2024-12-15.
    """
    first_day, last_day = cycle_month_range(billing_cycle)
    return first_day - timedelta(days=tolerance_days), last_day + timedelta(days=tolerance_days)


class BillingCycleService:
    """Groups unlinked credit-card transactions into billing cycles."""

    def __init__(self, db: Database):
        """Initialize billing cycle service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_pending_cycles(self, user_id: int) -> list[BillingCycle]:
        """List every cycle with at least one unlinked transaction.

        Read-only. Cycles are ordered by key.
        """
        return self.db.list_pending_cycles(user_id)

    def get_pending_cycle(self, user_id: int, billing_cycle: str) -> BillingCycle | None:
        """Get the unlinked summary of one cycle, or None if it has no unlinked transactions."""
        cycles = self.db.list_pending_cycles(user_id, billing_cycle=normalize_billing_cycle(billing_cycle))
        return cycles[0] if cycles else None

    def get_linked_bill_id(self, user_id: int, billing_cycle: str) -> int | None:
        """Return the bill payment linked to a cycle, if any."""
        return self.db.get_linked_bill_id(user_id, normalize_billing_cycle(billing_cycle))
