"""Bill payment candidate lookup for a billing cycle."""

import logging

from cardrecon.database.base import Database
from cardrecon.domain.billing_cycle import cycle_date_window, normalize_billing_cycle
from cardrecon.domain.entities import BillingCycle, BillPayment, PotentialMatch
from cardrecon.domain.matching_config import MatchingConfig
from cardrecon.domain.scoring import build_potential_match, rank_matches

logger = logging.getLogger(__name__)


class CandidateFinder:
    """Finds unexpanded bill payments that may pay a billing cycle."""

    def __init__(self, db: Database):
        """Initialize candidate finder.

        Args:
            db: Database instance
        """
        self.db = db

    def find_candidates(self, user_id: int, billing_cycle: str, config: MatchingConfig) -> list[BillPayment]:
        """Return unexpanded bill payments dated inside the cycle's window.

        Args:
            user_id: Owner of the cycle and bills
            billing_cycle: Cycle key (YYYY-MM)
            config: Matching policy providing the date tolerance

        Returns:
            Bill payments, possibly empty

        Raises:
            InvalidBillingCycleError: If the cycle key is malformed
        """
        key = normalize_billing_cycle(billing_cycle)
        start, end = cycle_date_window(key, config.date_tolerance_days)
        bills = self.db.list_bill_payment_candidates(user_id, start, end)
        logger.debug("Cycle %s window %s..%s: %d candidate bill(s)", key, start, end, len(bills))
        return bills

    def find_matches(self, user_id: int, cycle: BillingCycle, config: MatchingConfig) -> list[PotentialMatch]:
        """Return scored candidates within tolerance, best first."""
        matches = []
        for bill in self.find_candidates(user_id, cycle.billing_cycle, config):
            match = build_potential_match(cycle.total_amount, bill, config)
            if match is None:
                logger.debug(
                    "Bill %d (%s) excluded for cycle %s total %s",
                    bill.id,
                    bill.amount,
                    cycle.billing_cycle,
                    cycle.total_amount,
                )
                continue
            matches.append(match)
        return rank_matches(matches)
