"""Reconciliation triggered by the creation of a bill-payment-like transaction."""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from cardrecon.database.base import Database
from cardrecon.domain.billing_cycle import BillingCycleService, cycle_date_window
from cardrecon.domain.entities import BillingCycle, BillPayment, Confidence
from cardrecon.domain.errors import ConflictError, PendingCycleNotFoundError
from cardrecon.domain.matching_config import MatchingConfig, DEFAULT_MATCHING_CONFIG
from cardrecon.domain.reconciliation import ReconciliationService
from cardrecon.domain.scoring import score_confidence

logger = logging.getLogger(__name__)

BILL_PAYMENT_PATTERNS = [
    r"pagamento\s+(de\s+)?fatura",
    r"\bfatura\b",
    r"pagamento\s+(do\s+)?cart[aã]o",
    r"bill\s+payment",
    r"card\s+statement",
    r"credit\s+card\s+payment",
]

_BILL_PAYMENT_RE = re.compile("|".join(BILL_PAYMENT_PATTERNS), re.IGNORECASE)


def is_bill_payment_like(description: Optional[str], amount: Decimal, flagged: Optional[bool] = None) -> bool:
    """Decide whether a bank transaction pays a credit-card statement.

    An explicit flag wins. Otherwise the description must match a known
    bill-payment pattern and the amount must be an outflow.
    """
    if flagged is not None:
        return flagged
    if not description or amount >= 0:
        return False
    return _BILL_PAYMENT_RE.search(description) is not None


@dataclass(frozen=True)
class AutoTriggerResult:
    """Outcome of the hook for one new bill payment."""

    triggered: bool
    linked_cycle: Optional[str] = None
    confidence: Optional[Confidence] = None
    transactions_linked: int = 0


class AutoTriggerHook:
    """Links a new bill payment to the single pending cycle it clearly pays."""

    def __init__(self, db: Database, config: MatchingConfig = DEFAULT_MATCHING_CONFIG):
        self.db = db
        self.config = config
        self.cycles = BillingCycleService(db)
        self.reconciliation = ReconciliationService(db, config)

    def on_bill_like_transaction_created(self, user_id: int, bill_id: int) -> AutoTriggerResult:
        """Search pending cycles whose window holds the bill and link when unambiguous.

        Nothing is changed unless exactly one pending cycle is within tolerance,
        its confidence is high or medium, and the new bill is that cycle's only
        candidate.
        """
        bill = self.db.get_bill_payment(user_id, bill_id)
        if bill is None or bill.is_expanded:
            return AutoTriggerResult(triggered=False)

        within_tolerance = self._cycles_within_tolerance(user_id, bill)
        if len(within_tolerance) != 1:
            logger.debug("Bill %d matched %d pending cycle(s), not linking", bill_id, len(within_tolerance))
            return AutoTriggerResult(triggered=False)

        cycle, confidence = within_tolerance[0]
        if not confidence.allows_auto_link:
            logger.debug(
                "Bill %d matches cycle %s with %s confidence, not linking",
                bill_id,
                cycle.billing_cycle,
                confidence.value,
            )
            return AutoTriggerResult(triggered=False)

        # Other bills already competing for the cycle leave the choice to the user
        evaluation = self.reconciliation.evaluate_cycle(user_id, cycle)
        if [match.bill_id for match in evaluation.candidates] != [bill_id]:
            logger.debug(
                "Cycle %s has %d candidate bill(s), not linking bill %d",
                cycle.billing_cycle,
                len(evaluation.candidates),
                bill_id,
            )
            return AutoTriggerResult(triggered=False)

        billing_cycle = cycle.billing_cycle
        try:
            count = self.reconciliation.link_cycle(user_id, billing_cycle, bill_id)
        except (ConflictError, PendingCycleNotFoundError) as e:
            logger.warning("Auto-link of bill %d to cycle %s lost a race: %s", bill_id, billing_cycle, e)
            return AutoTriggerResult(triggered=False)

        logger.info("Auto-linked new bill %d to cycle %s (%s)", bill_id, billing_cycle, confidence.value)
        return AutoTriggerResult(
            triggered=True,
            linked_cycle=billing_cycle,
            confidence=confidence,
            transactions_linked=count,
        )

    def _cycles_within_tolerance(self, user_id: int, bill: BillPayment) -> list[tuple[BillingCycle, Confidence]]:
        matched = []
        for cycle in self.cycles.list_pending_cycles(user_id):
            start, end = cycle_date_window(cycle.billing_cycle, self.config.date_tolerance_days)
            if not (start <= bill.date <= end):
                continue
            if self.db.get_linked_bill_id(user_id, cycle.billing_cycle) is not None:
                continue
            confidence = score_confidence(cycle.total_amount, bill.amount, self.config)
            if confidence is not None:
                matched.append((cycle, confidence))
        return matched
