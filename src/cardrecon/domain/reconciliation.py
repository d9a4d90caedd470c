"""Reconciliation of credit-card billing cycles with bill payments.

The orchestrator evaluates each pending billing cycle independently:

- no candidate within tolerance: ``no_match``, the cycle stays pending
- exactly one candidate with high or medium confidence: ``auto_linked``
- anything else: ``requires_selection``, candidates are surfaced for a human

Cycles that already carry a bill reference are skipped, so re-running
reconciliation never re-evaluates a linked cycle.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from cardrecon.database.base import Database
from cardrecon.domain.billing_cycle import BillingCycleService, normalize_billing_cycle
from cardrecon.domain.candidates import CandidateFinder
from cardrecon.domain.entities import (
    BillingCycle,
    Confidence,
    CycleStatus,
    LinkedCycle,
    PendingCycle,
)
from cardrecon.domain.errors import (
    BillNotFoundError,
    ConflictError,
    PendingCycleNotFoundError,
)
from cardrecon.domain.matching_config import MatchingConfig, DEFAULT_MATCHING_CONFIG
from cardrecon.domain.scoring import amount_difference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutoLinkedCycle:
    """A cycle linked without human confirmation."""

    billing_cycle: str
    bill_id: int
    transactions_linked: int
    confidence: Confidence
    amount_difference: Decimal


@dataclass
class ReconciliationResult:
    """Outcome of a reconciliation run."""

    auto_linked: list[AutoLinkedCycle] = field(default_factory=list)
    requires_selection: list[PendingCycle] = field(default_factory=list)
    no_match: list[str] = field(default_factory=list)

    def merge(self, other: "ReconciliationResult") -> None:
        self.auto_linked.extend(other.auto_linked)
        self.requires_selection.extend(other.requires_selection)
        self.no_match.extend(other.no_match)


@dataclass(frozen=True)
class ReconciliationSummary:
    """Counts shown by a pending-reconciliation indicator."""

    pending_cycle_count: int
    pending_transaction_count: int
    pending_total_amount: Decimal
    linked_cycle_count: int
    mismatched_cycle_count: int


@dataclass(frozen=True)
class PendingReconciliations:
    """Read-only view of a user's reconciliation state."""

    pending_cycles: list[PendingCycle]
    linked_cycles: list[LinkedCycle]
    summary: ReconciliationSummary


class ReconciliationService:
    """Drives cycle evaluation and performs the atomic link."""

    def __init__(self, db: Database, config: MatchingConfig = DEFAULT_MATCHING_CONFIG):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            config: Matching policy applied to every evaluation
        """
        self.db = db
        self.config = config
        self.cycles = BillingCycleService(db)
        self.finder = CandidateFinder(db)

    def get_pending_reconciliations(self, user_id: int) -> PendingReconciliations:
        """Return pending cycles with their candidates, linked cycles and a summary.

        Read-only: no cycle is linked by this call.
        """
        linked_cycles = self.list_linked_cycles(user_id)
        linked_keys = {c.billing_cycle for c in linked_cycles}

        pending_cycles = [
            self.evaluate_cycle(user_id, cycle)
            for cycle in self.cycles.list_pending_cycles(user_id)
            if cycle.billing_cycle not in linked_keys
        ]

        summary = ReconciliationSummary(
            pending_cycle_count=len(pending_cycles),
            pending_transaction_count=sum(p.cycle.transaction_count for p in pending_cycles),
            pending_total_amount=sum((p.cycle.total_amount for p in pending_cycles), Decimal("0")),
            linked_cycle_count=len(linked_cycles),
            mismatched_cycle_count=sum(1 for c in linked_cycles if c.has_mismatch),
        )
        return PendingReconciliations(
            pending_cycles=pending_cycles,
            linked_cycles=linked_cycles,
            summary=summary,
        )

    def list_linked_cycles(self, user_id: int) -> list[LinkedCycle]:
        """List linked cycles with the amount difference against their bill."""
        linked = []
        for row in self.db.list_linked_cycles(user_id):
            bill = self.db.get_bill_payment(user_id, row["bill_id"])
            if bill is None:
                continue
            bill_amount = bill.effective_amount
            difference = amount_difference(row["total_amount"], bill_amount)
            linked.append(
                LinkedCycle(
                    billing_cycle=row["billing_cycle"],
                    bill=bill,
                    transaction_count=row["transaction_count"],
                    total_amount=row["total_amount"],
                    amount_difference=difference,
                    has_mismatch=abs(difference) > self.config.amount_tolerance(bill_amount),
                )
            )
        return linked

    def evaluate_cycle(self, user_id: int, cycle: BillingCycle) -> PendingCycle:
        """Score candidates for one cycle and classify it without mutating anything."""
        matches = self.finder.find_matches(user_id, cycle, self.config)
        if len(matches) == 1 and matches[0].confidence.allows_auto_link:
            status = CycleStatus.PENDING
        elif matches:
            status = CycleStatus.REQUIRES_SELECTION
        else:
            status = CycleStatus.PENDING
        return PendingCycle(cycle=cycle, status=status, candidates=matches)

    def reconcile(self, user_id: int, billing_cycle: Optional[str] = None) -> ReconciliationResult:
        """Reconcile one cycle, or every pending cycle when billing_cycle is None.

        Raises:
            InvalidBillingCycleError: If billing_cycle is malformed
            PendingCycleNotFoundError: If an unlinked cycle has no transactions
            ConflictError: If a single-cycle link loses a race
        """
        if billing_cycle is not None:
            key = normalize_billing_cycle(billing_cycle)
            if self.db.get_linked_bill_id(user_id, key) is not None:
                logger.debug("Cycle %s already linked, skipping", key)
                return ReconciliationResult()
            cycle = self.cycles.get_pending_cycle(user_id, key)
            if cycle is None:
                raise PendingCycleNotFoundError(key)
            return self._reconcile_cycle(user_id, cycle)

        result = ReconciliationResult()
        for cycle in self.cycles.list_pending_cycles(user_id):
            if self.db.get_linked_bill_id(user_id, cycle.billing_cycle) is not None:
                logger.debug("Cycle %s already linked, skipping", cycle.billing_cycle)
                continue
            try:
                result.merge(self._reconcile_cycle(user_id, cycle))
            except (ConflictError, PendingCycleNotFoundError) as e:
                logger.warning("Skipping cycle %s: %s", cycle.billing_cycle, e)
        logger.info(
            "Reconciled user %d: %d auto-linked, %d require selection, %d without match",
            user_id,
            len(result.auto_linked),
            len(result.requires_selection),
            len(result.no_match),
        )
        return result

    def _reconcile_cycle(self, user_id: int, cycle: BillingCycle) -> ReconciliationResult:
        result = ReconciliationResult()
        evaluation = self.evaluate_cycle(user_id, cycle)
        matches = evaluation.candidates

        if not matches:
            result.no_match.append(cycle.billing_cycle)
        elif evaluation.status == CycleStatus.REQUIRES_SELECTION:
            result.requires_selection.append(evaluation)
        else:
            best = matches[0]
            count = self.link_cycle(user_id, cycle.billing_cycle, best.bill_id)
            result.auto_linked.append(
                AutoLinkedCycle(
                    billing_cycle=cycle.billing_cycle,
                    bill_id=best.bill_id,
                    transactions_linked=count,
                    confidence=best.confidence,
                    amount_difference=best.amount_difference,
                )
            )
        return result

    def link_cycle(self, user_id: int, billing_cycle: str, bill_id: int) -> int:
        """Atomically link a cycle's unlinked transactions to a bill and expand the bill.

        Returns:
            Number of transactions linked

        Raises:
            BillNotFoundError: Bill missing or owned by someone else
            BillAlreadyExpandedError: Bill already linked to a cycle
            AlreadyLinkedError: Cycle already linked to another bill
            PendingCycleNotFoundError: Cycle has no unlinked transactions
        """
        key = normalize_billing_cycle(billing_cycle)
        if self.db.get_bill_payment(user_id, bill_id) is None:
            raise BillNotFoundError(bill_id)
        count = self.db.link_billing_cycle(user_id, key, bill_id, datetime.now(UTC))
        logger.info("Linked %d transaction(s) of cycle %s to bill %d", count, key, bill_id)
        return count

