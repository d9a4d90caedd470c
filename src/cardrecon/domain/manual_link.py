"""Manual link and unlink of billing cycles and bill payments."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from cardrecon.database.base import Database
from cardrecon.domain.billing_cycle import BillingCycleService, normalize_billing_cycle
from cardrecon.domain.errors import (
    AlreadyLinkedError,
    AmountMismatchError,
    BillAlreadyExpandedError,
    BillNotFoundError,
    PendingCycleNotFoundError,
)
from cardrecon.domain.matching_config import MatchingConfig, DEFAULT_MATCHING_CONFIG
from cardrecon.domain.reconciliation import ReconciliationService
from cardrecon.domain.scoring import amount_difference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManualLinkResult:
    """Outcome of a user-chosen link."""

    billing_cycle: str
    bill_id: int
    transactions_linked: int
    amount_difference: Decimal
    has_mismatch: bool


@dataclass(frozen=True)
class UnlinkResult:
    """Outcome of reversing a link."""

    bill_id: int
    restored_amount: Decimal
    affected_transaction_count: int


class ManualLinkService:
    """Explicit user override of automatic reconciliation decisions."""

    def __init__(self, db: Database, config: MatchingConfig = DEFAULT_MATCHING_CONFIG):
        """Initialize manual link service.

        Args:
            db: Database instance
            config: Matching policy providing the amount tolerance
        """
        self.db = db
        self.config = config
        self.cycles = BillingCycleService(db)
        self.reconciliation = ReconciliationService(db, config)

    def link(self, user_id: int, billing_cycle: str, bill_id: int, force: bool = False) -> ManualLinkResult:
        """Link a billing cycle to a chosen bill payment.

        Args:
            user_id: Owner of both the cycle and the bill
            billing_cycle: Cycle key (YYYY-MM)
            bill_id: Bill payment to link
            force: Link even when the amount difference exceeds tolerance

        Returns:
            ManualLinkResult

        Raises:
            InvalidBillingCycleError: If the cycle key is malformed
            BillNotFoundError: If the bill does not exist for this user
            BillAlreadyExpandedError: If the bill is linked to another cycle
            AlreadyLinkedError: If the cycle is linked to another bill
            PendingCycleNotFoundError: If the cycle has no unlinked transactions
            AmountMismatchError: If the difference exceeds tolerance and force is not set
        """
        key = normalize_billing_cycle(billing_cycle)

        bill = self.db.get_bill_payment(user_id, bill_id)
        if bill is None:
            raise BillNotFoundError(bill_id)
        if bill.is_expanded:
            raise BillAlreadyExpandedError(bill_id)

        linked_bill_id = self.cycles.get_linked_bill_id(user_id, key)
        if linked_bill_id is not None:
            raise AlreadyLinkedError(key, linked_bill_id)

        cycle = self.cycles.get_pending_cycle(user_id, key)
        if cycle is None:
            raise PendingCycleNotFoundError(key)

        difference = amount_difference(cycle.total_amount, bill.amount)
        tolerance = self.config.amount_tolerance(bill.amount)
        has_mismatch = abs(difference) > tolerance
        if has_mismatch and not force:
            raise AmountMismatchError(key, bill_id, difference, tolerance)

        count = self.reconciliation.link_cycle(user_id, key, bill_id)
        if has_mismatch:
            logger.warning(
                "Forced link of cycle %s to bill %d with difference %s (tolerance %s)",
                key,
                bill_id,
                difference,
                tolerance,
            )
        return ManualLinkResult(
            billing_cycle=key,
            bill_id=bill_id,
            transactions_linked=count,
            amount_difference=difference,
            has_mismatch=has_mismatch,
        )

    def unlink(self, user_id: int, bill_id: int) -> UnlinkResult:
        """Reverse a link, restoring the bill amount.

        Transactions are disassociated, never deleted. Unlinking a bill that
        is not expanded changes nothing.

        Raises:
            BillNotFoundError: If the bill does not exist for this user
        """
        restored_amount, count = self.db.unlink_bill_payment(user_id, bill_id)
        if count:
            logger.info("Unlinked %d transaction(s) from bill %d, restored %s", count, bill_id, restored_amount)
        else:
            logger.debug("Bill %d had no linked transactions", bill_id)
        return UnlinkResult(
            bill_id=bill_id,
            restored_amount=restored_amount,
            affected_transaction_count=count,
        )
