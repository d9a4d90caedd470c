"""Transaction domain service."""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from datetime import date
from decimal import Decimal

from cardrecon.database.base import Database
from cardrecon.domain.auto_trigger import AutoTriggerHook, AutoTriggerResult, is_bill_payment_like
from cardrecon.domain.billing_cycle import billing_cycle_for_date, normalize_billing_cycle
from cardrecon.domain.entities import (
    CreditCardTransaction as CreditCardTransactionEntity,
    Transaction as TransactionEntity,
)
from cardrecon.domain.errors import NotFoundError, ValidationError, user_not_found
from cardrecon.domain.matching_config import MatchingConfig, DEFAULT_MATCHING_CONFIG

logger = logging.getLogger(__name__)

INSTALLMENT_PATTERN = re.compile(r"(?:parcela|installment)\s+(\d{1,3})\s*/\s*(\d{1,3})", re.IGNORECASE)


def parse_installment(title: str) -> tuple[Optional[int], Optional[int]]:
    """Extract the installment position from a purchase title.

    "Hospital - Parcela 1/3" gives (1, 3). Titles without a valid position
    give (None, None).
    """
    match = INSTALLMENT_PATTERN.search(title or "")
    if match is None:
        return None, None
    current, total = int(match.group(1)), int(match.group(2))
    if current < 1 or total < 1 or current > total:
        return None, None
    return current, total


@dataclass(frozen=True)
class CreatedTransaction:
    """Result of creating a bank-side transaction."""

    transaction_id: int
    is_credit_card_payment: bool
    reconciliation: Optional[AutoTriggerResult] = None


class TransactionService:
    """Service for creating and listing transactions."""

    def __init__(self, db: Database, config: MatchingConfig = DEFAULT_MATCHING_CONFIG):
        """Initialize transaction service.

        Args:
            db: Database instance
            config: Matching policy used by the bill payment hook
        """
        self.db = db
        self.config = config

    def _require_user(self, user_id: int) -> None:
        if self.db.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))

    def create_transaction(
        self,
        user_id: int,
        date: date,
        amount: Decimal,
        description: Optional[str] = None,
        is_credit_card_payment: Optional[bool] = None,
    ) -> CreatedTransaction:
        """Create a bank-side transaction.

        Bill-payment-like transactions (by description heuristic or explicit
        flag) immediately try to link a pending billing cycle.

        Args:
            user_id: Owner
            date: Transaction date
            amount: Signed amount (outflows negative)
            description: Optional description
            is_credit_card_payment: Explicit bill payment flag, None to classify

        Returns:
            CreatedTransaction with the hook outcome for bill payments

        Raises:
            NotFoundError: If user doesn't exist
        """
        self._require_user(user_id)

        is_bill = is_bill_payment_like(description, amount, is_credit_card_payment)
        transaction_id = self.db.create_transaction(
            user_id=user_id,
            date=date,
            amount=amount,
            description=description,
            is_credit_card_payment=is_bill,
        )

        if not is_bill:
            return CreatedTransaction(transaction_id=transaction_id, is_credit_card_payment=False)

        logger.debug("Transaction %d recognized as bill payment", transaction_id)
        hook = AutoTriggerHook(self.db, self.config)
        outcome = hook.on_bill_like_transaction_created(user_id, transaction_id)
        return CreatedTransaction(
            transaction_id=transaction_id,
            is_credit_card_payment=True,
            reconciliation=outcome,
        )

    def create_credit_card_transaction(
        self,
        user_id: int,
        date: date,
        title: str,
        amount: Decimal,
        billing_cycle: Optional[str] = None,
    ) -> int:
        """Create an unlinked credit-card purchase line.

        Args:
            user_id: Owner
            date: Purchase date
            title: Title as printed on the statement
            amount: Signed amount (purchases negative, refunds positive)
            billing_cycle: Cycle key, derived from the date when omitted

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If user doesn't exist
            InvalidBillingCycleError: If billing_cycle is malformed
        """
        self._require_user(user_id)
        if not title or not title.strip():
            raise ValidationError("Credit card transaction title must not be empty")

        if billing_cycle is None:
            cycle = billing_cycle_for_date(date)
        else:
            cycle = normalize_billing_cycle(billing_cycle)
        installment_current, installment_total = parse_installment(title)

        return self.db.create_credit_card_transaction(
            user_id=user_id,
            date=date,
            title=title.strip(),
            amount=amount,
            billing_cycle=cycle,
            installment_current=installment_current,
            installment_total=installment_total,
        )

    def get_transaction(self, user_id: int, transaction_id: int) -> Optional[TransactionEntity]:
        """Get bank-side transaction by ID."""
        return self.db.get_transaction(user_id, transaction_id)

    def get_credit_card_transaction(self, user_id: int, transaction_id: int) -> Optional[CreditCardTransactionEntity]:
        """Get credit-card transaction by ID."""
        return self.db.get_credit_card_transaction(user_id, transaction_id)

    def list_transactions(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[TransactionEntity]:
        """List bank-side transactions with optional date filters."""
        return self.db.list_transactions(user_id, start_date=start_date, end_date=end_date)

    def list_credit_card_transactions(
        self,
        user_id: int,
        billing_cycle: Optional[str] = None,
        pending_only: bool = False,
    ) -> list[CreditCardTransactionEntity]:
        """List credit-card transactions.

        Args:
            user_id: Owner
            billing_cycle: Optional cycle key filter
            pending_only: If True, only transactions not yet linked to a bill
        """
        cycle = normalize_billing_cycle(billing_cycle) if billing_cycle is not None else None
        return self.db.list_credit_card_transactions(user_id, billing_cycle=cycle, unlinked=pending_only)
