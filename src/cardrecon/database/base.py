"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from cardrecon.domain.entities import (
    User,
    Transaction,
    BillPayment,
    BillingCycle,
    CreditCardTransaction,
)


class Database(ABC):
    """Abstract database interface for cardrecon.

    Every transaction read or write is scoped by user_id; records owned by
    another user behave as if they did not exist.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # User operations
    @abstractmethod
    def create_user(self, name: str) -> int:
        """Create a user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """List all users."""
        pass

    # Bank-side transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: int,
        date: date,
        amount: Decimal,
        description: Optional[str] = None,
        is_credit_card_payment: bool = False,
    ) -> int:
        """Create a bank-side transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, user_id: int, transaction_id: int) -> Optional[Transaction]:
        """Get a bank-side transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List bank-side transactions with optional date filters."""
        pass

    # Credit-card transaction operations
    @abstractmethod
    def create_credit_card_transaction(
        self,
        user_id: int,
        date: date,
        title: str,
        amount: Decimal,
        billing_cycle: str,
        installment_current: Optional[int] = None,
        installment_total: Optional[int] = None,
    ) -> int:
        """Create a credit-card purchase line. Returns transaction ID."""
        pass

    @abstractmethod
    def get_credit_card_transaction(self, user_id: int, transaction_id: int) -> Optional[CreditCardTransaction]:
        """Get a credit-card transaction by ID."""
        pass

    @abstractmethod
    def list_credit_card_transactions(
        self,
        user_id: int,
        billing_cycle: Optional[str] = None,
        credit_card_payment_id: Optional[int] = None,
        unlinked: bool = False,
    ) -> list[CreditCardTransaction]:
        """List credit-card transactions.

        Args:
            user_id: Owner
            billing_cycle: Optional cycle key filter
            credit_card_payment_id: Optional filter on the linked bill
            unlinked: If True, only return transactions without a bill reference
        """
        pass

    # Bill payment operations
    @abstractmethod
    def get_bill_payment(self, user_id: int, bill_id: int) -> Optional[BillPayment]:
        """Get a bank-side transaction viewed as a bill payment."""
        pass

    @abstractmethod
    def list_bill_payment_candidates(self, user_id: int, start_date: date, end_date: date) -> list[BillPayment]:
        """List unexpanded bill payments dated within [start_date, end_date]."""
        pass

    # Billing cycle aggregation
    @abstractmethod
    def list_pending_cycles(self, user_id: int, billing_cycle: Optional[str] = None) -> list[BillingCycle]:
        """Summarize unlinked credit-card transactions by billing cycle.

        Cycles without unlinked transactions are omitted.
        """
        pass

    @abstractmethod
    def list_linked_cycles(self, user_id: int) -> list[dict[str, Any]]:
        """Summarize linked credit-card transactions by (billing cycle, bill).

        Returns a list of dictionaries with billing_cycle, bill_id,
        transaction_count and total_amount. This structure is kept as dict for
        aggregation results.
        """
        pass

    @abstractmethod
    def get_linked_bill_id(self, user_id: int, billing_cycle: str) -> Optional[int]:
        """Return the bill referenced by any transaction of the cycle, if any."""
        pass

    # Linking
    @abstractmethod
    def link_billing_cycle(self, user_id: int, billing_cycle: str, bill_id: int, linked_at: datetime) -> int:
        """Atomically link every unlinked transaction of a cycle to a bill.

        Sets the bill's original_amount to its amount, expanded_at to
        linked_at and amount to zero. Preconditions are re-checked inside the
        write transaction; any failure rolls back everything.

        Returns:
            Number of transactions linked

        Raises:
            BillNotFoundError: Bill missing or not owned by user
            BillAlreadyExpandedError: Bill already linked to a cycle
            AlreadyLinkedError: Cycle already linked to a bill
            PendingCycleNotFoundError: Cycle has no unlinked transactions
        """
        pass

    @abstractmethod
    def unlink_bill_payment(self, user_id: int, bill_id: int) -> tuple[Decimal, int]:
        """Atomically reverse a link.

        Clears the bill reference of every linked transaction, restores the
        bill amount from original_amount and clears original_amount and
        expanded_at. A bill that is not expanded is left untouched.

        Returns:
            (bill amount after the call, number of transactions disassociated)

        Raises:
            BillNotFoundError: Bill missing or not owned by user
        """
        pass
