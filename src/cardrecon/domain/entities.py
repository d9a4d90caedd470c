"""Domain model entities for cardrecon.

These are pure data classes representing business concepts, independent of
database schema. Credit-card purchase lines and bank-side bill payments share
one storage table but are exposed to the domain as separate entities.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class Confidence(str, Enum):
    """How closely a bill payment amount matches a billing cycle total."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def allows_auto_link(self) -> bool:
        return self in (Confidence.HIGH, Confidence.MEDIUM)


class CycleStatus(str, Enum):
    """Lifecycle state of a billing cycle."""

    PENDING = "pending"
    REQUIRES_SELECTION = "requires_selection"
    LINKED = "linked"


@dataclass(frozen=True)
class User:
    """Owner of transactions."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Bank-side transaction entity."""

    id: int
    user_id: int
    date: date
    description: Optional[str]
    amount: Decimal
    is_credit_card_payment: bool
    original_amount: Optional[Decimal]
    expanded_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class CreditCardTransaction:
    """Purchase line imported from a credit-card statement.

    Amounts are signed: purchases are negative outflows, refunds positive.
    """

    id: int
    user_id: int
    date: date
    title: str
    amount: Decimal
    billing_cycle: str
    installment_current: Optional[int]
    installment_total: Optional[int]
    credit_card_payment_id: Optional[int]
    created_at: datetime

    @property
    def is_linked(self) -> bool:
        return self.credit_card_payment_id is not None

    @property
    def installment_label(self) -> Optional[str]:
        if self.installment_current is None or self.installment_total is None:
            return None
        return f"{self.installment_current}/{self.installment_total}"


@dataclass(frozen=True)
class BillPayment:
    """Bank-side transaction that pays a credit-card statement.

    original_amount and expanded_at are either both None (untouched) or
    both set (expanded into a billing cycle).
    """

    id: int
    user_id: int
    date: date
    description: Optional[str]
    amount: Decimal
    original_amount: Optional[Decimal]
    expanded_at: Optional[datetime]

    @property
    def is_expanded(self) -> bool:
        return self.expanded_at is not None

    @property
    def effective_amount(self) -> Decimal:
        """Amount of the statement this bill pays, regardless of expansion."""
        if self.original_amount is not None:
            return self.original_amount
        return self.amount


@dataclass(frozen=True)
class BillingCycle:
    """Summary of the unlinked credit-card transactions sharing a cycle key."""

    billing_cycle: str
    transaction_count: int
    total_amount: Decimal
    oldest_date: date
    newest_date: date


@dataclass(frozen=True)
class LinkedCycle:
    """Billing cycle whose transactions carry a bill payment reference."""

    billing_cycle: str
    bill: BillPayment
    transaction_count: int
    total_amount: Decimal
    amount_difference: Decimal
    has_mismatch: bool


@dataclass(frozen=True)
class PotentialMatch:
    """One bill payment evaluated against one billing cycle total."""

    bill_id: int
    date: date
    description: Optional[str]
    amount: Decimal
    amount_difference: Decimal
    difference_percent: Decimal
    confidence: Confidence


@dataclass(frozen=True)
class PendingCycle:
    """Pending billing cycle together with its scored candidates."""

    cycle: BillingCycle
    status: CycleStatus
    candidates: list[PotentialMatch] = field(default_factory=list)

    @property
    def billing_cycle(self) -> str:
        return self.cycle.billing_cycle
