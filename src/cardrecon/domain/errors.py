"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as a record already linked elsewhere."""


class BillNotFoundError(NotFoundError):
    """Bill payment does not exist or is not owned by the caller."""

    def __init__(self, bill_id: int):
        super().__init__(bill_not_found(bill_id))
        self.bill_id = bill_id


class PendingCycleNotFoundError(NotFoundError):
    """Billing cycle has no unlinked credit-card transactions."""

    def __init__(self, billing_cycle: str):
        super().__init__(pending_cycle_not_found(billing_cycle))
        self.billing_cycle = billing_cycle


class AlreadyLinkedError(ConflictError):
    """Billing cycle is already linked to a bill payment."""

    def __init__(self, billing_cycle: str, linked_bill_id: int | None = None):
        super().__init__(cycle_already_linked(billing_cycle, linked_bill_id))
        self.billing_cycle = billing_cycle
        self.linked_bill_id = linked_bill_id


class BillAlreadyExpandedError(ConflictError):
    """Bill payment is already expanded into another billing cycle."""

    def __init__(self, bill_id: int):
        super().__init__(bill_already_expanded(bill_id))
        self.bill_id = bill_id


class AmountMismatchError(ValidationError):
    """Manual link rejected because the amount difference exceeds tolerance."""

    def __init__(self, billing_cycle: str, bill_id: int, difference: Decimal, tolerance: Decimal):
        super().__init__(amount_mismatch(billing_cycle, bill_id, difference, tolerance))
        self.billing_cycle = billing_cycle
        self.bill_id = bill_id
        self.difference = difference
        self.tolerance = tolerance


class InvalidBillingCycleError(ValidationError):
    """Billing cycle key is not in YYYY-MM form."""

    def __init__(self, billing_cycle: str):
        super().__init__(invalid_billing_cycle(billing_cycle))
        self.billing_cycle = billing_cycle


def user_not_found(user_id: int) -> str:
    """Return message for missing user."""
    return f"User {user_id} not found"


def bill_not_found(bill_id: int) -> str:
    """Return message for missing bill payment."""
    return f"Bill payment {bill_id} not found"


def pending_cycle_not_found(billing_cycle: str) -> str:
    """Return message for a billing cycle without unlinked transactions."""
    return f"No pending credit card transactions for billing cycle {billing_cycle}"


def cycle_already_linked(billing_cycle: str, linked_bill_id: int | None = None) -> str:
    """Return message for a billing cycle that already has a bill."""
    if linked_bill_id is None:
        return f"Billing cycle {billing_cycle} is already linked to a bill payment"
    return f"Billing cycle {billing_cycle} is already linked to bill payment {linked_bill_id}"


def bill_already_expanded(bill_id: int) -> str:
    """Return message for a bill already linked to a billing cycle."""
    return f"Bill payment {bill_id} is already linked to a billing cycle"


def amount_mismatch(billing_cycle: str, bill_id: int, difference: Decimal, tolerance: Decimal) -> str:
    """Return message for a manual link outside the amount tolerance."""
    return (
        f"Amount difference {difference:,.2f} between billing cycle {billing_cycle} and "
        f"bill payment {bill_id} exceeds tolerance of {tolerance:,.2f}. "
        "Use force to link anyway."
    )


def invalid_billing_cycle(billing_cycle: str) -> str:
    """Return message for malformed billing cycle key."""
    return f"Invalid billing cycle '{billing_cycle}': expected YYYY-MM"


def duplicate_user_name(name: str) -> str:
    """Return message for duplicate user name."""
    return f"User with name '{name}' already exists"
