"""Mapper functions to convert SQLAlchemy models into domain entities.

One transactions table backs three domain views: bank transactions, bill
payments and credit-card purchase lines. The split lives here so the domain
never depends on the storage layout.
"""

from cardrecon.domain import entities as domain
from cardrecon.database.models import (
    User as ORMUser,
    Transaction as ORMTransaction,
)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        name=orm_user.name,
        created_at=orm_user.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert a bank-side SQLAlchemy Transaction to a domain Transaction."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        amount=orm_transaction.amount,
        is_credit_card_payment=bool(orm_transaction.is_credit_card_payment),
        original_amount=orm_transaction.original_amount,
        expanded_at=orm_transaction.expanded_at,
        created_at=orm_transaction.created_at,
    )


def bill_payment_to_domain(orm_transaction: ORMTransaction) -> domain.BillPayment:
    """Convert a bank-side SQLAlchemy Transaction to a domain BillPayment."""
    return domain.BillPayment(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        amount=orm_transaction.amount,
        original_amount=orm_transaction.original_amount,
        expanded_at=orm_transaction.expanded_at,
    )


def credit_card_transaction_to_domain(orm_transaction: ORMTransaction) -> domain.CreditCardTransaction:
    """Convert a credit-card SQLAlchemy Transaction to a domain CreditCardTransaction."""
    return domain.CreditCardTransaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        date=orm_transaction.date,
        title=orm_transaction.description or "",
        amount=orm_transaction.amount,
        billing_cycle=orm_transaction.billing_cycle,
        installment_current=orm_transaction.installment_current,
        installment_total=orm_transaction.installment_total,
        credit_card_payment_id=orm_transaction.credit_card_payment_id,
        created_at=orm_transaction.created_at,
    )
