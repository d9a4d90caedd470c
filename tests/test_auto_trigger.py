"""Tests for the bill payment classifier and the auto-trigger hook."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from cardrecon.domain.auto_trigger import AutoTriggerHook, is_bill_payment_like
from cardrecon.domain.entities import Confidence, CycleStatus


@pytest.mark.parametrize(
    "description",
    [
        "Pagamento de fatura",
        "PAGAMENTO FATURA NUBANK",
        "Pagamento cartão",
        "Pagamento do cartao",
        "Credit card payment",
        "Online bill payment",
        "Card statement 11/2024",
    ],
)
def test_bill_payment_descriptions(description):
    """Test descriptions recognized as bill payments."""
    assert is_bill_payment_like(description, Decimal("-100.00")) is True


@pytest.mark.parametrize("description", ["Supermarket", "Faturamento", "Salary", None, ""])
def test_other_descriptions(description):
    """Test descriptions that are not bill payments."""
    assert is_bill_payment_like(description, Decimal("-100.00")) is False


def test_inflow_is_never_bill_payment():
    """Test a positive amount with a bill-like description."""
    assert is_bill_payment_like("Pagamento de fatura", Decimal("100.00")) is False


def test_explicit_flag_wins():
    """Test the explicit flag overrides the heuristic both ways."""
    assert is_bill_payment_like("Pagamento de fatura", Decimal("-100.00"), flagged=False) is False
    assert is_bill_payment_like("Transfer", Decimal("-100.00"), flagged=True) is True


def test_new_bill_links_matching_cycle(temp_db, transaction_service, sample_user, add_purchase):
    """Test a new bill payment links the cycle it clearly pays."""
    add_purchase(sample_user, "600.00")
    add_purchase(sample_user, "400.00", txn_date=date(2024, 11, 18))

    created = transaction_service.create_transaction(
        user_id=sample_user.id,
        date=date(2024, 12, 10),
        amount=Decimal("-1000.00"),
        description="Pagamento de fatura",
    )

    assert created.is_credit_card_payment is True
    outcome = created.reconciliation
    assert outcome.triggered is True
    assert outcome.linked_cycle == "2024-11"
    assert outcome.confidence == Confidence.HIGH
    assert outcome.transactions_linked == 2
    assert temp_db.get_bill_payment(sample_user.id, created.transaction_id).is_expanded


def test_new_bill_medium_confidence_links(transaction_service, sample_user, add_purchase):
    """Test a medium-confidence single match is linked."""
    add_purchase(sample_user, "1000.00")

    created = transaction_service.create_transaction(
        user_id=sample_user.id,
        date=date(2024, 12, 10),
        amount=Decimal("-1015.00"),
        description="Pagamento de fatura",
    )

    assert created.reconciliation.triggered is True
    assert created.reconciliation.confidence == Confidence.MEDIUM


def test_new_bill_low_confidence_not_linked(temp_db, transaction_service, sample_user, add_purchase):
    """Test a low-confidence match is left for the user."""
    add_purchase(sample_user, "1000.00")

    created = transaction_service.create_transaction(
        user_id=sample_user.id,
        date=date(2024, 12, 10),
        amount=Decimal("-1040.00"),
        description="Pagamento de fatura",
    )

    assert created.reconciliation.triggered is False
    assert not temp_db.get_bill_payment(sample_user.id, created.transaction_id).is_expanded


def test_new_bill_matching_two_cycles_not_linked(temp_db, transaction_service, sample_user, add_purchase):
    """Test a bill fitting two pending cycles is ambiguous."""
    add_purchase(sample_user, "1000.00")
    add_purchase(sample_user, "1000.00", billing_cycle="2024-12", txn_date=date(2024, 12, 3))

    created = transaction_service.create_transaction(
        user_id=sample_user.id,
        date=date(2024, 12, 10),
        amount=Decimal("-1000.00"),
        description="Pagamento de fatura",
    )

    assert created.reconciliation.triggered is False
    assert temp_db.get_linked_bill_id(sample_user.id, "2024-11") is None
    assert temp_db.get_linked_bill_id(sample_user.id, "2024-12") is None


def test_new_bill_outside_window_not_linked(transaction_service, sample_user, add_purchase):
    """Test a bill dated after the cycle window."""
    add_purchase(sample_user, "1000.00")

    created = transaction_service.create_transaction(
        user_id=sample_user.id,
        date=date(2024, 12, 20),
        amount=Decimal("-1000.00"),
        description="Pagamento de fatura",
    )

    assert created.reconciliation.triggered is False


def test_new_bill_skips_linked_cycle(temp_db, transaction_service, sample_user, add_purchase, add_bill):
    """Test a linked cycle with a late purchase is not linked again."""
    add_purchase(sample_user, "1000.00")
    first_bill = add_bill(sample_user, "1000.00")
    temp_db.link_billing_cycle(sample_user.id, "2024-11", first_bill, datetime.now(UTC))
    add_purchase(sample_user, "20.00", txn_date=date(2024, 11, 29))

    created = transaction_service.create_transaction(
        user_id=sample_user.id,
        date=date(2024, 12, 12),
        amount=Decimal("-20.00"),
        description="Pagamento de fatura",
    )

    assert created.reconciliation.triggered is False
    assert temp_db.get_linked_bill_id(sample_user.id, "2024-11") == first_bill


def test_regular_transaction_skips_hook(transaction_service, sample_user, add_purchase):
    """Test a non-bill transaction is stored without reconciliation."""
    add_purchase(sample_user, "80.00")

    created = transaction_service.create_transaction(
        user_id=sample_user.id,
        date=date(2024, 12, 10),
        amount=Decimal("-80.00"),
        description="Pharmacy",
    )

    assert created.is_credit_card_payment is False
    assert created.reconciliation is None


def test_hook_ignores_missing_or_expanded_bill(temp_db, sample_user, add_purchase, add_bill):
    """Test the hook is a no-op for unknown and already linked bills."""
    hook = AutoTriggerHook(temp_db)
    assert hook.on_bill_like_transaction_created(sample_user.id, 9999).triggered is False

    add_purchase(sample_user, "1000.00")
    bill_id = add_bill(sample_user, "1000.00")
    temp_db.link_billing_cycle(sample_user.id, "2024-11", bill_id, datetime.now(UTC))
    assert hook.on_bill_like_transaction_created(sample_user.id, bill_id).triggered is False


def test_new_bill_for_cycle_awaiting_selection_not_linked(
    temp_db, transaction_service, reconciliation_service, sample_user, add_purchase, add_bill
):
    """Test a new bill does not settle a cycle that already has competing bills."""
    add_purchase(sample_user, "1000.00")
    add_bill(sample_user, "1000.00", txn_date=date(2024, 12, 5))
    add_bill(sample_user, "1005.00", txn_date=date(2024, 12, 6))

    created = transaction_service.create_transaction(
        user_id=sample_user.id,
        date=date(2024, 12, 7),
        amount=Decimal("-1000.00"),
        description="Pagamento de fatura",
    )

    assert created.reconciliation.triggered is False
    assert temp_db.get_linked_bill_id(sample_user.id, "2024-11") is None
    assert not temp_db.get_bill_payment(sample_user.id, created.transaction_id).is_expanded

    pending = reconciliation_service.get_pending_reconciliations(sample_user.id).pending_cycles
    assert len(pending) == 1
    assert pending[0].status == CycleStatus.REQUIRES_SELECTION
    assert len(pending[0].candidates) == 3


def test_new_bill_with_low_confidence_second_cycle_not_linked(temp_db, transaction_service, sample_user, add_purchase):
    """Test a bill within tolerance of two cycles is ambiguous even if one is low confidence."""
    add_purchase(sample_user, "1000.00")
    add_purchase(sample_user, "960.00", billing_cycle="2024-12", txn_date=date(2024, 12, 3))

    created = transaction_service.create_transaction(
        user_id=sample_user.id,
        date=date(2024, 12, 10),
        amount=Decimal("-1000.00"),
        description="Pagamento de fatura",
    )

    assert created.reconciliation.triggered is False
    assert temp_db.get_linked_bill_id(sample_user.id, "2024-11") is None
    assert temp_db.get_linked_bill_id(sample_user.id, "2024-12") is None


def test_new_bill_ignores_cycle_out_of_tolerance(transaction_service, sample_user, add_purchase):
    """Test a second cycle beyond tolerance does not block the link."""
    add_purchase(sample_user, "1000.00")
    add_purchase(sample_user, "300.00", billing_cycle="2024-12", txn_date=date(2024, 12, 3))

    created = transaction_service.create_transaction(
        user_id=sample_user.id,
        date=date(2024, 12, 10),
        amount=Decimal("-1000.00"),
        description="Pagamento de fatura",
    )

    assert created.reconciliation.triggered is True
    assert created.reconciliation.linked_cycle == "2024-11"
