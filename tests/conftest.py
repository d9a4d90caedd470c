"""Shared pytest fixtures for cardrecon tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from cardrecon.database.factories import create_sqlite_database
from cardrecon.domain.manual_link import ManualLinkService
from cardrecon.domain.reconciliation import ReconciliationService
from cardrecon.domain.transaction import TransactionService
from cardrecon.domain.user import UserService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a temporary database."""
    return UserService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    """Create a ReconciliationService with a temporary database."""
    return ReconciliationService(temp_db)


@pytest.fixture
def manual_link_service(temp_db):
    """Create a ManualLinkService with a temporary database."""
    return ManualLinkService(temp_db)


@pytest.fixture
def sample_user(user_service):
    """Create a sample user for testing."""
    user_id = user_service.create_user(name="alice")
    return user_service.get_user(user_id)


@pytest.fixture
def other_user(user_service):
    """Create a second user owning nothing of sample_user's."""
    user_id = user_service.create_user(name="bob")
    return user_service.get_user(user_id)


@pytest.fixture
def add_purchase(temp_db):
    """Return a helper that stores a credit card purchase (amount as outflow)."""

    def _add(user, amount, billing_cycle="2024-11", txn_date=date(2024, 11, 5), title="Purchase"):
        return temp_db.create_credit_card_transaction(
            user_id=user.id,
            date=txn_date,
            title=title,
            amount=-Decimal(str(amount)),
            billing_cycle=billing_cycle,
        )

    return _add


@pytest.fixture
def add_bill(temp_db):
    """Return a helper that stores a bill payment without triggering reconciliation."""

    def _add(user, amount, txn_date=date(2024, 12, 10), description="Pagamento de fatura"):
        return temp_db.create_transaction(
            user_id=user.id,
            date=txn_date,
            amount=-Decimal(str(amount)),
            description=description,
            is_credit_card_payment=True,
        )

    return _add


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
