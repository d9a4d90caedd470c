"""SQLAlchemy models for cardrecon database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class User(Base):
    """Owner of transactions."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")


class Transaction(Base):
    """Transaction model.

    Credit-card purchase lines carry a billing_cycle; bank-side transactions
    (including bill payments) leave it NULL.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)

    # Credit-card side
    billing_cycle = Column(String(7), nullable=True)
    installment_current = Column(Integer, nullable=True)
    installment_total = Column(Integer, nullable=True)
    credit_card_payment_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)

    # Bank side
    is_credit_card_payment = Column(Boolean, default=False, nullable=False)
    original_amount = Column(Numeric(12, 2), nullable=True)
    expanded_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("ix_transactions_user_cycle", "user_id", "billing_cycle"),
        Index("ix_transactions_payment", "credit_card_payment_id"),
    )

    # Relationships
    user = relationship("User", back_populates="transactions")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
