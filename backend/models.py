"""
SQLAlchemy ORM models for the personal finance records.

Includes:
    - Category (joined onto transactions and budgets)
    - Account, Transaction
    - Budget, Goal, Bill, RecurringTransaction

The insights engine only ever reads these tables; see insights.snapshot.

Author: Smart Financial Coach Team
"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Float, Boolean, Date, DateTime,
    ForeignKey, Index
)
from sqlalchemy.orm import relationship
from database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Category(Base):
    """Reference table for transaction categories."""
    __tablename__ = "categories"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, default="expense")  # 'income'|'expense'

    transactions = relationship("Transaction", back_populates="category")
    budgets = relationship("Budget", back_populates="category")


class Account(Base):
    """Bank, cash or credit account holding a balance."""
    __tablename__ = "accounts"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, default="checking")
    balance = Column(Float, default=0.0)

    transactions = relationship("Transaction", back_populates="account")


class Transaction(Base):
    """Core transaction data. Negative amounts are expenses."""
    __tablename__ = "transactions"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False)
    account_id = Column(String, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(String, ForeignKey("categories.id"))
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String)
    is_transfer = Column(Boolean, default=False)

    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")

    __table_args__ = (
        Index('ix_transactions_user_date', 'user_id', 'date'),
    )


class Budget(Base):
    """Spending limit for one category."""
    __tablename__ = "budgets"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, index=True)
    category_id = Column(String, ForeignKey("categories.id"), nullable=False)
    amount = Column(Float, nullable=False)
    period = Column(String, default="monthly")

    category = relationship("Category", back_populates="budgets")


class Goal(Base):
    """User savings goals."""
    __tablename__ = "goals"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    target_amount = Column(Float, nullable=False)
    current_amount = Column(Float, default=0.0)
    target_date = Column(Date)
    is_completed = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Bill(Base):
    """Obligation with a due date. A null amount means the bill is variable."""
    __tablename__ = "bills"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    amount = Column(Float)
    frequency = Column(String, nullable=False)  # weekly|biweekly|monthly|quarterly|yearly
    next_due_date = Column(Date, nullable=False)
    is_active = Column(Boolean, default=True)


class RecurringTransaction(Base):
    """Declared periodic income or expense, distinct from bills."""
    __tablename__ = "recurring_transactions"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    frequency = Column(String, nullable=False)
    is_active = Column(Boolean, default=True)
