"""
Pytest configuration and shared fixtures for the insights engine tests.

This file is automatically loaded by pytest and provides:
    - A fixed report date
    - An in-memory SQLite session with the ORM tables created
    - Sample snapshots

Author: Smart Financial Coach Team
"""

import pytest
import sys
from pathlib import Path
from datetime import date

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))
sys.path.insert(0, str(Path(__file__).parent.parent))

from database import init_db  # noqa: E402
from insights.observability import metrics  # noqa: E402

import factories as f  # noqa: E402


# =============================================================================
# Date & Metrics Fixtures
# =============================================================================

@pytest.fixture
def as_of() -> date:
    """Thursday 2025-03-20: day 20 of 31, 11 days remaining."""
    return f.AS_OF


@pytest.fixture(autouse=True)
def reset_metrics():
    """Keep metric assertions independent between tests."""
    metrics.reset()
    yield
    metrics.reset()


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def db_session():
    """In-memory SQLite session with all tables created."""
    engine = create_engine("sqlite://")
    init_db(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


# =============================================================================
# Snapshot Fixtures
# =============================================================================

@pytest.fixture
def empty_snapshot(as_of):
    """No records at all."""
    return f.snapshot(as_of)


@pytest.fixture
def grocery_history():
    """Three months of Groceries history: $100, $110, $90 (avg 100)."""
    return [
        f.txn(-100.00, date(2024, 12, 10), "Groceries", "Market"),
        f.txn(-110.00, date(2025, 1, 12), "Groceries", "Market"),
        f.txn(-90.00, date(2025, 2, 14), "Groceries", "Market"),
    ]


@pytest.fixture
def household_snapshot(as_of, grocery_history):
    """A typical month: income, spending, budgets, bills, goals."""
    return f.snapshot(
        as_of,
        transactions=grocery_history + [
            f.txn(4000.00, date(2025, 3, 1), description="Payroll"),
            f.txn(-400.00, date(2025, 3, 5), "Groceries", "Market"),
            f.txn(-150.00, date(2025, 3, 8), "Dining", "Bistro"),
            f.txn(-1500.00, date(2025, 3, 2), "Housing", "Rent"),
            f.txn(-500.00, date(2025, 3, 3), is_transfer=True, description="To savings"),
            f.txn(-900.00, date(2025, 2, 10), "Housing", "Rent"),
        ],
        budgets=[f.budget("Groceries", 600), f.budget("Dining", 100)],
        goals=[f.goal("Emergency Fund", 10000, 6000, date(2025, 10, 6))],
        bills=[f.bill("Internet", 60.00, date(2025, 3, 24))],
        accounts=[f.account(5000.00)],
        recurring_transactions=[f.recurring("Payroll", 4000.00)],
    )

