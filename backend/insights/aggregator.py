"""
Module: aggregator.py
Description: Shared spending aggregates for one report.

Built once per report from the snapshot and the resolved date ranges, then
handed to every analyzer that needs month-to-date totals, prior-month
totals or per-category baseline statistics. Transfers never count as
income or expense.

Author: Smart Financial Coach Team
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Dict, List

import numpy as np
import pandas as pd

from .date_ranges import DateRanges
from .snapshot import Snapshot, Transaction


UNCATEGORIZED = "Uncategorized"
UNKNOWN_CATEGORY = "Unknown"

TREND_BAND = 0.10  # +/-10% counts as stable


@dataclass(frozen=True)
class BudgetStatus:
    category: str
    spent: float
    limit: float

    @property
    def percentage(self) -> float:
        """Share of the limit spent; 0 for a non-positive limit."""
        if self.limit <= 0:
            return 0.0
        return self.spent / self.limit * 100


@dataclass(frozen=True)
class CategoryStats:
    """Mean and population standard deviation of expense magnitudes."""
    avg: float
    std_dev: float
    count: int


def category_label(txn: Transaction) -> str:
    return txn.category_name or UNCATEGORIZED


def classify_trend(current: float, previous: float) -> str:
    """'up'/'down' outside a +/-10% band around the previous amount."""
    if previous <= 0:
        return "stable"
    change = (current - previous) / previous
    if change > TREND_BAND:
        return "up"
    if change < -TREND_BAND:
        return "down"
    return "stable"


class SpendingAggregator:
    """
    Per-report aggregates over the snapshot's transactions.

    Attributes are computed lazily and cached; the snapshot is never
    modified.
    """

    def __init__(self, snapshot: Snapshot, dates: DateRanges):
        self.snapshot = snapshot
        self.dates = dates

    # =========================================================================
    # Transaction Subsets
    # =========================================================================

    @cached_property
    def month_to_date_expenses(self) -> List[Transaction]:
        return [
            t for t in self.snapshot.transactions
            if t.is_expense and self.dates.is_month_to_date(t.date)
        ]

    @cached_property
    def month_to_date_income(self) -> List[Transaction]:
        return [
            t for t in self.snapshot.transactions
            if t.is_income and self.dates.is_month_to_date(t.date)
        ]

    @cached_property
    def last_month_expenses(self) -> List[Transaction]:
        return [
            t for t in self.snapshot.transactions
            if t.is_expense and self.dates.is_last_month(t.date)
        ]

    @cached_property
    def history_expenses(self) -> List[Transaction]:
        """Expenses inside the three-month trailing window."""
        return [
            t for t in self.snapshot.transactions
            if t.is_expense and self.dates.is_in_history(t.date)
        ]

    # =========================================================================
    # Totals
    # =========================================================================

    @cached_property
    def monthly_income(self) -> float:
        return float(sum(t.amount for t in self.month_to_date_income))

    @cached_property
    def monthly_expenses(self) -> float:
        return float(sum(abs(t.amount) for t in self.month_to_date_expenses))

    @cached_property
    def last_month_total(self) -> float:
        return float(sum(abs(t.amount) for t in self.last_month_expenses))

    @cached_property
    def savings_rate(self) -> float:
        """(income - expenses) / income * 100 for the current month; 0 without income."""
        if self.monthly_income <= 0:
            return 0.0
        return (self.monthly_income - self.monthly_expenses) / self.monthly_income * 100

    @cached_property
    def spending_trend(self) -> str:
        if self.monthly_expenses > self.last_month_total * (1 + TREND_BAND):
            return "up"
        if self.monthly_expenses < self.last_month_total * (1 - TREND_BAND):
            return "down"
        return "stable"

    # =========================================================================
    # Per-Category Aggregates
    # =========================================================================

    @cached_property
    def month_to_date_by_category(self) -> Dict[str, float]:
        """Month-to-date spend keyed by category id (uncategorized excluded)."""
        return _sum_by(
            [t for t in self.month_to_date_expenses if t.category_id],
            lambda t: t.category_id,
        )

    @cached_property
    def budget_status(self) -> List[BudgetStatus]:
        """Month-to-date spend against each budget, in budget order."""
        spending = self.month_to_date_by_category
        return [
            BudgetStatus(
                category=b.category_name or UNKNOWN_CATEGORY,
                spent=spending.get(b.category_id, 0.0),
                limit=b.amount,
            )
            for b in self.snapshot.budgets
        ]

    @cached_property
    def upcoming_bills_total(self) -> float:
        """Active bill amounts due in the next 7 days."""
        return float(sum(
            b.amount or 0.0
            for b in self.snapshot.bills
            if b.is_active and self.dates.today <= b.next_due_date <= self.dates.next_7_days
        ))

    @cached_property
    def month_to_date_by_category_name(self) -> Dict[str, float]:
        return _sum_by(self.month_to_date_expenses, category_label)

    @cached_property
    def last_month_by_category_name(self) -> Dict[str, float]:
        return _sum_by(self.last_month_expenses, category_label)

    @cached_property
    def category_stats(self) -> Dict[str, CategoryStats]:
        """
        Baseline statistics per category id.

        Uses the full months of the trailing window before the current
        month, so a current-month outlier never inflates its own baseline.
        """
        rows = [
            {"category_id": t.category_id, "amount": abs(t.amount)}
            for t in self.snapshot.transactions
            if t.is_expense and t.category_id and self.dates.is_baseline(t.date)
        ]
        if not rows:
            return {}

        df = pd.DataFrame(rows)
        grouped = df.groupby("category_id", sort=False)["amount"]
        stats = pd.DataFrame({
            "avg": grouped.mean(),
            "std_dev": grouped.std(ddof=0),
            "count": grouped.size(),
        })

        return {
            category_id: CategoryStats(
                avg=float(row["avg"]),
                std_dev=float(np.nan_to_num(row["std_dev"])),
                count=int(row["count"]),
            )
            for category_id, row in stats.iterrows()
        }


def _sum_by(transactions: List[Transaction], key) -> Dict[str, float]:
    """Sum expense magnitudes grouped by key, preserving first-seen order."""
    if not transactions:
        return {}
    df = pd.DataFrame({
        "key": [key(t) for t in transactions],
        "amount": [abs(t.amount) for t in transactions],
    })
    totals = df.groupby("key", sort=False)["amount"].sum()
    return {k: float(v) for k, v in totals.items()}
