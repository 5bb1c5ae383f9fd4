"""
Module: bill_impact.py
Description: How much of income and balance the bills take.

Author: Smart Financial Coach Team
"""

from dataclasses import dataclass, field
from typing import List

from .aggregator import SpendingAggregator
from .frequencies import monthly_equivalent
from .snapshot import Bill, Snapshot


@dataclass
class UpcomingBill:
    bill: Bill
    impact: float
    percent_of_balance: float


@dataclass
class BillImpact:
    total_monthly_bills: float = 0.0
    percentage_of_income: float = 0.0
    upcoming_impact: List[UpcomingBill] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


class BillImpactAnalyzer:
    """
    Monthly bill load and the 7-day upcoming bill impact.

    Recommendations:
        - Bills above 50% of income
        - Any upcoming bill above 20% of the current balance
        - Upcoming bills together above 50% of the current balance
    """

    MAX_UPCOMING = 5

    HIGH_INCOME_SHARE = 50.0
    LARGE_BILL_SHARE = 20.0
    UPCOMING_BALANCE_RATIO = 0.5

    def __init__(self, snapshot: Snapshot, aggregator: SpendingAggregator):
        self.snapshot = snapshot
        self.aggregator = aggregator
        self.dates = aggregator.dates

    def analyze(self) -> BillImpact:
        balance = self.snapshot.current_balance
        income = self.aggregator.monthly_income

        total_monthly = sum(
            monthly_equivalent(b.amount, b.frequency)
            for b in self.snapshot.bills
            if b.is_active and b.amount
        )
        percentage_of_income = total_monthly / income * 100 if income > 0 else 0.0

        upcoming = [
            UpcomingBill(
                bill=b,
                impact=b.amount,
                percent_of_balance=b.amount / balance * 100 if balance > 0 else 0.0,
            )
            for b in self.snapshot.bills
            if b.is_active and b.amount
            and self.dates.today <= b.next_due_date <= self.dates.next_7_days
        ]
        upcoming.sort(key=lambda u: u.impact, reverse=True)

        return BillImpact(
            total_monthly_bills=total_monthly,
            percentage_of_income=percentage_of_income,
            upcoming_impact=upcoming[:self.MAX_UPCOMING],
            recommendations=self._recommendations(percentage_of_income, upcoming, balance),
        )

    def _recommendations(self, percentage_of_income: float, upcoming: List[UpcomingBill],
                         balance: float) -> List[str]:
        recommendations = []

        if percentage_of_income > self.HIGH_INCOME_SHARE:
            recommendations.append(
                f"Bills consume {percentage_of_income:.0f}% of income. Consider reducing fixed expenses."
            )

        large = [u for u in upcoming if u.percent_of_balance > self.LARGE_BILL_SHARE]
        if large:
            recommendations.append(
                f"{len(large)} upcoming bill(s) will take over 20% of your current balance."
            )

        total_upcoming = sum(u.impact for u in upcoming)
        if upcoming and total_upcoming > balance * self.UPCOMING_BALANCE_RATIO:
            recommendations.append(
                f"Upcoming bills total ${total_upcoming:.2f} - ensure sufficient funds."
            )

        return recommendations
