"""
Module: cash_flow.py
Description: 30-day cash flow forecast.

Inflows:
    - Declared recurring income: monthly counted once, biweekly x2.17
Outflows:
    - Active fixed-amount bills due between today and today+30
    - Discretionary estimate: last month's expenses / 30 per remaining day

Author: Smart Financial Coach Team
"""

from dataclasses import dataclass, field
from typing import List

from .aggregator import SpendingAggregator
from .frequencies import MONTHLY_MULTIPLIERS, normalize_frequency
from .snapshot import Snapshot


@dataclass
class CriticalDate:
    date: str  # ISO date, or "Monthly"
    description: str
    impact: float


@dataclass
class CashFlowForecast:
    projected_balance_30d: float = 0.0
    upcoming_inflows: float = 0.0
    upcoming_outflows: float = 0.0
    critical_dates: List[CriticalDate] = field(default_factory=list)
    insight: str = ""


class CashFlowForecaster:
    """Project the combined account balance 30 days out."""

    MAX_CRITICAL_DATES = 5
    DAYS_PER_MONTH = 30
    LOW_BALANCE_RATIO = 0.2

    MONTHLY_LABEL = "Monthly"

    def __init__(self, snapshot: Snapshot, aggregator: SpendingAggregator):
        self.snapshot = snapshot
        self.aggregator = aggregator
        self.dates = aggregator.dates

    def forecast(self) -> CashFlowForecast:
        critical_dates: List[CriticalDate] = []

        inflows = self._recurring_income(critical_dates)
        outflows = self._bills_due(critical_dates)
        outflows += self.aggregator.last_month_total / self.DAYS_PER_MONTH * self.dates.days_remaining

        balance = self.snapshot.current_balance
        projected = balance + inflows - outflows

        # "Monthly" sorts after ISO dates
        critical_dates.sort(key=lambda c: c.date)

        return CashFlowForecast(
            projected_balance_30d=projected,
            upcoming_inflows=inflows,
            upcoming_outflows=outflows,
            critical_dates=critical_dates[:self.MAX_CRITICAL_DATES],
            insight=self._insight(projected, balance),
        )

    def _recurring_income(self, critical_dates: List[CriticalDate]) -> float:
        inflows = 0.0
        for rt in self.snapshot.recurring_transactions:
            if rt.amount <= 0:
                continue
            frequency = normalize_frequency(rt.frequency)
            if frequency == "monthly":
                inflows += rt.amount
                critical_dates.append(CriticalDate(
                    date=self.MONTHLY_LABEL, description=rt.description, impact=rt.amount,
                ))
            elif frequency == "biweekly":
                inflows += rt.amount * MONTHLY_MULTIPLIERS["biweekly"]
        return inflows

    def _bills_due(self, critical_dates: List[CriticalDate]) -> float:
        outflows = 0.0
        for bill in self.snapshot.bills:
            if not bill.is_active or not bill.amount:
                continue
            if not self.dates.today <= bill.next_due_date <= self.dates.next_30_days:
                continue
            outflows += bill.amount
            critical_dates.append(CriticalDate(
                date=bill.next_due_date.isoformat(), description=bill.name, impact=-bill.amount,
            ))
        return outflows

    def _insight(self, projected: float, balance: float) -> str:
        if projected < 0:
            return "Warning: Projected negative balance in 30 days. Consider reducing expenses."
        elif projected < balance * self.LOW_BALANCE_RATIO:
            return "Your balance may drop significantly. Plan for upcoming expenses."
        return "Cash flow looks healthy for the next 30 days."
