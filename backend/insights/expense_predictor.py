"""
Module: expense_predictor.py
Description: Linear month-end expense projection.

Extrapolates the month-to-date daily average over the rest of the month,
overall and per category, and compares each category projection against
the same category's total for the previous full month.

Author: Smart Financial Coach Team
"""

from dataclasses import dataclass, field
from typing import List

from .aggregator import SpendingAggregator, classify_trend


@dataclass
class CategoryProjection:
    category: str
    projected: float
    trend: str


@dataclass
class ExpensePredictions:
    spent_so_far: float = 0.0
    projected_monthly_total: float = 0.0
    projected_by_category: List[CategoryProjection] = field(default_factory=list)
    daily_average: float = 0.0
    weekly_prediction: float = 0.0


def project_month_end(spent: float, current_day: int, days_remaining: int) -> float:
    """spent + (spent / current_day) * days_remaining"""
    if current_day <= 0:
        return spent
    return spent + spent / current_day * days_remaining


class ExpensePredictor:
    """Project this month's spending from the pace so far."""

    MAX_CATEGORIES = 5
    DAYS_PER_WEEK = 7

    def __init__(self, aggregator: SpendingAggregator):
        self.aggregator = aggregator
        self.dates = aggregator.dates

    def predict(self) -> ExpensePredictions:
        spent = self.aggregator.monthly_expenses
        current_day = self.dates.current_day
        daily_average = spent / current_day if current_day > 0 else 0.0

        return ExpensePredictions(
            spent_so_far=spent,
            projected_monthly_total=project_month_end(spent, current_day, self.dates.days_remaining),
            projected_by_category=self._by_category(),
            daily_average=daily_average,
            weekly_prediction=daily_average * self.DAYS_PER_WEEK,
        )

    def _by_category(self) -> List[CategoryProjection]:
        last_month = self.aggregator.last_month_by_category_name
        projections = []

        for category, spent in self.aggregator.month_to_date_by_category_name.items():
            projected = project_month_end(spent, self.dates.current_day, self.dates.days_remaining)
            projections.append(CategoryProjection(
                category=category,
                projected=projected,
                trend=classify_trend(projected, last_month.get(category, 0.0)),
            ))

        projections.sort(key=lambda p: p.projected, reverse=True)
        return projections[:self.MAX_CATEGORIES]
