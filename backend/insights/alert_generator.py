"""
Module: alert_generator.py
Description: Predictive budget alerts.

A budget gets an alert when it is still under its limit but the linear
month-end projection of its spending exceeds the limit.

Author: Smart Financial Coach Team
"""

import math
from dataclasses import dataclass
from typing import List, Optional

from .aggregator import UNKNOWN_CATEGORY, SpendingAggregator
from .expense_predictor import project_month_end
from .snapshot import Snapshot


@dataclass
class PredictiveAlert:
    category: str
    current_spent: float
    projected_total: float
    budget: float
    days_until_exceed: Optional[int] = None


class PredictiveAlertGenerator:
    """Warn about budgets on pace to be exceeded before month end."""

    def __init__(self, snapshot: Snapshot, aggregator: SpendingAggregator):
        self.snapshot = snapshot
        self.aggregator = aggregator
        self.dates = aggregator.dates

    def generate(self) -> List[PredictiveAlert]:
        spending = self.aggregator.month_to_date_by_category
        alerts = []

        for budget in self.snapshot.budgets:
            if budget.amount <= 0:
                continue

            spent = spending.get(budget.category_id, 0.0)
            projected = project_month_end(spent, self.dates.current_day, self.dates.days_remaining)
            if not (projected > budget.amount and spent < budget.amount):
                continue

            daily_average = spent / self.dates.current_day if self.dates.current_day > 0 else 0.0
            days_until_exceed = (
                math.ceil((budget.amount - spent) / daily_average) if daily_average > 0 else None
            )

            alerts.append(PredictiveAlert(
                category=budget.category_name or UNKNOWN_CATEGORY,
                current_spent=spent,
                projected_total=projected,
                budget=budget.amount,
                days_until_exceed=days_until_exceed,
            ))

        # Soonest first; unknown timing last
        alerts.sort(key=lambda a: (a.days_until_exceed is None, a.days_until_exceed or 0))
        return alerts
