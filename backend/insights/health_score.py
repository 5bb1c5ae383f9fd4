"""
Module: health_score.py
Description: Financial health score (0-100) with explanatory factors.

Components (25 points each):
    1. Budget adherence  - share of budgets not exceeded this month
    2. Savings rate      - tiered on this month's savings rate
    3. Bill punctuality  - share of active bills not overdue
    4. Goal progress     - average progress of active goals, plus an
                           emergency fund bonus

Author: Smart Financial Coach Team
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .aggregator import SpendingAggregator
from .rounding import whole
from .snapshot import Snapshot


@dataclass
class HealthScore:
    score: int
    grade: str
    breakdown: Dict[str, int]
    factors: List[str] = field(default_factory=list)


def grade_for(score: float) -> str:
    if score >= 80:
        return "A"
    elif score >= 60:
        return "B"
    elif score >= 40:
        return "C"
    else:
        return "D"


class HealthScoreCalculator:
    """Combine budgets, savings, bills and goals into one score."""

    MAX_COMPONENT = 25
    MAX_SCORE = 100

    # Neutral scores when there is nothing to measure
    NEUTRAL_BUDGET = 15
    NEUTRAL_BILLS = 20
    NEUTRAL_GOALS = 15

    EMERGENCY_FUND_BONUS = 5
    EMERGENCY_FUND_PROGRESS = 0.5

    def __init__(self, snapshot: Snapshot, aggregator: SpendingAggregator):
        self.snapshot = snapshot
        self.aggregator = aggregator
        self.dates = aggregator.dates

    def calculate(self) -> HealthScore:
        factors: List[str] = []

        budget_score = self._budget_adherence(factors)
        savings_score = self._savings(factors)
        bill_score = self._bill_payment(factors)
        goal_score = self._goal_progress(factors)

        if self.has_emergency_fund:
            goal_score = min(goal_score + self.EMERGENCY_FUND_BONUS, self.MAX_COMPONENT)
            factors.append("Emergency fund on track")

        breakdown = {
            "budget_adherence": budget_score,
            "savings_rate": savings_score,
            "bill_payment": bill_score,
            "goal_progress": goal_score,
        }
        score = max(0, min(sum(breakdown.values()), self.MAX_SCORE))

        return HealthScore(score=score, grade=grade_for(score), breakdown=breakdown, factors=factors)

    # =========================================================================
    # Inputs
    # =========================================================================

    @property
    def has_emergency_fund(self) -> bool:
        """An 'emergency' goal at least half funded."""
        return any(
            "emergency" in g.name.lower()
            and g.current_amount >= g.target_amount * self.EMERGENCY_FUND_PROGRESS
            for g in self.snapshot.goals
        )

    @property
    def active_goals(self) -> list:
        return [g for g in self.snapshot.goals if not g.is_completed]

    @property
    def average_goal_progress(self) -> float:
        goals = self.active_goals
        if not goals:
            return 0.0
        return sum(g.progress for g in goals) / len(goals)

    # =========================================================================
    # Components
    # =========================================================================

    def _budget_adherence(self, factors: List[str]) -> int:
        budgets = self.snapshot.budgets
        if not budgets:
            factors.append("Consider setting up budgets")
            return self.NEUTRAL_BUDGET

        spending = self.aggregator.month_to_date_by_category
        over_budget = sum(1 for b in budgets if spending.get(b.category_id, 0) > b.amount)

        if over_budget > 0:
            factors.append(f"{over_budget} budget(s) exceeded")
        else:
            factors.append("All budgets on track")

        adherence = (len(budgets) - over_budget) / len(budgets)
        return whole(adherence * self.MAX_COMPONENT)

    def _savings(self, factors: List[str]) -> int:
        rate = self.aggregator.savings_rate
        if rate >= 20:
            factors.append(f"Excellent savings rate: {rate:.1f}%")
            return 25
        elif rate >= 10:
            factors.append(f"Good savings rate: {rate:.1f}%")
            return 20
        elif rate > 0:
            factors.append(f"Savings rate: {rate:.1f}% (aim for 20%)")
            return min(whole(rate * 2), self.MAX_COMPONENT)
        else:
            factors.append("Not saving this month")
            return 0

    def _bill_payment(self, factors: List[str]) -> int:
        active = [b for b in self.snapshot.bills if b.is_active]
        if not active:
            return self.NEUTRAL_BILLS

        on_time = sum(1 for b in active if b.next_due_date >= self.dates.today)
        if on_time < len(active):
            factors.append(f"{len(active) - on_time} bill(s) overdue or due soon")
        else:
            factors.append("All bills on track")

        return whole(on_time / len(active) * self.MAX_COMPONENT)

    def _goal_progress(self, factors: List[str]) -> int:
        if not self.active_goals:
            factors.append("Set savings goals to improve score")
            return self.NEUTRAL_GOALS

        progress = self.average_goal_progress
        if progress >= 50:
            factors.append(f"Goals {progress:.0f}% complete")
        else:
            factors.append(f"Goals at {progress:.0f}% - keep contributing!")

        return max(0, min(whole(progress / 4), self.MAX_COMPONENT))
