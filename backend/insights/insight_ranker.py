"""Proactive insights: candidate rules ranked high, medium, low."""

from dataclasses import dataclass
from typing import List, Optional

from .aggregator import BudgetStatus


PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


@dataclass
class ProactiveInsight:
    type: str
    priority: str
    message: str
    action: Optional[str] = None


class InsightRanker:
    """
    Collect rule-based insights and keep the six most important.

    Sorting is stable, so insights of equal priority keep rule order:
    health score, budgets, trend, savings, anomalies, bills.
    """

    MAX_INSIGHTS = 6

    LOW_HEALTH_SCORE = 50
    HIGH_HEALTH_SCORE = 80
    OVER_BUDGET = 100.0
    NEAR_LIMIT = 80.0
    LOW_SAVINGS_RATE = 10.0

    def __init__(
        self,
        health_score: Optional[int],
        budget_status: List[BudgetStatus],
        spending_trend: str,
        savings_rate: float,
        anomaly_count: int,
        upcoming_bills_total: float,
    ):
        self.health_score = health_score
        self.budget_status = budget_status
        self.spending_trend = spending_trend
        self.savings_rate = savings_rate
        self.anomaly_count = anomaly_count
        self.upcoming_bills_total = upcoming_bills_total

    def rank(self) -> List[ProactiveInsight]:
        insights = self.candidates()
        insights.sort(key=lambda i: PRIORITY_ORDER[i.priority])
        return insights[:self.MAX_INSIGHTS]

    def candidates(self) -> List[ProactiveInsight]:
        insights: List[ProactiveInsight] = []

        # None when the health section degraded: no score to comment on
        if self.health_score is not None:
            if self.health_score < self.LOW_HEALTH_SCORE:
                insights.append(ProactiveInsight(
                    type="health_score",
                    priority="high",
                    message=(
                        f"Your financial health score is {self.health_score}. "
                        "Focus on budgeting and saving to improve."
                    ),
                    action="Review budgets",
                ))
            elif self.health_score >= self.HIGH_HEALTH_SCORE:
                insights.append(ProactiveInsight(
                    type="health_score",
                    priority="low",
                    message=f"Excellent! Your financial health score is {self.health_score}. Keep it up!",
                ))

        measurable = [b for b in self.budget_status if b.limit > 0]
        over_budget = [b.category for b in measurable if b.percentage >= self.OVER_BUDGET]
        near_limit = [
            b.category for b in measurable
            if self.NEAR_LIMIT <= b.percentage < self.OVER_BUDGET
        ]

        if over_budget:
            insights.append(ProactiveInsight(
                type="budget_exceeded",
                priority="high",
                message=f"{len(over_budget)} category(s) over budget: {', '.join(over_budget)}",
                action="Adjust spending",
            ))

        if near_limit:
            insights.append(ProactiveInsight(
                type="budget_warning",
                priority="medium",
                message=f"{len(near_limit)} category(s) approaching limit: {', '.join(near_limit)}",
            ))

        if self.spending_trend == "up":
            insights.append(ProactiveInsight(
                type="spending_trend",
                priority="medium",
                message="Your spending is trending upward this month compared to last month.",
            ))

        if 0 <= self.savings_rate < self.LOW_SAVINGS_RATE:
            insights.append(ProactiveInsight(
                type="savings",
                priority="medium",
                message=(
                    f"Your savings rate is {self.savings_rate:.1f}%. "
                    "Aim for at least 20% to build wealth faster."
                ),
                action="Set savings goal",
            ))

        if self.anomaly_count > 0:
            insights.append(ProactiveInsight(
                type="anomalies",
                priority="medium",
                message=f"{self.anomaly_count} unusual transaction(s) detected. Review for accuracy.",
                action="Review transactions",
            ))

        if self.upcoming_bills_total > 0:
            insights.append(ProactiveInsight(
                type="bills",
                priority="low",
                message=f"${self.upcoming_bills_total:.2f} in bills due in the next 7 days.",
            ))

        return insights
