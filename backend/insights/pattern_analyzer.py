"""
Module: pattern_analyzer.py
Description: Temporal spending patterns over the trailing three months.

Pattern Types:
    1. Day of week  - which weekday carries the most spending
    2. Time of month - early (1-10), mid (11-20) or late (21+)

Author: Smart Financial Coach Team

Usage:
    analyzer = PatternAnalyzer(aggregator)
    patterns = analyzer.analyze()
"""

from dataclasses import dataclass, field
from typing import Dict

from .aggregator import SpendingAggregator


DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

PERIOD_NAMES = {"early": "start", "mid": "middle", "late": "end"}


@dataclass
class SpendingPatterns:
    day_of_week: Dict[str, float] = field(default_factory=lambda: {d: 0.0 for d in DAY_NAMES})
    time_of_month: Dict[str, float] = field(default_factory=lambda: {p: 0.0 for p in PERIOD_NAMES})
    peak_day: str = "N/A"
    insight: str = ""


def day_name(day) -> str:
    # date.weekday(): Monday=0; names are Sunday-first
    return DAY_NAMES[(day.weekday() + 1) % 7]


def month_period(day_of_month: int) -> str:
    if day_of_month <= 10:
        return "early"
    elif day_of_month <= 20:
        return "mid"
    return "late"


class PatternAnalyzer:
    """Aggregate expense magnitude by weekday and by part of the month."""

    def __init__(self, aggregator: SpendingAggregator):
        self.aggregator = aggregator

    def analyze(self) -> SpendingPatterns:
        patterns = SpendingPatterns()

        for t in self.aggregator.history_expenses:
            amount = abs(t.amount)
            patterns.day_of_week[day_name(t.date)] += amount
            patterns.time_of_month[month_period(t.date.day)] += amount

        if not any(patterns.day_of_week.values()):
            patterns.insight = "Not enough spending history to detect patterns yet."
            return patterns

        # max() keeps the first of equal totals, in Sunday-first order
        patterns.peak_day = max(DAY_NAMES, key=lambda d: patterns.day_of_week[d])
        peak_period = max(PERIOD_NAMES, key=lambda p: patterns.time_of_month[p])

        patterns.insight = (
            f"You spend most on {patterns.peak_day}s. "
            f"Most spending happens at the {PERIOD_NAMES[peak_period]} of the month."
        )
        return patterns
