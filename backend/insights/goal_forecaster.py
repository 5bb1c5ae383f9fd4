"""
Module: goal_forecaster.py
Description: Savings goal achievement predictions.

For every active goal:
    - months_remaining = ceil(days_until_target / 30)
    - required_monthly = remaining / months_remaining
    - average pace     = current_amount / months since the goal was created
    - on track when the average pace covers 90% of the required pace

Goals without a target date get a 12-month suggested pace. Goals without
a creation date have no measurable pace and no predicted completion date.
A completion date is only predicted while the target date is still ahead.

Author: Smart Financial Coach Team

Usage:
    forecaster = GoalForecaster(snapshot, dates)
    predictions = forecaster.predict()
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

import pandas as pd

from .date_ranges import DateRanges
from .snapshot import Goal, Snapshot


@dataclass
class GoalPrediction:
    goal: Goal
    required_monthly: float
    on_track: bool
    insight: str
    predicted_completion_date: Optional[date] = None
    months_remaining: Optional[int] = None
    average_monthly: Optional[float] = None


def add_months(day: date, months: int) -> date:
    """Calendar-month offset, clamped to the end of shorter months."""
    return (pd.Timestamp(day) + pd.DateOffset(months=months)).date()


class GoalForecaster:
    """Predict when each active goal will be reached at the current pace."""

    DAYS_PER_MONTH = 30
    ON_TRACK_RATIO = 0.9
    DEFAULT_MONTHS = 12  # suggested horizon without a target date

    def __init__(self, snapshot: Snapshot, dates: DateRanges):
        self.snapshot = snapshot
        self.today = dates.today

    def predict(self) -> List[GoalPrediction]:
        return [self.predict_goal(g) for g in self.snapshot.goals if not g.is_completed]

    def average_pace(self, goal: Goal) -> Optional[float]:
        """Average monthly contribution since creation; None without created_at."""
        if goal.created_at is None:
            return None
        days_since_created = (self.today - goal.created_at.date()).days
        months = max(1.0, days_since_created / self.DAYS_PER_MONTH)
        return goal.current_amount / months

    def predict_goal(self, goal: Goal) -> GoalPrediction:
        remaining = goal.target_amount - goal.current_amount
        pace = self.average_pace(goal)
        months_remaining = None

        if goal.target_date is not None:
            days_until_target = (goal.target_date - self.today).days
            months_remaining = math.ceil(days_until_target / self.DAYS_PER_MONTH)

        if remaining <= 0:
            return GoalPrediction(
                goal=goal,
                required_monthly=0.0,
                on_track=True,
                insight=f"Goal reached with ${goal.current_amount:.2f} saved.",
                months_remaining=months_remaining,
                average_monthly=pace,
            )

        prediction = GoalPrediction(
            goal=goal,
            required_monthly=0.0,
            on_track=True,
            insight="",
            months_remaining=months_remaining,
            average_monthly=pace,
        )

        if months_remaining is None:
            prediction.required_monthly = remaining / self.DEFAULT_MONTHS
            prediction.insight = f"{goal.progress:.0f}% complete. ${remaining:.2f} remaining."
        elif months_remaining > 0:
            required = remaining / months_remaining
            prediction.required_monthly = required
            prediction.predicted_completion_date = self._completion_date(remaining, pace)
            prediction.on_track = pace is not None and pace >= required * self.ON_TRACK_RATIO
            if prediction.on_track:
                prediction.insight = f"On track to reach goal by {goal.target_date.isoformat()}"
            else:
                prediction.insight = f"Need to increase contributions to ${required:.2f}/month"
        else:
            prediction.on_track = False
            prediction.insight = f"Target date passed. ${remaining:.2f} still needed."

        return prediction

    def _completion_date(self, remaining: float, pace: Optional[float]) -> Optional[date]:
        if not pace or pace <= 0:
            return None
        return add_months(self.today, math.ceil(remaining / pace))
