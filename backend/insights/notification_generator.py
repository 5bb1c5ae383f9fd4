"""
Module: notification_generator.py
Description: Proactive notification rules for budgets, bills, goals and spending.

Runs separately from the insights report. Thresholds loosely mirror the
report (budget 90%/100%, bills due soon) but nothing here depends on the
report's output.

Rules:
    1. Budget warnings   - >=100% critical, >=90% high
    2. Bill reminders    - overdue / due today critical, due in 1-3 days high
    3. Goal reminders    - 90-100% progress, or behind schedule (medium)
    4. Spending alert    - projected month > 120% of total budget (high)
    5. Savings idea      - top category > 30% of month spend (low)
    6. Weekly summary    - Mondays only (low)

A notification is suppressed when the same (type, data) pair was already
sent recently; callers pass those keys in as `recent_keys`.

Author: Smart Financial Coach Team

Usage:
    generator = NotificationGenerator(snapshot, aggregator, recent_keys)
    notifications = generator.generate()
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .aggregator import UNKNOWN_CATEGORY, SpendingAggregator
from .observability import logger, metrics
from .rounding import money, whole
from .snapshot import Snapshot


DedupeKey = Tuple[str, str]


def dedupe_key(notification_type: str, data: Dict[str, Any]) -> DedupeKey:
    """Stable key for a notification: its type plus canonical JSON of its data."""
    return (notification_type, json.dumps(data, sort_keys=True, default=str))


@dataclass
class Notification:
    type: str
    title: str
    message: str
    priority: str  # 'critical'|'high'|'medium'|'low'
    data: Dict[str, Any] = field(default_factory=dict)
    action_url: Optional[str] = None
    action_label: Optional[str] = None
    expires_at: Optional[datetime] = None

    @property
    def key(self) -> DedupeKey:
        return dedupe_key(self.type, self.data)


class NotificationGenerator:
    """Generate deduplicated proactive notifications for one snapshot."""

    BUDGET_EXCEEDED = 100.0
    BUDGET_WARNING = 90.0

    BILL_DUE_SOON_DAYS = 3

    GOAL_ALMOST_THERE = 90.0
    GOAL_BEHIND_RATIO = 1.5

    SPENDING_OVER_BUDGET_RATIO = 1.2
    TOP_CATEGORY_SHARE = 0.3

    WEEKLY_SUMMARY_WEEKDAY = 0  # Monday

    def __init__(self, snapshot: Snapshot, aggregator: SpendingAggregator,
                 recent_keys: Iterable[DedupeKey] = ()):
        self.snapshot = snapshot
        self.aggregator = aggregator
        self.dates = aggregator.dates
        self.recent_keys = set(recent_keys)

    def generate(self) -> List[Notification]:
        candidates: List[Notification] = []
        candidates.extend(self._budget_warnings())
        candidates.extend(self._bill_reminders())
        candidates.extend(self._goal_reminders())
        candidates.extend(self._spending_alerts())
        candidates.extend(self._savings_opportunities())
        candidates.extend(self._weekly_summary())

        notifications = []
        for n in candidates:
            if n.key in self.recent_keys:
                metrics.increment("notifications.suppressed", tags={"type": n.type})
                continue
            self.recent_keys.add(n.key)
            notifications.append(n)

        metrics.increment("notifications.generated", len(notifications))
        logger.info("Notifications generated", count=len(notifications),
                    suppressed=len(candidates) - len(notifications))
        return notifications

    # =========================================================================
    # Expiry Anchors
    # =========================================================================

    @property
    def start_of_next_month(self) -> datetime:
        return datetime.combine(self.dates.end_of_month + timedelta(days=1), time.min)

    @property
    def one_week_from_today(self) -> datetime:
        return datetime.combine(self.dates.next_7_days, time.min)

    # =========================================================================
    # Rules
    # =========================================================================

    def _budget_warnings(self) -> List[Notification]:
        spending = self.aggregator.month_to_date_by_category
        notifications = []

        for budget in self.snapshot.budgets:
            if budget.amount <= 0:
                continue
            spent = spending.get(budget.category_id, 0.0)
            percentage = spent / budget.amount * 100
            category = budget.category_name or UNKNOWN_CATEGORY
            data = {"budget_id": budget.id, "category": category}

            if percentage >= self.BUDGET_EXCEEDED:
                notifications.append(Notification(
                    type="budget_warning",
                    title=f"Budget Exceeded: {category}",
                    message=(
                        f"You've spent ${spent:.2f} of your ${budget.amount:.2f} {category} "
                        f"budget ({whole(percentage)}%)."
                    ),
                    priority="critical",
                    data=data,
                    action_url="/dashboard/budgets",
                    action_label="View Budgets",
                ))
            elif percentage >= self.BUDGET_WARNING:
                notifications.append(Notification(
                    type="budget_warning",
                    title=f"Budget Alert: {category}",
                    message=(
                        f"You've used {whole(percentage)}% of your {category} budget. "
                        f"Only ${budget.amount - spent:.2f} remaining."
                    ),
                    priority="high",
                    data=data,
                    action_url="/dashboard/budgets",
                    action_label="View Budgets",
                ))

        return notifications

    def _bill_reminders(self) -> List[Notification]:
        notifications = []

        for bill in self.snapshot.bills:
            if not bill.is_active:
                continue
            days_until_due = (bill.next_due_date - self.dates.today).days
            amount = f"${bill.amount:.2f}" if bill.amount else "variable"
            data = {"bill_id": bill.id, "bill_name": bill.name}

            if days_until_due < 0:
                notifications.append(Notification(
                    type="bill_reminder",
                    title=f"Overdue: {bill.name}",
                    message=f"{bill.name} was due {-days_until_due} days ago. Amount: {amount}.",
                    priority="critical",
                    data=data,
                    action_url="/dashboard/bills",
                    action_label="Pay Now",
                ))
            elif days_until_due == 0:
                notifications.append(Notification(
                    type="bill_reminder",
                    title=f"Due Today: {bill.name}",
                    message=f"{bill.name} is due today! Amount: {amount}.",
                    priority="critical",
                    data=data,
                    action_url="/dashboard/bills",
                    action_label="Pay Now",
                ))
            elif days_until_due <= self.BILL_DUE_SOON_DAYS:
                plural = "s" if days_until_due > 1 else ""
                notifications.append(Notification(
                    type="bill_reminder",
                    title=f"Upcoming: {bill.name}",
                    message=f"{bill.name} is due in {days_until_due} day{plural}. Amount: {amount}.",
                    priority="high",
                    data=data,
                    action_url="/dashboard/bills",
                    action_label="View Bills",
                ))

        return notifications

    def _goal_reminders(self) -> List[Notification]:
        notifications = []

        for goal in self.snapshot.goals:
            if goal.is_completed or goal.target_amount <= 0:
                continue
            remaining = goal.target_amount - goal.current_amount
            data = {"goal_id": goal.id, "goal_name": goal.name}

            if self.GOAL_ALMOST_THERE <= goal.progress < 100:
                notifications.append(Notification(
                    type="goal_reminder",
                    title=f"Almost There: {goal.name}",
                    message=(
                        f"You're {whole(goal.progress)}% of the way to {goal.name}! "
                        f"Only ${remaining:.2f} to go."
                    ),
                    priority="medium",
                    data=data,
                    action_url="/dashboard/goals",
                    action_label="Contribute",
                ))

            required_daily = self._required_daily(goal, remaining)
            if required_daily is not None:
                notifications.append(Notification(
                    type="goal_reminder",
                    title=f"Goal Behind Schedule: {goal.name}",
                    message=(
                        f"To reach {goal.name} by {goal.target_date.isoformat()}, you need to save "
                        f"${required_daily:.2f}/day. Consider increasing contributions."
                    ),
                    priority="medium",
                    data={**data, "type": "behind"},
                    action_url="/dashboard/goals",
                    action_label="Adjust Goal",
                ))

        return notifications

    def _required_daily(self, goal, remaining: float) -> Optional[float]:
        """Required daily saving when the goal is behind schedule, else None."""
        if goal.target_date is None or goal.created_at is None or remaining <= 0:
            return None
        days_left = (goal.target_date - self.dates.today).days
        if days_left <= 0:
            return None

        required_daily = remaining / days_left
        days_since_created = max(1, (self.dates.today - goal.created_at.date()).days)
        average_daily = goal.current_amount / days_since_created

        if required_daily > average_daily * self.GOAL_BEHIND_RATIO:
            return required_daily
        return None

    def _spending_alerts(self) -> List[Notification]:
        total_budget = sum(b.amount for b in self.snapshot.budgets if b.amount > 0)
        if total_budget <= 0:
            return []

        spent = self.aggregator.monthly_expenses
        projected = spent / self.dates.current_day * self.dates.days_in_month
        if projected <= total_budget * self.SPENDING_OVER_BUDGET_RATIO:
            return []

        overage = whole((projected - total_budget) / total_budget * 100)
        return [Notification(
            type="spending_alert",
            title="Spending Projection Warning",
            message=(
                f"At current pace, you'll spend ${projected:.2f} this month, exceeding your "
                f"total budget of ${total_budget:.2f} by {overage}%."
            ),
            priority="high",
            data={"projected": money(projected), "budget": money(total_budget)},
            action_url="/dashboard/analytics",
            action_label="View Spending",
            expires_at=self.start_of_next_month,
        )]

    def _savings_opportunities(self) -> List[Notification]:
        by_category = self.aggregator.month_to_date_by_category_name
        total = self.aggregator.monthly_expenses
        if not by_category or total <= 0:
            return []

        # First category wins a tie
        category = max(by_category, key=by_category.get)
        amount = by_category[category]
        if amount <= total * self.TOP_CATEGORY_SHARE:
            return []

        return [Notification(
            type="savings_opportunity",
            title=f"Savings Opportunity: {category}",
            message=(
                f"You've spent ${amount:.2f} on {category} this month "
                f"({whole(amount / total * 100)}% of total). Consider ways to reduce this category."
            ),
            priority="low",
            data={"category": category, "amount": money(amount)},
            action_url="/dashboard/analytics",
            action_label="Analyze",
            expires_at=self.start_of_next_month,
        )]

    def _weekly_summary(self) -> List[Notification]:
        today = self.dates.today
        if today.weekday() != self.WEEKLY_SUMMARY_WEEKDAY:
            return []

        week_start = today - timedelta(days=7)
        spent = sum(
            abs(t.amount)
            for t in self.snapshot.transactions
            if t.is_expense and week_start <= t.date <= today
        )

        return [Notification(
            type="weekly_insight",
            title="Your Weekly Spending Summary",
            message=(
                f"Last week you spent ${spent:.2f}. "
                "Check your weekly summary for insights and tips."
            ),
            priority="low",
            data={"week": week_start.isoformat()},
            action_url="/dashboard",
            action_label="View Summary",
            expires_at=self.one_week_from_today,
        )]
