"""
Module: date_ranges.py
Description: Calendar anchors shared by every analyzer in one report.

"Today" is always passed in explicitly; nothing here reads the clock, so
all analyzers of a report agree on what "this month" means.

Author: Smart Financial Coach Team
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta


HISTORY_MONTHS = 3


def months_back(day: date, months: int) -> date:
    """First day of the month `months` before the month of `day`."""
    index = day.year * 12 + (day.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def history_start(as_of: date) -> date:
    """Start of the trailing history window used for patterns and baselines."""
    return months_back(as_of, HISTORY_MONTHS)


@dataclass(frozen=True)
class DateRanges:
    today: date
    start_of_month: date
    end_of_month: date
    start_of_last_month: date
    end_of_last_month: date
    start_of_week: date
    history_start: date
    days_in_month: int
    current_day: int
    days_remaining: int

    @property
    def next_7_days(self) -> date:
        return self.today + timedelta(days=7)

    @property
    def next_30_days(self) -> date:
        return self.today + timedelta(days=30)

    def is_month_to_date(self, day: date) -> bool:
        return self.start_of_month <= day <= self.today

    def is_last_month(self, day: date) -> bool:
        return self.start_of_last_month <= day <= self.end_of_last_month

    def is_in_history(self, day: date) -> bool:
        return self.history_start <= day <= self.today

    def is_baseline(self, day: date) -> bool:
        """Full months before the current one, inside the history window."""
        return self.history_start <= day < self.start_of_month


def resolve_date_ranges(today: date) -> DateRanges:
    """Compute every calendar anchor for the given report date."""
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    start_of_month = today.replace(day=1)
    end_of_last_month = start_of_month - timedelta(days=1)

    # date.weekday(): Monday=0 .. Sunday=6; weeks start on Sunday
    days_since_sunday = (today.weekday() + 1) % 7

    return DateRanges(
        today=today,
        start_of_month=start_of_month,
        end_of_month=today.replace(day=days_in_month),
        start_of_last_month=end_of_last_month.replace(day=1),
        end_of_last_month=end_of_last_month,
        start_of_week=today - timedelta(days=days_since_sunday),
        history_start=history_start(today),
        days_in_month=days_in_month,
        current_day=today.day,
        days_remaining=days_in_month - today.day,
    )
