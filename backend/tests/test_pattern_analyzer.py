"""
Test Module: test_pattern_analyzer.py
Description: Unit tests for weekday and time-of-month spending patterns.

Author: Smart Financial Coach Team
"""

from datetime import date

from insights.pattern_analyzer import DAY_NAMES, PatternAnalyzer, day_name, month_period

import factories as f


def analyze(snap):
    return PatternAnalyzer(f.aggregator_for(snap)).analyze()


class TestBuckets:

    def test_day_names_start_on_sunday(self):
        assert day_name(date(2025, 3, 16)) == "Sunday"
        assert day_name(date(2025, 3, 17)) == "Monday"
        assert day_name(date(2025, 3, 22)) == "Saturday"

    def test_month_periods(self):
        assert month_period(1) == "early"
        assert month_period(10) == "early"
        assert month_period(11) == "mid"
        assert month_period(20) == "mid"
        assert month_period(21) == "late"
        assert month_period(31) == "late"


class TestPatternAnalyzer:

    def test_no_history(self, empty_snapshot):
        patterns = analyze(empty_snapshot)

        assert patterns.peak_day == "N/A"
        assert list(patterns.day_of_week) == DAY_NAMES
        assert all(total == 0 for total in patterns.day_of_week.values())
        assert patterns.insight == "Not enough spending history to detect patterns yet."

    def test_peak_day_and_period(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-100.00, date(2025, 3, 17), "Dining"),   # Monday, mid
            f.txn(-50.00, date(2025, 3, 3), "Dining"),     # Monday, early
            f.txn(-30.00, date(2025, 3, 5), "Groceries"),  # Wednesday, early
            f.txn(2500.00, date(2025, 3, 7)),              # income ignored
        ])

        patterns = analyze(snap)

        assert patterns.day_of_week["Monday"] == 150.00
        assert patterns.day_of_week["Wednesday"] == 30.00
        assert patterns.time_of_month == {"early": 80.00, "mid": 100.00, "late": 0.0}
        assert patterns.peak_day == "Monday"
        assert patterns.insight == (
            "You spend most on Mondays. Most spending happens at the middle of the month."
        )

    def test_three_month_window(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-900.00, date(2024, 11, 30), "Travel"),  # before the window
            f.txn(-40.00, date(2024, 12, 1), "Dining"),
        ])

        patterns = analyze(snap)

        assert sum(patterns.day_of_week.values()) == 40.00

    def test_tie_goes_to_earlier_weekday(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-50.00, date(2025, 3, 15), "Dining"),  # Saturday
            f.txn(-50.00, date(2025, 3, 16), "Dining"),  # Sunday
        ])

        assert analyze(snap).peak_day == "Sunday"

    def test_late_month_insight(self, as_of):
        snap = f.snapshot(as_of, transactions=[f.txn(-75.00, date(2025, 2, 27), "Dining")])

        patterns = analyze(snap)

        assert patterns.peak_day == "Thursday"
        assert patterns.insight.endswith("at the end of the month.")
