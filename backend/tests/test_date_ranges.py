"""Tests for calendar anchors and frequency conversions."""

from datetime import date

import pytest

from insights.date_ranges import months_back, resolve_date_ranges
from insights.frequencies import annual_cost, monthly_equivalent


class TestDateRanges:

    def test_mid_month_anchors(self, as_of):
        dates = resolve_date_ranges(as_of)

        assert dates.today == date(2025, 3, 20)
        assert dates.start_of_month == date(2025, 3, 1)
        assert dates.end_of_month == date(2025, 3, 31)
        assert dates.start_of_last_month == date(2025, 2, 1)
        assert dates.end_of_last_month == date(2025, 2, 28)
        assert dates.history_start == date(2024, 12, 1)
        assert dates.days_in_month == 31
        assert dates.current_day == 20
        assert dates.days_remaining == 11

    def test_week_starts_on_sunday(self, as_of):
        assert resolve_date_ranges(as_of).start_of_week == date(2025, 3, 16)
        assert resolve_date_ranges(date(2025, 3, 16)).start_of_week == date(2025, 3, 16)
        assert resolve_date_ranges(date(2025, 3, 22)).start_of_week == date(2025, 3, 16)

    def test_january_rolls_back_a_year(self):
        dates = resolve_date_ranges(date(2025, 1, 15))

        assert dates.start_of_last_month == date(2024, 12, 1)
        assert dates.end_of_last_month == date(2024, 12, 31)
        assert dates.history_start == date(2024, 10, 1)

    def test_leap_february(self):
        dates = resolve_date_ranges(date(2024, 2, 29))

        assert dates.days_in_month == 29
        assert dates.days_remaining == 0

    def test_forward_windows(self, as_of):
        dates = resolve_date_ranges(as_of)

        assert dates.next_7_days == date(2025, 3, 27)
        assert dates.next_30_days == date(2025, 4, 19)

    def test_window_membership(self, as_of):
        dates = resolve_date_ranges(as_of)

        assert dates.is_month_to_date(date(2025, 3, 1))
        assert dates.is_month_to_date(date(2025, 3, 20))
        assert not dates.is_month_to_date(date(2025, 3, 21))
        assert dates.is_last_month(date(2025, 2, 28))
        assert dates.is_baseline(date(2024, 12, 1))
        assert dates.is_baseline(date(2025, 2, 28))
        assert not dates.is_baseline(date(2025, 3, 1))
        assert not dates.is_baseline(date(2024, 11, 30))

    def test_months_back(self):
        assert months_back(date(2025, 3, 20), 3) == date(2024, 12, 1)
        assert months_back(date(2025, 12, 31), 12) == date(2024, 12, 1)


class TestFrequencies:

    def test_yearly_subscription_round_trip(self):
        """A $120 yearly charge costs $120 a year and $10 a month."""
        assert annual_cost(120.0, "yearly") == 120.0
        assert monthly_equivalent(120.0, "yearly") == 10.0

    @pytest.mark.parametrize("frequency,annual", [
        ("weekly", 520.0),
        ("biweekly", 260.0),
        ("monthly", 120.0),
        ("quarterly", 40.0),
        ("yearly", 10.0),
        ("unknown", 120.0),
    ])
    def test_annual_cost(self, frequency, annual):
        assert annual_cost(10.0, frequency) == pytest.approx(annual)

    @pytest.mark.parametrize("frequency,monthly", [
        ("weekly", 43.3),
        ("biweekly", 21.7),
        ("monthly", 10.0),
        ("quarterly", 10.0 / 3),
        ("Monthly ", 10.0),
    ])
    def test_monthly_equivalent(self, frequency, monthly):
        assert monthly_equivalent(10.0, frequency) == pytest.approx(monthly)
