"""Tests for bill load against income and the upcoming 7-day bill impact."""

from datetime import date, timedelta

import pytest

from insights.bill_impact import BillImpactAnalyzer

import factories as f


def analyze(snap):
    return BillImpactAnalyzer(snap, f.aggregator_for(snap)).analyze()


class TestBillImpact:

    def test_monthly_equivalents_and_income_share(self, as_of):
        snap = f.snapshot(
            as_of,
            transactions=[f.txn(4000.00, date(2025, 3, 1))],
            accounts=[f.account(100000.00)],
            bills=[
                f.bill("Rent", 1500.00, date(2025, 4, 1), "monthly"),
                f.bill("Gym", 120.00, date(2025, 4, 1), "quarterly"),
                f.bill("Insurance", 1200.00, date(2025, 9, 1), "yearly"),
                f.bill("Cleaning", 100.00, date(2025, 4, 2), "weekly"),
                f.bill("Lawn", 50.00, date(2025, 4, 3), "biweekly"),
                f.bill("Electric", None, date(2025, 4, 3)),
                f.bill("Old Gym", 80.00, date(2025, 4, 3), is_active=False),
            ],
        )

        result = analyze(snap)

        assert result.total_monthly_bills == pytest.approx(2181.5)
        assert result.percentage_of_income == pytest.approx(54.5375)
        assert result.recommendations == [
            "Bills consume 55% of income. Consider reducing fixed expenses.",
        ]

    def test_no_income(self, as_of):
        snap = f.snapshot(as_of, bills=[f.bill("Rent", 1500.00, date(2025, 4, 1))])

        assert analyze(snap).percentage_of_income == 0.0

    def test_upcoming_bills_against_balance(self, as_of):
        snap = f.snapshot(
            as_of,
            accounts=[f.account(2000.00)],
            bills=[
                f.bill("Internet", 60.00, date(2025, 3, 22)),
                f.bill("Rent", 1500.00, date(2025, 3, 25)),
                f.bill("Phone", 45.00, date(2025, 3, 28)),  # outside 7 days
                f.bill("Water", 30.00, date(2025, 3, 19)),  # overdue
            ],
        )

        result = analyze(snap)

        assert [u.bill.name for u in result.upcoming_impact] == ["Rent", "Internet"]
        assert result.upcoming_impact[0].percent_of_balance == pytest.approx(75.0)
        assert result.upcoming_impact[1].percent_of_balance == pytest.approx(3.0)
        assert result.recommendations == [
            "1 upcoming bill(s) will take over 20% of your current balance.",
            "Upcoming bills total $1560.00 - ensure sufficient funds.",
        ]

    def test_upcoming_capped_at_five(self, as_of):
        snap = f.snapshot(as_of, accounts=[f.account(1000000.00)], bills=[
            f.bill(f"Bill {i}", 10.00 + i, as_of + timedelta(days=i)) for i in range(7)
        ])

        upcoming = analyze(snap).upcoming_impact

        assert len(upcoming) == 5
        assert upcoming[0].impact == 16.00

    def test_non_positive_balance(self, as_of):
        snap = f.snapshot(
            as_of,
            accounts=[f.account(-50.00)],
            bills=[f.bill("Internet", 60.00, date(2025, 3, 22))],
        )

        assert analyze(snap).upcoming_impact[0].percent_of_balance == 0.0

    def test_empty(self, empty_snapshot):
        result = analyze(empty_snapshot)

        assert result.total_monthly_bills == 0.0
        assert result.upcoming_impact == []
        assert result.recommendations == []
