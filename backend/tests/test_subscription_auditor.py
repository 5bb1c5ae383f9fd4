"""
Test Module: test_subscription_auditor.py
Description: Unit tests for declared and detected subscription auditing.

Author: Smart Financial Coach Team
"""

from datetime import date

import pytest

from insights.subscription_auditor import SubscriptionAuditor

import factories as f


def audit(snap):
    return SubscriptionAuditor(snap, f.aggregator_for(snap)).audit()


class TestDeclaredSubscriptions:

    def test_yearly_subscription(self, as_of):
        snap = f.snapshot(as_of, recurring_transactions=[
            f.recurring("Cloud Storage", -120.00, "yearly"),
        ])

        result = audit(snap)

        assert len(result.identified) == 1
        sub = result.identified[0]
        assert sub.annual_cost == 120.00
        assert sub.source == "declared"
        assert result.total_monthly == 10.00
        assert result.total_annual == 120.00

    @pytest.mark.parametrize("frequency,amount,annual", [
        ("weekly", -10.00, 520.00),
        ("biweekly", -50.00, 1300.00),
        ("monthly", -15.00, 180.00),
        ("quarterly", -30.00, 120.00),
    ])
    def test_annualized_by_frequency(self, as_of, frequency, amount, annual):
        snap = f.snapshot(as_of, recurring_transactions=[f.recurring("Service", amount, frequency)])

        assert audit(snap).identified[0].annual_cost == pytest.approx(annual)

    def test_quarterly_spread_over_three_months(self, as_of):
        snap = f.snapshot(as_of, recurring_transactions=[
            f.recurring("Software License", -90.00, "quarterly"),
        ])

        result = audit(snap)

        sub = result.identified[0]
        assert sub.annual_cost == pytest.approx(360.00)
        assert sub.monthly_cost == pytest.approx(30.00)
        assert result.total_monthly == pytest.approx(30.00)
        assert result.total_annual == pytest.approx(360.00)

    def test_recurring_income_ignored(self, as_of):
        snap = f.snapshot(as_of, recurring_transactions=[f.recurring("Payroll", 4000.00)])

        result = audit(snap)

        assert result.identified == []
        assert result.total_monthly == 0.0


class TestDetectedSubscriptions:

    def test_repeated_merchant_detected(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-15.99, date(2025, 1, 5), "Entertainment", "NETFLIX "),
            f.txn(-15.99, date(2025, 2, 5), "Entertainment", "Netflix"),
            f.txn(-64.00, date(2025, 2, 9), "Dining", "Steakhouse"),
        ])

        result = audit(snap)

        assert [s.name for s in result.identified] == ["netflix"]
        sub = result.identified[0]
        assert sub.source == "detected"
        assert sub.frequency == "monthly"
        assert sub.annual_cost == pytest.approx(191.88)

    def test_declared_wins_over_detected(self, as_of):
        snap = f.snapshot(
            as_of,
            transactions=[
                f.txn(-15.99, date(2025, 1, 5), description="netflix"),
                f.txn(-15.99, date(2025, 2, 5), description="netflix"),
            ],
            recurring_transactions=[f.recurring("Netflix", -15.99)],
        )

        result = audit(snap)

        assert len(result.identified) == 1
        assert result.identified[0].source == "declared"

    def test_transfers_and_old_history_ignored(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-200.00, date(2025, 1, 1), description="Savings", is_transfer=True),
            f.txn(-200.00, date(2025, 2, 1), description="Savings", is_transfer=True),
            f.txn(-9.99, date(2024, 10, 3), description="Music"),
            f.txn(-9.99, date(2025, 2, 3), description="Music"),
        ])

        assert audit(snap).identified == []


class TestSuggestions:

    def test_many_and_expensive_subscriptions(self, as_of):
        snap = f.snapshot(as_of, recurring_transactions=[
            f.recurring(f"Service {i}", -5.00) for i in range(5)
        ] + [f.recurring("Gym", -45.00)])

        result = audit(snap)

        assert result.suggestions == [
            "You have 6 recurring expenses. Review for unused subscriptions.",
            "1 subscription(s) cost over $200/year. Consider if they're worth it.",
        ]

    def test_no_suggestions_for_small_list(self, as_of):
        snap = f.snapshot(as_of, recurring_transactions=[f.recurring("Music", -9.99)])

        assert audit(snap).suggestions == []

    def test_top_ten_by_annual_cost(self, as_of):
        snap = f.snapshot(as_of, recurring_transactions=[
            f.recurring(f"Service {i}", -(i + 1.0)) for i in range(12)
        ])

        result = audit(snap)

        costs = [s.annual_cost for s in result.identified]
        assert len(costs) == 10
        assert costs == sorted(costs, reverse=True)
        assert costs[0] == 144.00
        # Totals still cover every subscription
        assert result.total_monthly == pytest.approx(sum(range(1, 13)))
