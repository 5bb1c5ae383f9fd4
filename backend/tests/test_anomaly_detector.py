"""
Test Module: test_anomaly_detector.py
Description: Unit tests for anomaly and duplicate detection.

Tests:
    - Z-score severity against the trailing baseline
    - Absolute large-transaction thresholds
    - Severity monotonicity
    - Duplicate grouping, ordering and caps

Author: Smart Financial Coach Team
"""

import random
from datetime import date

import pytest

from insights.aggregator import CategoryStats
from insights.anomaly_detector import (
    AnomalyDetector,
    DuplicateDetector,
    MAX_ANOMALIES,
    MAX_DUPLICATE_GROUPS,
)
from insights.snapshot import Transaction

import factories as f


SEVERITY_RANK = {None: 0, "medium": 1, "high": 2}


def expense(amount: float, category_id: str = "cat-dining") -> Transaction:
    return Transaction(id="t-1", amount=-amount, date=date(2025, 3, 10),
                       category_id=category_id, category_name="Dining")


# =============================================================================
# Z-Score Detection Tests
# =============================================================================

class TestStatisticalDetection:
    """Tests for per-category z-score detection."""

    def test_grocery_spike_is_high_severity(self, as_of, grocery_history):
        """$400 against a $100 average with stddev ~8.16 is z ~36.7."""
        snap = f.snapshot(as_of, transactions=grocery_history + [
            f.txn(-400.00, date(2025, 3, 12), "Groceries", "Market"),
        ])

        anomalies = AnomalyDetector(f.aggregator_for(snap)).detect()

        assert len(anomalies) == 1
        anomaly = anomalies[0]
        assert anomaly.severity == "high"
        assert anomaly.z_score == pytest.approx(36.742, abs=1e-3)
        assert anomaly.reason == (
            "$400.00 is significantly higher than average ($100.00) for Groceries"
        )

    def test_medium_zscore(self):
        """z between 2 and 3 is medium."""
        stats = CategoryStats(avg=100.0, std_dev=10.0, count=5)
        anomaly = AnomalyDetector(None).evaluate(expense(125.00), stats)

        assert anomaly.severity == "medium"
        assert anomaly.z_score == pytest.approx(2.5)
        assert anomaly.reason == "$125.00 is above average for Dining"

    def test_zero_spread_uses_unit_denominator(self):
        """Identical history amounts give a stddev of 0, treated as 1."""
        stats = CategoryStats(avg=50.0, std_dev=0.0, count=3)

        assert AnomalyDetector.z_score(53.0, stats) == pytest.approx(3.0)
        # Exactly 3 is not above the high threshold
        anomaly = AnomalyDetector(None).evaluate(expense(53.00), stats)
        assert anomaly.severity == "medium"

    def test_ordinary_expense_not_flagged(self, as_of, grocery_history):
        snap = f.snapshot(as_of, transactions=grocery_history + [
            f.txn(-105.00, date(2025, 3, 12), "Groceries", "Market"),
        ])

        assert AnomalyDetector(f.aggregator_for(snap)).detect() == []

    def test_current_month_not_in_baseline(self, as_of):
        """An outlier this month never inflates its own baseline."""
        snap = f.snapshot(as_of, transactions=[
            f.txn(-20.00, date(2025, 3, 2), "Coffee"),
            f.txn(-300.00, date(2025, 3, 3), "Coffee"),
        ])
        aggregator = f.aggregator_for(snap)

        assert aggregator.category_stats == {}
        assert AnomalyDetector(aggregator).detect() == []


# =============================================================================
# Absolute Threshold Tests
# =============================================================================

class TestAbsoluteThresholds:
    """Tests for the $500 / $1000 thresholds."""

    def test_large_uncategorized_expense_medium(self, as_of):
        snap = f.snapshot(as_of, transactions=[f.txn(-750.00, date(2025, 3, 4))])

        anomalies = AnomalyDetector(f.aggregator_for(snap)).detect()

        assert len(anomalies) == 1
        assert anomalies[0].severity == "medium"
        assert anomalies[0].z_score is None
        assert anomalies[0].reason == "Large transaction of $750.00"

    def test_very_large_expense_high(self, as_of):
        snap = f.snapshot(as_of, transactions=[f.txn(-1500.00, date(2025, 3, 4), "Travel")])

        anomalies = AnomalyDetector(f.aggregator_for(snap)).detect()

        assert anomalies[0].severity == "high"

    def test_exactly_500_not_flagged(self, as_of):
        snap = f.snapshot(as_of, transactions=[f.txn(-500.00, date(2025, 3, 4))])

        assert AnomalyDetector(f.aggregator_for(snap)).detect() == []

    def test_transfers_ignored(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-2000.00, date(2025, 3, 4), is_transfer=True),
        ])

        assert AnomalyDetector(f.aggregator_for(snap)).detect() == []

    def test_absolute_high_overrides_statistical_medium(self):
        """A wide-spread category cannot pull a $1200 expense below high."""
        stats = CategoryStats(avg=500.0, std_dev=300.0, count=10)
        anomaly = AnomalyDetector(None).evaluate(expense(1200.00), stats)

        assert anomaly.severity == "high"


# =============================================================================
# Property Tests
# =============================================================================

class TestDetectionProperties:
    """Properties that hold for every input."""

    @pytest.mark.parametrize("avg,std_dev", [(100.0, 50.0), (400.0, 200.0), (50.0, 0.0), (900.0, 5.0)])
    def test_severity_monotonic_in_amount(self, avg, std_dev):
        """Increasing the magnitude never lowers the severity."""
        detector = AnomalyDetector(None)
        stats = CategoryStats(avg=avg, std_dev=std_dev, count=3)

        previous = 0
        for amount in range(0, 2001, 25):
            anomaly = detector.evaluate(expense(float(amount)), stats)
            rank = SEVERITY_RANK[anomaly.severity if anomaly else None]
            assert rank >= previous, f"Severity dropped at ${amount}"
            previous = rank

    def test_capped_at_ten(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-600.00 - i, date(2025, 3, 1 + i), description=f"Purchase {i}")
            for i in range(15)
        ])

        anomalies = AnomalyDetector(f.aggregator_for(snap)).detect()

        assert len(anomalies) == MAX_ANOMALIES

    def test_empty_snapshot(self, empty_snapshot):
        assert AnomalyDetector(f.aggregator_for(empty_snapshot)).detect() == []


# =============================================================================
# Duplicate Detection Tests
# =============================================================================

class TestDuplicateDetection:
    """Tests for same amount/date/description grouping."""

    def test_coffee_shop_pair(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-45.00, date(2025, 3, 1), description="Coffee Shop"),
            f.txn(-45.00, date(2025, 3, 1), description="Coffee Shop"),
        ])

        groups = DuplicateDetector(snap).detect()

        assert len(groups) == 1
        assert len(groups[0].transactions) == 2
        assert groups[0].reason == "2 transactions with same amount ($45.00) on 2025-03-01"

    def test_description_normalized(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-12.50, date(2025, 3, 2), description="  coffee SHOP "),
            f.txn(-12.50, date(2025, 3, 2), description="Coffee Shop"),
        ])

        assert len(DuplicateDetector(snap).detect()) == 1

    def test_different_dates_not_grouped(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-45.00, date(2025, 3, 1), description="Coffee Shop"),
            f.txn(-45.00, date(2025, 3, 2), description="Coffee Shop"),
        ])

        assert DuplicateDetector(snap).detect() == []

    def test_previous_months_included(self, as_of):
        snap = f.snapshot(as_of, transactions=[
            f.txn(-80.00, date(2025, 1, 15), description="Gym"),
            f.txn(-80.00, date(2025, 1, 15), description="Gym"),
        ])

        assert len(DuplicateDetector(snap).detect()) == 1

    def test_independent_of_input_order(self, as_of):
        records = []
        for i in range(6):
            day = date(2025, 3, 1 + i)
            records.append(f.txn(-10.00 * (i + 1), day, description="Shop", id=f"a{i}"))
            records.append(f.txn(-10.00 * (i + 1), day, description="Shop", id=f"b{i}"))

        shuffled = list(records)
        random.Random(7).shuffle(shuffled)

        def signature(recs):
            groups = DuplicateDetector(f.snapshot(as_of, transactions=recs)).detect()
            return [[t.id for t in g.transactions] for g in groups]

        assert signature(records) == signature(shuffled)
        assert signature(records) == signature(list(reversed(records)))

    def test_capped_at_five_newest_first(self, as_of):
        records = []
        for i in range(7):
            day = date(2025, 3, 1 + i)
            records += [f.txn(-20.00, day, description="Cafe"), f.txn(-20.00, day, description="Cafe")]

        groups = DuplicateDetector(f.snapshot(as_of, transactions=records)).detect()

        assert len(groups) == MAX_DUPLICATE_GROUPS
        assert [g.transactions[0].date for g in groups] == [
            date(2025, 3, 7), date(2025, 3, 6), date(2025, 3, 5), date(2025, 3, 4), date(2025, 3, 3),
        ]
