"""
Module: anomaly_detector.py
Description: Unusual expense and duplicate transaction detection.

Detection Methods:
    1. AnomalyDetector: per-category z-score against the trailing baseline,
       plus absolute large-transaction thresholds
    2. DuplicateDetector: same amount, date and description

Author: Smart Financial Coach Team
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .aggregator import CategoryStats, SpendingAggregator
from .observability import log_anomaly_detected
from .snapshot import Snapshot, Transaction


# =============================================================================
# Detection Constants
# =============================================================================

HIGH_ZSCORE = 3.0
MEDIUM_ZSCORE = 2.0

LARGE_TRANSACTION = 500.0
VERY_LARGE_TRANSACTION = 1000.0

MAX_ANOMALIES = 10
MAX_DUPLICATE_GROUPS = 5

SEVERITY_RANK = {"medium": 1, "high": 2}


@dataclass
class Anomaly:
    transaction: Transaction
    reason: str
    severity: str
    z_score: Optional[float] = None


@dataclass
class DuplicateGroup:
    transactions: List[Transaction]
    reason: str


# =============================================================================
# Anomaly Detector
# =============================================================================

class AnomalyDetector:
    """
    Flags unusually large current-month expenses.

    A z-score above 3 is high severity, above 2 medium. Expenses the
    z-score path did not flag are still reported when they exceed the
    absolute thresholds ($1000 high, $500 medium).
    """

    def __init__(self, aggregator: SpendingAggregator):
        self.aggregator = aggregator

    def detect(self) -> List[Anomaly]:
        stats = self.aggregator.category_stats
        anomalies: List[Anomaly] = []

        for txn in self.aggregator.month_to_date_expenses:
            anomaly = self.evaluate(txn, stats.get(txn.category_id) if txn.category_id else None)
            if anomaly is not None:
                log_anomaly_detected(anomaly.severity, abs(txn.amount))
                anomalies.append(anomaly)

        return anomalies[:MAX_ANOMALIES]

    def evaluate(self, txn: Transaction, stats: Optional[CategoryStats]) -> Optional[Anomaly]:
        """
        Classify one expense; None when it is not unusual.

        The statistical and absolute checks are independent and the more
        severe one wins, so a larger amount never gets a lower severity.
        """
        statistical = self._statistical(txn, stats) if stats is not None else None
        absolute = self._absolute(txn)

        if statistical is None:
            return absolute
        if absolute is not None and SEVERITY_RANK[absolute.severity] > SEVERITY_RANK[statistical.severity]:
            return absolute
        return statistical

    def _statistical(self, txn: Transaction, stats: CategoryStats) -> Optional[Anomaly]:
        amount = abs(txn.amount)
        category = txn.category_name or "this category"
        z_score = self.z_score(amount, stats)

        if z_score > HIGH_ZSCORE:
            return Anomaly(
                transaction=txn,
                reason=(
                    f"${amount:.2f} is significantly higher than average "
                    f"(${stats.avg:.2f}) for {category}"
                ),
                severity="high",
                z_score=z_score,
            )
        elif z_score > MEDIUM_ZSCORE:
            return Anomaly(
                transaction=txn,
                reason=f"${amount:.2f} is above average for {category}",
                severity="medium",
                z_score=z_score,
            )
        return None

    def _absolute(self, txn: Transaction) -> Optional[Anomaly]:
        amount = abs(txn.amount)
        if amount <= LARGE_TRANSACTION:
            return None
        return Anomaly(
            transaction=txn,
            reason=f"Large transaction of ${amount:.2f}",
            severity="high" if amount > VERY_LARGE_TRANSACTION else "medium",
        )

    @staticmethod
    def z_score(amount: float, stats: CategoryStats) -> float:
        # A zero spread falls back to a unit denominator
        return (amount - stats.avg) / (stats.std_dev or 1)


# =============================================================================
# Duplicate Detector
# =============================================================================

class DuplicateDetector:
    """
    Groups transactions sharing amount, date and normalized description.

    Groups are ordered newest first and members by id, so the result does
    not depend on the order the transactions were fetched in.
    """

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot

    @staticmethod
    def key(txn: Transaction) -> Tuple[float, str, str]:
        return (txn.amount, txn.date.isoformat(), (txn.description or "").lower().strip())

    def detect(self) -> List[DuplicateGroup]:
        groups: Dict[Tuple[float, str, str], List[Transaction]] = defaultdict(list)
        for txn in self.snapshot.transactions:
            groups[self.key(txn)].append(txn)

        duplicates = [
            (key, sorted(txns, key=lambda t: t.id))
            for key, txns in groups.items()
            if len(txns) > 1
        ]
        # Newest date first, then amount and description as tie-breakers
        duplicates.sort(key=lambda item: (item[0][0], item[0][2]))
        duplicates.sort(key=lambda item: item[0][1], reverse=True)

        return [
            DuplicateGroup(
                transactions=txns,
                reason=(
                    f"{len(txns)} transactions with same amount "
                    f"(${abs(txns[0].amount):.2f}) on {txns[0].date.isoformat()}"
                ),
            )
            for _, txns in duplicates[:MAX_DUPLICATE_GROUPS]
        ]
