"""
Subscription and recurring expense auditing using rule-based detection.

Two sources are merged, de-duplicated by case-insensitive name:
    - Declared recurring expenses, annualized by their frequency
    - Merchant descriptions repeated at least twice in the trailing three
      months, assumed monthly

Author: Smart Financial Coach Team
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .aggregator import SpendingAggregator
from .frequencies import annual_cost, monthly_equivalent
from .snapshot import Snapshot


@dataclass
class Subscription:
    name: str
    amount: float
    frequency: str
    annual_cost: float
    source: str  # 'declared'|'detected'

    @property
    def monthly_cost(self) -> float:
        return monthly_equivalent(self.amount, self.frequency)


@dataclass
class SubscriptionAudit:
    identified: List[Subscription] = field(default_factory=list)
    total_monthly: float = 0.0
    total_annual: float = 0.0
    suggestions: List[str] = field(default_factory=list)


class SubscriptionAuditor:
    """
    Identify recurring expenses and what they cost per year.

    Why repeated descriptions count:
        - A merchant charging twice in three months is likely periodic
        - No interval analysis needed for an at-a-glance audit
    """

    MIN_OCCURRENCES = 2
    MAX_LISTED = 10

    # Suggestion thresholds
    MANY_SUBSCRIPTIONS = 5
    HIGH_ANNUAL_COST = 200.0

    def __init__(self, snapshot: Snapshot, aggregator: SpendingAggregator):
        self.snapshot = snapshot
        self.aggregator = aggregator

    def audit(self) -> SubscriptionAudit:
        subscriptions = self._declared()
        known = {s.name.lower() for s in subscriptions}

        for sub in self._detected():
            if sub.name not in known:
                subscriptions.append(sub)
                known.add(sub.name)

        ranked = sorted(subscriptions, key=lambda s: s.annual_cost, reverse=True)

        return SubscriptionAudit(
            identified=ranked[:self.MAX_LISTED],
            total_monthly=sum(s.monthly_cost for s in subscriptions),
            total_annual=sum(s.annual_cost for s in subscriptions),
            suggestions=self._suggestions(subscriptions),
        )

    def _declared(self) -> List[Subscription]:
        subscriptions = []
        for rt in self.snapshot.recurring_transactions:
            if rt.amount >= 0:
                continue
            amount = abs(rt.amount)
            subscriptions.append(Subscription(
                name=rt.description,
                amount=amount,
                frequency=rt.frequency,
                annual_cost=annual_cost(amount, rt.frequency),
                source="declared",
            ))
        return subscriptions

    def _detected(self) -> List[Subscription]:
        merchants: Dict[str, dict] = {}
        for t in self.aggregator.history_expenses:
            if not t.description:
                continue
            merchant = self._normalize_merchant(t.description)
            if not merchant:
                continue
            if merchant in merchants:
                merchants[merchant]["count"] += 1
            else:
                merchants[merchant] = {"amount": abs(t.amount), "count": 1}

        return [
            Subscription(
                name=merchant,
                amount=data["amount"],
                frequency="monthly",
                annual_cost=annual_cost(data["amount"], "monthly"),
                source="detected",
            )
            for merchant, data in merchants.items()
            if data["count"] >= self.MIN_OCCURRENCES
        ]

    def _normalize_merchant(self, description: str) -> str:
        return description.lower().strip()

    def _suggestions(self, subscriptions: List[Subscription]) -> List[str]:
        suggestions = []

        if len(subscriptions) > self.MANY_SUBSCRIPTIONS:
            suggestions.append(
                f"You have {len(subscriptions)} recurring expenses. Review for unused subscriptions."
            )

        expensive = [s for s in subscriptions if s.annual_cost > self.HIGH_ANNUAL_COST]
        if expensive:
            suggestions.append(
                f"{len(expensive)} subscription(s) cost over ${self.HIGH_ANNUAL_COST:.0f}/year. "
                "Consider if they're worth it."
            )

        return suggestions
