"""
Module: report.py
Description: Assemble the full insights report from one snapshot.

Pipeline:
    1. Resolve date ranges once from snapshot.as_of
    2. Build the shared SpendingAggregator once
    3. Run every analyzer and round its output into the InsightsReport
       schema inside one isolation block per section

A failing analyzer or formatter never aborts the report: the error is
logged, counted, and the section falls back to its empty default and is
listed in degraded_sections.

Author: Smart Financial Coach Team

Usage:
    snapshot = load_snapshot(db, user_id, as_of=date(2025, 3, 20))
    report = compute_insights(snapshot)
    payload = report.model_dump(mode="json")
"""

from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from schemas import (
    AnomalyOut, AnomalySection, BillImpactOut, CashFlowForecastOut,
    CategoryProjectionOut, CriticalDateOut, DuplicateGroupOut, DuplicateSection,
    ExpensePredictionsOut, GoalPredictionOut, HealthBreakdownOut, HealthScoreOut,
    InsightsReport, PredictiveAlertOut, ProactiveInsightOut, SpendingPatternsOut,
    SubscriptionAuditOut, SubscriptionOut, SummaryOut, TimeOfMonthOut,
    TransactionOut, UpcomingBillOut,
)

from .aggregator import UNCATEGORIZED, SpendingAggregator
from .alert_generator import PredictiveAlert, PredictiveAlertGenerator
from .anomaly_detector import Anomaly, AnomalyDetector, DuplicateDetector, DuplicateGroup
from .bill_impact import BillImpact, BillImpactAnalyzer
from .cash_flow import CashFlowForecast, CashFlowForecaster
from .date_ranges import resolve_date_ranges
from .expense_predictor import ExpensePredictions, ExpensePredictor
from .goal_forecaster import GoalForecaster, GoalPrediction
from .health_score import HealthScore, HealthScoreCalculator
from .insight_ranker import InsightRanker, ProactiveInsight
from .observability import (
    log_report_complete, log_report_start, log_section_degraded, timed_block,
)
from .pattern_analyzer import SpendingPatterns, PatternAnalyzer
from .rounding import money, percent, round_half_up
from .snapshot import Snapshot, Transaction
from .subscription_auditor import SubscriptionAudit, SubscriptionAuditor


T = TypeVar("T")


def empty_health_score() -> HealthScoreOut:
    return HealthScoreOut(
        score=0,
        grade="D",
        breakdown=HealthBreakdownOut(budget_adherence=0, savings_rate=0, bill_payment=0, goal_progress=0),
    )


# =============================================================================
# Report Assembler
# =============================================================================

class ReportAssembler:
    """Run every analyzer against one snapshot and compose the report."""

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot
        self.dates = resolve_date_ranges(snapshot.as_of)
        self.aggregator = SpendingAggregator(snapshot, self.dates)
        self.degraded_sections: List[str] = []

    def _run(self, section: str, build: Callable[[], T], default: Callable[[], T]) -> T:
        """Analyze and format one section; on failure log it and fall back to the empty default."""
        try:
            with timed_block(f"insights.{section}"):
                return build()
        except Exception as e:
            log_section_degraded(section, e)
            self.degraded_sections.append(section)
            return default()

    def assemble(self) -> InsightsReport:
        snapshot, aggregator, dates = self.snapshot, self.aggregator, self.dates

        log_report_start(snapshot.as_of, len(snapshot.transactions), snapshot.user_id)

        health = self._run(
            "health_score",
            lambda: format_health_score(HealthScoreCalculator(snapshot, aggregator).calculate()),
            empty_health_score,
        )
        anomalies = self._run(
            "anomalies",
            lambda: format_anomalies(AnomalyDetector(aggregator).detect()),
            AnomalySection,
        )
        duplicates = self._run(
            "duplicates",
            lambda: format_duplicates(DuplicateDetector(snapshot).detect()),
            DuplicateSection,
        )
        patterns = self._run(
            "spending_patterns",
            lambda: format_patterns(PatternAnalyzer(aggregator).analyze()),
            SpendingPatternsOut,
        )
        subscriptions = self._run(
            "subscription_audit",
            lambda: format_subscription_audit(SubscriptionAuditor(snapshot, aggregator).audit()),
            SubscriptionAuditOut,
        )
        predictions = self._run(
            "expense_predictions",
            lambda: format_expense_predictions(ExpensePredictor(aggregator).predict()),
            ExpensePredictionsOut,
        )
        cash_flow = self._run(
            "cash_flow_forecast",
            lambda: format_cash_flow(CashFlowForecaster(snapshot, aggregator).forecast()),
            CashFlowForecastOut,
        )
        goals = self._run(
            "goal_predictions",
            lambda: [format_goal_prediction(g) for g in GoalForecaster(snapshot, dates).predict()],
            list,
        )
        bills = self._run(
            "bill_impact",
            lambda: format_bill_impact(BillImpactAnalyzer(snapshot, aggregator).analyze()),
            BillImpactOut,
        )
        alerts = self._run(
            "predictive_alerts",
            lambda: [format_alert(a) for a in PredictiveAlertGenerator(snapshot, aggregator).generate()],
            list,
        )
        health_score = None if "health_score" in self.degraded_sections else health.score
        insights = self._run(
            "proactive_insights",
            lambda: [
                format_insight(i)
                for i in InsightRanker(
                    health_score=health_score,
                    budget_status=aggregator.budget_status,
                    spending_trend=aggregator.spending_trend,
                    savings_rate=aggregator.savings_rate,
                    anomaly_count=anomalies.count,
                    upcoming_bills_total=aggregator.upcoming_bills_total,
                ).rank()
            ],
            list,
        )
        summary = self._run("summary", self._summary, SummaryOut)

        report = InsightsReport(
            as_of=snapshot.as_of,
            health_score=health,
            proactive_insights=insights,
            predictive_alerts=alerts,
            anomalies=anomalies,
            duplicates=duplicates,
            spending_patterns=patterns,
            subscription_audit=subscriptions,
            expense_predictions=predictions,
            cash_flow_forecast=cash_flow,
            goal_predictions=goals,
            bill_impact=bills,
            summary=summary,
            degraded_sections=list(self.degraded_sections),
            generated_at=datetime.now(timezone.utc),
        )

        log_report_complete({
            "health_score": report.health_score.score,
            "anomalies": report.anomalies.count,
            "duplicates": report.duplicates.count,
            "alerts": len(report.predictive_alerts),
            "insights": len(report.proactive_insights),
            "degraded_sections": len(self.degraded_sections),
        })
        return report

    def _summary(self) -> SummaryOut:
        aggregator = self.aggregator
        active_bills = [b for b in self.snapshot.bills if b.is_active]

        return SummaryOut(
            current_balance=money(self.snapshot.current_balance),
            monthly_income=money(aggregator.monthly_income),
            monthly_expenses=money(aggregator.monthly_expenses),
            savings_rate=round_half_up(aggregator.savings_rate, 2),
            spending_trend=aggregator.spending_trend,
            budgets_over_limit=sum(
                1 for b in aggregator.budget_status if b.limit > 0 and b.percentage >= 100
            ),
            active_goals=sum(1 for g in self.snapshot.goals if not g.is_completed),
            # Overdue bills count as upcoming
            upcoming_bills=sum(1 for b in active_bills if b.next_due_date <= self.dates.next_7_days),
        )


# =============================================================================
# Entry Points
# =============================================================================

def compute_insights(snapshot: Snapshot) -> InsightsReport:
    """Compute the complete insights report for one snapshot."""
    return ReportAssembler(snapshot).assemble()


def compute_insights_from(
    transactions: Iterable[Any],
    budgets: Iterable[Any],
    goals: Iterable[Any],
    bills: Iterable[Any],
    accounts: Iterable[Any],
    recurring_transactions: Iterable[Any],
    as_of: date,
    user_id: Optional[str] = None,
) -> InsightsReport:
    """Compute the report straight from raw record collections."""
    snapshot = Snapshot.from_records(
        as_of=as_of,
        transactions=transactions,
        budgets=budgets,
        goals=goals,
        bills=bills,
        accounts=accounts,
        recurring_transactions=recurring_transactions,
        user_id=user_id,
    )
    return compute_insights(snapshot)


# =============================================================================
# Formatting
# =============================================================================

def format_transaction(txn: Transaction) -> TransactionOut:
    return TransactionOut(
        id=txn.id,
        amount=money(txn.amount),
        date=txn.date,
        description=txn.description,
        category_id=txn.category_id,
        category_name=txn.category_name or UNCATEGORIZED,
        account_id=txn.account_id,
        is_transfer=txn.is_transfer,
    )


def format_health_score(health: HealthScore) -> HealthScoreOut:
    return HealthScoreOut(
        score=health.score,
        grade=health.grade,
        breakdown=HealthBreakdownOut(**health.breakdown),
        factors=health.factors,
    )


def format_insight(insight: ProactiveInsight) -> ProactiveInsightOut:
    return ProactiveInsightOut(
        type=insight.type,
        priority=insight.priority,
        message=insight.message,
        action=insight.action,
    )


def format_alert(alert: PredictiveAlert) -> PredictiveAlertOut:
    return PredictiveAlertOut(
        category=alert.category,
        current_spent=money(alert.current_spent),
        projected_total=money(alert.projected_total),
        budget=money(alert.budget),
        days_until_exceed=alert.days_until_exceed,
    )


def format_anomaly(anomaly: Anomaly) -> AnomalyOut:
    return AnomalyOut(
        transaction=format_transaction(anomaly.transaction),
        reason=anomaly.reason,
        severity=anomaly.severity,
        z_score=round_half_up(anomaly.z_score, 2) if anomaly.z_score is not None else None,
    )


def format_anomalies(anomalies: List[Anomaly]) -> AnomalySection:
    return AnomalySection(items=[format_anomaly(a) for a in anomalies], count=len(anomalies))


def format_duplicate_group(group: DuplicateGroup) -> DuplicateGroupOut:
    return DuplicateGroupOut(
        transactions=[format_transaction(t) for t in group.transactions],
        reason=group.reason,
    )


def format_duplicates(groups: List[DuplicateGroup]) -> DuplicateSection:
    return DuplicateSection(items=[format_duplicate_group(g) for g in groups], count=len(groups))


def format_patterns(patterns: SpendingPatterns) -> SpendingPatternsOut:
    return SpendingPatternsOut(
        day_of_week={day: money(total) for day, total in patterns.day_of_week.items()},
        time_of_month=TimeOfMonthOut(
            **{period: money(total) for period, total in patterns.time_of_month.items()}
        ),
        peak_day=patterns.peak_day,
        insight=patterns.insight,
    )


def format_subscription_audit(audit: SubscriptionAudit) -> SubscriptionAuditOut:
    return SubscriptionAuditOut(
        identified=[
            SubscriptionOut(
                name=s.name,
                amount=money(s.amount),
                frequency=s.frequency,
                annual_cost=money(s.annual_cost),
                source=s.source,
            )
            for s in audit.identified
        ],
        total_monthly=money(audit.total_monthly),
        total_annual=money(audit.total_annual),
        suggestions=audit.suggestions,
    )


def format_expense_predictions(predictions: ExpensePredictions) -> ExpensePredictionsOut:
    return ExpensePredictionsOut(
        spent_so_far=money(predictions.spent_so_far),
        projected_monthly_total=money(predictions.projected_monthly_total),
        projected_by_category=[
            CategoryProjectionOut(category=p.category, projected=money(p.projected), trend=p.trend)
            for p in predictions.projected_by_category
        ],
        daily_average=money(predictions.daily_average),
        weekly_prediction=money(predictions.weekly_prediction),
    )


def format_cash_flow(forecast: CashFlowForecast) -> CashFlowForecastOut:
    return CashFlowForecastOut(
        projected_balance_30d=money(forecast.projected_balance_30d),
        upcoming_inflows=money(forecast.upcoming_inflows),
        upcoming_outflows=money(forecast.upcoming_outflows),
        critical_dates=[
            CriticalDateOut(date=c.date, description=c.description, impact=money(c.impact))
            for c in forecast.critical_dates
        ],
        insight=forecast.insight,
    )


def format_goal_prediction(prediction: GoalPrediction) -> GoalPredictionOut:
    goal = prediction.goal
    return GoalPredictionOut(
        goal_id=goal.id,
        goal_name=goal.name,
        target_amount=money(goal.target_amount),
        current_amount=money(goal.current_amount),
        progress=percent(goal.progress),
        predicted_completion_date=prediction.predicted_completion_date,
        months_remaining=prediction.months_remaining,
        required_monthly=money(prediction.required_monthly),
        average_monthly=(
            money(prediction.average_monthly) if prediction.average_monthly is not None else None
        ),
        on_track=prediction.on_track,
        insight=prediction.insight,
    )


def format_bill_impact(impact: BillImpact) -> BillImpactOut:
    return BillImpactOut(
        total_monthly_bills=money(impact.total_monthly_bills),
        percentage_of_income=round_half_up(impact.percentage_of_income, 2),
        upcoming_impact=[
            UpcomingBillOut(
                bill_id=u.bill.id,
                bill_name=u.bill.name,
                due_date=u.bill.next_due_date,
                impact=money(u.impact),
                percent_of_balance=percent(u.percent_of_balance),
            )
            for u in impact.upcoming_impact
        ],
        recommendations=impact.recommendations,
    )
