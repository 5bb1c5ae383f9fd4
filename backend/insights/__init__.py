"""Financial insights engine: analyzers over one immutable snapshot."""

from .exceptions import InsightsError, SnapshotLoadError, InvalidRecordError
from .snapshot import Snapshot, load_snapshot
from .date_ranges import DateRanges, resolve_date_ranges
from .aggregator import SpendingAggregator
from .health_score import HealthScoreCalculator
from .anomaly_detector import AnomalyDetector, DuplicateDetector
from .pattern_analyzer import PatternAnalyzer
from .subscription_auditor import SubscriptionAuditor
from .expense_predictor import ExpensePredictor
from .cash_flow import CashFlowForecaster
from .goal_forecaster import GoalForecaster
from .bill_impact import BillImpactAnalyzer
from .alert_generator import PredictiveAlertGenerator
from .insight_ranker import InsightRanker
from .notification_generator import Notification, NotificationGenerator
from .report import ReportAssembler, compute_insights, compute_insights_from

__all__ = [
    "InsightsError",
    "SnapshotLoadError",
    "InvalidRecordError",
    "Snapshot",
    "load_snapshot",
    "DateRanges",
    "resolve_date_ranges",
    "SpendingAggregator",
    "HealthScoreCalculator",
    "AnomalyDetector",
    "DuplicateDetector",
    "PatternAnalyzer",
    "SubscriptionAuditor",
    "ExpensePredictor",
    "CashFlowForecaster",
    "GoalForecaster",
    "BillImpactAnalyzer",
    "PredictiveAlertGenerator",
    "InsightRanker",
    "Notification",
    "NotificationGenerator",
    "ReportAssembler",
    "compute_insights",
    "compute_insights_from",
]
