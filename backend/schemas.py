"""Pydantic response schemas for the insights report."""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, Literal


Priority = Literal["high", "medium", "low"]
Trend = Literal["up", "down", "stable"]


class TransactionOut(BaseModel):
    id: str
    amount: float
    date: date
    description: Optional[str] = None
    category_id: Optional[str] = None
    category_name: str = "Uncategorized"
    account_id: Optional[str] = None
    is_transfer: bool = False


# =============================================================================
# Health Score
# =============================================================================

class HealthBreakdownOut(BaseModel):
    budget_adherence: int
    savings_rate: int
    bill_payment: int
    goal_progress: int


class HealthScoreOut(BaseModel):
    score: int = Field(ge=0, le=100)
    grade: Literal["A", "B", "C", "D"]
    breakdown: HealthBreakdownOut
    factors: list[str] = []


# =============================================================================
# Insights & Alerts
# =============================================================================

class ProactiveInsightOut(BaseModel):
    type: str
    priority: Priority
    message: str
    action: Optional[str] = None


class PredictiveAlertOut(BaseModel):
    category: str
    current_spent: float
    projected_total: float
    budget: float
    days_until_exceed: Optional[int] = None


# =============================================================================
# Anomalies & Duplicates
# =============================================================================

class AnomalyOut(BaseModel):
    transaction: TransactionOut
    reason: str
    severity: Literal["high", "medium", "low"]
    z_score: Optional[float] = None


class AnomalySection(BaseModel):
    items: list[AnomalyOut] = []
    count: int = 0


class DuplicateGroupOut(BaseModel):
    transactions: list[TransactionOut]
    reason: str


class DuplicateSection(BaseModel):
    items: list[DuplicateGroupOut] = []
    count: int = 0


# =============================================================================
# Patterns & Subscriptions
# =============================================================================

class TimeOfMonthOut(BaseModel):
    early: float = 0.0
    mid: float = 0.0
    late: float = 0.0


class SpendingPatternsOut(BaseModel):
    day_of_week: dict[str, float] = {}
    time_of_month: TimeOfMonthOut = TimeOfMonthOut()
    peak_day: str = "N/A"
    insight: str = ""


class SubscriptionOut(BaseModel):
    name: str
    amount: float
    frequency: str
    annual_cost: float
    source: Literal["declared", "detected"]


class SubscriptionAuditOut(BaseModel):
    identified: list[SubscriptionOut] = []
    total_monthly: float = 0.0
    total_annual: float = 0.0
    suggestions: list[str] = []


# =============================================================================
# Predictions & Forecasts
# =============================================================================

class CategoryProjectionOut(BaseModel):
    category: str
    projected: float
    trend: Trend


class ExpensePredictionsOut(BaseModel):
    spent_so_far: float = 0.0
    projected_monthly_total: float = 0.0
    projected_by_category: list[CategoryProjectionOut] = []
    daily_average: float = 0.0
    weekly_prediction: float = 0.0


class CriticalDateOut(BaseModel):
    date: str  # ISO date, or "Monthly" for recurring income
    description: str
    impact: float


class CashFlowForecastOut(BaseModel):
    projected_balance_30d: float = 0.0
    upcoming_inflows: float = 0.0
    upcoming_outflows: float = 0.0
    critical_dates: list[CriticalDateOut] = []
    insight: str = ""


class GoalPredictionOut(BaseModel):
    goal_id: str
    goal_name: str
    target_amount: float
    current_amount: float
    progress: int
    predicted_completion_date: Optional[date] = None
    months_remaining: Optional[int] = None
    required_monthly: float
    average_monthly: Optional[float] = None
    on_track: bool
    insight: str


class UpcomingBillOut(BaseModel):
    bill_id: str
    bill_name: str
    due_date: date
    impact: float
    percent_of_balance: int


class BillImpactOut(BaseModel):
    total_monthly_bills: float = 0.0
    percentage_of_income: float = 0.0
    upcoming_impact: list[UpcomingBillOut] = []
    recommendations: list[str] = []


# =============================================================================
# Report
# =============================================================================

class SummaryOut(BaseModel):
    current_balance: float = 0.0
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    savings_rate: float = 0.0
    spending_trend: Trend = "stable"
    budgets_over_limit: int = 0
    active_goals: int = 0
    upcoming_bills: int = 0


class InsightsReport(BaseModel):
    """Everything the dashboard needs, computed from one snapshot."""
    as_of: date
    health_score: HealthScoreOut
    proactive_insights: list[ProactiveInsightOut] = []
    predictive_alerts: list[PredictiveAlertOut] = []
    anomalies: AnomalySection = AnomalySection()
    duplicates: DuplicateSection = DuplicateSection()
    spending_patterns: SpendingPatternsOut = SpendingPatternsOut()
    subscription_audit: SubscriptionAuditOut = SubscriptionAuditOut()
    expense_predictions: ExpensePredictionsOut = ExpensePredictionsOut()
    cash_flow_forecast: CashFlowForecastOut = CashFlowForecastOut()
    goal_predictions: list[GoalPredictionOut] = []
    bill_impact: BillImpactOut = BillImpactOut()
    summary: SummaryOut = SummaryOut()
    degraded_sections: list[str] = []
    generated_at: datetime
