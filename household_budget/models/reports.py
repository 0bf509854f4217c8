"""
Derived Result Models

Everything the calculations and services hand back to a caller.
None of these are persisted; they are recomputed from rows on demand.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from household_budget.models.finance import (
    Bill,
    Frequency,
    ScopeKind,
)


_RESULT_CONFIG = ConfigDict(frozen=True)


# =============================================================================
# BILLS
# =============================================================================

class BillState(str, Enum):
    """
    Payment lifecycle of a bill.

    PENDING -> PAID_AND_ADVANCED -> PENDING (recurring, indefinitely)
    PENDING -> PAID_AND_INACTIVE (one-off, terminal)
    """
    PENDING = "pending"
    PAID_AND_ADVANCED = "paid_and_advanced"
    PAID_AND_INACTIVE = "paid_and_inactive"


class BillPaymentUpdate(BaseModel):
    """
    The full set of column changes for marking one bill paid.

    CRITICAL: These are written in a single update so the bill is never
    observable half-paid (e.g. last_paid_date set but next_due not moved).
    """
    model_config = _RESULT_CONFIG

    bill_id: str
    last_paid_date: date
    next_due: Optional[date] = None
    is_active: Optional[bool] = None
    resulting_state: BillState

    def changes(self) -> dict:
        """Columns to write, ISO-formatted, omitting unchanged ones."""
        out = {"last_paid_date": self.last_paid_date.isoformat()}
        if self.next_due is not None:
            out["next_due"] = self.next_due.isoformat()
        if self.is_active is not None:
            out["is_active"] = self.is_active
        return out

    def apply_to(self, bill: Bill) -> Bill:
        """Return a copy of `bill` with this update applied."""
        update: dict = {"last_paid_date": self.last_paid_date}
        if self.next_due is not None:
            update["next_due"] = self.next_due
        if self.is_active is not None:
            update["is_active"] = self.is_active
        return bill.model_copy(update=update)


class UpcomingBill(BaseModel):
    model_config = _RESULT_CONFIG

    bill: Bill
    days_until_due: int
    is_overdue: bool


# =============================================================================
# BUDGET
# =============================================================================

class NetWorthTotals(BaseModel):
    model_config = _RESULT_CONFIG

    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal


class CategorySpend(BaseModel):
    """One slice of the spending breakdown chart."""
    model_config = _RESULT_CONFIG

    category_id: str
    name: str
    color: str
    value: Decimal
    count: int
    percent: Decimal


class BudgetComparison(BaseModel):
    model_config = _RESULT_CONFIG

    category_id: str
    name: str
    color: str
    spent: Decimal
    budgeted: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.budgeted - self.spent

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.budgeted


class DailySpend(BaseModel):
    model_config = _RESULT_CONFIG

    date: date
    amount: Decimal
    label: str


class SpendingTrend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


# =============================================================================
# NET WORTH & GOALS
# =============================================================================

class MonthlyChange(BaseModel):
    """Change since ~1 month ago, and the month before that for comparison."""
    model_config = _RESULT_CONFIG

    monthly_change: Decimal
    last_month_change: Optional[Decimal] = None


class Momentum(BaseModel):
    model_config = _RESULT_CONFIG

    monthly_change: Decimal
    last_month_change: Optional[Decimal] = None
    is_positive: bool
    is_improving: bool


class Milestone(BaseModel):
    model_config = _RESULT_CONFIG

    amount: Decimal
    name: str
    is_goal: bool


class ProjectionPoint(BaseModel):
    model_config = _RESULT_CONFIG

    date: date
    projected_net_worth: Decimal


class MilestoneInfo(BaseModel):
    """
    Projection towards a net worth target.

    has_growth_data is False when the growth rate is zero or negative;
    months_to_goal and projected_date are then None ("insufficient data").
    """
    model_config = _RESULT_CONFIG

    target: Decimal
    remaining: Decimal
    reached: bool
    has_growth_data: bool
    avg_monthly_growth: Decimal
    months_to_goal: Optional[int] = None
    projected_date: Optional[date] = None
    likelihood_pct: Optional[int] = Field(default=None, ge=0, le=100)


class Likelihood(str, Enum):
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    BEHIND = "behind"


class GoalProgress(BaseModel):
    model_config = _RESULT_CONFIG

    goal_id: str
    name: str
    progress_pct: Decimal
    likelihood: Likelihood
    required_monthly: Optional[Decimal] = None
    milestone: Optional[MilestoneInfo] = None


# =============================================================================
# DEBT PLANNER
# =============================================================================

class PayoffStrategy(str, Enum):
    """
    AVALANCHE: highest interest rate first (saves the most money)
    SNOWBALL: lowest balance first (quick wins)
    """
    AVALANCHE = "avalanche"
    SNOWBALL = "snowball"


class DebtMonth(BaseModel):
    id: str
    name: str
    balance: Decimal
    payment: Decimal
    interest: Decimal
    is_paid_off: bool


class DebtProjection(BaseModel):
    """One month of a payoff schedule."""
    month: int
    date: date
    debts: list[DebtMonth]
    total_balance: Decimal
    total_payment: Decimal
    total_interest: Decimal
    cumulative_interest: Decimal


class StrategyOutcome(BaseModel):
    model_config = _RESULT_CONFIG

    months: int
    total_interest: Decimal


class StrategyComparison(BaseModel):
    model_config = _RESULT_CONFIG

    avalanche: StrategyOutcome
    snowball: StrategyOutcome
    interest_saved: Decimal
    months_difference: int


# =============================================================================
# CASH FLOW
# =============================================================================

class CashflowEventType(str, Enum):
    INCOME = "income"
    BILL = "bill"


class CashflowEvent(BaseModel):
    model_config = _RESULT_CONFIG

    type: CashflowEventType
    name: str
    amount: Decimal


class CashflowDay(BaseModel):
    """
    Projected spendable balance at the end of one day.

    Income lands before bills on the same day.
    """
    model_config = _RESULT_CONFIG

    date: date
    projected_balance: Decimal
    events: list[CashflowEvent] = Field(default_factory=list)
    is_negative: bool


class LowestBalance(BaseModel):
    model_config = _RESULT_CONFIG

    date: date
    balance: Decimal


# =============================================================================
# SERVICE VIEWS
# =============================================================================

class BudgetSummary(BaseModel):
    model_config = _RESULT_CONFIG

    month: date
    scope: ScopeKind
    spent_by_category: dict[str, Decimal]
    spent_by_member_by_category: dict[str, dict[str, Decimal]] = Field(default_factory=dict)
    comparisons: list[BudgetComparison]
    total_income: Decimal
    total_spent: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.total_income - self.total_spent


class NetWorthOverview(BaseModel):
    model_config = _RESULT_CONFIG

    totals: NetWorthTotals
    avg_monthly_growth: Decimal
    momentum: Momentum
    next_milestone: Optional[Milestone] = None
    projected_arrival: Optional[date] = None
    projection: list[ProjectionPoint] = Field(default_factory=list)


class GoalsOverview(BaseModel):
    model_config = _RESULT_CONFIG

    net_worth: Decimal
    avg_monthly_growth: Decimal
    active: list[GoalProgress]
    completed_count: int


class BillsOverview(BaseModel):
    model_config = _RESULT_CONFIG

    upcoming: list[UpcomingBill]
    total_monthly: Decimal
    active_count: int
    by_frequency: dict[Frequency, int] = Field(default_factory=dict)


class CashflowTimeline(BaseModel):
    model_config = _RESULT_CONFIG

    starting_balance: Decimal
    days: list[CashflowDay]
    lowest: Optional[LowestBalance] = None
    first_negative_date: Optional[date] = None
    has_pay_schedule: bool

    @property
    def has_negative_balance(self) -> bool:
        return self.first_negative_date is not None
