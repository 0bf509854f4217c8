"""
Data Models Package

This package contains all Pydantic models used in the Household Budget core.
Rows from the backend are parsed into these before any calculation runs.
"""

from household_budget.models.finance import (
    Account,
    AccountType,
    Bill,
    Budget,
    Category,
    Debt,
    Frequency,
    Goal,
    GoalStatus,
    GoalType,
    IncomeEntry,
    NetWorthSnapshot,
    ScopeKind,
    Transaction,
    TransactionType,
    ViewScope,
)
from household_budget.models.reports import (
    BillPaymentUpdate,
    BillState,
    BillsOverview,
    BudgetComparison,
    BudgetSummary,
    CashflowDay,
    CashflowEvent,
    CashflowEventType,
    CashflowTimeline,
    CategorySpend,
    DailySpend,
    DebtMonth,
    DebtProjection,
    GoalProgress,
    GoalsOverview,
    Likelihood,
    LowestBalance,
    Milestone,
    MilestoneInfo,
    Momentum,
    MonthlyChange,
    NetWorthOverview,
    NetWorthTotals,
    PayoffStrategy,
    ProjectionPoint,
    SpendingTrend,
    StrategyComparison,
    StrategyOutcome,
    UpcomingBill,
)
from household_budget.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entities
    "Account",
    "AccountType",
    "Bill",
    "Budget",
    "Category",
    "Debt",
    "Frequency",
    "Goal",
    "GoalStatus",
    "GoalType",
    "IncomeEntry",
    "NetWorthSnapshot",
    "ScopeKind",
    "Transaction",
    "TransactionType",
    "ViewScope",
    # Derived results
    "BillPaymentUpdate",
    "BillState",
    "BillsOverview",
    "BudgetComparison",
    "BudgetSummary",
    "CashflowDay",
    "CashflowEvent",
    "CashflowEventType",
    "CashflowTimeline",
    "CategorySpend",
    "DailySpend",
    "DebtMonth",
    "DebtProjection",
    "GoalProgress",
    "GoalsOverview",
    "Likelihood",
    "LowestBalance",
    "Milestone",
    "MilestoneInfo",
    "Momentum",
    "MonthlyChange",
    "NetWorthOverview",
    "NetWorthTotals",
    "PayoffStrategy",
    "ProjectionPoint",
    "SpendingTrend",
    "StrategyComparison",
    "StrategyOutcome",
    "UpcomingBill",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
