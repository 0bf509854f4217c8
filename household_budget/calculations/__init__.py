"""
Calculations Package

Pure, deterministic domain logic. Nothing here performs I/O or reads the
clock: rows and "today" are always passed in.
"""

from household_budget.calculations.budget import (
    aggregate_spend_by_category,
    budget_comparison,
    category_breakdown,
    compute_net_worth,
    daily_spending,
    spending_trend,
    spent_by_member_by_category,
    sum_income,
)
from household_budget.calculations.cashflow import (
    calculate_timeline,
    find_lowest_balance,
    get_first_negative_date,
    has_negative_balance,
)
from household_budget.calculations.debt import (
    calculate_payoff_schedule,
    compare_strategies,
    debts_from_accounts,
    format_payoff_time,
)
from household_budget.calculations.goals import (
    calculate_likelihood,
    calculate_milestone_info,
    progress_percentage,
    required_monthly_savings,
)
from household_budget.calculations.metrics import classify_momentum
from household_budget.calculations.net_worth import (
    calculate_avg_monthly_change,
    calculate_monthly_change,
    find_snapshot_near_date,
    generate_projection_data,
    get_next_milestone,
    growth_rate,
    project_arrival_date,
)
from household_budget.calculations.schedule import (
    apply_payment,
    bill_state,
    monthly_equivalent,
    next_due_date,
    total_monthly_bills,
    upcoming_bills,
)

__all__ = [
    # Schedule
    "apply_payment",
    "bill_state",
    "monthly_equivalent",
    "next_due_date",
    "total_monthly_bills",
    "upcoming_bills",
    # Budget
    "aggregate_spend_by_category",
    "budget_comparison",
    "category_breakdown",
    "compute_net_worth",
    "daily_spending",
    "spending_trend",
    "spent_by_member_by_category",
    "sum_income",
    # Net worth
    "calculate_avg_monthly_change",
    "calculate_monthly_change",
    "find_snapshot_near_date",
    "generate_projection_data",
    "get_next_milestone",
    "growth_rate",
    "project_arrival_date",
    # Display metrics and goals
    "classify_momentum",
    "calculate_likelihood",
    "calculate_milestone_info",
    "progress_percentage",
    "required_monthly_savings",
    # Debt
    "calculate_payoff_schedule",
    "compare_strategies",
    "debts_from_accounts",
    "format_payoff_time",
    # Cash flow
    "calculate_timeline",
    "find_lowest_balance",
    "get_first_negative_date",
    "has_negative_balance",
]
