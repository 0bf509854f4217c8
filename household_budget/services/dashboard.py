"""
Dashboard Service

Read-only views over a user's or household's rows.

Each view:
1. Fans out its independent reads concurrently (asyncio.gather)
2. Waits for all of them
3. Runs the pure calculations over the results

DESIGN DECISION: The service holds no per-request state. Scope and
"today" are resolved per call, so one instance can serve every user.
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Awaitable, Optional, Sequence, TypeVar
from uuid import UUID

import structlog

from household_budget.audit.logger import AuditLogger
from household_budget.calculations.budget import (
    aggregate_spend_by_category,
    budget_comparison,
    compute_net_worth,
    expenses,
    spent_by_member_by_category,
    sum_income,
)
from household_budget.calculations.cashflow import (
    calculate_timeline,
    find_lowest_balance,
    get_first_negative_date,
    spendable_balance,
)
from household_budget.calculations.debt import compare_strategies, debts_from_accounts
from household_budget.calculations.goals import (
    calculate_likelihood,
    calculate_milestone_info,
    progress_percentage,
    required_monthly_savings,
)
from household_budget.calculations.metrics import momentum_from_change
from household_budget.calculations.money import (
    ZERO,
    add_months,
    decimal_sum,
    first_of_month,
    to_decimal,
)
from household_budget.calculations.net_worth import (
    calculate_monthly_change,
    generate_projection_data,
    get_next_milestone,
    growth_rate,
    project_arrival_date,
)
from household_budget.calculations.schedule import (
    frequency_counts,
    total_monthly_bills,
    upcoming_bills,
)
from household_budget.clock import Clock, SystemClock
from household_budget.config import AppSettings, get_settings
from household_budget.models.finance import (
    Goal,
    GoalStatus,
    GoalType,
    ViewScope,
)
from household_budget.models.reports import (
    BillsOverview,
    BudgetSummary,
    CashflowTimeline,
    GoalProgress,
    GoalsOverview,
    NetWorthOverview,
    StrategyComparison,
)
from household_budget.services.storage.interface import (
    BACKEND_SERVICE,
    BackendUnavailableError,
    BillStorageInterface,
    LedgerStorageInterface,
    StorageError,
)

logger = structlog.get_logger(__name__)

RowT = TypeVar("RowT")


def _rows(result: Optional[Sequence[RowT]]) -> list[RowT]:
    """Storage may hand back None for an empty table."""
    return list(result) if result else []


def _month_bounds(month: date) -> tuple[date, date]:
    start = first_of_month(month)
    return start, add_months(start, 1) - timedelta(days=1)


class DashboardService:
    """
    Computes the budget, net worth, goals, bills, debt and cash flow views.
    """

    def __init__(
        self,
        ledger: LedgerStorageInterface,
        bill_storage: BillStorageInterface,
        clock: Optional[Clock] = None,
        app_settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger = ledger
        self._bill_storage = bill_storage
        self._clock = clock or SystemClock()
        self._settings = app_settings or get_settings().app
        self._audit_logger = audit_logger

    async def _gather(
        self,
        view: str,
        scope: ViewScope,
        correlation_id: Optional[UUID],
        *reads: Awaitable[Any],
    ) -> list[Any]:
        """
        Run a view's reads concurrently.

        A failed read fails the view. The failure is audited first: an
        unreachable backend as an external service error, anything else
        the backend rejected as a system error.
        """
        try:
            return await asyncio.gather(*reads)
        except StorageError as e:
            logger.error("dashboard_read_failed", view=view, scope=scope.kind.value, error=str(e))
            if self._audit_logger and isinstance(e, BackendUnavailableError):
                await self._audit_logger.log_external_service_error(
                    service=BACKEND_SERVICE,
                    operation=view,
                    error_message=str(e),
                    user_id=scope.user_id,
                    correlation_id=correlation_id,
                )
            elif self._audit_logger:
                await self._audit_logger.log_error(
                    error_type=f"{view}_read_failed",
                    error_message=str(e),
                    user_id=scope.user_id,
                    details={"view": view, "scope": scope.kind.value},
                    correlation_id=correlation_id,
                )
            raise

    async def _computed(
        self,
        view: str,
        scope: ViewScope,
        row_counts: dict[str, int],
        correlation_id: Optional[UUID],
    ) -> None:
        logger.debug("dashboard_computed", view=view, scope=scope.kind.value, rows=row_counts)
        if self._audit_logger:
            await self._audit_logger.log_dashboard_computed(
                view=view,
                scope=scope.kind.value,
                user_id=scope.user_id,
                row_counts=row_counts,
                correlation_id=correlation_id,
            )

    # -------------------------------------------------------------------------
    # Budget
    # -------------------------------------------------------------------------

    async def budget_summary(
        self,
        scope: ViewScope,
        month: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetSummary:
        """
        Spending against budget and income for one month.

        The per-member breakdown is only filled for household scope.
        """
        start, end = _month_bounds(month or self._clock.today())

        categories, budgets, income, transactions = await self._gather(
            "budget_summary",
            scope,
            correlation_id,
            self._ledger.list_categories(scope),
            self._ledger.list_budgets(scope, start),
            self._ledger.list_income(scope, start),
            self._ledger.list_transactions(scope, date_from=start, date_to=end),
        )
        categories = _rows(categories)
        budgets = _rows(budgets)
        income = _rows(income)
        spent = expenses(_rows(transactions))

        spent_by_category = aggregate_spend_by_category(spent)
        summary = BudgetSummary(
            month=start,
            scope=scope.kind,
            spent_by_category=spent_by_category,
            spent_by_member_by_category=(
                spent_by_member_by_category(spent) if scope.is_household else {}
            ),
            comparisons=budget_comparison(spent, budgets, categories),
            total_income=sum_income(income),
            total_spent=decimal_sum(spent_by_category.values()),
        )

        await self._computed(
            "budget_summary",
            scope,
            {
                "categories": len(categories),
                "budgets": len(budgets),
                "income": len(income),
                "transactions": len(spent),
            },
            correlation_id,
        )
        return summary

    # -------------------------------------------------------------------------
    # Net worth
    # -------------------------------------------------------------------------

    async def net_worth_overview(
        self,
        scope: ViewScope,
        correlation_id: Optional[UUID] = None,
    ) -> NetWorthOverview:
        """Totals, growth, momentum, next milestone and a projection towards it."""
        today = self._clock.today()

        accounts, snapshots, goals = await self._gather(
            "net_worth_overview",
            scope,
            correlation_id,
            self._ledger.list_accounts(scope),
            self._ledger.list_snapshots(scope),
            self._ledger.list_goals(scope),
        )
        accounts = _rows(accounts)
        snapshots = _rows(snapshots)
        goals = _rows(goals)

        totals = compute_net_worth(accounts)
        growth = growth_rate(snapshots, totals.net_worth, today=today)
        change = calculate_monthly_change(
            snapshots,
            totals.net_worth,
            today=today,
            tolerance_days=self._settings.snapshot_tolerance_days,
        )
        milestone = get_next_milestone(totals.net_worth, goals)

        projected_arrival = None
        projection = []
        if milestone is not None:
            horizon = self._settings.projection_horizon_months
            projected_arrival = project_arrival_date(
                totals.net_worth, milestone.amount, growth, today=today, horizon_months=horizon,
            )
            projection = generate_projection_data(
                totals.net_worth, growth, milestone.amount, start=today, horizon_months=horizon,
            )

        overview = NetWorthOverview(
            totals=totals,
            avg_monthly_growth=growth,
            momentum=momentum_from_change(change),
            next_milestone=milestone,
            projected_arrival=projected_arrival,
            projection=projection,
        )

        await self._computed(
            "net_worth_overview",
            scope,
            {"accounts": len(accounts), "snapshots": len(snapshots), "goals": len(goals)},
            correlation_id,
        )
        return overview

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    def _goal_progress(
        self,
        goal: Goal,
        net_worth: Decimal,
        growth: Decimal,
        today: date,
    ) -> GoalProgress:
        if goal.goal_type == GoalType.NET_WORTH_MILESTONE:
            # Milestone goals track live net worth, not a saved balance
            return GoalProgress(
                goal_id=goal.id,
                name=goal.name,
                progress_pct=progress_percentage(net_worth, goal.target_amount),
                likelihood=calculate_likelihood(
                    goal.model_copy(update={"current_amount": max(ZERO, net_worth)}),
                    today=today,
                ),
                milestone=calculate_milestone_info(
                    net_worth, goal.target_amount, growth, goal.deadline, today=today,
                ),
            )
        return GoalProgress(
            goal_id=goal.id,
            name=goal.name,
            progress_pct=progress_percentage(goal.current_amount, goal.target_amount),
            likelihood=calculate_likelihood(goal, today=today),
            required_monthly=required_monthly_savings(goal, today=today),
        )

    async def goals_overview(
        self,
        scope: ViewScope,
        correlation_id: Optional[UUID] = None,
    ) -> GoalsOverview:
        """Progress and likelihood for every active goal."""
        today = self._clock.today()

        goals, accounts, snapshots = await self._gather(
            "goals_overview",
            scope,
            correlation_id,
            self._ledger.list_goals(scope),
            self._ledger.list_accounts(scope),
            self._ledger.list_snapshots(scope),
        )
        goals = _rows(goals)
        accounts = _rows(accounts)
        snapshots = _rows(snapshots)

        net_worth = compute_net_worth(accounts).net_worth
        growth = growth_rate(snapshots, net_worth, today=today)

        active = [
            self._goal_progress(g, net_worth, growth, today)
            for g in goals
            if g.status == GoalStatus.ACTIVE
        ]
        overview = GoalsOverview(
            net_worth=net_worth,
            avg_monthly_growth=growth,
            active=active,
            completed_count=sum(1 for g in goals if g.status == GoalStatus.COMPLETED),
        )

        await self._computed(
            "goals_overview",
            scope,
            {"goals": len(goals), "accounts": len(accounts), "snapshots": len(snapshots)},
            correlation_id,
        )
        return overview

    # -------------------------------------------------------------------------
    # Bills
    # -------------------------------------------------------------------------

    async def bills_overview(
        self,
        scope: ViewScope,
        within_days: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> BillsOverview:
        """Upcoming (and overdue) bills plus the monthly cost of recurring ones."""
        today = self._clock.today()
        window = within_days if within_days is not None else self._settings.upcoming_bill_days

        (bills,) = await self._gather(
            "bills_overview",
            scope,
            correlation_id,
            self._bill_storage.list_bills(scope, active_only=True),
        )
        bills = _rows(bills)
        overview = BillsOverview(
            upcoming=upcoming_bills(bills, today, within_days=window),
            total_monthly=total_monthly_bills(bills),
            active_count=sum(1 for b in bills if b.is_active),
            by_frequency=frequency_counts(bills),
        )

        await self._computed("bills_overview", scope, {"bills": len(bills)}, correlation_id)
        return overview

    # -------------------------------------------------------------------------
    # Debt
    # -------------------------------------------------------------------------

    async def debt_plan(
        self,
        scope: ViewScope,
        extra_payment: Decimal = ZERO,
        correlation_id: Optional[UUID] = None,
    ) -> StrategyComparison:
        """Avalanche vs snowball over the scope's liability accounts."""
        today = self._clock.today()

        (accounts,) = await self._gather(
            "debt_plan",
            scope,
            correlation_id,
            self._ledger.list_accounts(scope),
        )
        accounts = _rows(accounts)
        debts = debts_from_accounts(accounts)
        comparison = compare_strategies(
            debts,
            to_decimal(extra_payment),
            start=today,
            max_months=self._settings.max_payoff_months,
        )

        await self._computed("debt_plan", scope, {"debts": len(debts)}, correlation_id)
        return comparison

    # -------------------------------------------------------------------------
    # Cash flow
    # -------------------------------------------------------------------------

    async def cashflow_timeline(
        self,
        scope: ViewScope,
        days: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> CashflowTimeline:
        """
        Day-by-day spendable balance from today, with the low point and
        the first day it goes negative.
        """
        today = self._clock.today()
        window = days if days is not None else self._settings.cashflow_days

        accounts, income, bills = await self._gather(
            "cashflow_timeline",
            scope,
            correlation_id,
            self._ledger.list_accounts(scope),
            self._ledger.list_recurring_income(scope),
            self._bill_storage.list_bills(scope, active_only=True),
        )
        accounts = _rows(accounts)
        income = _rows(income)
        bills = _rows(bills)

        timeline = calculate_timeline(accounts, income, bills, start=today, days=window)
        result = CashflowTimeline(
            starting_balance=spendable_balance(accounts),
            days=timeline,
            lowest=find_lowest_balance(timeline),
            first_negative_date=get_first_negative_date(timeline),
            has_pay_schedule=any(i.has_pay_schedule for i in income),
        )

        await self._computed(
            "cashflow_timeline",
            scope,
            {"accounts": len(accounts), "income": len(income), "bills": len(bills)},
            correlation_id,
        )
        return result
