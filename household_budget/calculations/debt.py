"""
Debt Payoff Planner

Month-by-month payoff schedules under the avalanche and snowball
strategies, and a comparison of the two.

Each month:
1. Interest accrues on every open balance (APR / 12)
2. Minimum payments are applied
3. The extra payment, plus minimums freed up by debts already paid off,
   goes to open debts in strategy order
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from household_budget.calculations.money import (
    ZERO,
    add_months,
    first_of_month,
    quantize_cents,
    to_decimal,
)
from household_budget.models.finance import Account, Debt
from household_budget.models.reports import (
    DebtMonth,
    DebtProjection,
    PayoffStrategy,
    StrategyComparison,
    StrategyOutcome,
)

DEFAULT_MAX_MONTHS = 360
MONTHS_PER_YEAR = Decimal("12")


def debt_from_account(account: Account) -> Optional[Debt]:
    """Planner view of a liability account; None for assets and cleared balances."""
    if account.is_asset or account.balance <= 0:
        return None
    return Debt(
        id=account.id,
        name=account.name,
        balance=account.balance,
        interest_rate=account.interest_rate or ZERO,
        minimum_payment=account.minimum_payment or ZERO,
        original_amount=account.original_amount,
    )


def debts_from_accounts(accounts: Iterable[Account]) -> list[Debt]:
    return [d for d in (debt_from_account(a) for a in accounts) if d is not None]


def sort_debts_by_strategy(debts: Iterable[Debt], strategy: PayoffStrategy) -> list[Debt]:
    """Avalanche: highest rate first. Snowball: lowest balance first."""
    if strategy == PayoffStrategy.AVALANCHE:
        return sorted(debts, key=lambda d: d.interest_rate, reverse=True)
    return sorted(debts, key=lambda d: d.balance)


def monthly_interest(balance: Decimal, annual_rate: Decimal) -> Decimal:
    if balance <= 0:
        return ZERO
    return balance * (annual_rate / 100 / MONTHS_PER_YEAR)


def calculate_payoff_schedule(
    debts: Sequence[Debt],
    extra_payment: Decimal = ZERO,
    strategy: PayoffStrategy = PayoffStrategy.AVALANCHE,
    *,
    start: date,
    max_months: int = DEFAULT_MAX_MONTHS,
) -> list[DebtProjection]:
    """
    Project balances month by month until everything is paid or max_months.

    Month n is dated the 1st of the n-th month after `start`.
    Totals are rounded to cents; running balances keep full precision.
    """
    if not debts:
        return []

    ordered = sort_debts_by_strategy(debts, strategy)
    balances = {d.id: to_decimal(d.balance) for d in debts}
    extra = to_decimal(extra_payment)
    base = first_of_month(start)

    projections = []
    cumulative_interest = ZERO

    for month in range(1, max_months + 1):
        remaining_extra = extra
        month_debts: dict[str, DebtMonth] = {}
        month_interest = ZERO

        for debt in ordered:
            balance = balances[debt.id]
            if balance <= 0:
                month_debts[debt.id] = DebtMonth(
                    id=debt.id,
                    name=debt.name,
                    balance=ZERO,
                    payment=ZERO,
                    interest=ZERO,
                    is_paid_off=True,
                )
                # Freed minimum rolls into the extra pool
                remaining_extra += debt.minimum_payment
                continue

            interest = monthly_interest(balance, debt.interest_rate)
            month_interest += interest
            owed = balance + interest
            payment = min(debt.minimum_payment, owed)
            new_balance = max(ZERO, owed - payment)
            balances[debt.id] = new_balance

            month_debts[debt.id] = DebtMonth(
                id=debt.id,
                name=debt.name,
                balance=new_balance,
                payment=payment,
                interest=interest,
                is_paid_off=new_balance <= 0,
            )

        for debt in ordered:
            if remaining_extra <= 0:
                break
            entry = month_debts[debt.id]
            if entry.balance <= 0:
                continue
            applied = min(remaining_extra, entry.balance)
            entry.balance -= applied
            entry.payment += applied
            entry.is_paid_off = entry.balance <= 0
            balances[debt.id] = entry.balance
            remaining_extra -= applied

        cumulative_interest += month_interest
        total_balance = sum(balances.values(), ZERO)
        total_payment = sum((d.payment for d in month_debts.values()), ZERO)

        projections.append(DebtProjection(
            month=month,
            date=add_months(base, month),
            debts=[month_debts[d.id] for d in ordered],
            total_balance=quantize_cents(total_balance),
            total_payment=quantize_cents(total_payment),
            total_interest=quantize_cents(month_interest),
            cumulative_interest=quantize_cents(cumulative_interest),
        ))

        if total_balance <= 0:
            break

    return projections


def _outcome(schedule: Sequence[DebtProjection]) -> StrategyOutcome:
    return StrategyOutcome(
        months=len(schedule),
        total_interest=schedule[-1].cumulative_interest if schedule else ZERO,
    )


def calculate_total_interest(
    debts: Sequence[Debt],
    extra_payment: Decimal = ZERO,
    strategy: PayoffStrategy = PayoffStrategy.AVALANCHE,
    *,
    start: date,
) -> Decimal:
    return _outcome(calculate_payoff_schedule(debts, extra_payment, strategy, start=start)).total_interest


def calculate_months_to_payoff(
    debts: Sequence[Debt],
    extra_payment: Decimal = ZERO,
    strategy: PayoffStrategy = PayoffStrategy.AVALANCHE,
    *,
    start: date,
) -> int:
    return len(calculate_payoff_schedule(debts, extra_payment, strategy, start=start))


def compare_strategies(
    debts: Sequence[Debt],
    extra_payment: Decimal = ZERO,
    *,
    start: date,
    max_months: int = DEFAULT_MAX_MONTHS,
) -> StrategyComparison:
    """Run both strategies; positive interest_saved means avalanche is cheaper."""
    avalanche = _outcome(calculate_payoff_schedule(
        debts, extra_payment, PayoffStrategy.AVALANCHE, start=start, max_months=max_months,
    ))
    snowball = _outcome(calculate_payoff_schedule(
        debts, extra_payment, PayoffStrategy.SNOWBALL, start=start, max_months=max_months,
    ))
    return StrategyComparison(
        avalanche=avalanche,
        snowball=snowball,
        interest_saved=snowball.total_interest - avalanche.total_interest,
        months_difference=snowball.months - avalanche.months,
    )


def calculate_available_funds(
    monthly_income: Decimal,
    monthly_bills: Decimal,
    minimum_debt_payments: Decimal,
) -> Decimal:
    """Money left for extra repayments; never negative."""
    available = to_decimal(monthly_income) - to_decimal(monthly_bills) - to_decimal(minimum_debt_payments)
    return max(ZERO, available)


def format_payoff_time(months: int) -> str:
    if months <= 0:
        return "Paid off"
    years, remaining = divmod(months, 12)
    if years == 0:
        return f"{remaining} month{'s' if remaining != 1 else ''}"
    if remaining == 0:
        return f"{years} year{'s' if years != 1 else ''}"
    return f"{years}y {remaining}m"
