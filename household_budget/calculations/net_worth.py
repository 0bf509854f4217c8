"""
Net-Worth Trend Estimator

Turns the snapshot history plus today's live net worth into growth rates,
month-over-month changes, milestones and forward projections.

DESIGN DECISION: Elapsed time is measured in FRACTIONAL calendar months
(whole months plus leftover days over that month's length), floored at 1.
This gives smooth estimates for partial months and never divides by zero.

None of these functions read the clock; "today" is always a parameter.
"""

from datetime import date
from decimal import ROUND_CEILING, Decimal
from typing import Iterable, Optional, Sequence

from household_budget.calculations.money import (
    ZERO,
    add_months,
    first_of_month,
    fractional_months_between,
    quantize_cents,
    to_decimal,
)
from household_budget.models.finance import (
    Goal,
    GoalStatus,
    GoalType,
    NetWorthSnapshot,
)
from household_budget.models.reports import (
    Milestone,
    MonthlyChange,
    ProjectionPoint,
)

ONE_MONTH = Decimal("1")
DEFAULT_TOLERANCE_DAYS = 5
DEFAULT_HORIZON_MONTHS = 60

AUTO_MILESTONES = [
    Decimal(v) for v in (
        0, 1_000, 5_000, 10_000, 25_000, 50_000, 100_000,
        250_000, 500_000, 1_000_000, 2_000_000, 5_000_000,
    )
]


def elapsed_months(start: date, today: date) -> Decimal:
    """Fractional months from start to today, never less than one."""
    months = fractional_months_between(start, today)
    return months if months > ONE_MONTH else ONE_MONTH


def calculate_avg_monthly_change(
    snapshots: Sequence[NetWorthSnapshot],
    current_net_worth: Decimal,
    *,
    today: date,
) -> Decimal:
    """
    Average change in net worth per month since the earliest snapshot.

    total change = current - earliest snapshot
    elapsed = fractional months from the earliest snapshot to today (min 1)

    Callers must pass at least two snapshots; use growth_rate() when the
    history might be shorter.
    """
    earliest = snapshots[0]
    total_change = to_decimal(current_net_worth) - to_decimal(earliest.net_worth)
    return quantize_cents(total_change / elapsed_months(earliest.snapshot_date, today))


def growth_rate(
    snapshots: Sequence[NetWorthSnapshot],
    current_net_worth: Decimal,
    *,
    today: date,
) -> Decimal:
    """Average monthly change, or zero when there are fewer than two snapshots."""
    if len(snapshots) < 2:
        return ZERO
    return calculate_avg_monthly_change(snapshots, current_net_worth, today=today)


def find_snapshot_near_date(
    snapshots: Iterable[NetWorthSnapshot],
    target: date,
    tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
) -> Optional[NetWorthSnapshot]:
    """
    The snapshot closest to `target`, if one lies within the tolerance.

    On a tie the earlier snapshot in the sequence wins.
    """
    best = None
    best_diff = None
    for snap in snapshots:
        diff = abs((snap.snapshot_date - target).days)
        if diff > tolerance_days:
            continue
        if best_diff is None or diff < best_diff:
            best = snap
            best_diff = diff
    return best


def calculate_monthly_change(
    snapshots: Sequence[NetWorthSnapshot],
    current_net_worth: Decimal,
    *,
    today: date,
    tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
) -> MonthlyChange:
    """
    Change since about a month ago, and the change in the month before.

    With no snapshot near one month ago the change is zero and there is
    nothing to compare against.
    """
    one_month_ago = find_snapshot_near_date(snapshots, add_months(today, -1), tolerance_days)
    if one_month_ago is None:
        return MonthlyChange(monthly_change=ZERO)

    current = to_decimal(current_net_worth)
    monthly_change = current - one_month_ago.net_worth

    two_months_ago = find_snapshot_near_date(snapshots, add_months(today, -2), tolerance_days)
    last_month_change = (
        one_month_ago.net_worth - two_months_ago.net_worth
        if two_months_ago is not None
        else None
    )
    return MonthlyChange(
        monthly_change=monthly_change,
        last_month_change=last_month_change,
    )


def _milestone_label(amount: Decimal) -> str:
    if amount >= 1_000_000:
        return f"${(amount / 1_000_000).normalize():f}M"
    return f"${(amount / 1_000).normalize():f}k"


def get_next_milestone(
    current_net_worth: Decimal,
    goals: Iterable[Goal] = (),
) -> Optional[Milestone]:
    """
    Nearest target above the current net worth.

    Candidates are the automatic milestones and active savings goals.
    A negative net worth always aims for debt-free (zero) first.
    """
    current = to_decimal(current_net_worth)
    if current < 0:
        return Milestone(amount=ZERO, name="Debt-free", is_goal=False)

    candidates = []
    next_auto = next((m for m in AUTO_MILESTONES if m > current), None)
    if next_auto is not None:
        candidates.append(Milestone(amount=next_auto, name=_milestone_label(next_auto), is_goal=False))

    goal_targets = sorted(
        (
            g for g in goals
            if g.goal_type == GoalType.SAVINGS
            and g.status == GoalStatus.ACTIVE
            and g.target_amount > current
        ),
        key=lambda g: g.target_amount,
    )
    if goal_targets:
        nearest = goal_targets[0]
        candidates.append(Milestone(amount=nearest.target_amount, name=nearest.name, is_goal=True))

    if not candidates:
        return None
    # Auto milestone listed first, so it wins a tie
    return min(candidates, key=lambda m: m.amount)


def months_needed(current: Decimal, target: Decimal, avg_monthly_change: Decimal) -> Optional[Decimal]:
    """Fractional months to close the gap at the given rate; None if never."""
    if avg_monthly_change <= 0:
        return None
    return (to_decimal(target) - to_decimal(current)) / avg_monthly_change


def project_arrival_date(
    current: Decimal,
    target: Decimal,
    avg_monthly_change: Decimal,
    *,
    today: date,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> Optional[date]:
    """
    Date the target is reached at the current rate.

    None when growth is not positive, the target is already met, or it
    would take longer than the horizon.
    """
    needed = months_needed(current, target, to_decimal(avg_monthly_change))
    if needed is None or needed <= 0 or needed > horizon_months:
        return None
    whole = int(needed.to_integral_value(rounding=ROUND_CEILING))
    return add_months(today, whole)


def generate_projection_data(
    current: Decimal,
    avg_monthly_change: Decimal,
    target: Decimal,
    *,
    start: date,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> list[ProjectionPoint]:
    """
    Month-by-month projected net worth, dated the 1st of each month.

    Stops at the first month reaching the target, or at the horizon.
    """
    rate = to_decimal(avg_monthly_change)
    if rate <= 0:
        return []

    points = []
    value = to_decimal(current)
    goal = to_decimal(target)
    base = first_of_month(start)
    for i in range(1, horizon_months + 1):
        value += rate
        points.append(ProjectionPoint(
            date=add_months(base, i),
            projected_net_worth=quantize_cents(value),
        ))
        if value >= goal:
            break
    return points

