"""
Goal Projection

Feasibility of savings, debt payoff and net-worth goals.

DESIGN DECISION: Without growth data (rate zero or negative) a projection
reports "insufficient data" through MilestoneInfo.has_growth_data rather
than raising. Month counts use whole calendar months, truncated.
"""

from datetime import date
from decimal import ROUND_CEILING, ROUND_HALF_EVEN, Decimal
from typing import Optional

from household_budget.calculations.money import (
    ZERO,
    add_months,
    to_decimal,
    whole_months_between,
)
from household_budget.models.finance import Goal
from household_budget.models.reports import Likelihood, MilestoneInfo

# Scale applied to the growth/required ratio to get a likelihood percentage
LIKELIHOOD_SCALE = Decimal("85")
ON_TRACK_RATIO = Decimal("0.9")
AT_RISK_RATIO = Decimal("0.6")


def _likelihood_pct(avg_growth: Decimal, remaining: Decimal, months_left: int) -> int:
    required = remaining / max(1, months_left)
    if avg_growth <= 0:
        return 1
    pct = (avg_growth / required * LIKELIHOOD_SCALE).to_integral_value(rounding=ROUND_HALF_EVEN)
    return int(min(Decimal("99"), max(Decimal("1"), pct)))


def calculate_milestone_info(
    current_net_worth: Decimal,
    target: Decimal,
    avg_monthly_growth: Decimal,
    deadline: Optional[date] = None,
    *,
    today: date,
) -> MilestoneInfo:
    """
    Project when net worth reaches `target` at the average growth rate.

    With a deadline, also estimates the chance (1-99%) of making it:
    round(growth / (remaining / months until deadline) * 85).
    """
    current = to_decimal(current_net_worth)
    goal = to_decimal(target)
    growth = to_decimal(avg_monthly_growth)
    remaining = goal - current

    if remaining <= 0:
        return MilestoneInfo(
            target=goal,
            remaining=ZERO,
            reached=True,
            has_growth_data=growth > 0,
            avg_monthly_growth=growth,
            months_to_goal=0,
            projected_date=today,
            likelihood_pct=100 if deadline else None,
        )

    months_to_goal = None
    projected = None
    if growth > 0:
        months_to_goal = int((remaining / growth).to_integral_value(rounding=ROUND_CEILING))
        projected = add_months(today, months_to_goal)

    likelihood = None
    if deadline is not None:
        likelihood = _likelihood_pct(growth, remaining, whole_months_between(today, deadline))

    return MilestoneInfo(
        target=goal,
        remaining=remaining,
        reached=False,
        has_growth_data=growth > 0,
        avg_monthly_growth=growth,
        months_to_goal=months_to_goal,
        projected_date=projected,
        likelihood_pct=likelihood,
    )


def calculate_likelihood(goal: Goal, *, today: date) -> Likelihood:
    """
    Compare the saving rate since the goal was created to what the deadline needs.

    on_track at 90% or more of the required rate, at_risk from 60%,
    behind below that or once the deadline month has arrived.
    """
    if goal.deadline is None:
        return Likelihood.ON_TRACK

    current = to_decimal(goal.current_amount)
    remaining = to_decimal(goal.target_amount) - current
    if remaining <= 0:
        return Likelihood.ON_TRACK

    months_remaining = whole_months_between(today, goal.deadline)
    if months_remaining <= 0:
        return Likelihood.BEHIND

    required_monthly = remaining / months_remaining
    months_since_created = max(1, whole_months_between(goal.created_at, today))
    avg_monthly_saved = current / months_since_created

    # Nothing saved yet is treated as a fresh start
    if current == 0:
        return Likelihood.ON_TRACK

    ratio = avg_monthly_saved / required_monthly
    if ratio >= ON_TRACK_RATIO:
        return Likelihood.ON_TRACK
    if ratio >= AT_RISK_RATIO:
        return Likelihood.AT_RISK
    return Likelihood.BEHIND


def required_monthly_savings(goal: Goal, *, today: date) -> Optional[Decimal]:
    """
    Monthly amount needed to hit the deadline.

    None without a deadline; the whole remainder once the deadline month is reached.
    """
    if goal.deadline is None:
        return None
    remaining = to_decimal(goal.target_amount) - to_decimal(goal.current_amount)
    if remaining <= 0:
        return ZERO
    months_remaining = whole_months_between(today, goal.deadline)
    if months_remaining <= 0:
        return remaining
    return remaining / months_remaining


def progress_percentage(current: Decimal, target: Decimal) -> Decimal:
    """Share of the target reached, 0-100."""
    goal = to_decimal(target)
    if goal <= 0:
        return ZERO
    return max(ZERO, min(to_decimal(current) / goal * 100, Decimal("100")))
