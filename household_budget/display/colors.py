"""Color assignment for household members and categories."""

from typing import Optional

from household_budget.models.finance import Category

DEFAULT_CATEGORY_COLOR = "#94a3b8"

MEMBER_COLORS = (
    "#3b82f6",  # blue
    "#a855f7",  # purple
    "#22c55e",  # green
    "#f97316",  # orange
    "#ec4899",  # pink
    "#06b6d4",  # cyan
)

POSITIVE_COLOR = "#16a34a"
NEGATIVE_COLOR = "#dc2626"


def member_color(index: int) -> str:
    """Stable color for the n-th household member; wraps around."""
    return MEMBER_COLORS[index % len(MEMBER_COLORS)]


def category_color(category: Optional[Category]) -> str:
    if category is None or not category.color:
        return DEFAULT_CATEGORY_COLOR
    return category.color


def trend_color(is_positive: bool) -> str:
    return POSITIVE_COLOR if is_positive else NEGATIVE_COLOR
