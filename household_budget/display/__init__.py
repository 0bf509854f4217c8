"""Display helpers: currency text, colors and icons."""

from household_budget.display.colors import (
    DEFAULT_CATEGORY_COLOR,
    category_color,
    member_color,
    trend_color,
)
from household_budget.display.currency import (
    format_compact_currency,
    format_currency,
    format_signed_currency,
)
from household_budget.display.icons import (
    DEFAULT_ICON,
    IconName,
    parse_icon_name,
    resolve_icon,
)

__all__ = [
    "DEFAULT_CATEGORY_COLOR",
    "DEFAULT_ICON",
    "IconName",
    "category_color",
    "format_compact_currency",
    "format_currency",
    "format_signed_currency",
    "member_color",
    "parse_icon_name",
    "resolve_icon",
    "trend_color",
]
