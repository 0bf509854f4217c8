"""
Currency Formatting

Formats Decimal amounts the way each supported currency's home locale
writes them: symbol placement, thousands grouping and decimal mark.
Between 0 and 2 fraction digits are shown; trailing zeros are dropped.

DESIGN DECISION: There is no mutable "default currency" global.
Callers pass a currency, or get the configured default from settings.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any, Optional

from household_budget.calculations.money import to_decimal
from household_budget.config import get_settings


@dataclass(frozen=True)
class CurrencyFormat:
    symbol: str
    group_sep: str = ","
    decimal_sep: str = "."
    symbol_after: bool = False
    max_decimals: int = 2
    indian_grouping: bool = False


CURRENCY_FORMATS = {
    "AUD": CurrencyFormat("$"),
    "USD": CurrencyFormat("$"),
    "GBP": CurrencyFormat("£"),
    "EUR": CurrencyFormat("€", group_sep=".", decimal_sep=",", symbol_after=True),
    "NZD": CurrencyFormat("$"),
    "CAD": CurrencyFormat("$"),
    "JPY": CurrencyFormat("￥", max_decimals=0),
    "INR": CurrencyFormat("₹", indian_grouping=True),
    "SGD": CurrencyFormat("$"),
}

_COMPACT_STEPS = (
    (Decimal("1000000000000"), "T"),
    (Decimal("1000000000"), "B"),
    (Decimal("1000000"), "M"),
    (Decimal("1000"), "K"),
)


def _format_for(currency: str) -> CurrencyFormat:
    fmt = CURRENCY_FORMATS.get(currency)
    if fmt is None:
        # Unknown codes keep the default layout with the code as the symbol
        return CurrencyFormat(f"{currency} ")
    return fmt


def _group(digits: str, fmt: CurrencyFormat) -> str:
    if fmt.indian_grouping and len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        parts = []
        while len(head) > 2:
            parts.insert(0, head[-2:])
            head = head[:-2]
        if head:
            parts.insert(0, head)
        return fmt.group_sep.join(parts + [tail])

    return f"{int(digits):,}".replace(",", fmt.group_sep)


def _number(value: Decimal, fmt: CurrencyFormat, max_decimals: int) -> str:
    quantum = Decimal(1).scaleb(-max_decimals)
    rounded = abs(value).quantize(quantum, rounding=ROUND_HALF_EVEN)
    text = f"{rounded:f}"
    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")
    out = _group(whole, fmt)
    if fraction:
        out += fmt.decimal_sep + fraction
    return out


def _assemble(number: str, negative: bool, fmt: CurrencyFormat) -> str:
    sign = "-" if negative else ""
    if fmt.symbol_after:
        return f"{sign}{number} {fmt.symbol}"
    return f"{sign}{fmt.symbol}{number}"


def resolve_currency(currency: Optional[str] = None) -> str:
    if currency:
        return currency.upper()
    return get_settings().app.default_currency


def format_currency(amount: Any, currency: Optional[str] = None) -> str:
    """
    Format an amount, e.g. 1234.5 AUD -> "$1,234.5", 1234.5 EUR -> "1.234,5 €".
    """
    code = resolve_currency(currency)
    fmt = _format_for(code)
    value = to_decimal(amount)
    number = _number(value, fmt, fmt.max_decimals)
    negative = value < 0 and number.strip("0.,") != ""
    return _assemble(number, negative, fmt)


def format_compact_currency(amount: Any, currency: Optional[str] = None) -> str:
    """
    Short form for amounts of 1,000 or more: "$12.3K", "$1.5M".

    Smaller amounts use format_currency.
    """
    code = resolve_currency(currency)
    fmt = _format_for(code)
    value = to_decimal(amount)
    for step, suffix in _COMPACT_STEPS:
        if abs(value) >= step:
            number = _number(value / step, fmt, 1) + suffix
            return _assemble(number, value < 0, fmt)
    return format_currency(value, code)


def format_signed_currency(amount: Any, currency: Optional[str] = None) -> str:
    """Like format_currency but with an explicit "+" for non-negative amounts."""
    value = to_decimal(amount)
    text = format_currency(value, currency)
    return text if value < 0 else f"+{text}"
