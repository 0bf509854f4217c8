"""Tests for currency text, colors and icons."""

from decimal import Decimal

import pytest

from household_budget.config import get_settings
from household_budget.display import (
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_ICON,
    IconName,
    category_color,
    format_compact_currency,
    format_currency,
    format_signed_currency,
    member_color,
    parse_icon_name,
    resolve_icon,
)
from household_budget.display.colors import MEMBER_COLORS
from household_budget.display.icons import ICON_SYMBOLS
from household_budget.models import Category


class TestFormatCurrency:
    """Tests for locale-style currency formatting."""

    @pytest.mark.parametrize("amount,currency,expected", [
        (Decimal("1234.5"), "AUD", "$1,234.5"),
        (1234.567, "USD", "$1,234.57"),
        (1000, "AUD", "$1,000"),
        (Decimal("-50.25"), "AUD", "-$50.25"),
        (Decimal("-0.001"), "AUD", "$0"),
        (Decimal("99.99"), "GBP", "£99.99"),
        (Decimal("1234.5"), "EUR", "1.234,5 €"),
        (Decimal("1234567"), "EUR", "1.234.567 €"),
        (Decimal("999"), "AUD", "$999"),
        (Decimal("999.5"), "INR", "₹999.5"),
        (Decimal("1234.6"), "JPY", "￥1,235"),
        (Decimal("1234567.89"), "INR", "₹12,34,567.89"),
        (Decimal("10"), "XYZ", "XYZ 10"),
        (Decimal("10"), "aud", "$10"),
    ])
    def test_formats(self, amount, currency, expected):
        assert format_currency(amount, currency) == expected

    def test_uses_configured_default(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_CURRENCY", "gbp")
        get_settings.cache_clear()
        try:
            assert format_currency(Decimal("5")) == "£5"
        finally:
            get_settings.cache_clear()

    @pytest.mark.parametrize("amount,expected", [
        (Decimal("12345"), "$12.3K"),
        (Decimal("1000"), "$1K"),
        (Decimal("1500000"), "$1.5M"),
        (Decimal("2000000000"), "$2B"),
        (Decimal("-2500"), "-$2.5K"),
        (Decimal("999"), "$999"),
    ])
    def test_compact(self, amount, expected):
        assert format_compact_currency(amount, "AUD") == expected

    @pytest.mark.parametrize("amount,expected", [
        (Decimal("5"), "+$5"),
        (Decimal("-5"), "-$5"),
        (Decimal("0"), "+$0"),
    ])
    def test_signed(self, amount, expected):
        assert format_signed_currency(amount, "AUD") == expected


class TestColors:
    """Tests for member and category colors."""

    def test_member_colors_wrap(self):
        assert member_color(0) == "#3b82f6"
        assert member_color(1) == "#a855f7"
        assert member_color(len(MEMBER_COLORS)) == member_color(0)

    def test_category_color(self):
        assert category_color(Category(id="c1", name="Food", color="#ff0000")) == "#ff0000"

    def test_category_color_default(self):
        assert category_color(None) == DEFAULT_CATEGORY_COLOR
        assert category_color(Category(id="c1", name="Food", color="")) == DEFAULT_CATEGORY_COLOR


class TestIcons:
    """Tests for icon resolution."""

    def test_every_icon_has_a_symbol(self):
        assert set(ICON_SYMBOLS) == set(IconName)
        assert all(ICON_SYMBOLS[i] for i in IconName)

    def test_resolve_known_icon(self):
        assert resolve_icon("shopping-cart") == ICON_SYMBOLS[IconName.SHOPPING_CART]

    @pytest.mark.parametrize("name,expected", [
        ("Shopping Cart", IconName.SHOPPING_CART),
        ("piggy_bank", IconName.PIGGY_BANK),
        (" HOME ", IconName.HOME),
    ])
    def test_parse_normalises_names(self, name, expected):
        assert parse_icon_name(name) == expected

    @pytest.mark.parametrize("name", [None, "", "rocket-ship", "__class__"])
    def test_unknown_names_get_default(self, name):
        assert parse_icon_name(name) == DEFAULT_ICON
        assert resolve_icon(name) == ICON_SYMBOLS[DEFAULT_ICON]
