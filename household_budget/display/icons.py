"""
Category Icons

Categories store an icon name (kebab-case, e.g. "shopping-cart").

DESIGN DECISION: Icon names resolve through an explicit table over a
closed IconName enum. Unknown names get DEFAULT_ICON; there is no dynamic
lookup by attribute name.
"""

from enum import Enum
from typing import Optional


class IconName(str, Enum):
    WALLET = "wallet"
    HOME = "home"
    CAR = "car"
    FUEL = "fuel"
    SHOPPING_CART = "shopping-cart"
    SHOPPING_BAG = "shopping-bag"
    UTENSILS = "utensils"
    COFFEE = "coffee"
    ZAP = "zap"
    DROPLETS = "droplets"
    WIFI = "wifi"
    PHONE = "phone"
    HEART = "heart"
    HEART_PULSE = "heart-pulse"
    SHIELD = "shield"
    GRADUATION_CAP = "graduation-cap"
    BABY = "baby"
    DOG = "dog"
    GIFT = "gift"
    PLANE = "plane"
    FILM = "film"
    MUSIC = "music"
    DUMBBELL = "dumbbell"
    SHIRT = "shirt"
    CREDIT_CARD = "credit-card"
    LANDMARK = "landmark"
    PIGGY_BANK = "piggy-bank"
    TRENDING_UP = "trending-up"
    BRIEFCASE = "briefcase"
    RECEIPT = "receipt"
    CIRCLE = "circle"


ICON_SYMBOLS: dict[IconName, str] = {
    IconName.WALLET: "👛",
    IconName.HOME: "🏠",
    IconName.CAR: "🚗",
    IconName.FUEL: "⛽",
    IconName.SHOPPING_CART: "🛒",
    IconName.SHOPPING_BAG: "🛍️",
    IconName.UTENSILS: "🍽️",
    IconName.COFFEE: "☕",
    IconName.ZAP: "⚡",
    IconName.DROPLETS: "💧",
    IconName.WIFI: "📶",
    IconName.PHONE: "📱",
    IconName.HEART: "❤️",
    IconName.HEART_PULSE: "🩺",
    IconName.SHIELD: "🛡️",
    IconName.GRADUATION_CAP: "🎓",
    IconName.BABY: "🍼",
    IconName.DOG: "🐕",
    IconName.GIFT: "🎁",
    IconName.PLANE: "✈️",
    IconName.FILM: "🎬",
    IconName.MUSIC: "🎵",
    IconName.DUMBBELL: "🏋️",
    IconName.SHIRT: "👕",
    IconName.CREDIT_CARD: "💳",
    IconName.LANDMARK: "🏦",
    IconName.PIGGY_BANK: "🐷",
    IconName.TRENDING_UP: "📈",
    IconName.BRIEFCASE: "💼",
    IconName.RECEIPT: "🧾",
    IconName.CIRCLE: "⚪",
}

DEFAULT_ICON = IconName.CIRCLE

_missing = set(IconName) - set(ICON_SYMBOLS)
if _missing:
    raise RuntimeError(f"Icons without a symbol: {sorted(i.value for i in _missing)}")


def parse_icon_name(name: Optional[str]) -> IconName:
    """Map a stored icon name to IconName; unknown or empty names give DEFAULT_ICON."""
    if not name:
        return DEFAULT_ICON
    normalised = name.strip().lower().replace("_", "-").replace(" ", "-")
    try:
        return IconName(normalised)
    except ValueError:
        return DEFAULT_ICON


def resolve_icon(name: Optional[str]) -> str:
    """Renderable symbol for a stored icon name."""
    return ICON_SYMBOLS[parse_icon_name(name)]
