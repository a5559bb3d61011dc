"""Mapping between human-facing category labels and the stored enum."""

from enum import Enum


class BusinessCategory(str, Enum):
    TOUCH = "TOUCH"
    SIGHT = "SIGHT"
    SMELL = "SMELL"
    TASTE = "TASTE"
    SOUND = "SOUND"
    CONNECTION = "CONNECTION"


# Display order used by selection menus
CATEGORY_LABELS: dict[BusinessCategory, str] = {
    BusinessCategory.SOUND: "Sound",
    BusinessCategory.SIGHT: "Sight",
    BusinessCategory.SMELL: "Smell",
    BusinessCategory.TASTE: "Taste",
    BusinessCategory.TOUCH: "Touch",
    BusinessCategory.CONNECTION: "Connection",
}


def category_from_label(label: str | None) -> BusinessCategory | None:
    """Map a label such as ``"touch"`` or ``"TOUCH"`` to its enum member.

    Unknown or empty labels map to ``None`` rather than raising, so a stale
    selection never blocks a save.
    """
    if not label:
        return None
    try:
        return BusinessCategory(str(label).strip().upper())
    except ValueError:
        return None


def category_display(category: str | None) -> str | None:
    """``"TOUCH"`` → ``"Touch"``."""
    member = category_from_label(category)
    return CATEGORY_LABELS[member] if member else None
