"""
Domain enums for the Kitchen Hand Guide application.
Contains all enumeration types used across the domain models.
"""

import enum


class PrepCategory(str, enum.Enum):
    """Kind of produce a preparation works on"""

    FRUIT = "fruit"
    BREAD = "bread"
    VEGETABLE = "vegetable"
    MEAT = "meat"
    SEAFOOD = "seafood"


class Shift(str, enum.Enum):
    """Meal-service period a preparation applies to"""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    BOTH = "both"


def enum_values(enum_cls) -> list[str]:
    """Stored values for an enum column (values, not member names)."""
    return [member.value for member in enum_cls]
