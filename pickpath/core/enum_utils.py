"""
Enum Utilities for VARCHAR-based Type Fields

• Database: VARCHAR - NOT a database ENUM
• SQLAlchemy: String(n) with Mapped[str]
• Python: Enum for matching and validation

DATA FLOW:
    Database string → to_enum() → Enum member used by routing logic
    Enum member → get_enum_value() → string written to the database
"""

from enum import Enum
from typing import Any, Optional, TypeVar, Type


T = TypeVar('T', bound=Enum)


def get_enum_value(value: Any) -> Optional[str]:
    """
    Safely get string value from an enum or string.

    Examples:
        >>> get_enum_value(MarkerType.START_POINT)
        'start_point'
        >>> get_enum_value("start_point")
        'start_point'
    """
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    return str(value)


def to_enum(value: Any, enum_class: Type[T]) -> Optional[T]:
    """
    Convert a string value to an enum instance.

    Returns None for unknown values so callers can skip rows they do
    not understand instead of failing the whole calculation.

    Examples:
        >>> to_enum("cart_parking", MarkerType)
        MarkerType.CART_PARKING
        >>> to_enum("loading_dock", MarkerType)
        None
    """
    if value is None:
        return None
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(value)
    except (ValueError, KeyError):
        return None


def enum_values(enum_class: Type[Enum]) -> list:
    """Get all values from an enum class."""
    return [e.value for e in enum_class]


def enum_comment(enum_class: Type[Enum]) -> str:
    """
    Generate a comment string for a VARCHAR column.

    Examples:
        >>> enum_comment(MarkerType)
        'start_point, stop_point, cart_parking'
    """
    return ", ".join(enum_values(enum_class))
