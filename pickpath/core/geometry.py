"""Rectilinear geometry on the layout canvas (1 unit = 1 inch)."""
from dataclasses import dataclass
from typing import Any

from pickpath.core.validation import require_finite


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    @classmethod
    def from_coordinates(cls, x: Any, y: Any, field: str = "coordinate") -> "Point":
        """Build a point from raw (DB/string) values, rejecting non-finite input."""
        return cls(require_finite(x, f"{field}.x"), require_finite(y, f"{field}.y"))


def manhattan_distance(a, b) -> float:
    """Aisle distance between two points: |dx| + |dy|."""
    return abs(a.x - b.x) + abs(a.y - b.y)


def element_center(x: Any, y: Any, width: Any, height: Any, field: str = "element") -> Point:
    """Centre of a rectangular element given its top-left corner and size."""
    left = require_finite(x, f"{field}.x")
    top = require_finite(y, f"{field}.y")
    w = require_finite(width or 0, f"{field}.width")
    h = require_finite(height or 0, f"{field}.height")
    return Point(left + w / 2, top + h / 2)
