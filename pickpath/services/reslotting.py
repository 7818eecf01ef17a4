"""
Reslotting Recommender

Finds items worth moving closer to the cart:
- "Hot" items: daily picks in the top slice of the observed population
- "Far" items: distance from the reference point in the top slice
- Candidates are both hot and far; savings assume the item moves to the
  closest observed distance

Percentile thresholds come from the observed items, not fixed constants.
"""
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from pickpath.config import settings
from pickpath.core.geometry import Point, element_center, manhattan_distance
from pickpath.core.numeric import round_to, safe_divide
from pickpath.core.standards import ResolvedStandards
from pickpath.schemas.labor import ReslotRecommendation


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemPosition:
    """One item's pick volume at one element, with its one-way distance."""
    item_id: str
    external_item_id: Optional[str]
    element_label: Optional[str]
    distance: float  # canvas units, one way
    daily_picks: float


def _get(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def build_item_positions(
    item_rows: Iterable[Any],
    reference: Point,
    total_days: int,
) -> List[ItemPosition]:
    """Attach distance from the reference point and daily pick rate to each item row."""
    days = max(int(total_days or 0), 1)
    positions = []
    for row in item_rows:
        center = element_center(
            _get(row, "x_coordinate"), _get(row, "y_coordinate"),
            _get(row, "width"), _get(row, "height"),
        )
        external = _get(row, "external_item_id")
        positions.append(ItemPosition(
            item_id=str(_get(row, "item_id")),
            external_item_id=str(external) if external is not None else None,
            element_label=_get(row, "element_label"),
            distance=manhattan_distance(center, reference),
            daily_picks=float(_get(row, "total_picks") or 0) / days,
        ))
    return positions


def percentile_threshold(values: Sequence[float], fraction: float) -> float:
    """Value at index floor(n * fraction) of the descending list; 0 when empty."""
    if not values:
        return 0.0
    ordered = sorted(values, reverse=True)
    index = int(len(ordered) * fraction)
    if index >= len(ordered):
        return 0.0
    return ordered[index]


def recommend_reslots(
    items: Sequence[ItemPosition],
    standards: ResolvedStandards,
    hot_percentile: float = settings.ROI_HOT_PERCENTILE,
    far_percentile: float = settings.ROI_FAR_PERCENTILE,
    inches_per_foot: float = settings.INCHES_PER_FOOT,
) -> Tuple[List[ReslotRecommendation], float]:
    """
    Rank hot-and-far items by expected walk savings.

    Returns the recommendations (highest priority first) and the total
    daily savings in feet.
    """
    if not items:
        return [], 0.0

    hot_threshold = percentile_threshold([i.daily_picks for i in items], hot_percentile)
    far_threshold = percentile_threshold([i.distance for i in items], far_percentile)
    min_distance = min(min(i.distance for i in items), far_threshold / 2)

    logger.debug(
        f"Reslot thresholds: hot>={hot_threshold:.2f} picks/day, "
        f"far>={far_threshold:.1f}, min distance={min_distance:.1f}"
    )

    recommendations = []
    total_savings_feet = 0.0

    for item in items:
        if item.daily_picks < hot_threshold or item.distance < far_threshold:
            continue

        savings_per_pick_feet = (item.distance - min_distance) * 2 / inches_per_foot
        daily_savings_feet = savings_per_pick_feet * item.daily_picks
        daily_savings_dollars = (
            safe_divide(daily_savings_feet, standards.walk_speed_fpm) / 60 * standards.fully_loaded_rate
        )

        recommendations.append(ReslotRecommendation(
            item_id=item.item_id,
            external_item_id=item.external_item_id,
            current_element=item.element_label,
            current_distance=round_to(item.distance * 2 / inches_per_foot, 2),
            recommended_distance=round_to(min_distance * 2 / inches_per_foot, 2),
            walk_savings_feet=round_to(daily_savings_feet, 2),
            daily_savings_dollars=round_to(daily_savings_dollars, 2),
            daily_picks=round_to(item.daily_picks, 1),
            priority=int(round_to(daily_savings_feet * item.daily_picks, 0)),
        ))
        total_savings_feet += daily_savings_feet

    recommendations.sort(key=lambda r: r.priority, reverse=True)
    return recommendations, total_savings_feet
