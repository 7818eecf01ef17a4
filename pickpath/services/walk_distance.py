"""
Walk Distance Service

Estimates how far pickers and carts travel for a layout's pick history:
- One visit per location per day (batch-picking assumption)
- Each visit is served from its nearest cart parking spot (round trip on foot)
- The cart travels Start -> active parking spots -> Stop
- Parking spots follow their sequence_order, or a greedy nearest-neighbour
  order from the start point when any active spot has none

All geometry is rectilinear (Manhattan) in canvas units (1 unit = 1 inch);
conversion to feet happens only when the result is built.

Labor analytics use a coarser estimate (estimate_reference_walk): every
pick is a round trip from one reference point to its element centre.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pickpath.config import settings
from pickpath.core.enum_utils import to_enum
from pickpath.core.geometry import Point, element_center, manhattan_distance
from pickpath.core.numeric import round_to, safe_divide, to_float
from pickpath.core.validation import normalize_date_key
from pickpath.models.layout import MarkerType
from pickpath.schemas.labor import (
    DailyDistance, MarkerPosition, MarkerSummary, MissingMarkers, WalkDistanceResult
)


logger = logging.getLogger(__name__)

MISSING_MARKERS_MESSAGE = (
    "Please add start point, stop point, and at least one cart parking spot "
    "to calculate walk distance."
)
NO_PICK_DATA_MESSAGE = "No pick data found for the selected date range."


@dataclass(frozen=True)
class ParkingSpot:
    id: Any
    x: float
    y: float
    label: Optional[str] = None
    sequence_order: Optional[int] = None


@dataclass(frozen=True)
class PickVisit:
    location_id: Any
    x: float
    y: float
    date: str
    label: Optional[str] = None


@dataclass
class ParkingAssignment:
    """Visits served from one parking spot on one day."""
    spot: ParkingSpot
    visits: List[PickVisit] = field(default_factory=list)
    pedestrian_distance: float = 0.0


@dataclass(frozen=True)
class DailyRoute:
    date: str
    cart_distance: float
    pedestrian_distance: float
    visit_count: int
    active_spots: Tuple[ParkingSpot, ...] = ()

    @property
    def total_distance(self) -> float:
        return self.cart_distance + self.pedestrian_distance


@dataclass(frozen=True)
class RouteMarkers:
    """Markers of one layout, split by category."""
    start: Optional[Point]
    stop: Optional[Point]
    parking: Tuple[ParkingSpot, ...]
    start_label: Optional[str] = None
    stop_label: Optional[str] = None

    @property
    def missing(self) -> MissingMarkers:
        return MissingMarkers(
            start_point=self.start is None,
            stop_point=self.stop is None,
            cart_parking=len(self.parking) == 0,
        )

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.stop is not None and len(self.parking) > 0

    @classmethod
    def from_rows(cls, rows: Iterable[Any]) -> "RouteMarkers":
        """
        Classify marker rows (ORM objects or mappings).

        The first start/stop marker wins; parking spots keep input order.
        Rows with an unknown marker_type are ignored.
        """
        start = stop = None
        start_label = stop_label = None
        parking: List[ParkingSpot] = []

        for row in rows:
            marker_type = to_enum(_get(row, "marker_type"), MarkerType)
            if marker_type is None:
                logger.warning(f"Ignoring route marker with unknown type: {_get(row, 'marker_type')!r}")
                continue

            point = Point.from_coordinates(
                _get(row, "x_coordinate"), _get(row, "y_coordinate"), field="marker"
            )
            if marker_type == MarkerType.START_POINT:
                if start is None:
                    start, start_label = point, _get(row, "label")
            elif marker_type == MarkerType.STOP_POINT:
                if stop is None:
                    stop, stop_label = point, _get(row, "label")
            elif marker_type == MarkerType.CART_PARKING:
                sequence = _get(row, "sequence_order")
                parking.append(ParkingSpot(
                    id=_get(row, "id"),
                    x=point.x,
                    y=point.y,
                    label=_get(row, "label"),
                    sequence_order=int(sequence) if sequence is not None else None,
                ))
            else:  # pragma: no cover - MarkerType is closed
                raise AssertionError(f"Unhandled marker type {marker_type}")

        return cls(start, stop, tuple(parking), start_label, stop_label)


def _get(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


# ==================== Visit Deduplication ====================

def dedupe_visits(pick_rows: Iterable[Any]) -> "OrderedDict[str, List[PickVisit]]":
    """
    Collapse pick rows into one visit per location per calendar day.

    Returns visits grouped by YYYY-MM-DD, dates ascending. The first row
    seen for a location on a day supplies its coordinates.
    """
    by_date: Dict[str, "OrderedDict[Any, PickVisit]"] = {}

    for row in pick_rows:
        day = normalize_date_key(_get(row, "pick_date"))
        location_id = _get(row, "element_id")
        visits = by_date.setdefault(day, OrderedDict())
        if location_id in visits:
            continue
        point = Point.from_coordinates(
            _get(row, "x_coordinate"), _get(row, "y_coordinate"), field="element"
        )
        visits[location_id] = PickVisit(
            location_id=location_id,
            x=point.x,
            y=point.y,
            date=day,
            label=_get(row, "element_label"),
        )

    return OrderedDict(
        (day, list(by_date[day].values())) for day in sorted(by_date)
    )


# ==================== Parking Assignment ====================

def nearest_parking_spot(point, spots: Sequence[ParkingSpot]) -> Tuple[ParkingSpot, float]:
    """Closest spot by Manhattan distance; the first spot wins ties."""
    if not spots:
        raise ValueError("at least one parking spot is required")

    nearest = spots[0]
    min_distance = manhattan_distance(point, nearest)
    for spot in spots[1:]:
        distance = manhattan_distance(point, spot)
        if distance < min_distance:
            nearest, min_distance = spot, distance
    return nearest, min_distance


def assign_visits_to_parking(
    visits: Sequence[PickVisit],
    spots: Sequence[ParkingSpot]
) -> List[ParkingAssignment]:
    """
    Assign each visit to its nearest parking spot.

    Returns one assignment per active spot (spots with at least one visit),
    in parking input order, each with its summed round-trip distance.
    """
    assignments: Dict[int, ParkingAssignment] = {}

    for visit in visits:
        spot, distance = nearest_parking_spot(visit, spots)
        key = spots.index(spot)
        assignment = assignments.get(key)
        if assignment is None:
            assignment = assignments[key] = ParkingAssignment(spot=spot)
        assignment.visits.append(visit)
        assignment.pedestrian_distance += distance * 2

    return [assignments[key] for key in sorted(assignments)]


# ==================== Cart Route Sequencing ====================

def sequence_parking_spots(start, spots: Sequence[ParkingSpot]) -> List[ParkingSpot]:
    """
    Order active parking spots into a cart route.

    Uses sequence_order when every spot has one; otherwise a greedy
    nearest-neighbour walk from the start point. Returns a new list.

    Ties go to the earliest spot in `spots`. calculate_daily_route passes
    active spots in parking input order, not in the order their first
    visit was assigned, so the route does not depend on pick row order.
    """
    if all(spot.sequence_order is not None for spot in spots):
        return sorted(spots, key=lambda spot: spot.sequence_order)

    remaining = list(spots)
    ordered: List[ParkingSpot] = []
    current = start

    while remaining:
        nearest_idx = 0
        min_distance = manhattan_distance(current, remaining[0])
        for idx in range(1, len(remaining)):
            distance = manhattan_distance(current, remaining[idx])
            if distance < min_distance:
                nearest_idx, min_distance = idx, distance
        current = remaining.pop(nearest_idx)
        ordered.append(current)

    return ordered


def cart_route_distance(start, stop, route: Sequence[ParkingSpot]) -> float:
    """Start -> each spot in order -> Stop. Empty route is start -> stop."""
    distance = 0.0
    current = start
    for spot in route:
        distance += manhattan_distance(current, spot)
        current = spot
    return distance + manhattan_distance(current, stop)


def calculate_daily_route(
    day: str,
    visits: Sequence[PickVisit],
    start: Point,
    stop: Point,
    parking: Sequence[ParkingSpot]
) -> DailyRoute:
    """Cart and pedestrian distance for one day's visits."""
    if not visits:
        return DailyRoute(day, cart_route_distance(start, stop, []), 0.0, 0)

    assignments = assign_visits_to_parking(visits, parking)
    route = sequence_parking_spots(start, [a.spot for a in assignments])

    return DailyRoute(
        date=day,
        cart_distance=cart_route_distance(start, stop, route),
        pedestrian_distance=sum(a.pedestrian_distance for a in assignments),
        visit_count=len(visits),
        active_spots=tuple(route),
    )


# ==================== Engine ====================

class WalkDistanceEngine:
    """
    Computes walk distance over a date range.

    Each day is routed independently and the per-day distances are summed.
    """

    def __init__(
        self,
        inches_per_foot: float = settings.INCHES_PER_FOOT,
        walk_speed_fpm: float = settings.DEFAULT_WALK_SPEED_FPM,
    ):
        self.inches_per_foot = inches_per_foot
        self.walk_speed_fpm = walk_speed_fpm

    def route_days(self, pick_rows: Iterable[Any], markers: RouteMarkers) -> List[DailyRoute]:
        """Per-day routes, dates ascending. Markers must be complete."""
        if not markers.is_complete:
            raise ValueError("route markers are incomplete")

        routes = []
        for day, visits in dedupe_visits(pick_rows).items():
            route = calculate_daily_route(day, visits, markers.start, markers.stop, markers.parking)
            logger.debug(
                f"{day}: {route.visit_count} visits, {len(route.active_spots)} active spots, "
                f"cart={route.cart_distance:.1f} pedestrian={route.pedestrian_distance:.1f}"
            )
            routes.append(route)
        return routes

    def _to_feet(self, inches: float) -> float:
        return round_to(safe_divide(inches, self.inches_per_foot), 0)

    def calculate(self, pick_rows: Sequence[Any], marker_rows: Iterable[Any]) -> WalkDistanceResult:
        """
        Walk distance for the given pick rows and layout markers.

        Missing markers and empty pick data are valid "not yet configured"
        states and produce a zero result with an explanatory message.
        """
        markers = marker_rows if isinstance(marker_rows, RouteMarkers) else RouteMarkers.from_rows(marker_rows)

        if not markers.is_complete:
            logger.warning(f"Walk distance skipped, missing markers: {markers.missing.model_dump()}")
            return WalkDistanceResult(
                message=MISSING_MARKERS_MESSAGE,
                missing_markers=markers.missing,
            )

        if not pick_rows:
            return WalkDistanceResult(message=NO_PICK_DATA_MESSAGE, markers=self._marker_summary(markers))

        routes = self.route_days(pick_rows, markers)

        cart_total = sum(r.cart_distance for r in routes)
        pedestrian_total = sum(r.pedestrian_distance for r in routes)
        visit_count = sum(r.visit_count for r in routes)
        total_picks = sum(int(to_float(_get(row, "pick_count")) or 0) for row in pick_rows)

        total_feet = self._to_feet(cart_total + pedestrian_total)

        return WalkDistanceResult(
            total_distance=round_to(cart_total + pedestrian_total, 0),
            total_distance_feet=total_feet,
            cart_travel_dist_feet=self._to_feet(cart_total),
            pedestrian_travel_dist_feet=self._to_feet(pedestrian_total),
            total_picks=total_picks,
            visit_count=visit_count,
            avg_distance_per_visit_feet=round_to(safe_divide(total_feet, visit_count), 1),
            estimated_minutes=round_to(safe_divide(total_feet, self.walk_speed_fpm), 0),
            daily_breakdown=[
                DailyDistance(
                    date=r.date,
                    total_feet=self._to_feet(r.total_distance),
                    cart_feet=self._to_feet(r.cart_distance),
                    pedestrian_feet=self._to_feet(r.pedestrian_distance),
                    visits=r.visit_count,
                )
                for r in routes
            ],
            markers=self._marker_summary(markers),
        )

    @staticmethod
    def _marker_summary(markers: RouteMarkers) -> MarkerSummary:
        return MarkerSummary(
            start_point=MarkerPosition(label=markers.start_label, x=markers.start.x, y=markers.start.y),
            stop_point=MarkerPosition(label=markers.stop_label, x=markers.stop.x, y=markers.stop.y),
            cart_parking_count=len(markers.parking),
        )


# ==================== Reference-point Estimate ====================

def reference_point(marker_rows: Iterable[Any]) -> Optional[Point]:
    """
    Single point that labor walk estimates are measured from.

    First cart parking spot by sequence order (unsequenced spots last),
    otherwise the start point, otherwise None.
    """
    parking = []
    start = None

    for idx, row in enumerate(marker_rows):
        marker_type = to_enum(_get(row, "marker_type"), MarkerType)
        if marker_type == MarkerType.CART_PARKING:
            sequence = _get(row, "sequence_order")
            key = (sequence is None, sequence if sequence is not None else 0, idx)
            parking.append((key, Point.from_coordinates(
                _get(row, "x_coordinate"), _get(row, "y_coordinate"), field="marker"
            )))
        elif marker_type == MarkerType.START_POINT and start is None:
            start = Point.from_coordinates(
                _get(row, "x_coordinate"), _get(row, "y_coordinate"), field="marker"
            )

    if parking:
        return min(parking, key=lambda entry: entry[0])[1]
    return start


@dataclass(frozen=True)
class ReferenceWalk:
    """Round-trip walk estimate from one reference point."""
    total_walk_feet: float = 0.0
    total_picks: int = 0
    min_distance: Optional[float] = None  # one way, canvas units

    @property
    def avg_walk_per_pick(self) -> float:
        return safe_divide(self.total_walk_feet, self.total_picks)


def estimate_reference_walk(
    element_rows: Iterable[Any],
    reference: Optional[Point],
    inches_per_foot: float = settings.INCHES_PER_FOOT,
) -> ReferenceWalk:
    """
    Walk feet as if every pick were a round trip from the reference point
    to its element centre.

    element_rows carry per-element pick totals (total_picks) and geometry.
    Without a reference point nothing can be estimated.
    """
    if reference is None:
        return ReferenceWalk()

    total_feet = 0.0
    total_picks = 0
    min_distance = None

    for row in element_rows:
        picks = int(to_float(_get(row, "total_picks")) or 0)
        center = element_center(
            _get(row, "x_coordinate"), _get(row, "y_coordinate"),
            _get(row, "width"), _get(row, "height"),
        )
        distance = manhattan_distance(center, reference)
        total_feet += distance * 2 / inches_per_foot * picks
        total_picks += picks
        if min_distance is None or distance < min_distance:
            min_distance = distance

    return ReferenceWalk(total_feet, total_picks, min_distance)
