"""
Labor Calculations

Time-motion formulas layered on top of walk distance:
- Allowance multiplier (fatigue + delay)
- Standard time per pick (legacy pick/pack/putaway or granular pick/tote/scan)
- Time element breakdown, efficiency, staffing, ROI
- Performance metrics for a recorded day, walk burden, efficiency trends

Every function takes a ResolvedStandards; none reads stored configuration.
Raw (unrounded) figures are computed first and rounded only when the
result schema is built.
"""
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from pickpath.config import settings
from pickpath.core.numeric import percent, round_to, safe_divide, to_float
from pickpath.core.standards import ResolvedStandards
from pickpath.core.validation import parse_date, require_positive
from pickpath.schemas.labor import (
    BreakdownMethod, CoverageInfo, EfficiencyBreakdown, EfficiencyResult,
    PerformanceMetrics, ROIImplementation, ROIResult, ROISavings, ROIState,
    StaffingResult, StandardsSummary, TimeBreakdownResult, TimeElement,
    TrendChartPoint, TrendDay, TrendDirection, TrendResult,
    WalkBurdenCurrent, WalkBurdenOptimal, WalkBurdenResult, WalkBurdenSavings,
)


FEET_PER_MILE = 5280
SECONDS_PER_HOUR = 3600
MINUTES_PER_HOUR = 60

TREND_WINDOW = 7
TREND_THRESHOLD_PERCENT = 5.0

ELEMENT_LABELS = {
    "walk": "Walk to Location",
    "pick": "Pick Item",
    "tote": "Place in Tote",
    "scan": "Scan/Confirm",
    "handling": "Pick/Pack/Putaway",
    "allowance": "PFD Allowance",
}


# ==================== Per-pick Standard Time ====================

def calculate_allowance_multiplier(standards: ResolvedStandards) -> float:
    """1 + fatigue% + delay%."""
    return 1 + standards.fatigue_allowance_percent / 100 + standards.delay_allowance_percent / 100


def walk_seconds(walk_feet: float, standards: ResolvedStandards) -> float:
    return safe_divide(walk_feet, standards.walk_speed_fpm) * 60


def walk_hours(walk_feet: float, standards: ResolvedStandards) -> float:
    return safe_divide(walk_feet, standards.walk_speed_fpm) / MINUTES_PER_HOUR


def handling_seconds(standards: ResolvedStandards, method: BreakdownMethod = BreakdownMethod.LEGACY) -> float:
    """Non-walk seconds per pick for the chosen method."""
    if method == BreakdownMethod.GRANULAR:
        return standards.pick_item_seconds + standards.tote_time_seconds + standards.scan_time_seconds
    return standards.pick_time_seconds + standards.pack_time_seconds + standards.putaway_time_seconds


def calculate_standard_time_per_pick(
    avg_walk_distance_feet: float,
    standards: ResolvedStandards,
    method: BreakdownMethod = BreakdownMethod.LEGACY,
) -> float:
    """Standard seconds per pick, allowances included."""
    base_seconds = handling_seconds(standards, method) + walk_seconds(avg_walk_distance_feet, standards)
    return base_seconds * calculate_allowance_multiplier(standards)


# ==================== Time Element Breakdown ====================

@dataclass(frozen=True)
class TimeElements:
    """Unrounded element hours. `elements` keeps display order."""
    elements: Dict[str, float]
    base_hours: float
    allowance_hours: float
    total_hours: float
    labor_cost: float


def calculate_time_elements(
    total_picks: int,
    total_walk_distance_feet: float,
    standards: ResolvedStandards,
    method: BreakdownMethod = BreakdownMethod.GRANULAR,
) -> TimeElements:
    elements = {"walk": walk_hours(total_walk_distance_feet, standards)}
    if method == BreakdownMethod.GRANULAR:
        elements["pick"] = total_picks * standards.pick_item_seconds / SECONDS_PER_HOUR
        elements["tote"] = total_picks * standards.tote_time_seconds / SECONDS_PER_HOUR
        elements["scan"] = total_picks * standards.scan_time_seconds / SECONDS_PER_HOUR
    else:
        elements["handling"] = total_picks * handling_seconds(standards, method) / SECONDS_PER_HOUR

    base_hours = sum(elements.values())
    allowance_hours = base_hours * (calculate_allowance_multiplier(standards) - 1)
    total_hours = base_hours + allowance_hours

    return TimeElements(
        elements=elements,
        base_hours=base_hours,
        allowance_hours=allowance_hours,
        total_hours=total_hours,
        labor_cost=total_hours * standards.fully_loaded_rate,
    )


def calculate_time_element_breakdown(
    total_picks: int,
    total_walk_distance_feet: float,
    standards: ResolvedStandards,
    method: BreakdownMethod = BreakdownMethod.GRANULAR,
) -> TimeBreakdownResult:
    """Split estimated hours into walk, handling and allowance elements."""
    raw = calculate_time_elements(total_picks, total_walk_distance_feet, standards, method)

    hours_by_element = dict(raw.elements, allowance=raw.allowance_hours)
    elements = {
        name: TimeElement(
            hours=round_to(hours, 3),
            percent=round_to(percent(hours, raw.total_hours), 1),
            label=ELEMENT_LABELS[name],
        )
        for name, hours in hours_by_element.items()
    }

    if method == BreakdownMethod.GRANULAR:
        summary = StandardsSummary(
            pick_item_seconds=standards.pick_item_seconds,
            tote_time_seconds=standards.tote_time_seconds,
            scan_time_seconds=standards.scan_time_seconds,
            walk_speed_fpm=standards.walk_speed_fpm,
            pfd_allowance_percent=round_to((calculate_allowance_multiplier(standards) - 1) * 100, 2),
        )
    else:
        summary = StandardsSummary(
            combined_handling_seconds=handling_seconds(standards, method),
            walk_speed_fpm=standards.walk_speed_fpm,
            pfd_allowance_percent=round_to((calculate_allowance_multiplier(standards) - 1) * 100, 2),
        )

    return TimeBreakdownResult(
        has_data=True,
        method=method,
        total_picks=total_picks,
        total_walk_distance_feet=round_to(total_walk_distance_feet, 2),
        elements=elements,
        total_estimated_hours=round_to(raw.total_hours, 2),
        estimated_labor_cost=round_to(raw.labor_cost, 2),
        standards=summary,
    )


# ==================== Efficiency ====================

def calculate_coverage(
    pick_days: int,
    perf_days: int,
    threshold_percent: float = settings.COVERAGE_THRESHOLD_PERCENT,
) -> Tuple[CoverageInfo, bool]:
    """
    Coverage of pick days by recorded performance days.

    Returns the coverage block and whether actual hours may be used.
    """
    coverage = percent(perf_days, pick_days)
    sufficient = perf_days > 0 and pick_days > 0 and coverage >= threshold_percent
    info = CoverageInfo(
        pick_days=pick_days,
        perf_days=perf_days,
        coverage_percent=round_to(coverage, 0),
    )
    return info, sufficient


def calculate_efficiency_metrics(
    total_picks: int,
    total_walk_distance_feet: float,
    actual_hours: Optional[float],
    standards: ResolvedStandards,
) -> EfficiencyResult:
    """
    Standard hours for the given volume and, when actual hours are
    supplied, efficiency = standard / actual.

    Callers pass actual_hours=None when coverage is insufficient.
    """
    avg_walk = safe_divide(total_walk_distance_feet, total_picks)
    standard_hours = total_picks * calculate_standard_time_per_pick(avg_walk, standards) / SECONDS_PER_HOUR

    pick_hours = total_picks * standards.pick_time_seconds / SECONDS_PER_HOUR
    walk = walk_hours(total_walk_distance_feet, standards)
    pack_hours = total_picks * standards.pack_time_seconds / SECONDS_PER_HOUR
    allowance_hours = (pick_hours + walk + pack_hours) * (calculate_allowance_multiplier(standards) - 1)

    efficiency = None
    if actual_hours is not None and actual_hours > 0:
        efficiency = round_to(standard_hours / actual_hours * 100, 1)

    return EfficiencyResult(
        total_picks=total_picks,
        total_walk_distance_feet=round_to(total_walk_distance_feet, 2),
        avg_walk_distance_per_pick=round_to(avg_walk, 2),
        standard_hours=round_to(standard_hours, 2),
        actual_hours=round_to(actual_hours, 2) if actual_hours is not None else None,
        efficiency_percent=efficiency,
        target_efficiency_percent=standards.target_efficiency_percent,
        breakdown=EfficiencyBreakdown(
            pick_time_hours=round_to(pick_hours, 2),
            walk_time_hours=round_to(walk, 2),
            pack_time_hours=round_to(pack_hours, 2),
            allowance_hours=round_to(allowance_hours, 2),
        ),
        estimated_labor_cost=round_to(standard_hours * standards.fully_loaded_rate, 2),
    )


def calculate_performance_metrics(
    actual_picks: int,
    actual_hours: float,
    walk_distance_feet: float,
    standards: ResolvedStandards,
) -> PerformanceMetrics:
    """Standard hours and efficiency for one recorded day (0 when hours is 0)."""
    avg_walk = safe_divide(walk_distance_feet, actual_picks)
    standard_hours = actual_picks * calculate_standard_time_per_pick(avg_walk, standards) / SECONDS_PER_HOUR

    return PerformanceMetrics(
        standard_hours=round_to(standard_hours, 2),
        efficiency_percent=round_to(percent(standard_hours, actual_hours), 1),
        pick_time_hours=round_to(actual_picks * standards.pick_time_seconds / SECONDS_PER_HOUR, 2),
        walk_time_hours=round_to(walk_hours(walk_distance_feet, standards), 2),
        pack_time_hours=round_to(actual_picks * standards.pack_time_seconds / SECONDS_PER_HOUR, 2),
    )


# ==================== Staffing ====================

def calculate_staffing_requirements(
    forecasted_picks: int,
    period_days: int,
    avg_walk_distance_per_pick: float,
    standards: ResolvedStandards,
) -> StaffingResult:
    """
    Headcount needed to cover the forecast within the period.

    Headcount is rounded up and never below 1, so capacity always covers
    the standard hours.
    """
    require_positive(forecasted_picks, "forecasted_picks")
    require_positive(period_days, "period_days")

    time_per_pick = calculate_standard_time_per_pick(avg_walk_distance_per_pick, standards)
    total_hours = forecasted_picks * time_per_pick / SECONDS_PER_HOUR

    available_per_worker = standards.shift_hours * (standards.target_efficiency_percent / 100) * period_days
    require_positive(available_per_worker, "available_hours_per_worker")

    headcount = max(1, math.ceil(total_hours / available_per_worker))
    capacity = headcount * available_per_worker

    return StaffingResult(
        forecasted_picks=forecasted_picks,
        period_days=period_days,
        required_headcount=headcount,
        total_labor_hours=round_to(total_hours, 2),
        estimated_labor_cost=round_to(total_hours * standards.fully_loaded_rate, 2),
        picks_per_person=round_to(forecasted_picks / headcount, 1),
        utilization_percent=round_to(percent(total_hours, capacity), 1),
    )


# ==================== ROI ====================

def calculate_payback_days(implementation_cost: float, daily_savings_dollars: float) -> int:
    """Days until savings repay the cost; 0 when there are no savings."""
    if daily_savings_dollars <= 0:
        return 0
    return math.ceil(implementation_cost / daily_savings_dollars)


def calculate_roi(
    current_daily_walk_feet: float,
    daily_savings_feet: float,
    items_to_reslot: int,
    standards: ResolvedStandards,
) -> ROIResult:
    """Walk-time savings from reslotting versus the one-off move cost."""
    rate = standards.fully_loaded_rate
    projected_feet = current_daily_walk_feet - daily_savings_feet

    current_minutes = safe_divide(current_daily_walk_feet, standards.walk_speed_fpm)
    projected_minutes = safe_divide(projected_feet, standards.walk_speed_fpm)
    savings_minutes = safe_divide(daily_savings_feet, standards.walk_speed_fpm)

    daily_dollars = savings_minutes / MINUTES_PER_HOUR * rate
    reslot_hours = items_to_reslot * standards.reslot_time_minutes / MINUTES_PER_HOUR
    implementation_cost = reslot_hours * rate

    return ROIResult(
        current_state=ROIState(
            daily_walk_feet=round_to(current_daily_walk_feet, 2),
            daily_walk_minutes=round_to(current_minutes, 2),
            daily_labor_cost=round_to(current_minutes / MINUTES_PER_HOUR * rate, 2),
        ),
        projected_state=ROIState(
            daily_walk_feet=round_to(projected_feet, 2),
            daily_walk_minutes=round_to(projected_minutes, 2),
            daily_labor_cost=round_to(projected_minutes / MINUTES_PER_HOUR * rate, 2),
        ),
        savings=ROISavings(
            daily_feet=round_to(daily_savings_feet, 2),
            daily_minutes=round_to(savings_minutes, 2),
            daily_dollars=round_to(daily_dollars, 2),
            weekly_dollars=round_to(daily_dollars * settings.WORKING_DAYS_PER_WEEK, 2),
            monthly_dollars=round_to(daily_dollars * settings.WORKING_DAYS_PER_MONTH, 2),
            annual_dollars=round_to(daily_dollars * settings.WORKING_DAYS_PER_YEAR, 2),
        ),
        implementation=ROIImplementation(
            items_to_reslot=items_to_reslot,
            estimated_hours=round_to(reslot_hours, 2),
            estimated_cost=round_to(implementation_cost, 2),
            payback_days=calculate_payback_days(implementation_cost, daily_dollars),
        ),
    )


# ==================== Walk Burden ====================

def calculate_walk_burden_metrics(
    total_walk_distance_feet: float,
    total_picks: int,
    optimal_distance_feet: Optional[float],
    standards: ResolvedStandards,
) -> WalkBurdenResult:
    """
    How much of the shift goes to walking, and what the closest-slot
    layout would save. Optimal and savings blocks are omitted when there
    is no optimal distance or nothing to save.
    """
    rate = standards.fully_loaded_rate
    minutes = safe_divide(total_walk_distance_feet, standards.walk_speed_fpm)
    hours = minutes / MINUTES_PER_HOUR

    current = WalkBurdenCurrent(
        distance_feet=round_to(total_walk_distance_feet, 2),
        distance_miles=round_to(total_walk_distance_feet / FEET_PER_MILE, 2),
        time_minutes=round_to(minutes, 1),
        time_hours=round_to(hours, 2),
        percent_of_shift=round_to(percent(minutes, standards.shift_hours * MINUTES_PER_HOUR), 1),
        avg_dist_per_pick=round_to(safe_divide(total_walk_distance_feet, total_picks), 1),
        daily_cost=round_to(hours * rate, 2),
    )

    optimal = savings = None
    if optimal_distance_feet:
        optimal = WalkBurdenOptimal(
            distance_feet=round_to(optimal_distance_feet, 2),
            distance_miles=round_to(optimal_distance_feet / FEET_PER_MILE, 2),
            avg_dist_per_pick=round_to(safe_divide(optimal_distance_feet, total_picks), 1),
        )
        savings_feet = max(0.0, total_walk_distance_feet - optimal_distance_feet)
        if savings_feet:
            savings_minutes = safe_divide(savings_feet, standards.walk_speed_fpm)
            daily_dollars = savings_minutes / MINUTES_PER_HOUR * rate
            savings = WalkBurdenSavings(
                distance_feet=round_to(savings_feet, 2),
                distance_miles=round_to(savings_feet / FEET_PER_MILE, 2),
                time_minutes=round_to(savings_minutes, 1),
                daily_dollars=round_to(daily_dollars, 2),
                annual_dollars=round_to(daily_dollars * settings.WORKING_DAYS_PER_YEAR, 2),
            )

    return WalkBurdenResult(
        has_data=True,
        total_picks=total_picks,
        current=current,
        optimal=optimal,
        potential_savings=savings,
        target_walk_percent=settings.TARGET_WALK_PERCENT,
    )


# ==================== Trends ====================

@dataclass(frozen=True)
class PerformancePoint:
    date: date
    efficiency_percent: Optional[float]
    picks: Optional[int] = None

    @classmethod
    def from_record(cls, record: Any) -> "PerformancePoint":
        """Accepts LaborPerformance rows or {date, efficiency_percent, picks} mappings."""
        picks = _first_present(record, "picks", "actual_picks")
        return cls(
            date=parse_date(_first_present(record, "date", "performance_date"), "performance_date"),
            efficiency_percent=to_float(_first_present(record, "efficiency_percent")),
            picks=int(picks) if picks is not None else None,
        )


def _first_present(record: Any, *names: str) -> Any:
    for name in names:
        value = record.get(name) if isinstance(record, Mapping) else getattr(record, name, None)
        if value is not None:
            return value
    return None


def _window_average(points: Sequence[PerformancePoint]) -> Optional[float]:
    if not points:
        return None
    return sum(p.efficiency_percent or 0 for p in points) / len(points)


def _trend_day(point: Optional[PerformancePoint]) -> Optional[TrendDay]:
    if point is None:
        return None
    return TrendDay(date=point.date, efficiency=round_to(point.efficiency_percent, 1), picks=point.picks)


def calculate_trend_metrics(
    performance_history: Sequence[Any],
    chart_points: int = settings.TREND_CHART_POINTS,
) -> TrendResult:
    """
    Rolling efficiency statistics over recorded days.

    History may arrive in any order; it is sorted newest first. The
    week-over-week change needs a non-zero previous window, so it is None
    with fewer than eight records.
    """
    if not performance_history:
        return TrendResult(has_data=False)

    points = sorted(
        (PerformancePoint.from_record(r) for r in performance_history),
        key=lambda p: p.date,
        reverse=True,
    )

    current_avg = _window_average(points[:TREND_WINDOW])
    previous_avg = _window_average(points[TREND_WINDOW:TREND_WINDOW * 2])

    wow_change = None
    if current_avg is not None and previous_avg:
        wow_change = (current_avg - previous_avg) / previous_avg * 100

    recent = [p for p in points[:chart_points] if p.efficiency_percent is not None]
    best = worst = None
    for point in recent:
        if best is None or point.efficiency_percent > best.efficiency_percent:
            best = point
        if worst is None or point.efficiency_percent < worst.efficiency_percent:
            worst = point

    trend = TrendDirection.STABLE
    if wow_change is not None:
        if wow_change > TREND_THRESHOLD_PERCENT:
            trend = TrendDirection.IMPROVING
        elif wow_change < -TREND_THRESHOLD_PERCENT:
            trend = TrendDirection.DECLINING

    chart_data = [
        TrendChartPoint(
            date=p.date,
            efficiency=round_to(p.efficiency_percent, 1),
            picks=p.picks,
        )
        for p in reversed(points[:chart_points])
    ]

    return TrendResult(
        has_data=True,
        rolling_avg_7_day=round_to(current_avg, 1),
        week_over_week_change=round_to(wow_change, 1),
        best_day=_trend_day(best),
        worst_day=_trend_day(worst),
        trend=trend,
        data_points=len(points),
        chart_data=chart_data,
    )
