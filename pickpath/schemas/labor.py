"""
Pydantic schemas for walk-distance and labor analytics results.

Distances are in feet and durations in hours unless the field name says
otherwise.
"""
import uuid
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import Field

from pickpath.schemas.base import (
    CamelSchema, BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema
)


# ============================================================================
# ENUMS
# ============================================================================

class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class BreakdownMethod(str, Enum):
    GRANULAR = "granular"   # pick-item + tote + scan
    LEGACY = "legacy"       # combined pick + pack + putaway


# ============================================================================
# SHARED
# ============================================================================

class DateRange(CamelSchema):
    start: Optional[date] = None
    end: Optional[date] = None


class Pagination(CamelSchema):
    page: int
    limit: int
    total: int
    pages: int


# ============================================================================
# WALK DISTANCE
# ============================================================================

class MissingMarkers(CamelSchema):
    """Which marker categories a layout still needs before routing."""
    start_point: bool = False
    stop_point: bool = False
    cart_parking: bool = False


class DailyDistance(CamelSchema):
    date: str
    total_feet: float
    cart_feet: float
    pedestrian_feet: float
    visits: int


class MarkerPosition(CamelSchema):
    label: Optional[str] = None
    x: float
    y: float


class MarkerSummary(CamelSchema):
    start_point: MarkerPosition
    stop_point: MarkerPosition
    cart_parking_count: int


class WalkDistanceResult(CamelSchema):
    total_distance: float = 0  # canvas units (inches)
    total_distance_feet: float = 0
    cart_travel_dist_feet: float = 0
    pedestrian_travel_dist_feet: float = 0
    total_picks: int = 0
    visit_count: int = 0
    avg_distance_per_visit_feet: float = 0
    estimated_minutes: float = 0
    daily_breakdown: List[DailyDistance] = Field(default_factory=list)
    markers: Optional[MarkerSummary] = None
    missing_markers: Optional[MissingMarkers] = None
    message: Optional[str] = None


# ============================================================================
# TIME ELEMENTS & EFFICIENCY
# ============================================================================

class TimeElement(CamelSchema):
    hours: float
    percent: float
    label: str


class StandardsSummary(CamelSchema):
    pick_item_seconds: Optional[float] = None
    tote_time_seconds: Optional[float] = None
    scan_time_seconds: Optional[float] = None
    combined_handling_seconds: Optional[float] = None
    walk_speed_fpm: float
    pfd_allowance_percent: float


class TimeBreakdownResult(CamelSchema):
    has_data: bool = True
    message: Optional[str] = None
    method: BreakdownMethod = BreakdownMethod.GRANULAR
    total_picks: int = 0
    total_walk_distance_feet: float = 0
    elements: Optional[Dict[str, TimeElement]] = None
    total_estimated_hours: float = 0
    estimated_labor_cost: float = 0
    standards: Optional[StandardsSummary] = None
    date_range: Optional[DateRange] = None


class EfficiencyBreakdown(CamelSchema):
    pick_time_hours: float
    walk_time_hours: float
    pack_time_hours: float
    allowance_hours: float


class CoverageInfo(CamelSchema):
    pick_days: int
    perf_days: int
    coverage_percent: float


class EfficiencyResult(CamelSchema):
    total_picks: int
    total_walk_distance_feet: float
    avg_walk_distance_per_pick: float
    standard_hours: float
    actual_hours: Optional[float] = None
    efficiency_percent: Optional[float] = None
    target_efficiency_percent: float
    breakdown: EfficiencyBreakdown
    estimated_labor_cost: float
    coverage: Optional[CoverageInfo] = None
    date_range: Optional[DateRange] = None


class PerformanceMetrics(CamelSchema):
    """Standard hours and efficiency for a single recorded day."""
    standard_hours: float
    efficiency_percent: float
    pick_time_hours: float
    walk_time_hours: float
    pack_time_hours: float


# ============================================================================
# WALK BURDEN
# ============================================================================

class WalkBurdenCurrent(CamelSchema):
    distance_feet: float
    distance_miles: float
    time_minutes: float
    time_hours: float
    percent_of_shift: float
    avg_dist_per_pick: float
    daily_cost: float


class WalkBurdenOptimal(CamelSchema):
    distance_feet: float
    distance_miles: float
    avg_dist_per_pick: float


class WalkBurdenSavings(CamelSchema):
    distance_feet: float
    distance_miles: float
    time_minutes: float
    daily_dollars: float
    annual_dollars: float


class WalkBurdenResult(CamelSchema):
    has_data: bool = True
    message: Optional[str] = None
    total_picks: int = 0
    current: Optional[WalkBurdenCurrent] = None
    optimal: Optional[WalkBurdenOptimal] = None
    potential_savings: Optional[WalkBurdenSavings] = None
    target_walk_percent: float = 35.0
    date_range: Optional[DateRange] = None


# ============================================================================
# STAFFING
# ============================================================================

class StaffingRequest(BaseCreateSchema):
    forecasted_picks: int = Field(..., gt=0)
    period_days: int = Field(1, gt=0)


class StaffingResult(CamelSchema):
    forecasted_picks: int
    period_days: int
    required_headcount: int
    total_labor_hours: float
    estimated_labor_cost: float
    picks_per_person: float
    utilization_percent: float
    standards_used: Optional[Dict[str, float]] = None


class StaffingSaveRequest(BaseCreateSchema):
    forecast_date: date
    forecasted_picks: int = Field(..., gt=0)
    period_days: int = Field(1, gt=0)
    required_headcount: int = Field(..., gt=0)
    required_hours: float = Field(..., ge=0)
    estimated_labor_cost: Optional[float] = None
    picks_per_person: Optional[float] = None
    utilization_percent: Optional[float] = None


class StaffingForecastResponse(BaseResponseSchema):
    id: uuid.UUID
    layout_id: uuid.UUID
    forecast_date: date
    forecasted_picks: int
    period_days: int
    required_headcount: int
    required_hours: float
    estimated_labor_cost: Optional[float] = None
    picks_per_person: Optional[float] = None
    utilization_percent: Optional[float] = None
    standards_snapshot: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


# ============================================================================
# ROI / RESLOTTING
# ============================================================================

class ROIState(CamelSchema):
    daily_walk_feet: float
    daily_walk_minutes: float
    daily_labor_cost: float


class ROISavings(CamelSchema):
    daily_feet: float
    daily_minutes: float
    daily_dollars: float
    weekly_dollars: float
    monthly_dollars: float
    annual_dollars: float


class ROIImplementation(CamelSchema):
    items_to_reslot: int
    estimated_hours: float
    estimated_cost: float
    payback_days: int


class ReslotRecommendation(CamelSchema):
    item_id: str
    external_item_id: Optional[str] = None
    current_element: Optional[str] = None
    current_distance: float  # round-trip feet
    recommended_distance: float  # round-trip feet
    walk_savings_feet: float  # per day
    daily_savings_dollars: float
    daily_picks: float
    priority: int


class ROIResult(CamelSchema):
    current_state: ROIState
    projected_state: ROIState
    savings: ROISavings
    implementation: ROIImplementation
    recommendations: List[ReslotRecommendation] = Field(default_factory=list)


class ROISaveRequest(BaseCreateSchema):
    simulation_name: Optional[str] = Field(None, max_length=100)
    current_state: Optional[ROIState] = None
    projected_state: Optional[ROIState] = None
    savings: Optional[ROISavings] = None
    implementation: Optional[ROIImplementation] = None
    recommendations: List[ReslotRecommendation] = Field(default_factory=list)


class ROISimulationResponse(BaseResponseSchema):
    id: uuid.UUID
    layout_id: uuid.UUID
    simulation_name: Optional[str] = None
    simulation_date: date
    daily_savings_dollars: Optional[float] = None
    annual_savings_dollars: Optional[float] = None
    items_to_reslot: Optional[int] = None
    implementation_cost: Optional[float] = None
    payback_days: Optional[int] = None
    recommendations_snapshot: Optional[List[Dict[str, Any]]] = None
    standards_snapshot: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


# ============================================================================
# TRENDS
# ============================================================================

class TrendDay(CamelSchema):
    date: date
    efficiency: float
    picks: Optional[int] = None


class TrendChartPoint(CamelSchema):
    date: date
    efficiency: Optional[float] = None
    picks: Optional[int] = None


class TrendResult(CamelSchema):
    has_data: bool = False
    rolling_avg_7_day: Optional[float] = None
    week_over_week_change: Optional[float] = None
    best_day: Optional[TrendDay] = None
    worst_day: Optional[TrendDay] = None
    trend: Optional[TrendDirection] = None
    data_points: int = 0
    chart_data: List[TrendChartPoint] = Field(default_factory=list)


# ============================================================================
# STANDARDS & PERFORMANCE RECORDS
# ============================================================================

class LaborStandardsUpdate(BaseUpdateSchema):
    """Partial standards update; omitted fields keep their stored value."""
    pick_time_seconds: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    pack_time_seconds: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    putaway_time_seconds: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    pick_item_seconds: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    tote_time_seconds: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    scan_time_seconds: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    walk_speed_fpm: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    fatigue_allowance_percent: Optional[float] = Field(None, ge=0, le=100, allow_inf_nan=False)
    delay_allowance_percent: Optional[float] = Field(None, ge=0, le=100, allow_inf_nan=False)
    reslot_time_minutes: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    hourly_labor_rate: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    benefits_multiplier: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    shift_hours: Optional[float] = Field(None, gt=0, le=24, allow_inf_nan=False)
    target_efficiency_percent: Optional[float] = Field(None, gt=0, le=200, allow_inf_nan=False)


class LaborStandardsResponse(BaseResponseSchema):
    id: Optional[uuid.UUID] = None
    layout_id: uuid.UUID
    is_default: bool = False
    pick_time_seconds: Optional[float] = None
    pack_time_seconds: Optional[float] = None
    putaway_time_seconds: Optional[float] = None
    pick_item_seconds: Optional[float] = None
    tote_time_seconds: Optional[float] = None
    scan_time_seconds: Optional[float] = None
    walk_speed_fpm: Optional[float] = None
    fatigue_allowance_percent: Optional[float] = None
    delay_allowance_percent: Optional[float] = None
    reslot_time_minutes: Optional[float] = None
    hourly_labor_rate: Optional[float] = None
    benefits_multiplier: Optional[float] = None
    shift_hours: Optional[float] = None
    target_efficiency_percent: Optional[float] = None
    updated_at: Optional[datetime] = None


class PerformanceCreate(BaseCreateSchema):
    performance_date: date
    actual_picks: int = Field(..., ge=0)
    actual_hours: float = Field(..., gt=0, allow_inf_nan=False)


class PerformanceResponse(BaseResponseSchema):
    id: uuid.UUID
    layout_id: uuid.UUID
    performance_date: date
    actual_picks: int
    actual_hours: float
    actual_walk_distance_feet: Optional[float] = None
    standard_hours: Optional[float] = None
    efficiency_percent: Optional[float] = None
    pick_time_hours: Optional[float] = None
    walk_time_hours: Optional[float] = None
    pack_time_hours: Optional[float] = None
    created_at: Optional[datetime] = None


class PerformanceListResponse(CamelSchema):
    data: List[PerformanceResponse]
    pagination: Pagination


class StaffingForecastListResponse(CamelSchema):
    data: List[StaffingForecastResponse]
    pagination: Pagination


class ROISimulationListResponse(CamelSchema):
    data: List[ROISimulationResponse]
    pagination: Pagination
