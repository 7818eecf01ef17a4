"""
Labor Analytics Service.

Per-layout orchestration of the walk-distance and labor calculations:
fetches markers, picks, standards and performance history through
LaborRepository, resolves standards once, and hands plain values to the
pure calculation functions.
"""
import csv
import io
import logging
import math
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from pickpath.config import settings
from pickpath.core.numeric import round_to
from pickpath.core.standards import ResolvedStandards, resolve_standards, DEFAULT_STANDARDS
from pickpath.core.validation import (
    InvalidInputError, parse_date, require_positive, validate_date_range
)
from pickpath.schemas.labor import (
    BreakdownMethod, DateRange, EfficiencyResult, LaborStandardsResponse,
    LaborStandardsUpdate, Pagination, PerformanceCreate, PerformanceListResponse,
    PerformanceResponse, ROIResult, ROISaveRequest, ROISimulationListResponse,
    ROISimulationResponse, StaffingForecastListResponse, StaffingForecastResponse,
    StaffingRequest, StaffingResult, StaffingSaveRequest, TimeBreakdownResult,
    TrendResult, WalkBurdenResult, WalkDistanceResult,
)
from pickpath.services.labor_calculations import (
    calculate_coverage, calculate_efficiency_metrics, calculate_performance_metrics,
    calculate_roi, calculate_staffing_requirements, calculate_time_element_breakdown,
    calculate_trend_metrics, calculate_walk_burden_metrics,
)
from pickpath.services.labor_repository import LaborRepository
from pickpath.services.reslotting import build_item_positions, recommend_reslots
from pickpath.services.walk_distance import (
    ReferenceWalk, RouteMarkers, WalkDistanceEngine, estimate_reference_walk, reference_point
)


logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

NO_BREAKDOWN_DATA_MESSAGE = "No pick data available. Upload pick data to see time element breakdown."
NO_BURDEN_DATA_MESSAGE = "No pick data available."


class InsufficientPickDataError(InvalidInputError):
    """No positioned pick history to derive walk distance from."""

    def __init__(self, action: str):
        super().__init__(
            "pick_data",
            f"Cannot calculate {action}: no pick data with element positions found. "
            "Ensure picks are associated with warehouse elements that have positions."
        )


def _parse(schema: Type[SchemaT], data: Any) -> SchemaT:
    """Validate caller input against a schema, raising InvalidInputError."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise InvalidInputError.from_validation_error(exc) from exc


def _pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


def _page_bounds(page: int, limit: int) -> Tuple[int, int]:
    page = int(require_positive(page, "page"))
    limit = int(require_positive(limit, "limit"))
    return page, limit


class LaborService:
    """Labor analytics for one layout. Create one instance per request."""

    def __init__(self, db: AsyncSession, layout_id: uuid.UUID):
        self.db = db
        self.layout_id = layout_id
        self.repository = LaborRepository(db, layout_id)
        self._standards: Optional[ResolvedStandards] = None

    async def resolved_standards(self) -> ResolvedStandards:
        """Stored standards merged with defaults, resolved once per instance."""
        if self._standards is None:
            self._standards = resolve_standards(await self.repository.get_standards())
        return self._standards

    async def _reference_walk(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> ReferenceWalk:
        reference = reference_point(await self.repository.get_route_markers())
        if reference is None:
            logger.warning(f"Layout {self.layout_id} has no cart parking or start point")
            return ReferenceWalk()
        rows = await self.repository.get_element_pick_totals(start_date, end_date)
        return estimate_reference_walk(rows, reference)

    # =========================================================================
    # WALK DISTANCE
    # =========================================================================

    async def get_walk_distance(self, start_date: Any = None, end_date: Any = None) -> WalkDistanceResult:
        """Routed cart and pedestrian distance for the date range."""
        start, end = validate_date_range(start_date, end_date)
        engine = WalkDistanceEngine()

        markers = RouteMarkers.from_rows(await self.repository.get_route_markers())
        if not markers.is_complete:
            return engine.calculate([], markers)

        pick_rows = await self.repository.get_pick_rows(start, end)
        return engine.calculate(pick_rows, markers)

    # =========================================================================
    # LABOR STANDARDS
    # =========================================================================

    async def get_standards(self) -> LaborStandardsResponse:
        """Stored standards, or the defaults (not persisted) when none exist."""
        stored = await self.repository.get_standards()
        if stored is None:
            return LaborStandardsResponse(layout_id=self.layout_id, is_default=True, **DEFAULT_STANDARDS)
        return LaborStandardsResponse.model_validate(stored)

    async def update_standards(self, data: Any) -> LaborStandardsResponse:
        """Partial update; fields left out (or None) keep their stored value."""
        update = _parse(LaborStandardsUpdate, data)
        values = update.model_dump(exclude_none=True)

        stored = await self.repository.upsert_standards(values)
        self._standards = None
        logger.info(f"Labor standards saved for layout {self.layout_id}: {sorted(values)}")
        return LaborStandardsResponse.model_validate(stored)

    # =========================================================================
    # EFFICIENCY / TIME BREAKDOWN / WALK BURDEN
    # =========================================================================

    async def get_efficiency(self, start_date: Any = None, end_date: Any = None) -> EfficiencyResult:
        """
        Standard hours for the range, with efficiency only when recorded
        actual hours cover enough of the pick days.
        """
        start, end = validate_date_range(start_date, end_date)
        standards = await self.resolved_standards()
        walk = await self._reference_walk(start, end)

        pick_days = await self.repository.count_pick_days(start, end)
        perf_days, total_actual_hours = await self.repository.get_performance_summary(start, end)

        coverage, sufficient = calculate_coverage(pick_days, perf_days, settings.COVERAGE_THRESHOLD_PERCENT)
        if perf_days and not sufficient:
            logger.warning(
                f"Efficiency withheld for layout {self.layout_id}: "
                f"{perf_days}/{pick_days} pick days have recorded hours"
            )

        result = calculate_efficiency_metrics(
            walk.total_picks,
            walk.total_walk_feet,
            total_actual_hours if sufficient else None,
            standards,
        )
        result.coverage = coverage
        result.date_range = DateRange(start=start, end=end)
        return result

    async def get_time_breakdown(
        self,
        start_date: Any = None,
        end_date: Any = None,
        method: BreakdownMethod = BreakdownMethod.GRANULAR
    ) -> TimeBreakdownResult:
        start, end = validate_date_range(start_date, end_date)
        standards = await self.resolved_standards()
        walk = await self._reference_walk(start, end)

        if walk.total_picks == 0:
            return TimeBreakdownResult(has_data=False, message=NO_BREAKDOWN_DATA_MESSAGE, method=method)

        result = calculate_time_element_breakdown(walk.total_picks, walk.total_walk_feet, standards, method)
        result.date_range = DateRange(start=start, end=end)
        return result

    async def get_walk_burden(self, start_date: Any = None, end_date: Any = None) -> WalkBurdenResult:
        """Walk share of the shift versus picking everything from the closest element."""
        start, end = validate_date_range(start_date, end_date)
        standards = await self.resolved_standards()
        walk = await self._reference_walk(start, end)

        if walk.total_picks == 0:
            return WalkBurdenResult(
                has_data=False,
                message=NO_BURDEN_DATA_MESSAGE,
                target_walk_percent=settings.TARGET_WALK_PERCENT,
            )

        optimal_feet = None
        if walk.min_distance is not None:
            optimal_feet = walk.min_distance * 2 * walk.total_picks / settings.INCHES_PER_FOOT

        result = calculate_walk_burden_metrics(walk.total_walk_feet, walk.total_picks, optimal_feet, standards)
        result.date_range = DateRange(start=start, end=end)
        return result

    # =========================================================================
    # TRENDS & PERFORMANCE
    # =========================================================================

    async def get_trends(self) -> TrendResult:
        history = await self.repository.get_performance_history(settings.TREND_HISTORY_LIMIT)
        return calculate_trend_metrics(history, settings.TREND_CHART_POINTS)

    async def record_performance(self, data: Any) -> PerformanceResponse:
        """
        Record actual hours for a day.

        Walk distance for the day is estimated from the layout's all-time
        average walk per pick.
        """
        record = _parse(PerformanceCreate, data)
        standards = await self.resolved_standards()

        walk = await self._reference_walk()
        if walk.total_picks == 0:
            raise InsufficientPickDataError("performance")

        estimated_walk_feet = record.actual_picks * walk.avg_walk_per_pick
        metrics = calculate_performance_metrics(
            record.actual_picks, record.actual_hours, estimated_walk_feet, standards
        )

        saved = await self.repository.upsert_performance(
            record.performance_date,
            {
                "actual_picks": record.actual_picks,
                "actual_hours": record.actual_hours,
                "actual_walk_distance_feet": round_to(estimated_walk_feet, 2),
                **metrics.model_dump(),
            }
        )
        logger.info(
            f"Performance recorded for layout {self.layout_id} on {record.performance_date}: "
            f"{metrics.efficiency_percent}%"
        )
        return PerformanceResponse.model_validate(saved)

    async def list_performance(
        self,
        start_date: Any = None,
        end_date: Any = None,
        page: int = 1,
        limit: int = 30
    ) -> PerformanceListResponse:
        start, end = validate_date_range(start_date, end_date)
        page, limit = _page_bounds(page, limit)

        records, total = await self.repository.list_performance(start, end, (page - 1) * limit, limit)
        return PerformanceListResponse(
            data=[PerformanceResponse.model_validate(r) for r in records],
            pagination=_pagination(page, limit, total),
        )

    async def delete_performance(self, performance_date: Any) -> bool:
        """Remove one day's record. Returns False when there was none."""
        day = parse_date(performance_date, "performance_date", strict=True)
        if day is None:
            raise InvalidInputError("performance_date", "a date is required")

        deleted_id = await self.repository.delete_performance(day)
        if deleted_id is not None:
            logger.info(f"Performance record {deleted_id} deleted for layout {self.layout_id}")
        return deleted_id is not None

    # =========================================================================
    # STAFFING
    # =========================================================================

    async def calculate_staffing(self, data: Any) -> StaffingResult:
        """Headcount for a pick forecast, using the all-time average walk per pick."""
        request = _parse(StaffingRequest, data)
        standards = await self.resolved_standards()

        walk = await self._reference_walk()
        if walk.total_picks == 0:
            raise InsufficientPickDataError("staffing")

        result = calculate_staffing_requirements(
            request.forecasted_picks, request.period_days, walk.avg_walk_per_pick, standards
        )
        result.standards_used = standards.to_snapshot()
        return result

    async def save_staffing(self, data: Any) -> StaffingForecastResponse:
        """Save a forecast snapshot; one per forecast date, last write wins."""
        request = _parse(StaffingSaveRequest, data)
        standards = await self.resolved_standards()

        values = request.model_dump(exclude={"forecast_date"})
        values["standards_snapshot"] = standards.to_snapshot()

        forecast = await self.repository.upsert_staffing_forecast(request.forecast_date, values)
        logger.info(
            f"Staffing forecast saved for layout {self.layout_id} on {request.forecast_date}: "
            f"{request.required_headcount} workers"
        )
        return StaffingForecastResponse.model_validate(forecast)

    async def list_staffing(self, page: int = 1, limit: int = 20) -> StaffingForecastListResponse:
        page, limit = _page_bounds(page, limit)
        forecasts, total = await self.repository.list_staffing_forecasts((page - 1) * limit, limit)
        return StaffingForecastListResponse(
            data=[StaffingForecastResponse.model_validate(f) for f in forecasts],
            pagination=_pagination(page, limit, total),
        )

    # =========================================================================
    # ROI
    # =========================================================================

    async def calculate_roi(self, start_date: Any = None, end_date: Any = None) -> ROIResult:
        """Reslotting recommendations and their payback for the date range."""
        start, end = validate_date_range(start_date, end_date)
        standards = await self.resolved_standards()

        markers = await self.repository.get_route_markers()
        reference = reference_point(markers)
        total_days = await self.repository.count_pick_days(start, end) or 1

        walk = ReferenceWalk()
        recommendations, savings_feet = [], 0.0
        if reference is not None:
            walk = estimate_reference_walk(
                await self.repository.get_element_pick_totals(start, end), reference
            )
            items = await self.repository.get_item_pick_totals(start, end, settings.ROI_ITEM_LIMIT)
            recommendations, savings_feet = recommend_reslots(
                build_item_positions(items, reference, total_days),
                standards,
                settings.ROI_HOT_PERCENTILE,
                settings.ROI_FAR_PERCENTILE,
            )

        result = calculate_roi(
            walk.total_walk_feet / total_days, savings_feet, len(recommendations), standards
        )
        result.recommendations = recommendations
        return result

    async def save_roi(self, data: Any) -> ROISimulationResponse:
        request = _parse(ROISaveRequest, data)
        standards = await self.resolved_standards()

        current, projected = request.current_state, request.projected_state
        savings, implementation = request.savings, request.implementation

        simulation = await self.repository.add_roi_simulation({
            "simulation_name": request.simulation_name or f"Simulation {date.today().isoformat()}",
            "current_daily_walk_feet": current.daily_walk_feet if current else None,
            "current_daily_walk_minutes": current.daily_walk_minutes if current else None,
            "current_daily_labor_cost": current.daily_labor_cost if current else None,
            "projected_daily_walk_feet": projected.daily_walk_feet if projected else None,
            "projected_daily_walk_minutes": projected.daily_walk_minutes if projected else None,
            "projected_daily_labor_cost": projected.daily_labor_cost if projected else None,
            "daily_savings_feet": savings.daily_feet if savings else None,
            "daily_savings_minutes": savings.daily_minutes if savings else None,
            "daily_savings_dollars": savings.daily_dollars if savings else None,
            "weekly_savings_dollars": savings.weekly_dollars if savings else None,
            "monthly_savings_dollars": savings.monthly_dollars if savings else None,
            "annual_savings_dollars": savings.annual_dollars if savings else None,
            "items_to_reslot": implementation.items_to_reslot if implementation else None,
            "estimated_reslot_hours": implementation.estimated_hours if implementation else None,
            "implementation_cost": implementation.estimated_cost if implementation else None,
            "payback_days": implementation.payback_days if implementation else None,
            "recommendations_snapshot": [r.model_dump(by_alias=True) for r in request.recommendations],
            "standards_snapshot": standards.to_snapshot(),
        })
        logger.info(f"ROI simulation '{simulation.simulation_name}' saved for layout {self.layout_id}")
        return ROISimulationResponse.model_validate(simulation)

    async def list_roi(self, page: int = 1, limit: int = 20) -> ROISimulationListResponse:
        page, limit = _page_bounds(page, limit)
        simulations, total = await self.repository.list_roi_simulations((page - 1) * limit, limit)
        return ROISimulationListResponse(
            data=[ROISimulationResponse.model_validate(s) for s in simulations],
            pagination=_pagination(page, limit, total),
        )

    def export_filename(self) -> str:
        return f"roi-report-{str(self.layout_id)[:8]}.csv"

    async def export_roi_csv(
        self,
        start_date: Any = None,
        end_date: Any = None,
        layout_name: Optional[str] = None
    ) -> str:
        """ROI report as CSV: a summary block followed by the recommendations table."""
        start, end = validate_date_range(start_date, end_date)
        standards = await self.resolved_standards()
        walk = await self._reference_walk(start, end)
        roi = await self.calculate_roi(start, end)

        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")

        writer.writerow(["ROI Analysis Report"])
        writer.writerow(["Layout", layout_name or "Unknown"])
        writer.writerow(["Generated", datetime.now(timezone.utc).isoformat()])
        writer.writerow(["Date Range", f"{start or 'All'} to {end or 'All'}"])
        writer.writerow([])

        writer.writerow(["SUMMARY"])
        writer.writerow(["Total Picks", walk.total_picks])
        writer.writerow(["Total Walk Distance (ft)", round(walk.total_walk_feet)])
        writer.writerow(["Walk Speed (fpm)", standards.walk_speed_fpm])
        writer.writerow(["Hourly Rate", f"${standards.hourly_labor_rate}"])
        writer.writerow(["Benefits Multiplier", f"{standards.benefits_multiplier}x"])
        writer.writerow(["Items to Reslot", roi.implementation.items_to_reslot])
        writer.writerow(["Daily Savings ($)", roi.savings.daily_dollars])
        writer.writerow(["Annual Savings ($)", roi.savings.annual_dollars])
        writer.writerow(["Implementation Cost ($)", roi.implementation.estimated_cost])
        writer.writerow(["Payback (days)", roi.implementation.payback_days])
        writer.writerow([])

        writer.writerow(["RECOMMENDATIONS"])
        writer.writerow([
            "Item ID", "Current Element", "Current Distance (ft)",
            "Walk Savings (ft/day)", "Daily Savings ($)", "Priority",
        ])
        for rec in roi.recommendations:
            writer.writerow([
                rec.external_item_id or rec.item_id,
                rec.current_element or "",
                rec.current_distance,
                rec.walk_savings_feet,
                rec.daily_savings_dollars,
                rec.priority,
            ])

        return output.getvalue()
