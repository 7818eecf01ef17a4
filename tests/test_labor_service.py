"""
LaborService tests against an in-memory SQLite database.

The default layout has start (0,0), stop (100,0) and one parking spot at
(50,0). Element A-01 sits 10 units from the parking spot.
"""
from datetime import date, timedelta

import pytest

from pickpath.core.validation import InvalidInputError
from pickpath.schemas.labor import BreakdownMethod
from pickpath.services import InsufficientPickDataError, LaborService
from pickpath.services.walk_distance import MISSING_MARKERS_MESSAGE

DAY = date(2026, 1, 5)


@pytest.fixture
def service(session, layout_id):
    return LaborService(session, layout_id)


@pytest.fixture
async def picked_layout(seeder):
    """Standard route, one element with 3 element-level and 2 item-level picks."""
    await seeder.standard_route()
    element = await seeder.element(50, 10, label="A-01")
    await seeder.picks(element, DAY, 3)
    await seeder.item_picks(element, "SKU-1", DAY, 2)
    return element


# ==================== Walk Distance ====================

async def test_walk_distance(service, picked_layout):
    result = await service.get_walk_distance()

    assert result.total_distance_feet == 10
    assert result.visit_count == 1
    assert result.total_picks == 5
    assert result.daily_breakdown[0].date == "2026-01-05"


async def test_walk_distance_date_filter(service, picked_layout):
    result = await service.get_walk_distance("2026-02-01", "2026-02-28")
    assert result.total_distance_feet == 0
    assert result.message is not None


async def test_walk_distance_missing_markers(service, seeder):
    element = await seeder.element(10, 10)
    await seeder.picks(element, DAY)

    result = await service.get_walk_distance()

    assert result.message == MISSING_MARKERS_MESSAGE
    assert result.missing_markers.start_point is True


async def test_walk_distance_rejects_reversed_range(service):
    with pytest.raises(InvalidInputError) as exc_info:
        await service.get_walk_distance("2026-02-01", "2026-01-01")
    assert exc_info.value.field == "start_date"


async def test_walk_distance_rejects_bad_date(service):
    with pytest.raises(InvalidInputError):
        await service.get_walk_distance("01/02/2026")


async def test_walk_distance_rejects_trailing_text_in_date(service):
    with pytest.raises(InvalidInputError):
        await service.get_walk_distance(None, "2026-01-31garbage")


# ==================== Standards ====================

async def test_default_standards_are_not_persisted(service):
    standards = await service.get_standards()
    assert standards.is_default is True
    assert standards.pick_time_seconds == 15.0
    assert await service.repository.get_standards() is None


async def test_partial_updates_keep_other_fields(service):
    await service.update_standards({"pickTimeSeconds": 20})
    updated = await service.update_standards({"walk_speed_fpm": 300})

    assert updated.is_default is False
    assert updated.pick_time_seconds == 20
    assert updated.walk_speed_fpm == 300
    assert updated.pack_time_seconds is None

    resolved = await service.resolved_standards()
    assert resolved.pick_time_seconds == 20
    assert resolved.pack_time_seconds == 30


async def test_update_rejects_negative_values(service):
    with pytest.raises(InvalidInputError):
        await service.update_standards({"pick_time_seconds": -1})


async def test_explicit_zero_standard(service):
    await service.update_standards({"delay_allowance_percent": 0})
    resolved = await service.resolved_standards()
    assert resolved.delay_allowance_percent == 0


# ==================== Efficiency ====================

async def test_efficiency_without_recorded_hours(service, picked_layout):
    result = await service.get_efficiency()

    assert result.total_picks == 5
    assert result.total_walk_distance_feet == pytest.approx(8.33)
    assert result.standard_hours == 0.1
    assert result.efficiency_percent is None
    assert result.coverage.pick_days == 1
    assert result.coverage.perf_days == 0


async def test_efficiency_with_full_coverage(service, picked_layout):
    await service.record_performance({"performanceDate": "2026-01-05", "actualPicks": 5, "actualHours": 0.1})

    result = await service.get_efficiency()

    assert result.coverage.coverage_percent == 100
    assert result.efficiency_percent == pytest.approx(104.4, abs=0.1)


async def test_efficiency_withheld_below_coverage(service, seeder, picked_layout):
    for offset in range(1, 5):
        await seeder.picks(picked_layout, DAY + timedelta(days=offset))
    await service.record_performance({"performance_date": DAY, "actual_picks": 5, "actual_hours": 0.1})

    result = await service.get_efficiency()

    assert result.coverage.pick_days == 5
    assert result.coverage.coverage_percent == 20
    assert result.efficiency_percent is None


async def test_hours_on_days_without_picks_do_not_count(service, seeder, picked_layout):
    for offset in range(1, 5):
        await seeder.picks(picked_layout, DAY + timedelta(days=offset))
    for offset in range(10, 14):
        await service.record_performance({
            "performance_date": DAY + timedelta(days=offset), "actual_picks": 5, "actual_hours": 0.1,
        })

    result = await service.get_efficiency()

    assert result.coverage.pick_days == 5
    assert result.coverage.perf_days == 0
    assert result.coverage.coverage_percent == 0
    assert result.efficiency_percent is None
    assert result.actual_hours is None


async def test_actual_hours_only_from_covered_pick_days(service, seeder, picked_layout):
    for offset in range(1, 5):
        await seeder.picks(picked_layout, DAY + timedelta(days=offset))
    for offset in range(4):
        await service.record_performance({
            "performance_date": DAY + timedelta(days=offset), "actual_picks": 5, "actual_hours": 0.1,
        })
    await service.record_performance({
        "performance_date": DAY + timedelta(days=20), "actual_picks": 5, "actual_hours": 5.0,
    })

    result = await service.get_efficiency()

    assert result.coverage.perf_days == 4
    assert result.coverage.coverage_percent == 80
    assert result.actual_hours == pytest.approx(0.4)
    assert result.efficiency_percent is not None


async def test_time_breakdown(service, picked_layout):
    granular = await service.get_time_breakdown()
    legacy = await service.get_time_breakdown(method=BreakdownMethod.LEGACY)

    assert granular.has_data is True
    assert granular.total_picks == 5
    assert "tote" in granular.elements
    assert "handling" in legacy.elements


async def test_time_breakdown_without_picks(service, seeder):
    await seeder.standard_route()
    result = await service.get_time_breakdown()
    assert result.has_data is False
    assert result.elements is None


async def test_walk_burden(service, picked_layout):
    result = await service.get_walk_burden()

    assert result.has_data is True
    assert result.current.distance_feet == pytest.approx(8.33)
    assert result.optimal is not None


async def test_walk_burden_without_picks(service):
    result = await service.get_walk_burden()
    assert result.has_data is False


# ==================== Performance ====================

async def test_record_performance_requires_picks(service, seeder):
    await seeder.standard_route()
    with pytest.raises(InsufficientPickDataError):
        await service.record_performance({"performance_date": DAY, "actual_picks": 5, "actual_hours": 1})


async def test_record_performance_rejects_zero_hours(service, picked_layout):
    with pytest.raises(InvalidInputError):
        await service.record_performance({"performance_date": DAY, "actual_picks": 5, "actual_hours": 0})


async def test_record_performance_replaces_same_day(service, picked_layout):
    await service.record_performance({"performance_date": DAY, "actual_picks": 5, "actual_hours": 0.1})
    second = await service.record_performance({"performance_date": DAY, "actual_picks": 10, "actual_hours": 0.5})

    listing = await service.list_performance()

    assert listing.pagination.total == 1
    assert listing.data[0].id == second.id
    assert listing.data[0].actual_picks == 10
    assert second.actual_walk_distance_feet == pytest.approx(16.67)


async def test_delete_performance(service, picked_layout):
    await service.record_performance({"performance_date": DAY, "actual_picks": 5, "actual_hours": 0.1})

    assert await service.delete_performance("2026-01-05") is True
    assert await service.delete_performance("2026-01-05") is False
    assert (await service.list_performance()).pagination.total == 0


async def test_list_performance_pagination(service, picked_layout):
    for offset in range(3):
        await service.record_performance({
            "performance_date": DAY + timedelta(days=offset), "actual_picks": 5, "actual_hours": 0.1,
        })

    page = await service.list_performance(page=2, limit=2)

    assert page.pagination.total == 3
    assert page.pagination.pages == 2
    assert [r.performance_date for r in page.data] == [DAY]


async def test_trends_follow_recorded_performance(service, picked_layout):
    assert (await service.get_trends()).has_data is False

    await service.record_performance({"performance_date": DAY, "actual_picks": 5, "actual_hours": 0.1})
    trends = await service.get_trends()

    assert trends.has_data is True
    assert trends.data_points == 1
    assert trends.chart_data[0].date == DAY


# ==================== Staffing ====================

async def test_calculate_staffing(service, picked_layout):
    result = await service.calculate_staffing({"forecastedPicks": 1000, "periodDays": 1})

    assert result.required_headcount == 4
    assert result.standards_used["shift_hours"] == 8.0


async def test_calculate_staffing_rejects_zero_forecast(service, picked_layout):
    with pytest.raises(InvalidInputError):
        await service.calculate_staffing({"forecasted_picks": 0})


async def test_calculate_staffing_requires_picks(service, seeder):
    await seeder.standard_route()
    with pytest.raises(InsufficientPickDataError):
        await service.calculate_staffing({"forecasted_picks": 100})


async def test_save_staffing_one_per_date(service):
    base = {"forecast_date": DAY, "forecasted_picks": 1000, "required_hours": 20.76}
    await service.save_staffing({**base, "required_headcount": 4})
    saved = await service.save_staffing({**base, "required_headcount": 5})

    listing = await service.list_staffing()

    assert listing.pagination.total == 1
    assert listing.data[0].required_headcount == 5
    assert saved.standards_snapshot["walk_speed_fpm"] == 264.0


# ==================== ROI ====================

async def test_calculate_roi(service, picked_layout):
    result = await service.calculate_roi()

    assert len(result.recommendations) == 1
    rec = result.recommendations[0]
    assert rec.external_item_id == "SKU-1"
    assert rec.current_element == "A-01"
    assert rec.walk_savings_feet == pytest.approx(1.67)
    assert result.current_state.daily_walk_feet == pytest.approx(8.33)
    assert result.implementation.items_to_reslot == 1
    assert result.implementation.payback_days > 0


async def test_calculate_roi_without_markers(service, seeder):
    element = await seeder.element(10, 10)
    await seeder.item_picks(element, "SKU-1", DAY, 4)

    result = await service.calculate_roi()

    assert result.recommendations == []
    assert result.implementation.payback_days == 0


async def test_save_and_list_roi(service, picked_layout):
    roi = await service.calculate_roi()

    saved = await service.save_roi(roi.model_dump())
    named = await service.save_roi({"simulationName": "Move fast movers"})
    listing = await service.list_roi()

    assert saved.simulation_name.startswith("Simulation ")
    assert saved.items_to_reslot == 1
    assert saved.recommendations_snapshot[0]["externalItemId"] == "SKU-1"
    assert named.payback_days is None
    assert listing.pagination.total == 2


async def test_export_roi_csv(service, picked_layout):
    report = await service.export_roi_csv(layout_name="Main DC")
    lines = report.splitlines()

    assert lines[0] == "ROI Analysis Report"
    assert lines[1] == "Layout,Main DC"
    assert "Total Picks,5" in lines
    assert "RECOMMENDATIONS" in lines
    assert lines[-1].startswith("SKU-1,A-01,")
    assert service.export_filename().endswith(".csv")
