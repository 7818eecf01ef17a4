"""Tests for the time-motion formulas."""
import pytest

from pickpath.core.standards import default_standards, resolve_standards
from pickpath.core.validation import InvalidInputError
from pickpath.schemas.labor import BreakdownMethod
from pickpath.services.labor_calculations import (
    calculate_allowance_multiplier,
    calculate_coverage,
    calculate_efficiency_metrics,
    calculate_payback_days,
    calculate_performance_metrics,
    calculate_roi,
    calculate_staffing_requirements,
    calculate_standard_time_per_pick,
    calculate_time_element_breakdown,
    calculate_time_elements,
    calculate_walk_burden_metrics,
)


@pytest.fixture
def standards():
    return default_standards()


# ==================== Per-pick Time ====================

def test_allowance_multiplier(standards):
    assert calculate_allowance_multiplier(standards) == pytest.approx(1.15)


def test_allowance_multiplier_without_allowances():
    standards = resolve_standards({"fatigue_allowance_percent": 0, "delay_allowance_percent": 0})
    assert calculate_allowance_multiplier(standards) == 1


def test_standard_time_per_pick_legacy(standards):
    assert calculate_standard_time_per_pick(0, standards) == pytest.approx(74.75)
    # 264 ft at 264 fpm adds one minute
    assert calculate_standard_time_per_pick(264, standards) == pytest.approx(143.75)


def test_standard_time_per_pick_granular(standards):
    seconds = calculate_standard_time_per_pick(0, standards, BreakdownMethod.GRANULAR)
    assert seconds == pytest.approx(25 * 1.15)


# ==================== Time Elements ====================

def test_single_pick_total_hours(standards):
    elements = calculate_time_elements(1, 0, standards)
    assert elements.total_hours == pytest.approx(0.007986, abs=1e-6)
    assert elements.allowance_hours == pytest.approx(elements.base_hours * 0.15)


def test_granular_breakdown_percents(standards):
    result = calculate_time_element_breakdown(1, 0, standards)

    assert list(result.elements) == ["walk", "pick", "tote", "scan", "allowance"]
    assert result.elements["walk"].hours == 0
    assert result.elements["pick"].hours == 0.003
    assert result.elements["pick"].percent == 41.7
    assert result.elements["tote"].percent == 27.8
    assert result.elements["scan"].percent == 17.4
    assert result.elements["allowance"].percent == 13.0
    assert result.elements["allowance"].label == "PFD Allowance"
    assert result.standards.pfd_allowance_percent == 15.0
    assert result.standards.combined_handling_seconds is None


def test_legacy_breakdown_uses_combined_handling(standards):
    result = calculate_time_element_breakdown(100, 0, standards, BreakdownMethod.LEGACY)

    assert list(result.elements) == ["walk", "handling", "allowance"]
    assert result.elements["handling"].label == "Pick/Pack/Putaway"
    assert result.standards.combined_handling_seconds == 65
    assert result.total_estimated_hours == pytest.approx(100 * 65 * 1.15 / 3600, abs=0.005)


def test_breakdown_percents_sum_to_about_100(standards):
    result = calculate_time_element_breakdown(250, 5000, standards)
    total = sum(e.percent for e in result.elements.values())
    assert total == pytest.approx(100, abs=0.3)


# ==================== Efficiency ====================

def test_efficiency_without_actual_hours(standards):
    result = calculate_efficiency_metrics(100, 2640, None, standards)

    assert result.standard_hours == 2.27
    assert result.avg_walk_distance_per_pick == 26.4
    assert result.efficiency_percent is None
    assert result.actual_hours is None
    assert result.breakdown.pick_time_hours == 0.42
    assert result.breakdown.walk_time_hours == 0.17
    assert result.breakdown.pack_time_hours == 0.83
    assert result.target_efficiency_percent == 85.0


def test_efficiency_with_actual_hours(standards):
    result = calculate_efficiency_metrics(100, 2640, 2.0, standards)
    assert result.efficiency_percent == 113.4
    assert result.actual_hours == 2.0


def test_efficiency_with_no_picks(standards):
    result = calculate_efficiency_metrics(0, 0, None, standards)
    assert result.standard_hours == 0
    assert result.avg_walk_distance_per_pick == 0


@pytest.mark.parametrize("pick_days, perf_days, sufficient, coverage", [
    (10, 8, True, 80),
    (10, 7, False, 70),
    (10, 10, True, 100),
    (0, 0, False, 0),
    (5, 0, False, 0),
])
def test_coverage_gate(pick_days, perf_days, sufficient, coverage):
    info, ok = calculate_coverage(pick_days, perf_days)
    assert ok is sufficient
    assert info.coverage_percent == coverage
    assert info.pick_days == pick_days


def test_efficiency_withheld_whenever_coverage_is_low(standards):
    for pick_days in range(1, 21):
        for perf_days in range(0, pick_days + 1):
            _, ok = calculate_coverage(pick_days, perf_days)
            result = calculate_efficiency_metrics(100, 500, 3.0 if ok else None, standards)
            if perf_days * 100 < 80 * pick_days:
                assert result.efficiency_percent is None
            else:
                assert result.efficiency_percent is not None


def test_coverage_threshold_is_configurable():
    _, ok = calculate_coverage(10, 7, threshold_percent=50)
    assert ok is True


def test_performance_metrics(standards):
    metrics = calculate_performance_metrics(100, 2.0, 2640, standards)
    assert metrics.standard_hours == 2.27
    assert metrics.efficiency_percent == 113.4
    assert metrics.walk_time_hours == 0.17


def test_performance_metrics_zero_hours(standards):
    assert calculate_performance_metrics(100, 0, 0, standards).efficiency_percent == 0


# ==================== Staffing ====================

def test_staffing_example(standards):
    result = calculate_staffing_requirements(1000, 1, 0, standards)

    assert result.required_headcount == 4
    assert result.total_labor_hours == 20.76
    assert result.picks_per_person == 250.0
    assert result.utilization_percent == 76.3


def test_staffing_minimum_one_person(standards):
    result = calculate_staffing_requirements(1, 1, 0, standards)
    assert result.required_headcount == 1


@pytest.mark.parametrize("picks", [1, 100, 327, 1000, 5000, 12345])
@pytest.mark.parametrize("period_days", [1, 3])
@pytest.mark.parametrize("avg_walk", [0, 40.5])
def test_staffing_capacity_covers_demand(standards, picks, period_days, avg_walk):
    result = calculate_staffing_requirements(picks, period_days, avg_walk, standards)

    demand = picks * calculate_standard_time_per_pick(avg_walk, standards) / 3600
    available = standards.shift_hours * standards.target_efficiency_percent / 100 * period_days

    assert result.required_headcount * available >= demand - 1e-9
    if result.required_headcount > 1:
        assert (result.required_headcount - 1) * available < demand


@pytest.mark.parametrize("picks, days", [(0, 1), (-5, 1), (10, 0)])
def test_staffing_rejects_invalid_forecast(standards, picks, days):
    with pytest.raises(InvalidInputError):
        calculate_staffing_requirements(picks, days, 0, standards)


# ==================== ROI ====================

def test_payback_zero_without_savings():
    assert calculate_payback_days(100, 0) == 0
    assert calculate_payback_days(100, -1) == 0


def test_payback_rounds_up():
    assert calculate_payback_days(100, 30) == 4
    assert calculate_payback_days(90, 30) == 3


def test_payback_grows_with_cost():
    paybacks = [calculate_payback_days(cost, 7.5) for cost in range(0, 500, 25)]
    assert paybacks == sorted(paybacks)


def test_roi_without_savings(standards):
    result = calculate_roi(1000, 0, 5, standards)

    assert result.implementation.payback_days == 0
    assert result.implementation.estimated_hours == 1.0
    assert result.implementation.estimated_cost == 23.4
    assert result.savings.daily_dollars == 0
    assert result.current_state.daily_walk_minutes == 3.79
    assert result.projected_state.daily_walk_feet == 1000


def test_roi_savings_horizons(standards):
    result = calculate_roi(1000, 264, 5, standards)

    assert result.savings.daily_minutes == 1.0
    assert result.savings.daily_dollars == 0.39
    assert result.savings.weekly_dollars == 1.95
    assert result.savings.annual_dollars == 97.5
    assert result.projected_state.daily_walk_feet == 736
    assert result.implementation.payback_days >= 60


def test_roi_payback_monotonic_in_items(standards):
    paybacks = [calculate_roi(1000, 264, n, standards).implementation.payback_days for n in range(1, 21)]
    assert paybacks == sorted(paybacks)


# ==================== Walk Burden ====================

def test_walk_burden_current_only(standards):
    result = calculate_walk_burden_metrics(5280, 100, None, standards)

    assert result.current.distance_miles == 1.0
    assert result.current.time_minutes == 20.0
    assert result.current.percent_of_shift == 4.2
    assert result.current.avg_dist_per_pick == 52.8
    assert result.current.daily_cost == 7.8
    assert result.optimal is None
    assert result.potential_savings is None
    assert result.target_walk_percent == 35.0


def test_walk_burden_with_savings(standards):
    result = calculate_walk_burden_metrics(5280, 100, 2640, standards)

    assert result.optimal.distance_miles == 0.5
    assert result.optimal.avg_dist_per_pick == 26.4
    assert result.potential_savings.distance_feet == 2640
    assert result.potential_savings.time_minutes == 10.0
    assert result.potential_savings.daily_dollars == 3.9
    assert result.potential_savings.annual_dollars == 975.0


def test_walk_burden_already_optimal(standards):
    result = calculate_walk_burden_metrics(2640, 100, 2640, standards)
    assert result.optimal is not None
    assert result.potential_savings is None
