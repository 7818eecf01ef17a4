from datetime import date, timedelta

import pytest

from pickpath.schemas.labor import TrendDirection
from pickpath.services.labor_calculations import calculate_trend_metrics


def history(efficiencies, start=date(2026, 1, 1)):
    """Records oldest first: efficiencies[0] is the earliest day."""
    return [
        {"date": start + timedelta(days=i), "efficiency_percent": eff, "picks": 100 + i}
        for i, eff in enumerate(efficiencies)
    ]


def test_empty_history():
    result = calculate_trend_metrics([])
    assert result.has_data is False
    assert result.chart_data == []


def test_one_week_has_no_week_over_week():
    result = calculate_trend_metrics(history([90] * 7))

    assert result.has_data is True
    assert result.rolling_avg_7_day == 90.0
    assert result.week_over_week_change is None
    assert result.trend == TrendDirection.STABLE
    assert result.data_points == 7


def test_eighth_record_enables_week_over_week():
    result = calculate_trend_metrics(history([98] + [100] * 7))
    assert result.week_over_week_change == 2.0
    assert result.trend == TrendDirection.STABLE


def test_improving():
    result = calculate_trend_metrics(history([80] * 7 + [100] * 7))
    assert result.rolling_avg_7_day == 100.0
    assert result.week_over_week_change == 25.0
    assert result.trend == TrendDirection.IMPROVING


def test_declining():
    result = calculate_trend_metrics(history([100] * 7 + [80] * 7))
    assert result.week_over_week_change == -20.0
    assert result.trend == TrendDirection.DECLINING


def test_zero_previous_week_has_no_change():
    result = calculate_trend_metrics(history([0] * 7 + [90] * 7))
    assert result.week_over_week_change is None
    assert result.trend == TrendDirection.STABLE


def test_order_of_input_does_not_matter():
    records = history([80] * 7 + [100] * 7)
    assert calculate_trend_metrics(list(reversed(records))) == calculate_trend_metrics(records)


def test_best_and_worst_day():
    result = calculate_trend_metrics(history([90, 120.26, 75, None, 75]))

    assert result.best_day.efficiency == 120.3
    assert result.best_day.date == date(2026, 1, 2)
    # Newest record wins a tie
    assert result.worst_day.date == date(2026, 1, 5)
    assert result.worst_day.efficiency == 75.0


def test_missing_efficiency_counts_as_zero_in_average():
    result = calculate_trend_metrics(history([None, 100]))
    assert result.rolling_avg_7_day == 50.0


def test_chart_is_oldest_first_and_capped():
    result = calculate_trend_metrics(history([80 + i % 5 for i in range(40)]))

    assert len(result.chart_data) == 30
    assert result.data_points == 40
    assert result.chart_data[0].date < result.chart_data[-1].date
    assert result.chart_data[-1].date == date(2026, 1, 1) + timedelta(days=39)


def test_accepts_performance_rows():
    class Row:
        def __init__(self, day, eff):
            self.performance_date = day
            self.efficiency_percent = eff
            self.actual_picks = 10

    result = calculate_trend_metrics([Row(date(2026, 1, 1), 90), Row(date(2026, 1, 2), 110)])
    assert result.rolling_avg_7_day == pytest.approx(100.0)
    assert result.chart_data[0].picks == 10
