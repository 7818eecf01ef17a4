from datetime import date, datetime

import pytest
from pydantic import ValidationError

from pickpath.core.numeric import round_to, safe_divide
from pickpath.core.validation import (
    InvalidInputError, parse_date, require_positive, validate_date_range
)
from pickpath.schemas.labor import StaffingRequest


def test_parse_date_variants():
    assert parse_date("2026-01-05") == date(2026, 1, 5)
    assert parse_date("2026-01-05T14:30:00Z") == date(2026, 1, 5)
    assert parse_date(datetime(2026, 1, 5, 23, 59)) == date(2026, 1, 5)
    assert parse_date("") is None


def test_open_ended_range():
    assert validate_date_range(None, "2026-01-31") == (None, date(2026, 1, 31))


@pytest.mark.parametrize("bound", ["2026-01-05garbage", "2026-01-05 junk", "2026-13-01"])
def test_range_rejects_malformed_bounds(bound):
    with pytest.raises(InvalidInputError) as exc_info:
        validate_date_range(bound, None)
    assert exc_info.value.field == "start_date"


def test_range_accepts_iso_datetime_bounds():
    start, end = validate_date_range("2026-01-05T08:00:00Z", "2026-01-06T17:30:00+05:30")
    assert (start, end) == (date(2026, 1, 5), date(2026, 1, 6))


def test_single_day_range_is_valid():
    assert validate_date_range("2026-01-05", "2026-01-05") == (date(2026, 1, 5), date(2026, 1, 5))


@pytest.mark.parametrize("value", [0, -1, float("nan"), "x"])
def test_require_positive(value):
    with pytest.raises(InvalidInputError):
        require_positive(value, "forecasted_picks")


def test_validation_error_names_field():
    with pytest.raises(ValidationError) as exc_info:
        StaffingRequest.model_validate({"forecastedPicks": -3})

    error = InvalidInputError.from_validation_error(exc_info.value)
    assert error.field == "forecastedPicks"
    assert isinstance(error, ValueError)


@pytest.mark.parametrize("value, places, expected", [
    (2.675, 2, 2.68),
    (0.125, 2, 0.13),
    (-1.5, 0, -2.0),
    (104.45, 1, 104.5),
])
def test_round_half_away_from_zero(value, places, expected):
    assert round_to(value, places) == expected


def test_safe_divide_by_zero():
    assert safe_divide(10, 0) == 0
    assert safe_divide(10, float("nan")) == 0
