"""
Input validation for the calculation pipeline.

Caller errors (bad dates, non-finite coordinates, non-positive volumes)
are rejected here, before any distance or labor math runs.
"""
import math
from datetime import date, datetime
from typing import Any, Optional, Tuple

from pydantic import ValidationError


class InvalidInputError(ValueError):
    """Raised when a caller supplies an invalid value for a named field."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "InvalidInputError":
        """Wrap the first pydantic error, naming the offending field."""
        errors = exc.errors()
        if not errors:
            return cls("input", str(exc))
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "input"
        return cls(field, first.get("msg", "invalid value"))


def _parse_iso_string(value: str) -> date:
    """Whole-string ISO date or datetime; a trailing Z means UTC."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value).date()


def parse_date(value: Any, field: str = "date", strict: bool = False) -> Optional[date]:
    """
    Parse a YYYY-MM-DD string, date or datetime into a date.

    Empty values return None (an open range bound). By default only the
    first 10 characters of a string are read, which suits DB timestamps;
    strict mode requires the whole string to be an ISO date or datetime.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            if strict:
                return _parse_iso_string(value.strip())
            return date.fromisoformat(value[:10])
        except ValueError:
            raise InvalidInputError(field, f"'{value}' is not a valid YYYY-MM-DD date")
    raise InvalidInputError(field, f"unsupported date value {value!r}")


def normalize_date_key(value: Any) -> str:
    """Calendar-day key (YYYY-MM-DD) used to group picks by day."""
    parsed = parse_date(value, field="pick_date")
    if parsed is None:
        raise InvalidInputError("pick_date", "pick row has no date")
    return parsed.isoformat()


def validate_date_range(
    start_date: Any,
    end_date: Any
) -> Tuple[Optional[date], Optional[date]]:
    """Parse both bounds and make sure start is not after end."""
    start = parse_date(start_date, field="start_date", strict=True)
    end = parse_date(end_date, field="end_date", strict=True)
    if start and end and start > end:
        raise InvalidInputError("start_date", "start_date must be on or before end_date")
    return start, end


def require_finite(value: Any, field: str) -> float:
    """Coerce to float and reject NaN/Infinity/non-numeric values."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(field, f"{value!r} is not a number")
    if not math.isfinite(number):
        raise InvalidInputError(field, "must be a finite number")
    return number


def require_positive(value: Any, field: str) -> float:
    """Finite and strictly greater than zero."""
    number = require_finite(value, field)
    if number <= 0:
        raise InvalidInputError(field, "must be a positive number")
    return number
