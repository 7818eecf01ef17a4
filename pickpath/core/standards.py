"""
Labor standards resolution.

Stored standards are partial: any field may be NULL, which means "use
the documented default", never "use zero". resolve_standards() is the
one place that turns a stored row into a fully populated, immutable
ResolvedStandards; every calculation takes the resolved record as a
parameter.
"""
from dataclasses import dataclass, asdict
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pickpath.core.numeric import to_float


DEFAULT_STANDARDS: Mapping[str, float] = MappingProxyType({
    # Legacy combined time standards (seconds)
    "pick_time_seconds": 15.0,
    "pack_time_seconds": 30.0,
    "putaway_time_seconds": 20.0,

    # Granular picking time elements (seconds)
    "pick_item_seconds": 12.0,
    "tote_time_seconds": 8.0,
    "scan_time_seconds": 5.0,

    # Walk and allowances
    "walk_speed_fpm": 264.0,  # 3 mph
    "fatigue_allowance_percent": 10.0,
    "delay_allowance_percent": 5.0,

    # Cost and shift settings
    "reslot_time_minutes": 12.0,
    "hourly_labor_rate": 18.00,
    "benefits_multiplier": 1.30,
    "shift_hours": 8.0,
    "target_efficiency_percent": 85.0,
})

STANDARD_FIELDS = tuple(DEFAULT_STANDARDS.keys())


@dataclass(frozen=True)
class ResolvedStandards:
    """Fully populated labor standards. No field is ever None."""
    pick_time_seconds: float
    pack_time_seconds: float
    putaway_time_seconds: float
    pick_item_seconds: float
    tote_time_seconds: float
    scan_time_seconds: float
    walk_speed_fpm: float
    fatigue_allowance_percent: float
    delay_allowance_percent: float
    reslot_time_minutes: float
    hourly_labor_rate: float
    benefits_multiplier: float
    shift_hours: float
    target_efficiency_percent: float

    @property
    def fully_loaded_rate(self) -> float:
        """Hourly rate including benefits."""
        return self.hourly_labor_rate * self.benefits_multiplier

    def to_snapshot(self) -> Dict[str, float]:
        """Plain dict for JSON snapshots."""
        return asdict(self)


def _stored_value(stored: Any, name: str) -> Any:
    if isinstance(stored, Mapping):
        return stored.get(name)
    return getattr(stored, name, None)


def resolve_standards(stored: Optional[Any] = None) -> ResolvedStandards:
    """
    Merge stored standards with DEFAULT_STANDARDS.

    Accepts None, a mapping, or an ORM row. A field keeps its stored value
    when it is present and numeric (explicit 0 included); otherwise the
    default is used.
    """
    values = {}
    for name in STANDARD_FIELDS:
        stored_value = to_float(_stored_value(stored, name)) if stored is not None else None
        values[name] = stored_value if stored_value is not None else DEFAULT_STANDARDS[name]
    return ResolvedStandards(**values)


def default_standards() -> ResolvedStandards:
    return resolve_standards(None)


