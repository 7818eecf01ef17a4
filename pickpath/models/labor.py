"""
Labor Management Models.

- LaborStandard: engineered time standards and cost configuration per layout
- LaborPerformance: daily actual hours recorded against standards
- StaffingForecast: saved headcount calculations
- ROISimulation: saved reslotting ROI calculations

Every LaborStandard field is nullable: NULL means "use the documented
default", which is resolved in pickpath.core.standards.
"""
import uuid
from datetime import datetime, timezone, date
from decimal import Decimal
from typing import Optional, List, Dict, Any

from sqlalchemy import (
    String, DateTime, Integer, Numeric, Date, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import Mapped, mapped_column

from pickpath.database import Base
from pickpath.db_types import UUIDType, JSONType


class LaborStandard(Base):
    """
    Engineered labor standards for one layout.

    Time standards are in seconds unless the column name says otherwise.
    """
    __tablename__ = "labor_standards"
    __table_args__ = (
        UniqueConstraint('layout_id', name='unique_standards_per_layout'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    layout_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        nullable=False,
        index=True
    )

    # Legacy combined time standards
    pick_time_seconds: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(8, 2),
        comment="Legacy combined pick time"
    )
    pack_time_seconds: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2))
    putaway_time_seconds: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2))

    # Granular picking time elements
    pick_item_seconds: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(8, 2),
        comment="Reach, grab and retrieve item from slot"
    )
    tote_time_seconds: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(8, 2),
        comment="Place item in cart/tote"
    )
    scan_time_seconds: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(8, 2),
        comment="Scan barcode and confirm on RF device"
    )

    # Walk and allowances
    walk_speed_fpm: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(8, 2),
        comment="Walking speed in feet per minute"
    )
    fatigue_allowance_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    delay_allowance_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))

    # Cost and shift settings
    reslot_time_minutes: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(6, 2),
        comment="Minutes to relocate one item"
    )
    hourly_labor_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    benefits_multiplier: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    shift_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(4, 2))
    target_efficiency_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<LaborStandard layout={self.layout_id}>"


class LaborPerformance(Base):
    """Actual labor hours for one layout on one date."""
    __tablename__ = "labor_performance"
    __table_args__ = (
        UniqueConstraint('layout_id', 'performance_date', name='unique_performance_per_day'),
        CheckConstraint('actual_picks >= 0', name='ck_performance_picks'),
        CheckConstraint('actual_hours > 0', name='ck_performance_hours'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    layout_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False, index=True)
    performance_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Actuals (user input)
    actual_picks: Mapped[int] = mapped_column(Integer, nullable=False)
    actual_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    actual_walk_distance_feet: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))

    # Calculated
    standard_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2))
    efficiency_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    pick_time_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2))
    walk_time_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2))
    pack_time_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<LaborPerformance {self.performance_date}: {self.efficiency_percent}%>"


class StaffingForecast(Base):
    """Saved staffing calculation with the standards in effect at the time."""
    __tablename__ = "staffing_forecasts"
    __table_args__ = (
        UniqueConstraint('layout_id', 'forecast_date', name='unique_forecast_per_day'),
        CheckConstraint('forecasted_picks > 0', name='ck_forecast_picks'),
        CheckConstraint('period_days > 0', name='ck_forecast_period'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    layout_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False, index=True)
    forecast_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Input
    forecasted_picks: Mapped[int] = mapped_column(Integer, nullable=False)
    period_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Output
    required_headcount: Mapped[int] = mapped_column(Integer, nullable=False)
    required_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    estimated_labor_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    picks_per_person: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 1))
    utilization_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))

    standards_snapshot: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )


class ROISimulation(Base):
    """Saved reslotting ROI snapshot."""
    __tablename__ = "roi_simulations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    layout_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False, index=True)
    simulation_name: Mapped[Optional[str]] = mapped_column(String(100))
    simulation_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        default=lambda: datetime.now(timezone.utc).date()
    )

    # Current state (before reslotting)
    current_daily_walk_feet: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    current_daily_walk_minutes: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2))
    current_daily_labor_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))

    # Projected state (after reslotting)
    projected_daily_walk_feet: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    projected_daily_walk_minutes: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2))
    projected_daily_labor_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))

    # Savings
    daily_savings_feet: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    daily_savings_minutes: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2))
    daily_savings_dollars: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    weekly_savings_dollars: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    monthly_savings_dollars: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    annual_savings_dollars: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))

    # Implementation
    items_to_reslot: Mapped[Optional[int]] = mapped_column(Integer)
    estimated_reslot_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2))
    implementation_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    payback_days: Mapped[Optional[int]] = mapped_column(Integer)

    recommendations_snapshot: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSONType)
    standards_snapshot: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
