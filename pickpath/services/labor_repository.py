"""
Labor Repository

Async query adapter over the layout and labor tables. Every read and
write the labor engine performs goes through this class; calculations
never touch the session directly.

Pick history lives in two tables (element-level and item-level); reads
combine them with UNION ALL.
"""
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func, union_all, desc
from sqlalchemy.ext.asyncio import AsyncSession

from pickpath.models.layout import (
    RouteMarker, WarehouseElement, PickTransaction, Item, ItemPickTransaction
)
from pickpath.models.labor import (
    LaborStandard, LaborPerformance, StaffingForecast, ROISimulation
)


def _to_decimal(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(repr(value))
    return value


class LaborRepository:
    """Reads and writes scoped to a single layout."""

    def __init__(self, db: AsyncSession, layout_id: uuid.UUID):
        self.db = db
        self.layout_id = layout_id

    # =========================================================================
    # LAYOUT GEOMETRY
    # =========================================================================

    async def get_route_markers(self) -> List[RouteMarker]:
        """Markers grouped by type; parking spots by sequence order, unsequenced last."""
        result = await self.db.execute(
            select(RouteMarker)
            .where(RouteMarker.layout_id == self.layout_id)
            .order_by(
                RouteMarker.marker_type,
                RouteMarker.sequence_order.is_(None),
                RouteMarker.sequence_order,
                RouteMarker.created_at,
            )
        )
        return list(result.scalars().all())

    # =========================================================================
    # PICK HISTORY
    # =========================================================================

    def _all_picks(self, start_date: Optional[date], end_date: Optional[date]):
        """UNION ALL of element-level and item-level picks in the date range."""
        parts = []
        for model in (PickTransaction, ItemPickTransaction):
            query = select(
                model.element_id.label("element_id"),
                model.pick_date.label("pick_date"),
                model.pick_count.label("pick_count"),
            ).where(model.layout_id == self.layout_id)
            if start_date:
                query = query.where(model.pick_date >= start_date)
            if end_date:
                query = query.where(model.pick_date <= end_date)
            parts.append(query)
        return union_all(*parts).subquery("all_picks")

    async def get_pick_rows(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """Individual pick rows joined to their element position."""
        all_picks = self._all_picks(start_date, end_date)
        result = await self.db.execute(
            select(
                all_picks.c.element_id,
                all_picks.c.pick_date,
                all_picks.c.pick_count,
                WarehouseElement.x_coordinate,
                WarehouseElement.y_coordinate,
                WarehouseElement.label.label("element_label"),
            )
            .join(WarehouseElement, WarehouseElement.id == all_picks.c.element_id)
            .where(WarehouseElement.layout_id == self.layout_id)
            .order_by(all_picks.c.pick_date)
        )
        return [dict(row) for row in result.mappings().all()]

    async def get_element_pick_totals(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """Total picks per element with the element's geometry."""
        all_picks = self._all_picks(start_date, end_date)
        totals = (
            select(
                all_picks.c.element_id,
                func.sum(all_picks.c.pick_count).label("total_picks"),
            )
            .group_by(all_picks.c.element_id)
            .subquery("element_totals")
        )
        result = await self.db.execute(
            select(
                totals.c.element_id,
                totals.c.total_picks,
                WarehouseElement.x_coordinate,
                WarehouseElement.y_coordinate,
                WarehouseElement.width,
                WarehouseElement.height,
            )
            .join(WarehouseElement, WarehouseElement.id == totals.c.element_id)
        )
        return [dict(row) for row in result.mappings().all()]

    async def count_pick_days(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> int:
        """Distinct calendar days with any pick activity."""
        all_picks = self._all_picks(start_date, end_date)
        result = await self.db.execute(
            select(func.count(func.distinct(all_picks.c.pick_date)))
        )
        return result.scalar() or 0

    async def get_item_pick_totals(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 50
    ) -> List[Dict[str, Any]]:
        """Busiest items (by total picks) with the element they are slotted in."""
        total_picks = func.sum(ItemPickTransaction.pick_count).label("total_picks")
        query = (
            select(
                Item.id.label("item_id"),
                Item.item_code.label("external_item_id"),
                WarehouseElement.id.label("element_id"),
                WarehouseElement.label.label("element_label"),
                WarehouseElement.x_coordinate,
                WarehouseElement.y_coordinate,
                WarehouseElement.width,
                WarehouseElement.height,
                total_picks,
            )
            .select_from(ItemPickTransaction)
            .join(Item, ItemPickTransaction.item_id == Item.id)
            .join(WarehouseElement, ItemPickTransaction.element_id == WarehouseElement.id)
            .where(ItemPickTransaction.layout_id == self.layout_id)
        )
        if start_date:
            query = query.where(ItemPickTransaction.pick_date >= start_date)
        if end_date:
            query = query.where(ItemPickTransaction.pick_date <= end_date)

        query = (
            query.group_by(
                Item.id, Item.item_code, WarehouseElement.id, WarehouseElement.label,
                WarehouseElement.x_coordinate, WarehouseElement.y_coordinate,
                WarehouseElement.width, WarehouseElement.height,
            )
            .order_by(desc("total_picks"), Item.item_code)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return [dict(row) for row in result.mappings().all()]

    # =========================================================================
    # LABOR STANDARDS
    # =========================================================================

    async def get_standards(self) -> Optional[LaborStandard]:
        result = await self.db.execute(
            select(LaborStandard).where(LaborStandard.layout_id == self.layout_id)
        )
        return result.scalar_one_or_none()

    async def upsert_standards(self, values: Dict[str, Any]) -> LaborStandard:
        """
        Create or update the layout's standards.

        Only keys present in values are written; other stored fields keep
        their current value.
        """
        standard = await self.get_standards()
        if standard is None:
            standard = LaborStandard(layout_id=self.layout_id)
            self.db.add(standard)

        for field, value in values.items():
            setattr(standard, field, _to_decimal(value))
        standard.updated_at = datetime.now(timezone.utc)

        await self.db.flush()
        await self.db.refresh(standard)
        return standard

    # =========================================================================
    # PERFORMANCE
    # =========================================================================

    async def get_performance_summary(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Tuple[int, Optional[float]]:
        """
        (covered pick days, summed actual hours) in the date range.

        Only records on days with pick activity count; hours recorded on
        other days are left out of both figures.
        """
        all_picks = self._all_picks(start_date, end_date)
        pick_dates = select(all_picks.c.pick_date).distinct().subquery("pick_dates")

        query = (
            select(
                func.count(LaborPerformance.id),
                func.sum(LaborPerformance.actual_hours),
            )
            .select_from(LaborPerformance)
            .join(pick_dates, pick_dates.c.pick_date == LaborPerformance.performance_date)
            .where(LaborPerformance.layout_id == self.layout_id)
        )

        count, total_hours = (await self.db.execute(query)).one()
        return count or 0, float(total_hours) if total_hours is not None else None

    async def get_performance_history(self, limit: int = 60) -> List[LaborPerformance]:
        """Most recent performance records, newest first."""
        result = await self.db.execute(
            select(LaborPerformance)
            .where(LaborPerformance.layout_id == self.layout_id)
            .order_by(desc(LaborPerformance.performance_date))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def upsert_performance(self, performance_date: date, values: Dict[str, Any]) -> LaborPerformance:
        """Insert or replace the record for one day."""
        result = await self.db.execute(
            select(LaborPerformance).where(
                LaborPerformance.layout_id == self.layout_id,
                LaborPerformance.performance_date == performance_date
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            record = LaborPerformance(layout_id=self.layout_id, performance_date=performance_date)
            self.db.add(record)

        for field, value in values.items():
            setattr(record, field, _to_decimal(value))

        await self.db.flush()
        await self.db.refresh(record)
        return record

    async def delete_performance(self, performance_date: date) -> Optional[uuid.UUID]:
        """Delete one day's record; returns its id, or None when absent."""
        result = await self.db.execute(
            select(LaborPerformance).where(
                LaborPerformance.layout_id == self.layout_id,
                LaborPerformance.performance_date == performance_date
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            return None

        record_id = record.id
        await self.db.delete(record)
        await self.db.flush()
        return record_id

    async def list_performance(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 30
    ) -> Tuple[List[LaborPerformance], int]:
        """Paginated performance records, newest first."""
        query = select(LaborPerformance).where(LaborPerformance.layout_id == self.layout_id)
        if start_date:
            query = query.where(LaborPerformance.performance_date >= start_date)
        if end_date:
            query = query.where(LaborPerformance.performance_date <= end_date)

        # Count
        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        # Fetch
        query = query.order_by(desc(LaborPerformance.performance_date)).offset(skip).limit(limit)
        result = await self.db.execute(query)

        return list(result.scalars().all()), total

    # =========================================================================
    # STAFFING FORECASTS
    # =========================================================================

    async def upsert_staffing_forecast(self, forecast_date: date, values: Dict[str, Any]) -> StaffingForecast:
        """Insert or replace the saved forecast for one date."""
        result = await self.db.execute(
            select(StaffingForecast).where(
                StaffingForecast.layout_id == self.layout_id,
                StaffingForecast.forecast_date == forecast_date
            )
        )
        forecast = result.scalar_one_or_none()
        if forecast is None:
            forecast = StaffingForecast(layout_id=self.layout_id, forecast_date=forecast_date)
            self.db.add(forecast)

        for field, value in values.items():
            setattr(forecast, field, _to_decimal(value))

        await self.db.flush()
        await self.db.refresh(forecast)
        return forecast

    async def list_staffing_forecasts(self, skip: int = 0, limit: int = 20) -> Tuple[List[StaffingForecast], int]:
        query = select(StaffingForecast).where(StaffingForecast.layout_id == self.layout_id)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        query = query.order_by(desc(StaffingForecast.forecast_date)).offset(skip).limit(limit)
        result = await self.db.execute(query)

        return list(result.scalars().all()), total

    # =========================================================================
    # ROI SIMULATIONS
    # =========================================================================

    async def add_roi_simulation(self, values: Dict[str, Any]) -> ROISimulation:
        simulation = ROISimulation(
            layout_id=self.layout_id,
            **{field: _to_decimal(value) for field, value in values.items()}
        )
        self.db.add(simulation)
        await self.db.flush()
        await self.db.refresh(simulation)
        return simulation

    async def list_roi_simulations(self, skip: int = 0, limit: int = 20) -> Tuple[List[ROISimulation], int]:
        query = select(ROISimulation).where(ROISimulation.layout_id == self.layout_id)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        query = query.order_by(desc(ROISimulation.created_at)).offset(skip).limit(limit)
        result = await self.db.execute(query)

        return list(result.scalars().all()), total
