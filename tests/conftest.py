"""
Pytest configuration and shared fixtures.

Async tests run against an in-memory SQLite database (aiosqlite) that is
created fresh for every test.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pickpath.core.enum_utils import get_enum_value
from pickpath.database import custom_json_dumps, init_db
from pickpath.models import (
    Item, ItemPickTransaction, MarkerType, PickTransaction, RouteMarker, WarehouseElement
)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        json_serializer=custom_json_dumps,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def layout_id() -> uuid.UUID:
    return uuid.uuid4()


class LayoutSeeder:
    """Adds markers, elements and picks for one layout."""

    def __init__(self, session: AsyncSession, layout_id: uuid.UUID):
        self.session = session
        self.layout_id = layout_id

    async def marker(
        self,
        marker_type: MarkerType,
        x: float,
        y: float,
        sequence_order: Optional[int] = None,
        label: Optional[str] = None,
    ) -> RouteMarker:
        marker = RouteMarker(
            layout_id=self.layout_id,
            marker_type=get_enum_value(marker_type),
            label=label or marker_type.value.replace("_", " "),
            x_coordinate=Decimal(str(x)),
            y_coordinate=Decimal(str(y)),
            sequence_order=sequence_order,
        )
        self.session.add(marker)
        await self.session.flush()
        return marker

    async def standard_route(self) -> None:
        """Start (0,0), stop (100,0), one parking spot at (50,0)."""
        await self.marker(MarkerType.START_POINT, 0, 0)
        await self.marker(MarkerType.STOP_POINT, 100, 0)
        await self.marker(MarkerType.CART_PARKING, 50, 0, sequence_order=1)

    async def element(self, x: float, y: float, width: float = 0, height: float = 0,
                      label: Optional[str] = None) -> WarehouseElement:
        element = WarehouseElement(
            layout_id=self.layout_id,
            label=label,
            x_coordinate=Decimal(str(x)),
            y_coordinate=Decimal(str(y)),
            width=Decimal(str(width)),
            height=Decimal(str(height)),
        )
        self.session.add(element)
        await self.session.flush()
        return element

    async def picks(self, element: WarehouseElement, pick_date: date, count: int = 1) -> None:
        self.session.add(PickTransaction(
            layout_id=self.layout_id,
            element_id=element.id,
            pick_date=pick_date,
            pick_count=count,
        ))
        await self.session.flush()

    async def item_picks(self, element: WarehouseElement, item_code: str, pick_date: date,
                         count: int = 1) -> Item:
        item = Item(layout_id=self.layout_id, item_code=item_code)
        self.session.add(item)
        await self.session.flush()
        self.session.add(ItemPickTransaction(
            layout_id=self.layout_id,
            element_id=element.id,
            item_id=item.id,
            pick_date=pick_date,
            pick_count=count,
        ))
        await self.session.flush()
        return item


@pytest.fixture
def seeder(session, layout_id) -> LayoutSeeder:
    return LayoutSeeder(session, layout_id)
